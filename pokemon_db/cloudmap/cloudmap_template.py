# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to create the CloudMap namespace, discovery service and register the load balancer in it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from troposphere.elasticloadbalancingv2 import LoadBalancer
    from pokemon_db.vpc.vpc_stack import Vpc

from compose_x_common.compose_x_common import keyisset
from troposphere import GetAtt, Ref, Sub
from troposphere.servicediscovery import DnsConfig, DnsRecord, Instance
from troposphere.servicediscovery import Service as SdService
from troposphere.servicediscovery import PrivateDnsNamespace

from pokemon_db.cloudmap.cloudmap_params import (
    ALIAS_DNS_NAME_ATTRIBUTE,
    ALIAS_RECORD_TYPES,
    LB_INSTANCE_T,
    NAMESPACE_T,
    PRIVATE_NAMESPACE_ID,
    RECORD_TYPES,
    SD_SERVICE_T,
)
from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import (
    add_outputs,
    add_resource,
    define_attribute_output,
)


def add_private_namespace(
    template: Template, namespace_name: str, vpc: Vpc
) -> PrivateDnsNamespace:
    """
    Creates the private DNS namespace, associated to the VPC

    :param troposphere.Template template:
    :param str namespace_name: the DNS domain name of the namespace
    :param Vpc vpc:
    :rtype: troposphere.servicediscovery.PrivateDnsNamespace
    """
    namespace = add_resource(
        template,
        PrivateDnsNamespace(
            NAMESPACE_T,
            Name=namespace_name,
            Description=Sub(f"{namespace_name} private namespace in ${{AWS::StackName}}"),
            Vpc=vpc.vpc_id,
        ),
    )
    LOG.info(f"cloudmap - Private namespace {namespace_name}")
    add_outputs(
        template,
        [define_attribute_output(namespace, PRIVATE_NAMESPACE_ID, "Namespace ID")],
    )
    return namespace


def define_dns_records(record_type: str, ttl: int) -> list:
    """
    Returns the DNS records for the record type. A_AAAA gives both an A and an AAAA record.

    :param str record_type:
    :param int ttl: the records TTL in seconds
    :rtype: list[troposphere.servicediscovery.DnsRecord]
    """
    if record_type not in RECORD_TYPES:
        raise ValueError(
            f"DNS record type {record_type} is invalid. Must be one of",
            list(RECORD_TYPES.keys()),
        )
    return [
        DnsRecord(Type=_type, TTL=str(ttl)) for _type in RECORD_TYPES[record_type]
    ]


def add_discovery_service(
    template: Template, namespace: PrivateDnsNamespace, definition: dict
) -> SdService:
    """
    Creates the discovery service in the namespace. A WEIGHTED routing policy is used so that
    alias records to a load balancer are supported.

    :param troposphere.Template template:
    :param troposphere.servicediscovery.PrivateDnsNamespace namespace:
    :param dict definition: the CloudMap settings
    :rtype: troposphere.servicediscovery.Service
    """
    records = define_dns_records(definition["DnsRecordType"], definition["DnsTtl"])
    props = {
        "Description": Sub(r"Service discovery in ${AWS::StackName}"),
        "NamespaceId": Ref(namespace),
        "DnsConfig": DnsConfig(
            RoutingPolicy="WEIGHTED",
            DnsRecords=records,
        ),
    }
    if keyisset("ServiceName", definition):
        props["Name"] = definition["ServiceName"]
    return add_resource(template, SdService(SD_SERVICE_T, **props))


def register_load_balancer(
    template: Template, sd_service: SdService, lb: LoadBalancer
) -> Instance:
    """
    Registers the load balancer DNS name as an alias instance of the discovery service.

    :param troposphere.Template template:
    :param troposphere.servicediscovery.Service sd_service:
    :param troposphere.elasticloadbalancingv2.LoadBalancer lb:
    :raises ValueError: if the service has no A or AAAA records, which alias registration requires
    :rtype: troposphere.servicediscovery.Instance
    """
    records_types = [record.Type for record in sd_service.DnsConfig.DnsRecords]
    if not any(_type in ALIAS_RECORD_TYPES for _type in records_types):
        raise ValueError(
            f"{sd_service.title} - Must support A or AAAA records to register a load balancer. Got",
            records_types,
        )
    LOG.info(f"cloudmap - Registering {lb.title} in {sd_service.title}")
    return add_resource(
        template,
        Instance(
            LB_INSTANCE_T,
            ServiceId=GetAtt(sd_service, "Id"),
            InstanceAttributes={ALIAS_DNS_NAME_ATTRIBUTE: GetAtt(lb, "DNSName")},
        ),
    )
