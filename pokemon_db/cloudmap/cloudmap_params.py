# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for AWS CloudMap
"""

from pokemon_db.common.cfn_params import Parameter

NAMESPACE_T = "PrivateNamespace"
SD_SERVICE_T = "ServiceDiscovery"
LB_INSTANCE_T = "LoadBalancerInstance"

PRIVATE_NAMESPACE_ID_T = "Id"
PRIVATE_NAMESPACE_ID = Parameter(
    PRIVATE_NAMESPACE_ID_T,
    return_value="Id",
    Type="String",
)

RECORD_TYPES = {
    "A": ["A"],
    "AAAA": ["AAAA"],
    "A_AAAA": ["A", "AAAA"],
    "CNAME": ["CNAME"],
}
ALIAS_RECORD_TYPES = ["A", "AAAA"]
ALIAS_DNS_NAME_ATTRIBUTE = "AWS_ALIAS_DNS_NAME"
