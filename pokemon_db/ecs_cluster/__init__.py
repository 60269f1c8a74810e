# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS Cluster the service runs in
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template

from troposphere import Tags
from troposphere.ecs import Cluster

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import (
    add_outputs,
    add_resource,
    define_attribute_output,
)
from pokemon_db.ecs_cluster.ecs_cluster_params import (
    CLUSTER_ARN,
    CLUSTER_NAME,
    CLUSTER_T,
    DEFAULT_PROVIDERS,
    DEFAULT_STRATEGY,
)


def add_ecs_cluster(template: Template, definition: dict) -> Cluster:
    """
    Adds the ECS Cluster. The cluster itself holds no network settings, the service places
    its tasks in the VPC subnets.

    :param troposphere.Template template:
    :param dict definition: the Cluster settings
    :rtype: troposphere.ecs.Cluster
    """
    cluster = add_resource(
        template,
        Cluster(
            CLUSTER_T,
            ClusterName=definition["ClusterName"],
            CapacityProviders=DEFAULT_PROVIDERS,
            DefaultCapacityProviderStrategy=DEFAULT_STRATEGY,
            Tags=Tags(Name=definition["ClusterName"]),
        ),
    )
    LOG.info(f"ecs.cluster - {definition['ClusterName']}")
    add_outputs(
        template,
        [
            define_attribute_output(cluster, CLUSTER_NAME, "ECS Cluster name"),
            define_attribute_output(cluster, CLUSTER_ARN, "ECS Cluster ARN"),
        ],
    )
    return cluster

