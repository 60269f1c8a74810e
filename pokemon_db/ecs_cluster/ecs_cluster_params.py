#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from troposphere.ecs import CapacityProviderStrategyItem

from pokemon_db.common.cfn_params import Parameter

CLUSTER_T = "EcsCluster"
FARGATE_PROVIDER = "FARGATE"
DEFAULT_PROVIDERS = [FARGATE_PROVIDER]
DEFAULT_STRATEGY = [
    CapacityProviderStrategyItem(Weight=1, Base=1, CapacityProvider=FARGATE_PROVIDER),
]

CLUSTER_NAME_T = "Name"
CLUSTER_NAME = Parameter(CLUSTER_NAME_T, Type="String")

CLUSTER_ARN_T = "Arn"
CLUSTER_ARN = Parameter(CLUSTER_ARN_T, return_value="Arn", Type="String")
