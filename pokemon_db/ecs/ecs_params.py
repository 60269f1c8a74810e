# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Parameters bound to pokemon_db.ecs
This is a crucial part as all the titles, marked `_T` are string which are then used the same way
across all imports, which gives consistency for CFN to use the same names,
which it heavily relies onto.

You can change the names *values* so you like so long as you keep it [a-zA-Z0-9]
"""

from pokemon_db.common.cfn_params import Parameter

LOG_GROUP_T = "ServicesLogGroup"
SG_T = "ServiceSecurityGroup"
EXEC_ROLE_T = "EcsExecutionRole"
TASK_ROLE_T = "EcsTaskRole"
SERVICE_T = "EcsServiceDefinition"
TASK_T = "EcsTaskDefinition"

CONTAINER_PORT = 80
LAUNCH_TYPE = "FARGATE"
NETWORK_MODE = "awsvpc"
FARGATE_VERSION = "LATEST"
HEALTH_CHECK_GRACE_PERIOD = 60
DEPLOYMENT_MAX_PERCENT = 200
DEPLOYMENT_MIN_HEALTHY_PERCENT = 50

POSTGRES_HOST = "POSTGRES_HOST"
POSTGRES_PORT = "POSTGRES_PORT"
POSTGRES_USER = "POSTGRES_USER"
POSTGRES_PASSWORD = "POSTGRES_PASSWORD"
POSTGRES_DB = "POSTGRES_DB"
REDASH_COOKIE_SECRET = "REDASH_COOKIE_SECRET"
CONTAINER_ENV_VARS = [
    POSTGRES_HOST,
    POSTGRES_PORT,
    POSTGRES_USER,
    POSTGRES_PASSWORD,
    POSTGRES_DB,
    REDASH_COOKIE_SECRET,
]

SERVICE_NAME_T = "Name"
SERVICE_NAME = Parameter(SERVICE_NAME_T, return_value="Name", Type="String")

