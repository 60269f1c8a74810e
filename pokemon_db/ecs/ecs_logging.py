#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
CloudWatch log group the container output is routed to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template

from troposphere import AWS_REGION, Ref
from troposphere.ecs import LogConfiguration
from troposphere.logs import LogGroup

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.ecs.ecs_params import LOG_GROUP_T

LOGGING_ACTIONS = [
    "logs:CreateLogStream",
    "logs:PutLogEvents",
]
AWSLOGS_DRIVER = "awslogs"


def create_log_group(template: Template, definition: dict) -> LogGroup:
    """
    Function to create the Log Group for the service. The log group is kept when the stack is deleted.

    :param troposphere.Template template:
    :param dict definition: the Logging settings
    :rtype: troposphere.logs.LogGroup
    """
    if LOG_GROUP_T in template.resources:
        return template.resources[LOG_GROUP_T]
    LOG.info(
        f"logs.{definition['LogGroupName']} - retention {definition['RetentionInDays']} days"
    )
    return add_resource(
        template,
        LogGroup(
            LOG_GROUP_T,
            LogGroupName=definition["LogGroupName"],
            RetentionInDays=int(definition["RetentionInDays"]),
            DeletionPolicy="Retain",
            UpdateReplacePolicy="Retain",
        ),
    )


def define_awslogs_configuration(
    log_group: LogGroup, stream_prefix: str
) -> LogConfiguration:
    """
    Returns the awslogs driver configuration for the container, routed to the log group

    :param troposphere.logs.LogGroup log_group:
    :param str stream_prefix:
    """
    return LogConfiguration(
        LogDriver=AWSLOGS_DRIVER,
        Options={
            "awslogs-group": Ref(log_group),
            "awslogs-region": Ref(AWS_REGION),
            "awslogs-stream-prefix": stream_prefix,
        },
    )
