# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
IAM Roles for the ECS Task. The execution role is used by the ECS agent to pull the image and
ship the logs, the task role is assumed by the application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from troposphere.logs import LogGroup

from troposphere import GetAtt, Sub
from troposphere.iam import Policy, Role

from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.ecs.ecs_logging import LOGGING_ACTIONS
from pokemon_db.ecs.ecs_params import EXEC_ROLE_T, TASK_ROLE_T
from pokemon_db.iam import service_role_trust_policy

ECR_PULL_ACTIONS = [
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
]


def add_execution_role(
    template: Template, log_group: LogGroup, repository_arn: str
) -> Role:
    """
    Creates the ECS Execution role, allowed to pull from the repository and write to the log group

    :param troposphere.Template template:
    :param troposphere.logs.LogGroup log_group:
    :param str repository_arn: the ECR repository the image is pulled from
    :rtype: troposphere.iam.Role
    """
    role = Role(
        EXEC_ROLE_T,
        AssumeRolePolicyDocument=service_role_trust_policy("ecs-tasks"),
        Description=Sub(r"Execution role for the service in ${AWS::StackName}"),
        Policies=[
            Policy(
                PolicyName="EcrPull",
                PolicyDocument={
                    "Version": "2012-10-17",
                    "Statement": [
                        {
                            "Sid": "AllowsEcrAuthorization",
                            "Effect": "Allow",
                            "Action": ["ecr:GetAuthorizationToken"],
                            "Resource": ["*"],
                        },
                        {
                            "Sid": "AllowsEcrPullFromRepository",
                            "Effect": "Allow",
                            "Action": ECR_PULL_ACTIONS,
                            "Resource": [repository_arn],
                        },
                    ],
                },
            ),
            Policy(
                PolicyName="CloudWatchLogsAccess",
                PolicyDocument={
                    "Version": "2012-10-17",
                    "Statement": [
                        {
                            "Sid": "AllowsLoggingToLogGroup",
                            "Effect": "Allow",
                            "Action": LOGGING_ACTIONS,
                            "Resource": [GetAtt(log_group, "Arn")],
                        }
                    ],
                },
            ),
        ],
    )
    return add_resource(template, role)


def add_task_role(template: Template) -> Role:
    """
    Creates the Task role. The application needs no AWS API access so it has no policies.
    """
    role = Role(
        TASK_ROLE_T,
        AssumeRolePolicyDocument=service_role_trust_policy("ecs-tasks"),
        Description=Sub(r"TaskRole - service in ${AWS::StackName}"),
    )
    return add_resource(template, role)
