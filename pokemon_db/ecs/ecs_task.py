# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to define the Fargate Task Definition and its only container
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from troposphere.iam import Role
    from troposphere.logs import LogGroup
    from pokemon_db.rds.rds_stack import Rds

from troposphere import GetAtt
from troposphere.ecs import ContainerDefinition, Environment, PortMapping, TaskDefinition

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.ecs.ecs_logging import define_awslogs_configuration
from pokemon_db.ecs.ecs_params import (
    CONTAINER_PORT,
    LAUNCH_TYPE,
    NETWORK_MODE,
    POSTGRES_DB,
    POSTGRES_HOST,
    POSTGRES_PASSWORD,
    POSTGRES_PORT,
    POSTGRES_USER,
    REDASH_COOKIE_SECRET,
    TASK_T,
)

FARGATE_CPU_RAM = {
    256: [512, 1024, 2048],
    512: list(range(1024, 4096 + 1, 1024)),
    1024: list(range(2048, 8192 + 1, 1024)),
    2048: list(range(4096, 16384 + 1, 1024)),
    4096: list(range(8192, 30720 + 1, 1024)),
}


def validate_fargate_cpu_ram(cpu: int, ram: int) -> None:
    """
    Validates the Task CPU / RAM combination is valid for AWS Fargate

    :raises ValueError: if the combination is not a valid one
    """
    if cpu not in FARGATE_CPU_RAM:
        raise ValueError(
            f"Task CPU {cpu} is not valid for Fargate. Must be one of",
            list(FARGATE_CPU_RAM.keys()),
        )
    if ram not in FARGATE_CPU_RAM[cpu]:
        raise ValueError(
            f"Task memory {ram} is not valid for Fargate with {cpu} CPU. Must be one of",
            FARGATE_CPU_RAM[cpu],
        )


def define_container_memory(container_memory: int, task_memory: int) -> int:
    """
    Returns the container memory hard limit. The container cannot use more than the task memory,
    so the value is capped to it.

    :param int container_memory: requested container memory in MiB
    :param int task_memory: task memory in MiB
    :rtype: int
    """
    if container_memory > task_memory:
        LOG.warning(
            f"Container memory {container_memory}MiB is above the task memory {task_memory}MiB."
            f" Capping to {task_memory}MiB"
        )
        return task_memory
    return container_memory


def define_container_environment(
    db: Rds,
    db_password: str,
    application_database: str,
    cookie_secret: str,
) -> list:
    """
    Defines the container environment variables, connecting the application to the database.

    :param Rds db:
    :param str db_password:
    :param str application_database: the database the application connects to
    :param str cookie_secret:
    :rtype: list[troposphere.ecs.Environment]
    """
    env_vars = [
        (POSTGRES_HOST, db.endpoint_address),
        (POSTGRES_PORT, db.endpoint_port),
        (POSTGRES_USER, db.master_username),
        (POSTGRES_PASSWORD, db_password),
        (POSTGRES_DB, application_database),
        (REDASH_COOKIE_SECRET, cookie_secret),
    ]
    return [Environment(Name=name, Value=value) for name, value in env_vars]


def add_task_definition(
    template: Template,
    task_definition: dict,
    image,
    environment: list,
    log_group: LogGroup,
    stream_prefix: str,
    exec_role: Role,
    task_role: Role,
) -> TaskDefinition:
    """
    Creates the Fargate Task Definition with a single container listening on port 80.

    :param troposphere.Template template:
    :param dict task_definition: the Task settings
    :param image: the container image URI
    :param list environment: the container environment variables
    :param troposphere.logs.LogGroup log_group:
    :param str stream_prefix: the awslogs stream prefix
    :param troposphere.iam.Role exec_role:
    :param troposphere.iam.Role task_role:
    :rtype: troposphere.ecs.TaskDefinition
    """
    cpu = int(task_definition["Cpu"])
    memory = int(task_definition["Memory"])
    validate_fargate_cpu_ram(cpu, memory)
    container = ContainerDefinition(
        Name=task_definition["ContainerName"],
        Image=image,
        Essential=True,
        Cpu=int(task_definition["ContainerCpu"]),
        Memory=define_container_memory(
            int(task_definition["ContainerMemory"]), memory
        ),
        Environment=environment,
        LogConfiguration=define_awslogs_configuration(log_group, stream_prefix),
        PortMappings=[
            PortMapping(
                ContainerPort=CONTAINER_PORT, HostPort=CONTAINER_PORT, Protocol="tcp"
            )
        ],
    )
    LOG.info(
        f"ecs.task - {task_definition['ContainerName']} - {cpu} CPU / {memory}MiB"
    )
    return add_resource(
        template,
        TaskDefinition(
            TASK_T,
            Cpu=str(cpu),
            Memory=str(memory),
            NetworkMode=NETWORK_MODE,
            RequiresCompatibilities=[LAUNCH_TYPE],
            ExecutionRoleArn=GetAtt(exec_role, "Arn"),
            TaskRoleArn=GetAtt(task_role, "Arn"),
            ContainerDefinitions=[container],
        ),
    )
