# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Main module to generate the full stack: VPC, Database, ECS Cluster & Service, Load Balancer and CloudMap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings

from compose_x_common.compose_x_common import keyisset

from pokemon_db.cloudmap.cloudmap_template import (
    add_discovery_service,
    add_private_namespace,
    register_load_balancer,
)
from pokemon_db.common.logging import LOG
from pokemon_db.common.stacks import PokemonDbStack
from pokemon_db.common.troposphere_tools import (
    add_outputs,
    define_attribute_output,
    init_template,
)
from pokemon_db.ecr.ecr_helpers import (
    define_ecr_image,
    get_repository_arn_from_context,
)
from pokemon_db.ecs.ecs_iam import add_execution_role, add_task_role
from pokemon_db.ecs.ecs_logging import create_log_group
from pokemon_db.ecs.ecs_params import SERVICE_NAME
from pokemon_db.ecs.ecs_service import add_fargate_service, add_service_sg
from pokemon_db.ecs.ecs_task import add_task_definition, define_container_environment
from pokemon_db.ecs_cluster import add_ecs_cluster
from pokemon_db.elbv2.elbv2_template import (
    add_alb_sg,
    add_lb_outputs,
    add_lb_to_service_ingress,
    add_listener,
    add_load_balancer,
    add_target_group,
)
from pokemon_db.rds.rds_stack import Rds
from pokemon_db.ssm_parameter.ssm_parameter_aws import value_from_lookup
from pokemon_db.vpc.vpc_stack import Vpc


def generate_full_template(settings: PokemonDbSettings) -> PokemonDbStack:
    """
    Function to generate the root template, each resource being configured with the ones created before it.

    * Resolves the image and the SSM parameters values (lookups)
    * Creates the VPC
    * Creates the DB, its access-control group
    * Creates the ECS Cluster, Task Definition and the Service behind the Load Balancer
    * Allows the service tasks to reach the DB
    * Registers the Load Balancer in the CloudMap namespace

    :param pokemon_db.common.settings.PokemonDbSettings settings: The settings for the execution
    :return: the root stack
    :rtype: PokemonDbStack
    """
    definition = settings.definition
    prefix = definition["ResourcesPrefix"]
    task_definition = definition["Task"]

    repository_arn = get_repository_arn_from_context(
        settings, definition["Image"]["RepositoryArnContextKey"]
    )
    image = define_ecr_image(repository_arn, definition["Image"]["Tag"])
    db_password = value_from_lookup(
        settings, definition["Database"]["PasswordParameter"]
    )
    cookie_secret = value_from_lookup(settings, task_definition["CookieSecretParameter"])

    template = init_template(f"{prefix} - Root stack generated with pokemon-db")
    vpc = Vpc(definition["Vpc"], prefix)
    vpc.create_vpc(template)

    db = Rds(definition["Database"])
    db.create_db(template, vpc, db_password)

    cluster = add_ecs_cluster(template, definition["Cluster"])
    log_group = create_log_group(template, definition["Logging"])
    exec_role = add_execution_role(template, log_group, repository_arn)
    task_role = add_task_role(template)
    task = add_task_definition(
        template,
        task_definition,
        image,
        define_container_environment(
            db,
            db_password,
            definition["Database"]["ApplicationDatabase"],
            cookie_secret,
        ),
        log_group,
        definition["Logging"]["StreamPrefix"],
        exec_role,
        task_role,
    )

    service_sg = add_service_sg(template, vpc)
    db.allow_default_port_from(template, service_sg)

    is_public = keyisset("PublicLoadBalancer", definition["Service"])
    lb_sg = add_alb_sg(template, vpc, is_public)
    add_lb_to_service_ingress(template, lb_sg, service_sg)
    lb = add_load_balancer(template, vpc, lb_sg, is_public)
    target_group = add_target_group(template, vpc)
    listener = add_listener(template, lb, target_group)
    service = add_fargate_service(
        template,
        definition["Service"],
        cluster,
        task,
        task_definition["ContainerName"],
        vpc,
        service_sg,
        target_group,
        listener,
    )
    add_lb_outputs(template, lb)
    add_outputs(
        template, [define_attribute_output(service, SERVICE_NAME, "ECS Service name")]
    )

    namespace = add_private_namespace(
        template, definition["CloudMap"]["Namespace"], vpc
    )
    sd_service = add_discovery_service(template, namespace, definition["CloudMap"])
    register_load_balancer(template, sd_service, lb)

    settings.context.save()
    LOG.info(f"{settings.name} - {len(template.resources)} resources defined")
    return PokemonDbStack(settings.name, template)
