# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to define the ECS Fargate Service and its security group
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from troposphere.ecs import Cluster, TaskDefinition
    from troposphere.elasticloadbalancingv2 import Listener, TargetGroup
    from pokemon_db.vpc.vpc_stack import Vpc

from troposphere import GetAtt, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupRule
from troposphere.ecs import (
    AwsvpcConfiguration,
    DeploymentCircuitBreaker,
    DeploymentConfiguration,
    DeploymentController,
)
from troposphere.ecs import LoadBalancer as EcsLoadBalancer
from troposphere.ecs import NetworkConfiguration, Service

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.ecs.ecs_params import (
    CONTAINER_PORT,
    DEPLOYMENT_MAX_PERCENT,
    DEPLOYMENT_MIN_HEALTHY_PERCENT,
    FARGATE_VERSION,
    HEALTH_CHECK_GRACE_PERIOD,
    LAUNCH_TYPE,
    SERVICE_T,
    SG_T,
)


def add_service_sg(template: Template, vpc: Vpc) -> SecurityGroup:
    """
    Creates the security group of the service tasks. Ingress is granted by the load balancer.
    """
    sg = SecurityGroup(
        SG_T,
        GroupDescription=Sub(r"Service tasks security group in ${AWS::StackName}"),
        VpcId=vpc.vpc_id,
        SecurityGroupEgress=[
            SecurityGroupRule(
                CidrIp="0.0.0.0/0",
                Description="Allow all outbound traffic by default",
                IpProtocol="-1",
            )
        ],
        Tags=Tags(Name=Sub(r"${AWS::StackName}-service")),
    )
    return add_resource(template, sg)


def define_deployment_options() -> DeploymentConfiguration:
    """
    Function to define the DeploymentConfiguration. Rollback and CircuitBreaker are on.
    """
    return DeploymentConfiguration(
        MaximumPercent=DEPLOYMENT_MAX_PERCENT,
        MinimumHealthyPercent=DEPLOYMENT_MIN_HEALTHY_PERCENT,
        DeploymentCircuitBreaker=DeploymentCircuitBreaker(Enable=True, Rollback=True),
    )


def add_fargate_service(
    template: Template,
    service_definition: dict,
    cluster: Cluster,
    task_definition: TaskDefinition,
    container_name: str,
    vpc: Vpc,
    service_sg: SecurityGroup,
    target_group: TargetGroup,
    listener: Listener,
) -> Service:
    """
    Creates the ECS Service, running the tasks in the private subnets behind the load balancer.

    :param troposphere.Template template:
    :param dict service_definition: the Service settings
    :param troposphere.ecs.Cluster cluster:
    :param troposphere.ecs.TaskDefinition task_definition:
    :param str container_name: the container the target group sends traffic to
    :param Vpc vpc:
    :param troposphere.ec2.SecurityGroup service_sg:
    :param troposphere.elasticloadbalancingv2.TargetGroup target_group:
    :param troposphere.elasticloadbalancingv2.Listener listener: the target group must be
        associated to the load balancer before the service is created.
    :rtype: troposphere.ecs.Service
    """
    desired_count = int(service_definition["DesiredCount"])
    service = Service(
        SERVICE_T,
        Cluster=Ref(cluster),
        TaskDefinition=Ref(task_definition),
        DesiredCount=desired_count,
        LaunchType=LAUNCH_TYPE,
        PlatformVersion=FARGATE_VERSION,
        DeploymentController=DeploymentController(Type="ECS"),
        DeploymentConfiguration=define_deployment_options(),
        HealthCheckGracePeriodSeconds=HEALTH_CHECK_GRACE_PERIOD,
        NetworkConfiguration=NetworkConfiguration(
            AwsvpcConfiguration=AwsvpcConfiguration(
                AssignPublicIp="DISABLED",
                SecurityGroups=[GetAtt(service_sg, "GroupId")],
                Subnets=vpc.private_subnets_ids,
            )
        ),
        LoadBalancers=[
            EcsLoadBalancer(
                ContainerName=container_name,
                ContainerPort=CONTAINER_PORT,
                TargetGroupArn=Ref(target_group),
            )
        ],
        EnableECSManagedTags=True,
        PropagateTags="SERVICE",
        DependsOn=[listener.title],
    )
    LOG.info(f"ecs.service - {desired_count} task(s) of {container_name}")
    return add_resource(template, service)
