# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to create the Application Load Balancer resources for the service
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from pokemon_db.vpc.vpc_stack import Vpc

from troposphere import GetAtt, Output, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupIngress, SecurityGroupRule
from troposphere.elasticloadbalancingv2 import Action as ListenerAction
from troposphere.elasticloadbalancingv2 import (
    Listener,
    LoadBalancer,
    TargetGroup,
    TargetGroupAttribute,
)

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import (
    add_outputs,
    add_resource,
    define_attribute_output,
)
from pokemon_db.ecs.ecs_params import CONTAINER_PORT
from pokemon_db.elbv2.elbv2_params import (
    LB_DNS_NAME,
    LB_PORT,
    LB_PROTOCOL,
    LB_SG_T,
    LB_T,
    LB_TO_SERVICE_INGRESS_T,
    LB_TYPE,
    LISTENER_T,
    PRIVATE_SCHEME,
    PUBLIC_SCHEME,
    SERVICE_URL_T,
    TGT_GROUP_T,
)


def add_alb_sg(template: Template, vpc: Vpc, is_public: bool) -> SecurityGroup:
    """
    Creates the load balancer security group, open on the listener port to the world when public,
    to the VPC otherwise.

    :param troposphere.Template template:
    :param Vpc vpc:
    :param bool is_public:
    """
    sg = SecurityGroup(
        LB_SG_T,
        GroupDescription=Sub(r"Load balancer security group in ${AWS::StackName}"),
        VpcId=vpc.vpc_id,
        SecurityGroupIngress=[
            SecurityGroupRule(
                CidrIp="0.0.0.0/0" if is_public else vpc.cidr_block,
                Description=f"Allow from anyone on port {LB_PORT}"
                if is_public
                else f"Allow from VPC on port {LB_PORT}",
                IpProtocol="tcp",
                FromPort=LB_PORT,
                ToPort=LB_PORT,
            )
        ],
        SecurityGroupEgress=[
            SecurityGroupRule(
                CidrIp="0.0.0.0/0",
                Description="Allow all outbound traffic by default",
                IpProtocol="-1",
            )
        ],
        Tags=Tags(Name=Sub(r"${AWS::StackName}-alb")),
    )
    return add_resource(template, sg)


def add_lb_to_service_ingress(
    template: Template, lb_sg: SecurityGroup, service_sg: SecurityGroup
) -> SecurityGroupIngress:
    """
    Allows the load balancer to reach the service tasks on the container port only
    """
    return add_resource(
        template,
        SecurityGroupIngress(
            LB_TO_SERVICE_INGRESS_T,
            GroupId=GetAtt(service_sg, "GroupId"),
            SourceSecurityGroupId=GetAtt(lb_sg, "GroupId"),
            IpProtocol="tcp",
            FromPort=CONTAINER_PORT,
            ToPort=CONTAINER_PORT,
            Description=f"From {lb_sg.title} to {service_sg.title} on port {CONTAINER_PORT}",
        ),
    )


def add_load_balancer(
    template: Template, vpc: Vpc, lb_sg: SecurityGroup, is_public: bool
) -> LoadBalancer:
    """
    Creates the Application Load Balancer. Public load balancers are placed in the public subnets,
    internal ones in the private subnets.

    :param troposphere.Template template:
    :param Vpc vpc:
    :param troposphere.ec2.SecurityGroup lb_sg:
    :param bool is_public:
    :rtype: troposphere.elasticloadbalancingv2.LoadBalancer
    """
    scheme = PUBLIC_SCHEME if is_public else PRIVATE_SCHEME
    LOG.info(f"elbv2 - {LB_TYPE} load balancer is {scheme}")
    return add_resource(
        template,
        LoadBalancer(
            LB_T,
            Scheme=scheme,
            Type=LB_TYPE,
            SecurityGroups=[GetAtt(lb_sg, "GroupId")],
            Subnets=vpc.public_subnets_ids if is_public else vpc.private_subnets_ids,
            Tags=Tags(Name=Sub(r"${AWS::StackName}-alb")),
        ),
    )


def add_target_group(template: Template, vpc: Vpc) -> TargetGroup:
    """
    Creates the IP target group, the Fargate tasks register into, on the container port

    :param troposphere.Template template:
    :param Vpc vpc:
    :rtype: troposphere.elasticloadbalancingv2.TargetGroup
    """
    return add_resource(
        template,
        TargetGroup(
            TGT_GROUP_T,
            VpcId=vpc.vpc_id,
            Port=CONTAINER_PORT,
            Protocol=LB_PROTOCOL,
            TargetType="ip",
            TargetGroupAttributes=[
                TargetGroupAttribute(
                    Key="deregistration_delay.timeout_seconds", Value="10"
                )
            ],
            Tags=Tags(Name=Sub(rf"${{AWS::StackName}}-{CONTAINER_PORT}")),
        ),
    )


def add_listener(
    template: Template, lb: LoadBalancer, target_group: TargetGroup
) -> Listener:
    """
    Creates the HTTP listener forwarding all the traffic to the target group

    :param troposphere.Template template:
    :param troposphere.elasticloadbalancingv2.LoadBalancer lb:
    :param troposphere.elasticloadbalancingv2.TargetGroup target_group:
    :rtype: troposphere.elasticloadbalancingv2.Listener
    """
    return add_resource(
        template,
        Listener(
            LISTENER_T,
            DefaultActions=[
                ListenerAction(Type="forward", TargetGroupArn=Ref(target_group))
            ],
            LoadBalancerArn=Ref(lb),
            Port=LB_PORT,
            Protocol=LB_PROTOCOL,
        ),
    )


def add_lb_outputs(template: Template, lb: LoadBalancer) -> None:
    """
    Adds the load balancer DNS name and the service URL to the outputs
    """
    add_outputs(
        template,
        [
            define_attribute_output(lb, LB_DNS_NAME, "Load balancer DNS name"),
            Output(
                SERVICE_URL_T,
                Description="Service URL",
                Value=Sub(f"http://${{{lb.title}.{LB_DNS_NAME.return_value}}}"),
            ),
        ],
    )
