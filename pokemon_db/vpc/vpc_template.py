# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Create the VPC core resources
"""

from troposphere import Ref, Sub, Tags
from troposphere.ec2 import VPC as VPCType
from troposphere.ec2 import InternetGateway, VPCGatewayAttachment

from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.vpc import metadata
from pokemon_db.vpc.vpc_params import IGW_ATTACHMENT_T, IGW_T, VPC_T


def add_vpc_core(template, vpc_cidr, prefix):
    """
    Function to create the core resources of the VPC and add them to the template

    :param template: the stack Template()
    :param vpc_cidr: str of the VPC CIDR i.e. 10.0.0.0/16
    :param str prefix: the resources prefix, used for tagging

    :return: tuple() with the vpc, igw and igw attachment objects
    """
    vpc = add_resource(
        template,
        VPCType(
            VPC_T,
            CidrBlock=vpc_cidr,
            EnableDnsHostnames=True,
            EnableDnsSupport=True,
            InstanceTenancy="default",
            Tags=Tags(Name=f"{prefix}/vpc"),
            Metadata=metadata,
        ),
    )
    igw = add_resource(
        template,
        InternetGateway(IGW_T, Tags=Tags(Name=Sub(f"{prefix}-igw-${{{VPC_T}}}"))),
    )
    attachment = add_resource(
        template,
        VPCGatewayAttachment(
            IGW_ATTACHMENT_T,
            InternetGatewayId=Ref(igw),
            VpcId=Ref(vpc),
            Metadata=metadata,
        ),
    )
    return vpc, igw, attachment
