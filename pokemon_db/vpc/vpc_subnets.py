# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to add the two VPC layer type subnets:

* Public
* Private

RTB -> Route Table

Public subnet type: All subnets use the same RTB, route to 0.0.0.0/0 via InternetGateway.
Each public subnet hosts the NAT Gateway of its AZ.
Private subnet type: Each subnet has its own RTB, each RTB points to the NAT Gateway of its AZ.
"""

from troposphere import GetAZs, GetAtt, Ref, Select, Tags
from troposphere.ec2 import (
    EIP,
    NatGateway,
    Route,
    RouteTable,
    Subnet,
    SubnetRouteTableAssociation,
)

from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.vpc import metadata
from pokemon_db.vpc.vpc_params import PRIVATE_LAYER, PUBLIC_LAYER


def define_az(index: int) -> Select:
    """
    Selects the AZ of the region at the given index, resolved by CFN at deploy time.
    """
    return Select(index, GetAZs(""))


def add_public_subnets(template, vpc, layers, igw_attachment, prefix):
    """
    Function to add public subnets and their NAT gateways for the VPC

    :param troposphere.Template template: the stack template
    :param troposphere.ec2.VPC vpc: the VPC
    :param dict layers: layers of subnets
    :param troposphere.ec2.VPCGatewayAttachment igw_attachment: the IGW attachment to route to
    :param str prefix: the resources prefix
    :return: tuple() rtb, list of subnets, list of nats
    """
    rtb = add_resource(
        template,
        RouteTable(
            "PublicRtb",
            VpcId=Ref(vpc),
            Tags=Tags(Name=f"{prefix}/vpc/PublicRtb"),
            Metadata=metadata,
        ),
    )
    add_resource(
        template,
        Route(
            "PublicDefaultRoute",
            GatewayId=igw_attachment.InternetGatewayId,
            RouteTableId=Ref(rtb),
            DestinationCidrBlock="0.0.0.0/0",
            DependsOn=[igw_attachment],
        ),
    )
    subnets = []
    nats = []
    for count, subnet_cidr in enumerate(layers[PUBLIC_LAYER]):
        index = count + 1
        subnet = add_resource(
            template,
            Subnet(
                f"PublicSubnet{index}",
                CidrBlock=subnet_cidr,
                VpcId=Ref(vpc),
                AvailabilityZone=define_az(count),
                MapPublicIpOnLaunch=True,
                Tags=Tags(Name=f"{prefix}/vpc/PublicSubnet{index}")
                + Tags({"vpc::usage": PUBLIC_LAYER}),
                Metadata=metadata,
            ),
        )
        add_resource(
            template,
            SubnetRouteTableAssociation(
                f"PublicSubnetRtbAssoc{index}",
                RouteTableId=Ref(rtb),
                SubnetId=Ref(subnet),
            ),
        )
        eip = add_resource(
            template,
            EIP(
                f"NatGatewayEip{index}",
                Domain="vpc",
                Tags=Tags(Name=f"{prefix}/vpc/PublicSubnet{index}"),
            ),
        )
        nat = add_resource(
            template,
            NatGateway(
                f"NatGatewayAz{index}",
                AllocationId=GetAtt(eip, "AllocationId"),
                SubnetId=Ref(subnet),
                Tags=Tags(Name=f"{prefix}/vpc/PublicSubnet{index}"),
                Metadata=metadata,
            ),
        )
        subnets.append(subnet)
        nats.append(nat)
    return rtb, subnets, nats


def add_private_subnets(template, vpc, layers, nats, prefix):
    """
    Function to add private subnets. Each subnet routes to the NAT Gateway of the same AZ.

    :param troposphere.Template template: the stack template
    :param troposphere.ec2.VPC vpc: the VPC
    :param dict layers: layers of subnets
    :param list[troposphere.ec2.NatGateway] nats: the NAT gateways, one per AZ
    :param str prefix: the resources prefix
    :return: tuple() list of rtb, list of subnets
    """
    if len(nats) != len(layers[PRIVATE_LAYER]):
        raise ValueError(
            "There must be one NAT Gateway per private subnet. Got",
            len(nats),
            len(layers[PRIVATE_LAYER]),
        )
    rtbs = []
    subnets = []
    for count, (subnet_cidr, nat) in enumerate(zip(layers[PRIVATE_LAYER], nats)):
        index = count + 1
        subnet = add_resource(
            template,
            Subnet(
                f"PrivateSubnet{index}",
                CidrBlock=subnet_cidr,
                VpcId=Ref(vpc),
                AvailabilityZone=define_az(count),
                MapPublicIpOnLaunch=False,
                Tags=Tags(Name=f"{prefix}/vpc/PrivateSubnet{index}")
                + Tags({"vpc::usage": PRIVATE_LAYER}),
                Metadata=metadata,
            ),
        )
        rtb = add_resource(
            template,
            RouteTable(
                f"PrivateRtb{index}",
                VpcId=Ref(vpc),
                Tags=Tags(Name=f"{prefix}/vpc/PrivateSubnet{index}"),
                Metadata=metadata,
            ),
        )
        add_resource(
            template,
            Route(
                f"PrivateDefaultRoute{index}",
                NatGatewayId=Ref(nat),
                RouteTableId=Ref(rtb),
                DestinationCidrBlock="0.0.0.0/0",
            ),
        )
        add_resource(
            template,
            SubnetRouteTableAssociation(
                f"PrivateSubnetRtbAssoc{index}",
                RouteTableId=Ref(rtb),
                SubnetId=Ref(subnet),
            ),
        )
        rtbs.append(rtb)
        subnets.append(subnet)
    return rtbs, subnets
