# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the Vpc, the network every other resource lives in.
"""

from __future__ import annotations

from troposphere import GetAtt, Ref, Template

from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import add_outputs, define_attribute_output
from pokemon_db.vpc.vpc_maths import get_subnet_layers
from pokemon_db.vpc.vpc_params import VPC_CIDR, VPC_ID
from pokemon_db.vpc.vpc_subnets import add_private_subnets, add_public_subnets
from pokemon_db.vpc.vpc_template import add_vpc_core


class Vpc(object):
    """
    Class to represent the VPC

    :ivar troposphere.ec2.VPC vpc:
    :ivar list[troposphere.ec2.Subnet] public_subnets:
    :ivar list[troposphere.ec2.Subnet] private_subnets:
    :ivar list[troposphere.ec2.NatGateway] nats:
    """

    def __init__(self, definition: dict, prefix: str):
        self.definition = definition
        self.prefix = prefix
        self.vpc_cidr = definition["Cidr"]
        self.max_azs = int(definition["MaxAzs"])
        self.vpc = None
        self.igw = None
        self.layers = None
        self.public_subnets = []
        self.private_subnets = []
        self.nats = []

    def create_vpc(self, template: Template) -> None:
        """
        Creates the VPC and the subnets, spread over max_azs AZs

        :param troposphere.Template template:
        """
        self.layers = get_subnet_layers(self.vpc_cidr, self.max_azs)
        LOG.info(f"vpc - {self.vpc_cidr} over {self.max_azs} AZs - {self.layers}")
        self.vpc, self.igw, attachment = add_vpc_core(
            template, self.vpc_cidr, self.prefix
        )
        __, self.public_subnets, self.nats = add_public_subnets(
            template, self.vpc, self.layers, attachment, self.prefix
        )
        __, self.private_subnets = add_private_subnets(
            template, self.vpc, self.layers, self.nats, self.prefix
        )
        add_outputs(
            template,
            [
                define_attribute_output(self.vpc, VPC_ID, "VPC ID"),
                define_attribute_output(self.vpc, VPC_CIDR, "VPC CIDR"),
            ],
        )

    @property
    def vpc_id(self) -> Ref:
        return Ref(self.vpc)

    @property
    def cidr_block(self) -> GetAtt:
        return GetAtt(self.vpc, "CidrBlock")

    @property
    def public_subnets_ids(self) -> list:
        return [Ref(subnet) for subnet in self.public_subnets]

    @property
    def private_subnets_ids(self) -> list:
        return [Ref(subnet) for subnet in self.private_subnets]
