# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Parameters related to the VPC settings. Used by pokemon_db.vpc and others
"""

from pokemon_db.common.cfn_params import Parameter

VPC_T = "Vpc"
IGW_T = "InternetGatewayV4"
IGW_ATTACHMENT_T = "VPCGatewayAttachement"

PUBLIC_LAYER = "public"
PRIVATE_LAYER = "private"
LAYERS = [PUBLIC_LAYER, PRIVATE_LAYER]

VPC_ID_T = "VpcId"
VPC_ID = Parameter(VPC_ID_T, Type="AWS::EC2::VPC::Id")

VPC_CIDR_T = "VpcCidr"
VPC_CIDR = Parameter(VPC_CIDR_T, return_value="CidrBlock", Type="String")
