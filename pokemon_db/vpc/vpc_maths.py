# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Subnets calculator. Splits the VPC CIDR evenly between all the layers and AZs.
"""

import ipaddress

from pokemon_db.common import nxtpow2
from pokemon_db.vpc.vpc_params import LAYERS

SMALLEST_SUBNET_PREFIX = 28


def get_subnet_layers(cidr, azs, layers=None):
    """
    Get the lists of subnets CIDRs per layer. The VPC range is cut into equal parts,
    the number of parts being the next power of two of layers * azs.

    >>> get_subnet_layers("10.0.0.0/16", 2)
    {'public': ['10.0.0.0/18', '10.0.64.0/18'], 'private': ['10.0.128.0/18', '10.0.192.0/18']}

    :param str cidr: the VPC CIDR
    :param int azs: number of AZs
    :param list[str] layers: the layers names, in the order the ranges are allocated
    :rtype: dict
    """
    if layers is None:
        layers = LAYERS
    if azs < 1:
        raise ValueError("The number of AZs must be at least 1. Got", azs)
    vpc_net = ipaddress.IPv4Network(f"{cidr}")
    subnets_count = nxtpow2(len(layers) * azs) if len(layers) * azs > 1 else 1
    new_prefix = vpc_net.prefixlen + (subnets_count - 1).bit_length()
    if new_prefix > SMALLEST_SUBNET_PREFIX:
        raise ValueError(
            f"VPC CIDR {cidr} is too small to fit {len(layers) * azs} subnets."
            f" Subnets would be /{new_prefix}, smallest allowed is /{SMALLEST_SUBNET_PREFIX}"
        )
    subnets = list(vpc_net.subnets(new_prefix=new_prefix))
    cidrs = {}
    for index, layer in enumerate(layers):
        cidrs[layer] = [
            f"{subnet}" for subnet in subnets[index * azs : (index + 1) * azs]
        ]
    return cidrs
