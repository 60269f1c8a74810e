# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Network resources: VPC, subnets, gateways and routing
"""

metadata = {
    "Type": "PokemonDb",
    "Properties": {"Module": "vpc"},
}
