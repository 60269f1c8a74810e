# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
pokemon_db.rds parameters.

You can change the names *values* so you like so long as you keep it Alphanumerical [a-zA-Z0-9]
"""

from pokemon_db.common.cfn_params import Parameter

DB_SG_T = "DBSecurityGroup"

DB_SUBNET_GROUP_T = "DBSubnetGroup"
DB_INGRESS_T = "DBIngressFromService"

DB_ENDPOINT_PORT_T = "EndpointPort"
DB_ENDPOINT_ADDRESS_T = "EndpointAddress"

DB_ENDPOINT_ADDRESS = Parameter(
    DB_ENDPOINT_ADDRESS_T, return_value="Endpoint.Address", Type="String"
)
DB_ENDPOINT_PORT = Parameter(
    DB_ENDPOINT_PORT_T, return_value="Endpoint.Port", Type="Number"
)

DEFAULT_PORTS = {"postgres": 5432}
