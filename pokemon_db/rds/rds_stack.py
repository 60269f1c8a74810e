# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the Rds class, the database instance and its access-control group
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from troposphere.ec2 import SecurityGroup
    from pokemon_db.vpc.vpc_stack import Vpc

from compose_x_common.compose_x_common import keyisset, set_else_none
from troposphere import GetAtt

from pokemon_db.common import logical_name
from pokemon_db.common.logging import LOG
from pokemon_db.common.troposphere_tools import add_outputs, define_attribute_output
from pokemon_db.rds.rds_params import (
    DB_ENDPOINT_ADDRESS,
    DB_ENDPOINT_PORT,
    DEFAULT_PORTS,
)
from pokemon_db.rds.rds_template import (
    add_db_instance,
    add_db_sg,
    allow_default_port_from,
    create_db_subnet_group,
)


class Rds(object):
    """
    Class to represent the RDS DB Instance

    :ivar troposphere.rds.DBInstance cfn_resource:
    :ivar troposphere.ec2.SecurityGroup security_group: the only security group attached to the DB
    :ivar troposphere.ec2.SecurityGroupIngress ingress: the only ingress rule of the security group
    """

    def __init__(self, definition: dict):
        self.definition = definition
        self.identifier = definition["InstanceIdentifier"]
        self.logical_name = logical_name(self.identifier)
        self.engine = definition["Engine"]
        self.engine_version = set_else_none("EngineVersion", definition)
        self.instance_class = definition["InstanceClass"]
        self.allocated_storage = int(definition["AllocatedStorage"])
        self.master_username = definition["MasterUsername"]
        self.database_name = definition["DatabaseName"]
        self.port = int(set_else_none("Port", definition, DEFAULT_PORTS[self.engine]))
        self.backup_retention = int(definition["BackupRetentionDays"])
        self.multi_az = keyisset("MultiAz", definition)
        self.auto_minor_version_upgrade = keyisset(
            "AutoMinorVersionUpgrade", definition
        )
        self.security_group_name = definition["SecurityGroupName"]
        self.password_parameter = definition["PasswordParameter"]
        self.cfn_resource = None
        self.subnet_group = None
        self.security_group = None
        self.ingress = None

    def create_db(self, template: Template, vpc: Vpc, password: str) -> None:
        """
        Creates the subnet group, access-control group and DB instance.
        """
        self.subnet_group = create_db_subnet_group(template, self, vpc)
        self.security_group = add_db_sg(template, self, vpc)
        self.cfn_resource = add_db_instance(template, self, password)
        LOG.info(
            f"rds.{self.identifier} - {self.engine} {self.instance_class} on port {self.port}"
        )
        add_outputs(
            template,
            [
                define_attribute_output(
                    self.cfn_resource, DB_ENDPOINT_ADDRESS, "DB endpoint address"
                ),
                define_attribute_output(
                    self.cfn_resource, DB_ENDPOINT_PORT, "DB endpoint port"
                ),
            ],
        )

    def allow_default_port_from(
        self, template: Template, source_sg: SecurityGroup
    ) -> None:
        """
        Allows the source security group to reach the DB. Only one source is allowed.
        """
        if self.ingress is not None:
            raise ValueError(
                f"rds.{self.identifier} - Access is already granted via {self.ingress.title}"
            )
        self.ingress = allow_default_port_from(template, self, source_sg)

    @property
    def endpoint_address(self) -> GetAtt:
        return GetAtt(self.cfn_resource, DB_ENDPOINT_ADDRESS.return_value)

    @property
    def endpoint_port(self) -> GetAtt:
        return GetAtt(self.cfn_resource, DB_ENDPOINT_PORT.return_value)
