# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
RDS DB template generator
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from pokemon_db.rds.rds_stack import Rds
    from pokemon_db.vpc.vpc_stack import Vpc

from troposphere import GetAtt, NoValue, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup, SecurityGroupIngress, SecurityGroupRule
from troposphere.rds import DBInstance, DBSubnetGroup

from pokemon_db.common.troposphere_tools import add_resource
from pokemon_db.rds.rds_params import DB_INGRESS_T, DB_SG_T, DB_SUBNET_GROUP_T


def create_db_subnet_group(template: Template, db: Rds, vpc: Vpc) -> DBSubnetGroup:
    """
    Create the DB Subnet Group, in the private subnets
    """
    group = DBSubnetGroup(
        f"{db.logical_name}{DB_SUBNET_GROUP_T}",
        DBSubnetGroupDescription=Sub(
            f"Subnet group for {db.identifier} in ${{AWS::StackName}}"
        ),
        SubnetIds=vpc.private_subnets_ids,
        Tags=Tags(Name=db.identifier),
    )
    return add_resource(template, group)


def add_db_sg(template: Template, db: Rds, vpc: Vpc) -> SecurityGroup:
    """
    Function to add the Security group (access-control group) for the database.
    The group has no ingress until allowed from another security group.

    :param troposphere.Template template: template to add the sg to
    :param Rds db: the database
    :param Vpc vpc: the VPC the group belongs to
    """
    sg = SecurityGroup(
        f"{db.logical_name}{DB_SG_T}",
        GroupName=db.security_group_name,
        GroupDescription=Sub(f"${{AWS::StackName}} {db.security_group_name}"),
        VpcId=vpc.vpc_id,
        SecurityGroupEgress=[
            SecurityGroupRule(
                CidrIp="0.0.0.0/0",
                Description="Allow all outbound traffic by default",
                IpProtocol="-1",
            )
        ],
        Tags=Tags(Name=db.security_group_name),
    )
    return add_resource(template, sg)


def allow_default_port_from(
    template: Template, db: Rds, source_sg: SecurityGroup, description: str = None
) -> SecurityGroupIngress:
    """
    Allows the source security group to reach the database on its port only

    :param troposphere.Template template:
    :param Rds db:
    :param troposphere.ec2.SecurityGroup source_sg:
    :param str description:
    """
    if db.security_group is None:
        raise AttributeError(f"rds.{db.identifier} - Security group is not yet set")
    ingress = SecurityGroupIngress(
        f"{db.logical_name}{DB_INGRESS_T}",
        GroupId=GetAtt(db.security_group, "GroupId"),
        SourceSecurityGroupId=GetAtt(source_sg, "GroupId"),
        IpProtocol="tcp",
        FromPort=db.port,
        ToPort=db.port,
        Description=description
        if description
        else f"From {source_sg.title} to {db.identifier} on port {db.port}",
    )
    return add_resource(template, ingress)


def add_db_instance(template: Template, db: Rds, password: str) -> DBInstance:
    """
    Adds the DB Instance, attached to the DB Security group only.

    :param troposphere.Template template:
    :param Rds db:
    :param str password: the master password
    """
    props = {
        "DBInstanceIdentifier": db.identifier,
        "Engine": db.engine,
        "EngineVersion": db.engine_version if db.engine_version else NoValue,
        "DBInstanceClass": db.instance_class,
        "AllocatedStorage": str(db.allocated_storage),
        "StorageType": "gp2",
        "DBName": db.database_name,
        "MasterUsername": db.master_username,
        "MasterUserPassword": password,
        "Port": str(db.port),
        "BackupRetentionPeriod": db.backup_retention,
        "MultiAZ": db.multi_az,
        "AutoMinorVersionUpgrade": db.auto_minor_version_upgrade,
        "PubliclyAccessible": False,
        "CopyTagsToSnapshot": True,
        "DBSubnetGroupName": Ref(db.subnet_group),
        "VPCSecurityGroups": [GetAtt(db.security_group, "GroupId")],
        "DeletionPolicy": "Snapshot",
        "UpdateReplacePolicy": "Snapshot",
        "Tags": Tags(Name=db.identifier),
    }
    return add_resource(template, DBInstance(db.logical_name, **props))
