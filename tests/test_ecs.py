#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tests for the ECS Cluster, Task Definition, Service and Load Balancer
"""

import pytest

from pokemon_db.ecs.ecs_params import CONTAINER_ENV_VARS
from pokemon_db.ecs.ecs_task import define_container_memory, validate_fargate_cpu_ram
from pokemon_db.pokemon_db import generate_full_template
from tests.conftest import ECR_ARN, resources_of_type


def test_cluster(template):
    clusters = resources_of_type(template, "AWS::ECS::Cluster")
    assert len(clusters) == 1
    assert list(clusters.values())[0]["Properties"]["ClusterName"] == (
        "pokemon-db-cluster"
    )


def test_single_container_definition(template):
    tasks = resources_of_type(template, "AWS::ECS::TaskDefinition")
    assert len(tasks) == 1
    task = list(tasks.values())[0]["Properties"]
    assert task["Cpu"] == "256"
    assert task["Memory"] == "1024"
    assert task["NetworkMode"] == "awsvpc"
    assert task["RequiresCompatibilities"] == ["FARGATE"]
    assert len(task["ContainerDefinitions"]) == 1
    container = task["ContainerDefinitions"][0]
    assert container["Name"] == "pokemon-db-container"
    assert container["Memory"] == 1024
    assert container["Cpu"] == 256
    assert {env["Name"] for env in container["Environment"]} == {
        "POSTGRES_HOST",
        "POSTGRES_PORT",
        "POSTGRES_USER",
        "POSTGRES_PASSWORD",
        "POSTGRES_DB",
        "REDASH_COOKIE_SECRET",
    }
    assert [env["Name"] for env in container["Environment"]] == CONTAINER_ENV_VARS
    assert container["PortMappings"] == [
        {"ContainerPort": 80, "HostPort": 80, "Protocol": "tcp"}
    ]


def test_container_environment_values(template):
    task = resources_of_type(template, "AWS::ECS::TaskDefinition")
    container = list(task.values())[0]["Properties"]["ContainerDefinitions"][0]
    env = {env["Name"]: env["Value"] for env in container["Environment"]}
    assert env["POSTGRES_HOST"] == {"Fn::GetAtt": ["PokemonDbDb", "Endpoint.Address"]}
    assert env["POSTGRES_PORT"] == {"Fn::GetAtt": ["PokemonDbDb", "Endpoint.Port"]}
    assert env["POSTGRES_USER"] == "pokemon_db"
    assert env["POSTGRES_PASSWORD"] == "dummy-value-for-SONAR_JDBC_PASSWORD"
    assert env["POSTGRES_DB"] == "postgres"
    assert env["REDASH_COOKIE_SECRET"] == "dummy-value-for-POKEMON_REDASH_COOKIE_SECRET"


def test_container_image_and_logging(template):
    task = resources_of_type(template, "AWS::ECS::TaskDefinition")
    container = list(task.values())[0]["Properties"]["ContainerDefinitions"][0]
    assert container["Image"] == {
        "Fn::Sub": "012345678912.dkr.ecr.eu-west-1.${AWS::URLSuffix}/pokemon-db:latest"
    }
    log_config = container["LogConfiguration"]
    assert log_config["LogDriver"] == "awslogs"
    assert log_config["Options"]["awslogs-group"] == {"Ref": "ServicesLogGroup"}
    assert log_config["Options"]["awslogs-stream-prefix"] == "pokemon-db-service"
    log_group = template["Resources"]["ServicesLogGroup"]
    assert log_group["Properties"]["LogGroupName"] == "pokemon-db-service"
    assert log_group["Properties"]["RetentionInDays"] == 731
    assert log_group["DeletionPolicy"] == "Retain"


def test_execution_role_scoped_to_repository(template):
    role = template["Resources"]["EcsExecutionRole"]["Properties"]
    statements = [
        statement
        for policy in role["Policies"]
        for statement in policy["PolicyDocument"]["Statement"]
    ]
    assert [ECR_ARN] in [statement["Resource"] for statement in statements]


def test_service_desired_count_and_public_lb(template):
    """
    One task running, behind an internet-facing load balancer
    """
    services = resources_of_type(template, "AWS::ECS::Service")
    assert len(services) == 1
    service = list(services.values())[0]
    props = service["Properties"]
    assert props["DesiredCount"] == 1
    assert props["LaunchType"] == "FARGATE"
    assert props["HealthCheckGracePeriodSeconds"] == 60
    assert props["DeploymentConfiguration"]["MaximumPercent"] == 200
    assert props["DeploymentConfiguration"]["MinimumHealthyPercent"] == 50
    network = props["NetworkConfiguration"]["AwsvpcConfiguration"]
    assert network["AssignPublicIp"] == "DISABLED"
    assert network["Subnets"] == [{"Ref": "PrivateSubnet1"}, {"Ref": "PrivateSubnet2"}]
    assert props["LoadBalancers"][0]["ContainerPort"] == 80
    assert service["DependsOn"] == ["ServiceLoadBalancerListener"]

    lbs = resources_of_type(template, "AWS::ElasticLoadBalancingV2::LoadBalancer")
    assert len(lbs) == 1
    lb = list(lbs.values())[0]["Properties"]
    assert lb["Scheme"] == "internet-facing"
    assert lb["Subnets"] == [{"Ref": "PublicSubnet1"}, {"Ref": "PublicSubnet2"}]


def test_lb_to_service_traffic(template):
    resources = template["Resources"]
    lb_sg = resources["ServiceLoadBalancerSecurityGroup"]["Properties"]
    assert lb_sg["SecurityGroupIngress"][0]["CidrIp"] == "0.0.0.0/0"
    assert lb_sg["SecurityGroupIngress"][0]["FromPort"] == 80
    ingress = resources["FromLoadBalancerToService"]["Properties"]
    assert ingress["GroupId"] == {"Fn::GetAtt": ["ServiceSecurityGroup", "GroupId"]}
    assert ingress["SourceSecurityGroupId"] == {
        "Fn::GetAtt": ["ServiceLoadBalancerSecurityGroup", "GroupId"]
    }
    assert ingress["FromPort"] == ingress["ToPort"] == 80
    target_group = resources["ServiceTargetGroup"]["Properties"]
    assert target_group["TargetType"] == "ip"
    assert target_group["Port"] == 80
    listener = resources["ServiceLoadBalancerListener"]["Properties"]
    assert listener["Port"] == 80
    assert listener["Protocol"] == "HTTP"


def test_private_load_balancer(settings_kwargs):
    from pokemon_db.common.settings import PokemonDbSettings

    settings = PokemonDbSettings(
        content={"Service": {"PublicLoadBalancer": False}}, **settings_kwargs
    )
    template = generate_full_template(settings).stack_template.to_dict()
    lb = template["Resources"]["ServiceLoadBalancer"]["Properties"]
    assert lb["Scheme"] == "internal"
    assert lb["Subnets"] == [{"Ref": "PrivateSubnet1"}, {"Ref": "PrivateSubnet2"}]


def test_outputs(template):
    outputs = template["Outputs"]
    assert outputs["ServiceLoadBalancerDNSName"]["Value"] == {
        "Fn::GetAtt": ["ServiceLoadBalancer", "DNSName"]
    }
    assert outputs["ServiceURL"]["Value"] == {
        "Fn::Sub": "http://${ServiceLoadBalancer.DNSName}"
    }
    assert outputs["EcsServiceDefinitionName"]["Value"] == {
        "Fn::GetAtt": ["EcsServiceDefinition", "Name"]
    }


def test_container_memory_capped():
    assert define_container_memory(2048, 1024) == 1024
    assert define_container_memory(512, 1024) == 512


def test_fargate_cpu_ram():
    validate_fargate_cpu_ram(256, 1024)
    with pytest.raises(ValueError):
        validate_fargate_cpu_ram(256, 4096)
    with pytest.raises(ValueError):
        validate_fargate_cpu_ram(128, 512)
