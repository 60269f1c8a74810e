#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Shared fixtures for pokemon_db tests
"""

from os import path

import boto3
import pytest
from botocore.stub import Stubber

from pokemon_db.common.settings import PokemonDbSettings
from pokemon_db.pokemon_db import generate_full_template

ACCOUNT_ID = "012345678912"
REGION = "eu-west-1"
ECR_ARN = f"arn:aws:ecr:{REGION}:{ACCOUNT_ID}:repository/pokemon-db"


class StubbedSession(object):
    """
    Session returning the same client, to be stubbed, for a given service name
    """

    def __init__(self, region_name=REGION):
        self.region_name = region_name
        self._session = boto3.session.Session(region_name=region_name)
        self.clients = {}

    def client(self, service_name, **kwargs):
        if service_name not in self.clients:
            self.clients[service_name] = self._session.client(
                service_name, region_name=self.region_name
            )
        return self.clients[service_name]

    def stubber(self, service_name) -> Stubber:
        return Stubber(self.client(service_name))


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def here():
    return path.abspath(path.dirname(__file__))


@pytest.fixture
def settings_kwargs(tmp_path):
    return {
        PokemonDbSettings.command_arg: PokemonDbSettings.render_arg,
        PokemonDbSettings.region_arg: REGION,
        PokemonDbSettings.account_arg: ACCOUNT_ID,
        PokemonDbSettings.context_arg: [f"ecrArn={ECR_ARN}"],
        PokemonDbSettings.context_file_arg: str(tmp_path / "pokemon-db.context.json"),
        PokemonDbSettings.no_lookups_arg: True,
        PokemonDbSettings.output_dir_arg: str(tmp_path / "outputs"),
    }


@pytest.fixture
def settings(settings_kwargs):
    return PokemonDbSettings(**settings_kwargs)


@pytest.fixture
def stack(settings):
    return generate_full_template(settings)


@pytest.fixture
def template(stack):
    """
    The rendered root template, as a dict
    """
    return stack.stack_template.to_dict()


def resources_of_type(template: dict, resource_type: str) -> dict:
    return {
        title: resource
        for title, resource in template["Resources"].items()
        if resource["Type"] == resource_type
    }
