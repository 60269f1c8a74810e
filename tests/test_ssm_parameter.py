#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tests for the SSM parameters lookups
"""

import json

import boto3
import pytest
from botocore.stub import Stubber

from pokemon_db.common.context import ssm_lookup_key
from pokemon_db.common.settings import PokemonDbSettings
from pokemon_db.ssm_parameter.ssm_parameter_aws import value_from_lookup
from tests.conftest import ACCOUNT_ID, REGION

PARAMETER_NAME = "SONAR_JDBC_PASSWORD"


@pytest.fixture
def ssm_client():
    return boto3.client("ssm", region_name=REGION)


@pytest.fixture
def lookup_settings(settings_kwargs):
    settings_kwargs[PokemonDbSettings.no_lookups_arg] = False
    return PokemonDbSettings(**settings_kwargs)


def test_dummy_value_without_lookups(settings, ssm_client):
    with Stubber(ssm_client) as stubber:
        assert (
            value_from_lookup(settings, PARAMETER_NAME, client=ssm_client)
            == "dummy-value-for-SONAR_JDBC_PASSWORD"
        )
        stubber.assert_no_pending_responses()
    assert not settings.context.updated


def test_lookup_stored_in_context(lookup_settings, ssm_client):
    stubber = Stubber(ssm_client)
    stubber.add_response(
        "get_parameter",
        {
            "Parameter": {
                "Name": PARAMETER_NAME,
                "Type": "SecureString",
                "Value": "s3cr3t",
                "Version": 1,
            }
        },
        {"Name": PARAMETER_NAME, "WithDecryption": True},
    )
    with stubber:
        assert value_from_lookup(lookup_settings, PARAMETER_NAME, ssm_client) == "s3cr3t"
        # Second lookup uses the context, no API call left to stub.
        assert value_from_lookup(lookup_settings, PARAMETER_NAME, ssm_client) == "s3cr3t"
        stubber.assert_no_pending_responses()
    lookup_settings.context.save()
    with open(lookup_settings.context.file_path) as context_fd:
        saved = json.loads(context_fd.read())
    assert saved[ssm_lookup_key(PARAMETER_NAME, ACCOUNT_ID, REGION)] == "s3cr3t"


def test_context_value_used_with_no_lookups(settings_kwargs, ssm_client):
    settings_kwargs[PokemonDbSettings.context_arg].append(
        f"{ssm_lookup_key(PARAMETER_NAME, ACCOUNT_ID, REGION)}=from-cli"
    )
    settings = PokemonDbSettings(**settings_kwargs)
    assert value_from_lookup(settings, PARAMETER_NAME, ssm_client) == "from-cli"


def test_parameter_not_found(lookup_settings, ssm_client):
    stubber = Stubber(ssm_client)
    stubber.add_client_error(
        "get_parameter",
        service_error_code="ParameterNotFound",
        service_message="Parameter not found",
    )
    with stubber:
        with pytest.raises(LookupError):
            value_from_lookup(lookup_settings, PARAMETER_NAME, ssm_client)
    assert not lookup_settings.context.updated


def test_no_lookups_without_account_id(settings_kwargs, ssm_client, monkeypatch):
    def no_sts_call(session):
        raise AssertionError("STS must not be called when lookups are disabled")

    monkeypatch.setattr("pokemon_db.common.settings.get_account_id", no_sts_call)
    del settings_kwargs[PokemonDbSettings.account_arg]
    settings = PokemonDbSettings(**settings_kwargs)
    with Stubber(ssm_client) as stubber:
        assert (
            value_from_lookup(settings, PARAMETER_NAME, client=ssm_client)
            == "dummy-value-for-SONAR_JDBC_PASSWORD"
        )
        stubber.assert_no_pending_responses()
    assert not settings.account_id_is_known
