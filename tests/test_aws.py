#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tests for the CloudFormation functions, against stubbed responses
"""

import datetime

import pytest
from botocore.exceptions import ClientError
from botocore.stub import ANY
from troposphere import Template

from pokemon_db.common.aws import (
    TEMPLATE_BODY_MAX_SIZE,
    assert_can_create_stack,
    assert_can_update_stack,
    define_template_source,
    deploy,
    destroy,
    get_change_set_status,
    plan,
)
from pokemon_db.common.stacks import PokemonDbStack
from tests.conftest import StubbedSession

STACK_ID = "arn:aws:cloudformation:eu-west-1:012345678912:stack/pokemon-db/abcd"


def describe_stacks_response(status):
    return {
        "Stacks": [
            {
                "StackName": "pokemon-db",
                "StackId": STACK_ID,
                "CreationTime": datetime.datetime(2022, 1, 1),
                "StackStatus": status,
            }
        ]
    }


@pytest.fixture
def session():
    return StubbedSession()


@pytest.fixture
def root_stack():
    stack = PokemonDbStack("pokemon-db", Template())
    stack.template_body = '{"Resources": {}}'
    stack.template_url = "/tmp/pokemon-db.json"
    return stack


def add_stack_does_not_exist(stubber):
    stubber.add_client_error(
        "describe_stacks",
        service_error_code="ValidationError",
        service_message="Stack with id pokemon-db does not exist",
    )


def test_assert_can_create_stack(session):
    client = session.client("cloudformation")
    stubber = session.stubber("cloudformation")
    add_stack_does_not_exist(stubber)
    stubber.add_response(
        "describe_stacks", describe_stacks_response("CREATE_COMPLETE")
    )
    stubber.add_client_error(
        "describe_stacks", service_error_code="AccessDenied", service_message="denied"
    )
    with stubber:
        assert assert_can_create_stack(client, "pokemon-db") is True
        assert assert_can_create_stack(client, "pokemon-db") is False
        with pytest.raises(ClientError):
            assert_can_create_stack(client, "pokemon-db")


def test_assert_can_update_stack(session):
    client = session.client("cloudformation")
    stubber = session.stubber("cloudformation")
    stubber.add_response(
        "describe_stacks", describe_stacks_response("UPDATE_ROLLBACK_COMPLETE")
    )
    stubber.add_response(
        "describe_stacks", describe_stacks_response("UPDATE_IN_PROGRESS")
    )
    with stubber:
        assert assert_can_update_stack(client, "pokemon-db") is True
        assert assert_can_update_stack(client, "pokemon-db") is False


def test_define_template_source(root_stack):
    assert define_template_source(root_stack) == {
        "TemplateBody": root_stack.template_body
    }
    root_stack.template_url = "https://s3.amazonaws.com/bucket/pokemon-db.json"
    assert define_template_source(root_stack) == {
        "TemplateURL": root_stack.template_url
    }
    root_stack.template_url = "/tmp/pokemon-db.json"
    root_stack.template_body = " " * TEMPLATE_BODY_MAX_SIZE
    with pytest.raises(ValueError):
        define_template_source(root_stack)


def test_deploy_creates_stack(settings, session, root_stack):
    settings.session = session
    stubber = session.stubber("cloudformation")
    add_stack_does_not_exist(stubber)
    stubber.add_response(
        "create_stack",
        {"StackId": STACK_ID},
        {
            "StackName": "pokemon-db",
            "Capabilities": ["CAPABILITY_IAM"],
            "DisableRollback": False,
            "TemplateBody": root_stack.template_body,
        },
    )
    with stubber:
        assert deploy(settings, root_stack) == STACK_ID
        stubber.assert_no_pending_responses()


def test_deploy_no_updates(settings, session, root_stack):
    settings.session = session
    stubber = session.stubber("cloudformation")
    stubber.add_response(
        "describe_stacks", describe_stacks_response("CREATE_COMPLETE")
    )
    stubber.add_response(
        "describe_stacks", describe_stacks_response("CREATE_COMPLETE")
    )
    stubber.add_client_error(
        "update_stack",
        service_error_code="ValidationError",
        service_message="No updates are to be performed.",
    )
    with stubber:
        assert deploy(settings, root_stack) is None
        stubber.assert_no_pending_responses()


def test_destroy(settings, session):
    settings.session = session
    stubber = session.stubber("cloudformation")
    stubber.add_response(
        "describe_stacks", describe_stacks_response("CREATE_COMPLETE")
    )
    stubber.add_response("delete_stack", {}, {"StackName": "pokemon-db"})
    add_stack_does_not_exist(stubber)
    with stubber:
        assert destroy(settings) is True
        assert destroy(settings) is False
        stubber.assert_no_pending_responses()


CHANGE_SET_ID = "arn:aws:cloudformation:eu-west-1:012345678912:changeSet/pokemon-db/abcd"


def describe_change_set_response(status):
    return {
        "ChangeSetName": "pokemon-db-abcdefghij",
        "StackName": "pokemon-db",
        "Status": status,
        "Changes": [
            {
                "Type": "Resource",
                "ResourceChange": {
                    "Action": "Add",
                    "LogicalResourceId": "Vpc",
                    "ResourceType": "AWS::EC2::VPC",
                },
            }
        ],
    }


def add_change_set_created(stubber, root_stack, change_set_type):
    stubber.add_response(
        "create_change_set",
        {"Id": CHANGE_SET_ID, "StackId": STACK_ID},
        {
            "StackName": "pokemon-db",
            "Capabilities": ["CAPABILITY_IAM"],
            "UsePreviousTemplate": False,
            "ChangeSetType": change_set_type,
            "ChangeSetName": ANY,
            "TemplateBody": root_stack.template_body,
        },
    )
    stubber.add_response(
        "describe_change_set",
        describe_change_set_response("CREATE_COMPLETE"),
        {"ChangeSetName": ANY, "StackName": "pokemon-db"},
    )


def test_deploy_stack_in_review(settings, session, root_stack):
    """
    A stack left in REVIEW_IN_PROGRESS is created from a change set, not with create_stack
    """
    settings.session = session
    stubber = session.stubber("cloudformation")
    stubber.add_response(
        "describe_stacks", describe_stacks_response("REVIEW_IN_PROGRESS")
    )
    add_change_set_created(stubber, root_stack, "CREATE")
    stubber.add_response(
        "execute_change_set",
        {},
        {"ChangeSetName": ANY, "StackName": "pokemon-db", "DisableRollback": False},
    )
    with stubber:
        assert deploy(settings, root_stack) == STACK_ID
        stubber.assert_no_pending_responses()


def test_plan_declined_with_cleanup(settings, session, root_stack, monkeypatch):
    settings.session = session
    answers = iter(["n", "y"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    stubber = session.stubber("cloudformation")
    add_stack_does_not_exist(stubber)
    add_change_set_created(stubber, root_stack, "CREATE")
    stubber.add_response(
        "delete_change_set", {}, {"ChangeSetName": ANY, "StackName": "pokemon-db"}
    )
    stubber.add_response("delete_stack", {}, {"StackName": "pokemon-db"})
    with stubber:
        plan(settings, root_stack)
        stubber.assert_no_pending_responses()


def test_plan_applied_on_update(settings, session, root_stack, monkeypatch):
    settings.session = session
    monkeypatch.setattr("builtins.input", lambda prompt: "yes")
    stubber = session.stubber("cloudformation")
    stubber.add_response(
        "describe_stacks", describe_stacks_response("UPDATE_COMPLETE")
    )
    stubber.add_response(
        "describe_stacks", describe_stacks_response("UPDATE_COMPLETE")
    )
    add_change_set_created(stubber, root_stack, "UPDATE")
    stubber.add_response(
        "execute_change_set",
        {},
        {"ChangeSetName": ANY, "StackName": "pokemon-db", "DisableRollback": False},
    )
    with stubber:
        plan(settings, root_stack)
        stubber.assert_no_pending_responses()


def test_change_set_failed(settings, session, capsys):
    client = session.client("cloudformation")
    stubber = session.stubber("cloudformation")
    failed = describe_change_set_response("FAILED")
    failed["StatusReason"] = "Template format error"
    stubber.add_response("describe_change_set", failed)
    stubber.add_response(
        "describe_change_set", describe_change_set_response("CREATE_COMPLETE")
    )
    with stubber:
        with pytest.raises(SystemExit):
            get_change_set_status(client, "pokemon-db-abcdefghij", settings)
        status = get_change_set_status(client, "pokemon-db-abcdefghij", settings)
    assert status["Status"] == "CREATE_COMPLETE"
    assert "AWS::EC2::VPC" in capsys.readouterr().out
