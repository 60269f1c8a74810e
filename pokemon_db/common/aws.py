# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to hand the rendered template over to AWS CloudFormation.
CloudFormation does the planning, diffing and rollback. These functions only submit and report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings
    from pokemon_db.common.stacks import PokemonDbStack

import secrets
from string import ascii_lowercase
from time import sleep

from botocore.exceptions import ClientError
from compose_x_common.aws import get_assume_role_session
from compose_x_common.compose_x_common import keyisset
from tabulate import tabulate

from pokemon_db.common.logging import LOG

CAPABILITIES = ["CAPABILITY_IAM"]
TEMPLATE_BODY_MAX_SIZE = 51200
YES_ANSWERS = ["y", "Y", "YES", "Yes", "yes"]


def get_cross_role_session(session, arn, region_name=None, session_name=None):
    """
    Function to override the settings session with an assumed role session

    :param boto3.session.Session session: The original session fetching the credentials for X-Role
    :param str arn:
    :param str region_name: Name of region for session
    :param str session_name: Override name of the session
    :return: boto3 session from lookup settings
    :rtype: boto3.session.Session
    """
    if not session_name:
        session_name = "PokemonDb@Lookup"
    try:
        return get_assume_role_session(
            session, arn, session_name=session_name, region=region_name
        )
    except ClientError:
        LOG.error(f"Failed to use the Role ARN {arn}")
        raise


def assert_can_create_stack(client, name):
    """
    Checks whether a stack already exists or not

    :return: True if the stack does not exist, the stack description if it is in REVIEW_IN_PROGRESS, False otherwise.
    """
    try:
        stack_r = client.describe_stacks(StackName=name)
        if not keyisset("Stacks", stack_r):
            return True
        stacks = stack_r["Stacks"]
        if len(stacks) != 1:
            raise LookupError("Too many stacks found with machine name", name)
        stack = stacks[0]
        if stack["StackStatus"] == "REVIEW_IN_PROGRESS":
            return stack
        return False
    except ClientError as error:
        if (
            error.response["Error"]["Code"] == "ValidationError"
            and error.response["Error"]["Message"].find("does not exist") > 0
        ):
            return True
        raise error


def assert_can_update_stack(client, name):
    """
    Checks whether an existing stack is in a status allowing an update
    """
    can_update_statuses = [
        "CREATE_COMPLETE",
        "ROLLBACK_COMPLETE",
        "UPDATE_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
    ]
    res = client.describe_stacks(StackName=name)
    if not res["Stacks"]:
        return False
    stack = res["Stacks"][0]
    LOG.info(f"Stack {name} is {stack['StackStatus']}")
    if stack["StackStatus"] in can_update_statuses:
        return True
    return False


def define_template_source(root_stack: PokemonDbStack) -> dict:
    """
    Returns TemplateURL when the template was uploaded to S3, TemplateBody otherwise.

    :raises ValueError: when the template is too large to be sent as body and was not uploaded.
    """
    if root_stack.template_url and root_stack.template_url.startswith("https://"):
        return {"TemplateURL": root_stack.template_url}
    if len(root_stack.template_body) >= TEMPLATE_BODY_MAX_SIZE:
        raise ValueError(
            f"The template for {root_stack.name} is too large to be sent as body "
            f"({len(root_stack.template_body)} >= {TEMPLATE_BODY_MAX_SIZE}). Upload it to S3 with --bucket-name",
        )
    return {"TemplateBody": root_stack.template_body}


def wait_for_stack(client, settings: PokemonDbSettings, waiter_name: str) -> None:
    if not settings.wait:
        return
    LOG.info(f"Waiting for {waiter_name} on stack {settings.name}")
    client.get_waiter(waiter_name).wait(
        StackName=settings.name, WaiterConfig={"Delay": 15, "MaxAttempts": 240}
    )
    LOG.info(f"Stack {settings.name} - {waiter_name} done.")


def define_change_set_name(settings: PokemonDbSettings) -> str:
    return f"{settings.name}-" + "".join(
        secrets.choice(ascii_lowercase) for _ in range(10)
    )


def submit_change_set(
    client, settings: PokemonDbSettings, template_source: dict, change_set_type: str
) -> str:
    """
    Creates the change set and waits for CloudFormation to compute the changes.

    :param str change_set_type: CREATE or UPDATE
    :return: the change set name
    """
    change_set_name = define_change_set_name(settings)
    client.create_change_set(
        StackName=settings.name,
        Capabilities=CAPABILITIES,
        UsePreviousTemplate=False,
        ChangeSetType=change_set_type,
        ChangeSetName=change_set_name,
        **template_source,
    )
    get_change_set_status(client, change_set_name, settings)
    return change_set_name


def deploy(settings: PokemonDbSettings, root_stack: PokemonDbStack):
    """
    Function to deploy (create or update) the stack to CFN.
    A stack left in REVIEW_IN_PROGRESS by a plan is created via a CREATE change set.

    :param PokemonDbSettings settings:
    :param PokemonDbStack root_stack:
    :return: the stack ID
    """
    client = settings.session.client("cloudformation")
    template_source = define_template_source(root_stack)
    can_create = assert_can_create_stack(client, settings.name)
    if isinstance(can_create, dict):
        LOG.warning(
            f"Stack {settings.name} is in REVIEW_IN_PROGRESS. Creating it from a change set."
        )
        change_set_name = submit_change_set(
            client, settings, template_source, "CREATE"
        )
        client.execute_change_set(
            ChangeSetName=change_set_name,
            StackName=settings.name,
            DisableRollback=settings.disable_rollback,
        )
        LOG.info(f"Stack {settings.name} successfully deployed.")
        wait_for_stack(client, settings, "stack_create_complete")
        return can_create["StackId"]
    elif can_create:
        res = client.create_stack(
            StackName=settings.name,
            Capabilities=CAPABILITIES,
            DisableRollback=settings.disable_rollback,
            **template_source,
        )
        LOG.info(f"Stack {settings.name} successfully deployed.")
        LOG.info(res["StackId"])
        wait_for_stack(client, settings, "stack_create_complete")
        return res["StackId"]
    elif assert_can_update_stack(client, settings.name):
        LOG.warning(f"Stack {settings.name} already exists. Updating.")
        try:
            res = client.update_stack(
                StackName=settings.name,
                Capabilities=CAPABILITIES,
                DisableRollback=settings.disable_rollback,
                **template_source,
            )
        except ClientError as error:
            if error.response["Error"]["Message"].startswith(
                "No updates are to be performed"
            ):
                LOG.info(f"Stack {settings.name} - No updates to perform.")
                return None
            raise
        LOG.info(f"Stack {settings.name} successfully updating.")
        LOG.info(res["StackId"])
        wait_for_stack(client, settings, "stack_update_complete")
        return res["StackId"]
    LOG.error(f"Stack {settings.name} can neither be created nor updated.")
    return None


def get_change_set_status(client, change_set_name, settings):
    pending_statuses = [
        "CREATE_PENDING",
        "CREATE_IN_PROGRESS",
        "DELETE_PENDING",
        "DELETE_IN_PROGRESS",
        "REVIEW_IN_PROGRESS",
    ]
    success_statuses = ["CREATE_COMPLETE", "DELETE_COMPLETE"]
    failed_statuses = ["DELETE_FAILED", "FAILED"]
    ready = False
    status = None
    while not ready:
        status = client.describe_change_set(
            ChangeSetName=change_set_name, StackName=settings.name
        )
        if status["Status"] in failed_statuses:
            raise SystemExit(
                "Change set is unsuccessful",
                status["Status"],
                status.get("StatusReason"),
            )
        if status["Status"] in pending_statuses:
            print(
                "ChangeSet creation in progress. Waiting 10 seconds",
                end="\r",
                flush=True,
            )
            sleep(10)
        elif status["Status"] in success_statuses:
            ready = True

    print(
        tabulate(
            [
                [
                    change["ResourceChange"]["LogicalResourceId"],
                    change["ResourceChange"]["ResourceType"],
                    change["ResourceChange"]["Action"],
                    change["ResourceChange"].get("Replacement", ""),
                ]
                for change in status.get("Changes", [])
            ],
            ["LogicalResourceId", "ResourceType", "Action", "Replacement"],
            tablefmt="rst",
        )
    )
    return status


def plan(settings: PokemonDbSettings, root_stack: PokemonDbStack):
    """
    Function to create a change-set and show the diffs, then optionally apply it.

    :param PokemonDbSettings settings:
    :param PokemonDbStack root_stack:
    """
    client = settings.session.client("cloudformation")
    template_source = define_template_source(root_stack)
    creating = assert_can_create_stack(client, settings.name)
    if not creating and not assert_can_update_stack(client, settings.name):
        LOG.error(f"Stack {settings.name} is not in a status that allows changes.")
        return
    change_set_name = submit_change_set(
        client, settings, template_source, "CREATE" if creating else "UPDATE"
    )
    apply_q = input("Want to apply? [yN]: ")
    if apply_q in YES_ANSWERS:
        client.execute_change_set(
            ChangeSetName=change_set_name,
            StackName=settings.name,
            DisableRollback=settings.disable_rollback,
        )
        wait_for_stack(
            client,
            settings,
            "stack_create_complete" if creating else "stack_update_complete",
        )
        return
    delete_q = input("Cleanup ChangeSet ? [yN]: ")
    if delete_q in YES_ANSWERS:
        client.delete_change_set(ChangeSetName=change_set_name, StackName=settings.name)
        if creating:
            client.delete_stack(StackName=settings.name)


def destroy(settings: PokemonDbSettings) -> bool:
    """
    Tears down the whole stack. There is no partial deletion.

    :return: whether the deletion was requested
    """
    client = settings.session.client("cloudformation")
    if assert_can_create_stack(client, settings.name) is True:
        LOG.warning(f"Stack {settings.name} does not exist. Nothing to delete.")
        return False
    client.delete_stack(StackName=settings.name)
    LOG.info(f"Stack {settings.name} deletion requested.")
    wait_for_stack(client, settings, "stack_delete_complete")
    return True
