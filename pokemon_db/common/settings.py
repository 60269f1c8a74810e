# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the PokemonDbSettings class
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime as dt
from json import loads

import boto3
import jsonschema
import yaml
from botocore.exceptions import ClientError
from compose_x_common.aws import get_account_id, validate_iam_role_arn
from compose_x_common.compose_x_common import keyisset, set_else_none
from importlib_resources import files as pkg_files

from pokemon_db import __version__
from pokemon_db.common.aws import get_cross_role_session
from pokemon_db.common.context import LookupContext, parse_context_args
from pokemon_db.common.logging import LOG
from pokemon_db.iam import ROLE_ARN_ARG

try:
    from yaml import CSafeLoader as Loader
except ImportError:
    from yaml import SafeLoader as Loader


def merge_definitions(base: dict, override: dict) -> dict:
    """
    Deep merges override into a copy of base. Lists and scalars from override replace the ones in base.

    :param dict base:
    :param dict override:
    :rtype: dict
    """
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_definitions(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def load_definition_file(file_path: str) -> dict:
    """
    Loads a YAML (or JSON) settings file

    :raises TypeError: if the file content is not a mapping
    """
    with open(file_path) as definition_fd:
        content = yaml.load(definition_fd.read(), Loader=Loader)
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise TypeError(
            f"Settings file {file_path} must be a mapping. Got", type(content)
        )
    return content


class PokemonDbSettings:
    """
    Class to handle the settings to use for pokemon-db.

    :ivar dict definition: the resources settings, defaults merged with the settings file
    :ivar LookupContext context: the lookup context
    :ivar boto3.session.Session session: session used for lookups and deployment
    """

    name_arg = "Name"
    region_arg = "RegionName"
    account_arg = "AccountId"
    arn_arg = ROLE_ARN_ARG

    deploy_arg = "up"
    render_arg = "render"
    create_arg = "create"
    plan_arg = "plan"
    down_arg = "down"
    command_arg = "command"

    bucket_arg = "BucketName"
    input_file_arg = "ConfigFile"
    output_dir_arg = "OutputDirectory"
    format_arg = "TemplateFormat"
    context_arg = "Context"
    context_file_arg = "ContextFile"
    no_lookups_arg = "NoLookups"
    wait_arg = "Wait"
    disable_rollback_arg = "DisableRollback"

    default_name = "pokemon-db"
    default_format = "json"
    allowed_formats = ["json", "yaml"]
    default_output_dir = f"/tmp/{dt.utcnow().strftime('%s')}"

    active_commands = [
        {
            "name": deploy_arg,
            "help": "Generates & Validates the CFN template, Creates/Updates stack in CFN",
        },
        {
            "name": render_arg,
            "help": "Generates & Validates the CFN template locally. No upload to S3",
        },
        {
            "name": create_arg,
            "help": "Generates & Validates the CFN template locally. Uploads files to S3",
        },
        {
            "name": plan_arg,
            "help": "Creates a change-set to show the diff prior to an update",
        },
    ]
    teardown_commands = [
        {"name": down_arg, "help": "Deletes the whole stack"},
    ]
    neutral_commands = [
        {"name": "version", "help": "pokemon-db version"},
    ]
    all_commands = active_commands + teardown_commands + neutral_commands

    def __init__(
        self,
        content=None,
        profile_name=None,
        session=None,
        **kwargs,
    ):
        """
        Class to init the configuration
        """
        self.__args = deepcopy(kwargs)
        self.session = boto3.session.Session()
        self.override_session(session, profile_name, kwargs)
        self.aws_region = (
            kwargs[self.region_arg]
            if keyisset(self.region_arg, kwargs)
            else self.session.region_name
        )
        self.name = set_else_none(self.name_arg, kwargs, self.default_name)
        self.bucket_name = set_else_none(self.bucket_arg, kwargs)
        self._account_id = set_else_none(self.account_arg, kwargs)
        self.output_dir = self.default_output_dir
        self.format = self.default_format
        self.deploy = False
        self.plan = False
        self.teardown = False
        self.no_upload = True
        self.upload = False
        self.parse_command(kwargs)
        self.set_output_settings(kwargs)
        self.use_lookups = not keyisset(self.no_lookups_arg, kwargs)
        self.wait = keyisset(self.wait_arg, kwargs)
        self.context = LookupContext(
            set_else_none(self.context_file_arg, kwargs),
            parse_context_args(set_else_none(self.context_arg, kwargs, [])),
        )
        self.definition = {}
        self.set_definition(kwargs, content)

    def __repr__(self):
        return f"PokemonDbSettings({self.name}, region={self.aws_region})"

    @property
    def disable_rollback(self) -> bool:
        return bool(
            set_else_none(self.disable_rollback_arg, self.__args, alt_value=False)
        )

    @property
    def account_id(self) -> str:
        """
        The AWS Account ID. Set from input or else discovered via STS on first use.
        """
        if self._account_id is None:
            self._account_id = get_account_id(self.session)
        return self._account_id

    @property
    def account_id_is_known(self) -> bool:
        return self._account_id is not None

    def set_definition(self, kwargs: dict, content: dict = None) -> None:
        """
        Merges the default settings with the settings file and content, validated against the JSON schema.

        :param dict kwargs:
        :param dict content: settings given programmatically, merged last
        """
        specs = pkg_files("pokemon_db").joinpath("specs")
        definition = yaml.load(
            specs.joinpath("defaults.yml").read_text(), Loader=Loader
        )
        if keyisset(self.input_file_arg, kwargs):
            LOG.info(f"Loading settings from {kwargs[self.input_file_arg]}")
            definition = merge_definitions(
                definition, load_definition_file(kwargs[self.input_file_arg])
            )
        if content:
            definition = merge_definitions(definition, content)
        source = specs.joinpath("pokemon-db.spec.json")
        LOG.debug(f"Validating settings against schema {source}")
        jsonschema.validate(definition, loads(source.read_text()))
        self.definition = definition

    def parse_command(self, kwargs):
        """
        Method to analyze the command and set execution settings accordingly.

        :param dict kwargs:
        """
        command = set_else_none(self.command_arg, kwargs)
        if command == self.deploy_arg:
            self.deploy = True
        elif command == self.plan_arg:
            self.plan = True
        elif command == self.create_arg:
            self.no_upload = False
        elif command == self.down_arg:
            self.teardown = True
        elif command == "version":
            print("pokemon-db", __version__)
            exit(0)
        if keyisset(self.bucket_arg, kwargs) and command in [
            self.deploy_arg,
            self.plan_arg,
        ]:
            self.no_upload = False
        self.upload = not self.no_upload

    def override_session(self, session, profile_name, kwargs):
        """
        Method to set the session based on input params

        :param boto3.session.Session session: The session to override the API calls with
        :param str profile_name: Name of a profile configured in .aws/config
        :param dict kwargs: CLI kwargs
        """
        if profile_name and not session:
            self.session = boto3.session.Session(profile_name=profile_name)
        elif session:
            self.session = session
        if keyisset(self.region_arg, kwargs) and not session:
            self.session = boto3.session.Session(
                profile_name=profile_name, region_name=kwargs[self.region_arg]
            )
        if keyisset(self.arn_arg, kwargs):
            validate_iam_role_arn(arn=kwargs[self.arn_arg])
            self.session = get_cross_role_session(
                self.session,
                kwargs[self.arn_arg],
                region_name=set_else_none(self.region_arg, kwargs),
                session_name=f"PokemonDbSettings@{set_else_none(self.command_arg, kwargs, 'cli')}",
            )

    def set_output_settings(self, kwargs):
        """
        Method to set the output settings based on kwargs
        """
        self.format = self.default_format
        if (
            keyisset(self.format_arg, kwargs)
            and kwargs[self.format_arg] in self.allowed_formats
        ):
            self.format = kwargs[self.format_arg]

        self.output_dir = (
            kwargs[self.output_dir_arg]
            if keyisset(self.output_dir_arg, kwargs)
            else self.default_output_dir
        )

    def set_bucket_name_from_account_id(self):
        """
        Defines the default bucket name to use from the AWS Account ID
        """
        if not self.upload or (self.bucket_name and isinstance(self.bucket_name, str)):
            return
        try:
            self.bucket_name = f"pokemon-db-{self.account_id}-{self.aws_region}"
        except ClientError as error:
            code = error.response["Error"]["Code"]
            message = error.response["Error"]["Message"]
            if code == "ExpiredToken":
                LOG.error(message)
                LOG.warning(
                    "Due to credentials error, we won't attempt to upload to S3."
                )
            else:
                LOG.error(error)
            self.bucket_name = None
            self.upload = False
            self.no_upload = True
