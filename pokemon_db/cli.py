# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for pokemon_db.
"""

import argparse
import logging
import sys

from botocore.exceptions import ClientError, NoCredentialsError
from jsonschema.exceptions import ValidationError

from pokemon_db.common.aws import deploy, destroy, plan
from pokemon_db.common.logging import LOG
from pokemon_db.common.settings import PokemonDbSettings
from pokemon_db.exceptions import PokemonDbException
from pokemon_db.pokemon_db import generate_full_template


class ArgparseHelper(argparse._HelpAction):
    """
    Used to help print top level '--help' arguments from argparse
    when used with subparsers
    """

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print()
        subparsers_actions = [
            action
            for action in parser._actions
            if isinstance(action, argparse._SubParsersAction)
        ]
        for subparsers_action in subparsers_actions:
            for choice, subparser in list(subparsers_action.choices.items()):
                if choice in [
                    cmd["name"] for cmd in PokemonDbSettings.active_commands
                ] or choice in [
                    cmd["name"] for cmd in PokemonDbSettings.teardown_commands
                ]:
                    print(f"Command '{choice}'")
                    print(subparser.format_usage())
        parser.exit()


def main_parser():
    """
    Console script for pokemon_db.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action=ArgparseHelper,
        help="show this help message and exit",
    )

    cmd_parsers = parser.add_subparsers(
        dest=PokemonDbSettings.command_arg, help="Command to execute."
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    files_parser = argparse.ArgumentParser(add_help=False)
    lookups_parser = argparse.ArgumentParser(add_help=False)
    files_parser.add_argument(
        "-f",
        "--config-file",
        dest=PokemonDbSettings.input_file_arg,
        required=False,
        help="Path to the YAML settings file, overriding the default settings",
    )
    files_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest=PokemonDbSettings.output_dir_arg,
        default=PokemonDbSettings.default_output_dir,
    )
    files_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=PokemonDbSettings.format_arg,
        choices=PokemonDbSettings.allowed_formats,
        default=PokemonDbSettings.default_format,
    )
    files_parser.add_argument(
        "-b",
        "--bucket-name",
        type=str,
        required=False,
        help="Bucket name to upload the template to",
        dest=PokemonDbSettings.bucket_arg,
    )
    lookups_parser.add_argument(
        "-c",
        "--context",
        dest=PokemonDbSettings.context_arg,
        action="append",
        default=[],
        help="Context value, key=value. Takes precedence over the context file. Can be repeated",
    )
    lookups_parser.add_argument(
        "--context-file",
        dest=PokemonDbSettings.context_file_arg,
        required=False,
        help="Path to the lookup context file. Defaults to pokemon-db.context.json",
    )
    lookups_parser.add_argument(
        "--no-lookups",
        dest=PokemonDbSettings.no_lookups_arg,
        action="store_true",
        help="Do not call AWS to resolve values missing from context, use dummy values instead.",
    )
    lookups_parser.add_argument(
        "--account-id",
        dest=PokemonDbSettings.account_arg,
        required=False,
        help="AWS Account ID to use for lookups. Defaults to the account of the credentials",
    )
    base_command_parser.add_argument(
        "-n",
        "--name",
        help="Name of the CFN stack",
        required=False,
        type=str,
        dest=PokemonDbSettings.name_arg,
        default=PokemonDbSettings.default_name,
    )
    base_command_parser.add_argument(
        "--region",
        required=False,
        dest=PokemonDbSettings.region_arg,
        help="Specify the region you want to build for"
        "default use default region from config or environment vars",
    )
    base_command_parser.add_argument(
        "--role-arn",
        dest=PokemonDbSettings.arn_arg,
        help="Allow you to run API calls using a specific IAM role, within same or for cross-account",
        required=False,
    )
    base_command_parser.add_argument(
        "--disable-rollback",
        dest=PokemonDbSettings.disable_rollback_arg,
        help="On create/plan, disable stack automatic rollback.",
        required=False,
        action="store_true",
    )
    base_command_parser.add_argument(
        "--wait",
        dest=PokemonDbSettings.wait_arg,
        help="Wait for the stack operation to complete",
        required=False,
        action="store_true",
    )
    base_command_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    for command in PokemonDbSettings.active_commands:
        cmd_parsers.add_parser(
            name=command["name"],
            help=command["help"],
            parents=[base_command_parser, files_parser, lookups_parser],
        )
    for command in PokemonDbSettings.teardown_commands:
        cmd_parsers.add_parser(
            name=command["name"], help=command["help"], parents=[base_command_parser]
        )

    for command in PokemonDbSettings.neutral_commands:
        cmd_parsers.add_parser(name=command["name"], help=command["help"])
    return parser


def set_log_level(loglevel: str) -> None:
    valid_levels = [
        "FATAL",
        "CRITICAL",
        "ERROR",
        "WARNING",
        "WARN",
        "INFO",
        "DEBUG",
    ]
    if loglevel.upper() in valid_levels:
        LOG.setLevel(logging.getLevelName(loglevel.upper()))
    else:
        print(f"Log level value {loglevel} is invalid. Must me one of {valid_levels}")


def main(argv=None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    if argv is None and len(sys.argv) == 1:
        parser.print_help()
        sys.exit()
    args = parser.parse_args(argv)
    if getattr(args, "loglevel", None):
        set_log_level(args.loglevel)
    LOG.debug(args)
    try:
        settings = PokemonDbSettings(**vars(args))
        if settings.teardown:
            destroy(settings)
            return 0
        settings.set_bucket_name_from_account_id()
        LOG.debug(settings)
        root_stack = generate_full_template(settings)
        root_stack.render(settings)
        if settings.deploy:
            deploy(settings, root_stack)
        elif settings.plan:
            plan(settings, root_stack)
    except (
        PokemonDbException,
        LookupError,
        ValueError,
        TypeError,
        ValidationError,
        ClientError,
        NoCredentialsError,
    ) as error:
        LOG.error(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
