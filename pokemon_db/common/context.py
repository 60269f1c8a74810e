#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Lookup context. Holds the values resolved at synthesis time (SSM parameters, ECR ARN etc.)
so that rendering the same stack twice gives the same template without calling AWS again.
"""

from __future__ import annotations

import json
import re
from os import path

from pokemon_db.common.logging import LOG

CONTEXT_SEPARATOR = "="
SSM_CONTEXT_ARG_RE = re.compile(
    r"^(?P<key>ssm:account=[^:]+:parameterName=[^:]+:region=[^=]+)=(?P<value>.*)$"
)


def parse_context_args(context_args: list) -> dict:
    """
    Parses the key=value strings from the --context CLI argument.
    SSM lookup keys contain the separator themselves, so they are matched in full first.

    :param list[str] context_args:
    :return: the key/value pairs
    :rtype: dict
    """
    context = {}
    if not context_args:
        return context
    for context_arg in context_args:
        ssm_parts = SSM_CONTEXT_ARG_RE.match(context_arg)
        if ssm_parts:
            context[ssm_parts.group("key")] = ssm_parts.group("value")
            continue
        if CONTEXT_SEPARATOR not in context_arg:
            raise ValueError(
                f"Context {context_arg} is invalid. Expected format key{CONTEXT_SEPARATOR}value"
            )
        key, value = context_arg.split(CONTEXT_SEPARATOR, 1)
        if not key:
            raise ValueError(f"Context {context_arg} has no key")
        context[key] = value
    return context


def ssm_lookup_key(parameter_name: str, account_id: str, region: str) -> str:
    """
    Returns the context key for a given SSM parameter

    >>> ssm_lookup_key("SONAR_JDBC_PASSWORD", "012345678912", "eu-west-1")
    'ssm:account=012345678912:parameterName=SONAR_JDBC_PASSWORD:region=eu-west-1'
    """
    return f"ssm:account={account_id}:parameterName={parameter_name}:region={region}"


class LookupContext(object):
    """
    Class to manage the context file and the values given via CLI.

    Values given on the command line take precedence over the file and are never saved.

    :ivar str file_path: path to the context file
    :ivar dict values: values loaded from / written to the file
    :ivar dict overrides: values set from the CLI
    """

    default_file_name = "pokemon-db.context.json"

    def __init__(self, file_path: str = None, overrides: dict = None):
        self.file_path = file_path if file_path else self.default_file_name
        self.values = {}
        self.overrides = overrides if overrides else {}
        self.updated = False
        self.load()

    def __contains__(self, key):
        return key in self.overrides or key in self.values

    def __getitem__(self, key):
        if key in self.overrides:
            return self.overrides[key]
        return self.values[key]

    def get(self, key, default=None):
        if key in self:
            return self[key]
        return default

    def set(self, key: str, value) -> None:
        """
        Sets the value in the context, to be persisted on save()
        """
        if self.values.get(key) != value:
            self.values[key] = value
            self.updated = True

    def load(self) -> None:
        if not path.exists(self.file_path):
            LOG.debug(f"No context file at {self.file_path}")
            return
        with open(self.file_path) as context_fd:
            content = json.loads(context_fd.read())
        if not isinstance(content, dict):
            raise TypeError(
                f"Context file {self.file_path} must be a JSON object. Got",
                type(content),
            )
        self.values = content
        LOG.debug(f"Loaded {len(self.values)} context values from {self.file_path}")

    def save(self) -> None:
        """
        Writes the context values to file if any changed since load.
        """
        if not self.updated:
            return
        with open(self.file_path, "w") as context_fd:
            context_fd.write(json.dumps(self.values, indent=2, sort_keys=True))
        self.updated = False
        LOG.info(f"Lookup context saved to {path.abspath(self.file_path)}")
