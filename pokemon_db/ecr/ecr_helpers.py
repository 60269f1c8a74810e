#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resolves the container image URI from the ECR repository ARN given in context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings

import re

from troposphere import Sub

from pokemon_db.common.logging import LOG
from pokemon_db.exceptions import InvalidArnError, MissingContextError

ECR_REPO_ARN_RE = re.compile(
    r"^arn:(?P<partition>aws(?:-[a-z]+)*):ecr:(?P<region>[a-z0-9-]+):(?P<account_id>\d{12}):"
    r"repository/(?P<repo_name>[a-z0-9]+(?:[._/-][a-z0-9]+)*)$"
)
DEFAULT_TAG = "latest"


def parse_repository_arn(repository_arn: str) -> dict:
    """
    Parses the ECR repository ARN

    >>> parse_repository_arn("arn:aws:ecr:eu-west-1:012345678912:repository/pokemon-db")["repo_name"]
    'pokemon-db'

    :param str repository_arn:
    :raises InvalidArnError: if the ARN is not a valid ECR repository ARN
    :rtype: dict
    """
    if not isinstance(repository_arn, str):
        raise InvalidArnError(
            "ECR repository ARN must be a string. Got", type(repository_arn)
        )
    parts = ECR_REPO_ARN_RE.match(repository_arn)
    if not parts:
        raise InvalidArnError(
            f"{repository_arn} is not a valid ECR repository ARN",
            ECR_REPO_ARN_RE.pattern,
        )
    return parts.groupdict()


def define_ecr_image(repository_arn: str, tag: str = None) -> Sub:
    """
    Returns the image URI of the repository for the tag, resolved by CFN at deploy time

    :param str repository_arn:
    :param str tag: the image tag, defaults to latest
    :rtype: troposphere.Sub
    """
    if tag is None:
        tag = DEFAULT_TAG
    repo = parse_repository_arn(repository_arn)
    return Sub(
        f"{repo['account_id']}.dkr.ecr.{repo['region']}.${{AWS::URLSuffix}}/{repo['repo_name']}:{tag}"
    )


def get_repository_arn_from_context(
    settings: PokemonDbSettings, context_key: str
) -> str:
    """
    Retrieves the ECR repository ARN from the settings context

    :raises MissingContextError: if the context key is not set
    """
    repository_arn = settings.context.get(context_key)
    if repository_arn is None:
        raise MissingContextError(
            f"Context {context_key} is not set. "
            f"Use --context {context_key}=<ECR repository ARN> or set it in {settings.context.file_path}"
        )
    LOG.debug(f"ecr - Using repository {repository_arn}")
    return repository_arn
