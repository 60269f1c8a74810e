#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tests for the ECR repository ARN handling
"""

import pytest

from pokemon_db.ecr.ecr_helpers import (
    define_ecr_image,
    get_repository_arn_from_context,
    parse_repository_arn,
)
from pokemon_db.exceptions import InvalidArnError, MissingContextError
from pokemon_db.pokemon_db import generate_full_template


def test_parse_repository_arn():
    parts = parse_repository_arn(
        "arn:aws:ecr:eu-west-1:012345678912:repository/team/pokemon-db"
    )
    assert parts == {
        "partition": "aws",
        "region": "eu-west-1",
        "account_id": "012345678912",
        "repo_name": "team/pokemon-db",
    }
    assert (
        parse_repository_arn(
            "arn:aws-cn:ecr:cn-north-1:012345678912:repository/pokemon"
        )["partition"]
        == "aws-cn"
    )


@pytest.mark.parametrize(
    "arn",
    [
        "arn:aws:ecr:eu-west-1:0123:repository/pokemon-db",
        "arn:aws:s3:::pokemon-db",
        "pokemon-db",
        "arn:aws:ecr:eu-west-1:012345678912:repository/Pokemon",
        123,
    ],
)
def test_invalid_repository_arn(arn):
    with pytest.raises(InvalidArnError):
        parse_repository_arn(arn)


def test_define_ecr_image():
    image = define_ecr_image(
        "arn:aws:ecr:us-east-1:012345678912:repository/pokemon-db", "v1"
    )
    assert image.to_dict() == {
        "Fn::Sub": "012345678912.dkr.ecr.us-east-1.${AWS::URLSuffix}/pokemon-db:v1"
    }
    assert define_ecr_image(
        "arn:aws:ecr:us-east-1:012345678912:repository/pokemon-db"
    ).to_dict()["Fn::Sub"].endswith(":latest")


def test_missing_ecr_arn(settings_kwargs):
    from pokemon_db.common.settings import PokemonDbSettings

    settings_kwargs[PokemonDbSettings.context_arg] = []
    settings = PokemonDbSettings(**settings_kwargs)
    with pytest.raises(MissingContextError):
        get_repository_arn_from_context(settings, "ecrArn")
    with pytest.raises(KeyError):
        generate_full_template(settings)


def test_malformed_ecr_arn(settings_kwargs):
    from pokemon_db.common.settings import PokemonDbSettings

    settings_kwargs[PokemonDbSettings.context_arg] = ["ecrArn=not-an-arn"]
    with pytest.raises(ValueError):
        generate_full_template(PokemonDbSettings(**settings_kwargs))
