#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to resolve SSM parameters values at synthesis time.

The value is read once from AWS SSM and stored in the lookup context.
Subsequent renders use the context value and do not call AWS.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings

from botocore.exceptions import ClientError

from pokemon_db.common.context import ssm_lookup_key
from pokemon_db.common.logging import LOG

DUMMY_VALUE_PREFIX = "dummy-value-for-"


def get_parameter_value(client, parameter_name: str) -> str:
    """
    Retrieves the decrypted value of the SSM parameter

    :param client: boto3 SSM client
    :param str parameter_name:
    :raises LookupError: if the parameter does not exist
    """
    try:
        return client.get_parameter(Name=parameter_name, WithDecryption=True)[
            "Parameter"
        ]["Value"]
    except ClientError as error:
        if error.response["Error"]["Code"] == "ParameterNotFound":
            raise LookupError(
                f"SSM Parameter {parameter_name} not found in "
                f"{client.meta.region_name}"
            ) from error
        raise


def value_from_lookup(
    settings: PokemonDbSettings, parameter_name: str, client=None
) -> str:
    """
    Returns the value of the SSM parameter, from context if set, else from AWS API.
    When lookups are disabled, missing values are replaced with a dummy value.

    :param PokemonDbSettings settings:
    :param str parameter_name: name of the SSM parameter
    :param client: Override SSM client
    :rtype: str
    """
    if not settings.use_lookups and not settings.account_id_is_known:
        LOG.warning(
            f"SSM {parameter_name} - Lookups are disabled and no account ID is set. "
            "Using dummy value."
        )
        return f"{DUMMY_VALUE_PREFIX}{parameter_name}"
    context_key = ssm_lookup_key(
        parameter_name, settings.account_id, settings.aws_region
    )
    if context_key in settings.context:
        LOG.debug(f"SSM {parameter_name} - Using value from context")
        return settings.context[context_key]
    if not settings.use_lookups:
        LOG.warning(
            f"SSM {parameter_name} - Lookups are disabled and no value is set in context. "
            "Using dummy value."
        )
        return f"{DUMMY_VALUE_PREFIX}{parameter_name}"
    if client is None:
        client = settings.session.client("ssm", region_name=settings.aws_region)
    LOG.info(f"SSM {parameter_name} - Looking up value in {settings.aws_region}")
    value = get_parameter_value(client, parameter_name)
    settings.context.set(context_key, value)
    return value
