# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

import re
from datetime import datetime as dt
from math import ceil, log
from uuid import uuid4

FILE_PREFIX = f'{dt.utcnow().strftime("%Y/%m/%d/%H%M")}/{str(uuid4().hex)[:6]}'
NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def nxtpow2(x):
    """Function to find the next power of two from given x number

    :param x: number to look for the next power of two

    :returns: next power of two number
    """
    return int(pow(2, ceil(log(x, 2))))


def logical_name(name: str) -> str:
    """
    Returns the CFN compatible logical name for a resource name, i.e. pokemon-db-db -> PokemonDbDb
    """
    return "".join(part.title() for part in NONALPHANUM.split(name) if part.isalnum())
