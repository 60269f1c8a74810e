#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for pokemon-db
"""


class PokemonDbException(Exception):
    """
    Top class for pokemon-db Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class MissingContextError(PokemonDbException, KeyError):
    """
    Exception when a context value required to render the stack is not set, i.e. ecrArn
    """


class InvalidArnError(PokemonDbException, ValueError):
    """
    Exception when an ARN given as input does not match the expected format for the resource type
    """
