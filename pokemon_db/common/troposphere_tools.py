#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helper functions around troposphere Template objects
"""

from __future__ import annotations

from typing import Union

from troposphere import AWSObject, GetAtt, Output, Ref, Template

from pokemon_db import __version__
from pokemon_db.common.cfn_params import Parameter
from pokemon_db.common.logging import LOG


def init_template(description=None) -> Template:
    """Function to initialize the troposphere base template

    :param str description: Description used for the CFN
    :rtype: troposphere.Template
    """
    if description is not None:
        template = Template(description)
    else:
        template = Template(f"Template generated by pokemon-db {__version__}")
    template.set_metadata(
        {
            "Type": "PokemonDb",
            "Properties": {"Version": __version__},
        }
    )
    template.set_version()
    return template


def add_resource(
    template: Template, resource: AWSObject, replace: bool = False
) -> AWSObject:
    """
    Function to add resource to template if the resource does not already exist

    :param troposphere.Template template:
    :param resource:
    :param bool replace:
    :raises ValueError: if the resource title is already used and replace is False
    """
    if resource.title not in template.resources:
        template.add_resource(resource)
    elif replace:
        LOG.debug(f"Replacing {resource.title} in template")
        template.resources[resource.title] = resource
    else:
        raise ValueError(f"Resource {resource.title} is already defined in template")
    return resource


def add_outputs(template: Template, outputs: list) -> None:
    """
    Function to add outputs to the template, ignoring those already set.

    :param troposphere.Template template:
    :param list[troposphere.Output] outputs:
    """
    for output in outputs:
        if output.title not in template.outputs:
            template.add_output(output)
        else:
            LOG.debug(f"Output {output.title} already set. Skipping")


def define_attribute_output(
    resource: AWSObject, parameter: Parameter, description: str = None
) -> Output:
    """
    Creates the Output for a resource attribute, using the parameter return_value as the attribute name.
    Parameters without return_value output Ref(resource)

    :param resource: The resource to output the attribute for
    :param Parameter parameter:
    :param str description:
    """
    value: Union[Ref, GetAtt] = (
        GetAtt(resource, parameter.return_value)
        if parameter.return_value
        else Ref(resource)
    )
    props = {"Value": value}
    if description:
        props["Description"] = description
    return Output(f"{resource.title}{parameter.title}", **props)
