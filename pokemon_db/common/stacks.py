# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to handle the root stack, its template and the rendering of it to file / S3.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings

from troposphere import Template

from pokemon_db.common import NONALPHANUM
from pokemon_db.common.files import FileArtifact
from pokemon_db.common.logging import LOG


class PokemonDbStack(object):
    """
    Class to define a CFN Stack as the composition of its name and template object.

    :ivar str name: the CFN stack name
    :ivar troposphere.Template stack_template: the template object to keep track of
    :ivar str template_url: the URL (S3) or local file path the template was rendered to
    :ivar str template_body: the rendered template body
    """

    def __init__(self, name: str, stack_template: Template, file_name: str = None):
        if not isinstance(stack_template, Template):
            raise TypeError(
                "stack_template is", type(stack_template), "expected", Template
            )
        self.name = name
        self.title = NONALPHANUM.sub("", name)
        self.file_name = file_name if file_name else name
        self.stack_template = stack_template
        self.template_url = None
        self.template_body = None

    def __repr__(self):
        return f"PokemonDbStack({self.name})"

    def render(self, settings: PokemonDbSettings) -> FileArtifact:
        """
        Function to use when the template is finalized. Writes it locally, uploads to S3 when
        required and validates it with CloudFormation.
        """
        LOG.debug(f"Rendering {self.title}")
        template_file = FileArtifact(
            file_name=self.file_name,
            template=self.stack_template,
            settings=settings,
            file_format=settings.format,
        )
        template_file.define_body()
        template_file.write(settings)
        self.template_body = template_file.body
        self.template_url = template_file.file_path
        if settings.upload:
            template_file.upload(settings)
            self.template_url = template_file.url
            LOG.debug(f"Rendered URL = {template_file.url}")
        template_file.validate(settings)
        return template_file
