# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The rendered CloudFormation template as a file: written locally, uploaded to S3 and validated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokemon_db.common.settings import PokemonDbSettings

from os import makedirs
from os.path import abspath

from botocore.exceptions import ClientError, NoCredentialsError
from troposphere import Template

from pokemon_db.common import FILE_PREFIX
from pokemon_db.common.logging import LOG

JSON_MIME = "application/json"
YAML_MIME = "application/x-yaml"
FORMAT_MIMES = {"json": JSON_MIME, "yaml": YAML_MIME}
VALIDATION_BODY_MAX_SIZE = 51200


def upload_file(body: str, bucket_name: str, file_name: str, settings, mime: str):
    """
    Uploads the body to the artifacts bucket, under the FILE_PREFIX folder

    :return: the https://s3.amazonaws.com/ URL of the object
    :rtype: str
    """
    key = f"{FILE_PREFIX}/{file_name}"
    settings.session.client("s3").put_object(
        Body=body,
        Key=key,
        Bucket=bucket_name,
        ContentEncoding="utf-8",
        ContentType=mime,
        ServerSideEncryption="AES256",
    )
    return f"https://s3.amazonaws.com/{bucket_name}/{key}"


class FileArtifact(object):
    """
    The template file for a stack.

    :ivar str file_name: the file name, with the format extension
    :ivar str file_path: local path the body is written to
    :ivar str mime: MIME-type matching the format
    :ivar str body: the rendered template, set by define_body()
    :ivar str url: the S3 URL, once uploaded
    """

    def __init__(
        self,
        file_name: str,
        settings: PokemonDbSettings,
        template: Template,
        file_format: str = None,
    ):
        if not isinstance(template, Template):
            raise TypeError("template must be of type", Template, "got", type(template))
        file_format = file_format if file_format else settings.format
        if file_format not in FORMAT_MIMES:
            raise ValueError(
                f"Format {file_format} is not supported. Must be one of",
                list(FORMAT_MIMES.keys()),
            )
        self.template = template
        self.file_name = f"{file_name}.{file_format}"
        self.mime = FORMAT_MIMES[file_format]
        self.file_path = f"{settings.output_dir}/{self.file_name}"
        self.body = None
        self.url = None

    def __repr__(self):
        return self.file_path

    def define_body(self) -> None:
        if self.mime == YAML_MIME:
            self.body = self.template.to_yaml()
        else:
            self.body = self.template.to_json()

    def write(self, settings: PokemonDbSettings) -> None:
        makedirs(settings.output_dir, exist_ok=True)
        with open(self.file_path, "w") as template_fd:
            template_fd.write(self.body)
        LOG.info(
            f"Template {self.file_name} written successfully at {abspath(self.file_path)}"
        )

    def upload(self, settings: PokemonDbSettings) -> None:
        self.url = upload_file(
            self.body, settings.bucket_name, self.file_name, settings, self.mime
        )
        LOG.info(f"{self.file_name} uploaded successfully to {self.url}")

    def validate(self, settings: PokemonDbSettings) -> None:
        """
        Validates the template with CloudFormation, from S3 when uploaded, else from its body.
        On failure, the body is written to /tmp/<name>.<format> before the error is raised again.
        """
        client = settings.session.client("cloudformation")
        try:
            if self.url:
                client.validate_template(TemplateURL=self.url)
            elif len(self.body) >= VALIDATION_BODY_MAX_SIZE:
                LOG.warning(
                    f"Template body for {self.file_name} is too big for validation without upload. Skipping."
                )
                return
            else:
                LOG.debug(f"Validating template body - {self.file_path}")
                client.validate_template(TemplateBody=self.body)
        except NoCredentialsError:
            LOG.warning(
                f"No AWS credentials available. Template {self.file_name} was not validated."
            )
            return
        except ClientError as error:
            LOG.error(error)
            failed_path = f"/tmp/{settings.name}.{settings.format}"
            with open(failed_path, "w") as failed_file_fd:
                failed_file_fd.write(self.body)
            LOG.error(f"Failed validation template written at {failed_path}")
            raise
        LOG.info(f"Template {self.file_name} was validated successfully by CFN")
