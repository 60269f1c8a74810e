#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from os import path

from behave import given, then, when
from pytest import raises

from pokemon_db.common.files import FileArtifact
from pokemon_db.common.settings import PokemonDbSettings
from pokemon_db.exceptions import MissingContextError
from pokemon_db.pokemon_db import generate_full_template


def get_settings(context) -> PokemonDbSettings:
    if not hasattr(context, "settings"):
        context.settings = PokemonDbSettings(
            content=getattr(context, "content", None), **context.settings_kwargs
        )
    return context.settings


@given("I want to render the stack in {region} for account {account_id}")
def step_impl(context, region, account_id):
    context.settings_kwargs.update(
        {
            PokemonDbSettings.command_arg: PokemonDbSettings.render_arg,
            PokemonDbSettings.region_arg: region,
            PokemonDbSettings.account_arg: account_id,
            PokemonDbSettings.format_arg: "yaml",
            PokemonDbSettings.output_dir_arg: path.join(
                context.workdir.name, "outputs"
            ),
            PokemonDbSettings.context_file_arg: path.join(
                context.workdir.name, "pokemon-db.context.json"
            ),
            PokemonDbSettings.context_arg: [],
        }
    )


@given("I set context {key} to {value}")
def step_impl(context, key, value):
    context.settings_kwargs[PokemonDbSettings.context_arg].append(f"{key}={value}")


@given("I disable lookups")
def step_impl(context):
    context.settings_kwargs[PokemonDbSettings.no_lookups_arg] = True


@given("I use a private load balancer")
def step_impl(context):
    context.content = {"Service": {"PublicLoadBalancer": False}}


@when("I generate the stack")
def step_impl(context):
    context.root_stack = generate_full_template(get_settings(context))
    context.template = context.root_stack.stack_template.to_dict()


@then("generating the stack fails for missing context")
def step_impl(context):
    with raises(MissingContextError):
        generate_full_template(get_settings(context))


@then("I render the template locally")
def step_impl(context):
    template_file = FileArtifact(
        context.settings.name,
        context.settings,
        template=context.root_stack.stack_template,
    )
    template_file.define_body()
    template_file.write(context.settings)
    assert path.exists(
        path.join(context.settings.output_dir, f"{context.settings.name}.yaml")
    )
