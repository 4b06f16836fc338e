#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from behave import given, then, when

from ecs_blueprint.common.settings import BlueprintSettings
from ecs_blueprint.exceptions import BlueprintBaseException
from tests.recording_context import RecordingContext


@given("I use {file_path} as my blueprint file")
def step_impl(context, file_path):
    context.settings = BlueprintSettings(
        **{
            BlueprintSettings.input_file_arg: file_path,
            BlueprintSettings.command_arg: BlueprintSettings.render_arg,
        }
    )
    context.provisioning = RecordingContext()


@given("the backend fails on call {fail_at:d}")
def step_impl(context, fail_at):
    context.provisioning = RecordingContext(fail_at=fail_at)


@when("I provision the cluster")
def step_impl(context):
    context.error = None
    try:
        context.settings.ecs_cluster.provision(context.provisioning)
    except BlueprintBaseException as error:
        context.error = error


@then("the backend calls should be {calls}")
def step_impl(context, calls):
    assert context.error is None
    assert context.provisioning.calls == calls.split(",")


@then("the exports should be {exports}")
def step_impl(context, exports):
    assert [name for name, _ in context.provisioning.exports] == exports.split(",")


@then("provisioning should fail with {error_name}")
def step_impl(context, error_name):
    assert context.error is not None
    assert type(context.error).__name__ == error_name


@then("there should be {count:d} backend calls")
def step_impl(context, count):
    assert len(context.provisioning.calls) == count
