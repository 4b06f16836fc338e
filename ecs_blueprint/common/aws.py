# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to deploy the rendered template to AWS CloudFormation.
"""

import secrets
from string import ascii_lowercase
from time import sleep

from botocore.exceptions import ClientError
from compose_x_common.compose_x_common import keyisset
from tabulate import tabulate

from ecs_blueprint.common.logging import LOG
from ecs_blueprint.exceptions import BackendCallFailed

CAPABILITIES = ["CAPABILITY_IAM"]


def assert_can_create_stack(client, name):
    """
    Checks whether a stack already exists or not
    """
    try:
        stack_r = client.describe_stacks(StackName=name)
        if not keyisset("Stacks", stack_r):
            return True
        stacks = stack_r["Stacks"]
        if len(stacks) != 1:
            raise LookupError("Too many stacks found with machine name", name)
        stack = stacks[0]
        if stack["StackStatus"] == "REVIEW_IN_PROGRESS":
            return stack
        return False
    except ClientError as error:
        if (
            error.response["Error"]["Code"] == "ValidationError"
            and error.response["Error"]["Message"].find("does not exist") > 0
        ):
            return True
        raise BackendCallFailed(f"Failed to describe stack {name}", error) from error


def assert_can_update_stack(client, name):
    """
    Checks whether the existing stack is in a status that allows an update
    """
    can_update_statuses = [
        "CREATE_COMPLETE",
        "ROLLBACK_COMPLETE",
        "UPDATE_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
    ]
    try:
        res = client.describe_stacks(StackName=name)
    except ClientError as error:
        raise BackendCallFailed(f"Failed to describe stack {name}", error) from error
    if not res["Stacks"]:
        return False
    stack = res["Stacks"][0]
    LOG.info(stack["StackStatus"])
    if stack["StackStatus"] in can_update_statuses:
        return True
    return False


def deploy(settings, template_body):
    """
    Function to deploy (create or update) the stack to CFN.

    :param ecs_blueprint.common.settings.BlueprintSettings settings:
    :param str template_body: the rendered template
    :return: the stack ID, if deployed
    :rtype: str
    """
    client = settings.session.client("cloudformation")
    try:
        if assert_can_create_stack(client, settings.name):
            res = client.create_stack(
                StackName=settings.name,
                Capabilities=CAPABILITIES,
                TemplateBody=template_body,
                DisableRollback=settings.disable_rollback,
            )
            LOG.info(f"Stack {settings.name} successfully deployed.")
            LOG.info(res["StackId"])
            return res["StackId"]
        elif assert_can_update_stack(client, settings.name):
            LOG.warning(f"Stack {settings.name} already exists. Updating.")
            res = client.update_stack(
                StackName=settings.name,
                Capabilities=CAPABILITIES,
                TemplateBody=template_body,
                DisableRollback=settings.disable_rollback,
            )
            LOG.info(f"Stack {settings.name} successfully updating.")
            LOG.info(res["StackId"])
            return res["StackId"]
    except ClientError as error:
        LOG.error(f"Failed to deploy stack {settings.name}")
        raise BackendCallFailed(
            f"Failed to deploy stack {settings.name}", error
        ) from error
    LOG.error(f"Stack {settings.name} is in a status that does not allow an update")
    return None


def get_change_set_status(client, change_set_name, settings):
    pending_statuses = [
        "CREATE_PENDING",
        "CREATE_IN_PROGRESS",
        "DELETE_PENDING",
        "DELETE_IN_PROGRESS",
        "REVIEW_IN_PROGRESS",
    ]
    success_statuses = ["CREATE_COMPLETE", "DELETE_COMPLETE"]
    failed_statuses = ["DELETE_FAILED", "FAILED"]
    ready = False
    status = None
    while not ready:
        status = client.describe_change_set(
            ChangeSetName=change_set_name, StackName=settings.name
        )
        if status["Status"] in failed_statuses:
            raise BackendCallFailed(
                f"Change set {change_set_name} is {status['Status']}: "
                f"{status.get('StatusReason')}"
            )
        if status["Status"] in pending_statuses:
            print(
                "ChangeSet creation in progress. Waiting 10 seconds",
                end="\r",
                flush=True,
            )
            sleep(10)
        elif status["Status"] in success_statuses:
            ready = True

    print(
        tabulate(
            [
                [
                    change["ResourceChange"]["LogicalResourceId"],
                    change["ResourceChange"]["ResourceType"],
                    change["ResourceChange"]["Action"],
                ]
                for change in status["Changes"]
            ],
            ["LogicalResourceId", "ResourceType", "Action"],
            tablefmt="rst",
        )
    )
    return status


def plan(settings, template_body):
    """
    Function to create a change-set, show the changes and apply it if confirmed.

    :param ecs_blueprint.common.settings.BlueprintSettings settings:
    :param str template_body: the rendered template
    """
    client = settings.session.client("cloudformation")
    change_set_name = f"{settings.name}" + "".join(
        secrets.choice(ascii_lowercase) for _ in range(10)
    )
    change_set_type = (
        "CREATE" if assert_can_create_stack(client, settings.name) else "UPDATE"
    )
    try:
        client.create_change_set(
            StackName=settings.name,
            Capabilities=CAPABILITIES,
            TemplateBody=template_body,
            ChangeSetType=change_set_type,
            ChangeSetName=change_set_name,
        )
        status = get_change_set_status(client, change_set_name, settings)
        if status:
            apply_q = input("Want to apply? [yN]: ")
            if apply_q in ["y", "Y", "YES", "Yes", "yes"]:
                client.execute_change_set(
                    ChangeSetName=change_set_name,
                    StackName=settings.name,
                    DisableRollback=settings.disable_rollback,
                )
            else:
                delete_q = input("Cleanup ChangeSet ? [yN]: ")
                if delete_q in ["y", "Y", "YES", "Yes", "yes"]:
                    client.delete_change_set(
                        ChangeSetName=change_set_name, StackName=settings.name
                    )
    except ClientError as error:
        raise BackendCallFailed(
            f"Failed to plan changes for {settings.name}", error
        ) from error
