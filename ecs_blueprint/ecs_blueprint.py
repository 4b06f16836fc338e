# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Core module of ecs_blueprint.

It generates the CloudFormation template of the cluster defined in the blueprint,
and renders the container definitions.
"""

import json

from ecs_blueprint import __version__
from ecs_blueprint.common.context import ProvisioningContext
from ecs_blueprint.common.logging import LOG
from ecs_blueprint.ecs.container_definition import (
    JSON_SEPARATORS,
    render_container_definitions,
)
from ecs_blueprint.exceptions import MissingField


def generate_full_template(settings) -> ProvisioningContext:
    """
    Function to generate the template of the ECS Cluster defined in x-cluster.

    :param ecs_blueprint.common.settings.BlueprintSettings settings: The settings for the execution
    :return: the provisioning context holding the template and the exports
    :rtype: ecs_blueprint.common.context.ProvisioningContext
    """
    if settings.ecs_cluster is None:
        raise MissingField("x-cluster")
    context = ProvisioningContext(
        description=f"ECS Blueprint {settings.name} - {__version__}"
    )
    outputs = settings.ecs_cluster.provision(context)
    LOG.info(
        f"{settings.name} - Cluster {outputs.cluster.title} "
        f"and role {outputs.task_exec_role.title} defined"
    )
    return context


def generate_container_definitions(settings) -> str:
    """
    Validates the containers of x-containers and renders them as the JSON list of container definitions.

    :param ecs_blueprint.common.settings.BlueprintSettings settings:
    :rtype: str
    """
    definitions = render_container_definitions(settings.containers)
    return json.dumps(
        [definition.to_dict() for definition in definitions],
        separators=JSON_SEPARATORS,
    )
