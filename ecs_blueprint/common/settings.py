# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the BlueprintSettings class
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime as dt
from json import loads

import boto3
import jsonschema
import yaml
from compose_x_common.aws import get_assume_role_session, validate_iam_role_arn
from compose_x_common.compose_x_common import keyisset, set_else_none
from importlib_resources import files as pkg_files

from ecs_blueprint.common.logging import LOG
from ecs_blueprint.ecs.container_definition import ContainerDefinition
from ecs_blueprint.ecs_cluster import EcsCluster
from ecs_blueprint.iam import ROLE_ARN_ARG


class BlueprintSettings:
    """
    Class to handle the settings to use for ECS Blueprint.

    :ivar EcsCluster ecs_cluster: the cluster defined in x-cluster, if any
    :ivar list[ContainerDefinition] containers: the containers defined in x-containers
    """

    name_arg = "Name"
    region_arg = "RegionName"
    arn_arg = ROLE_ARN_ARG

    deploy_arg = "up"
    render_arg = "render"
    plan_arg = "plan"
    containers_arg = "containers"
    command_arg = "command"

    input_file_arg = "BlueprintFile"
    output_dir_arg = "OutputDirectory"
    format_arg = "TemplateFormat"
    default_format = "json"
    allowed_formats = ["json", "yaml"]

    default_output_dir = f"/tmp/{dt.now().strftime('%Y%m%d%H%M%S')}"

    active_commands = [
        {
            "name": deploy_arg,
            "help": "Generates the CFN template, Creates/Updates the stack in CFN",
        },
        {
            "name": render_arg,
            "help": "Generates the CFN template locally",
        },
        {
            "name": plan_arg,
            "help": "Creates a change-set to show the diff prior to an update",
        },
    ]
    validation_commands = [
        {
            "name": containers_arg,
            "help": "Validates and renders the x-containers definitions to ECS JSON",
        }
    ]
    neutral_commands = [
        {"name": "version", "help": "ECS Blueprint Version"},
    ]
    all_commands = active_commands + validation_commands + neutral_commands

    def __init__(
        self,
        content=None,
        profile_name=None,
        session=None,
        **kwargs,
    ):
        """
        Class to init the configuration
        """
        self.__args = deepcopy(kwargs)
        self.session = boto3.session.Session()
        self.override_session(session, profile_name, kwargs)
        self.aws_region = (
            kwargs[self.region_arg]
            if keyisset(self.region_arg, kwargs)
            else self.session.region_name
        )
        self.name = set_else_none(self.name_arg, kwargs)
        self.command = set_else_none(self.command_arg, kwargs, alt_value=self.render_arg)
        self.deploy = self.command == self.deploy_arg
        self.plan = self.command == self.plan_arg
        self.input_file = set_else_none(self.input_file_arg, kwargs)
        self.content = {}
        self.ecs_cluster = None
        self.containers = []
        self.output_dir = self.default_output_dir
        self.format = self.default_format
        self.set_content(kwargs, content)
        if not self.name and self.ecs_cluster:
            self.name = self.ecs_cluster.name
        self.set_output_settings(kwargs)

    def __repr__(self):
        return f"BlueprintSettings({self.name}, {self.command})"

    @property
    def disable_rollback(self) -> bool:
        return bool(set_else_none("DisableRollback", self.__args, alt_value=False))

    def set_content(self, kwargs, content=None):
        """
        Method to load the blueprint content from the input file or the content given,
        and to validate it against the blueprint schema.

        :param dict kwargs:
        :param dict content:
        """
        if content is None and keyisset(self.input_file_arg, kwargs):
            with open(kwargs[self.input_file_arg]) as blueprint_fd:
                content = yaml.safe_load(blueprint_fd.read())
            LOG.debug(f"Loaded {kwargs[self.input_file_arg]}")
        if content is None:
            content = {}
        if not isinstance(content, dict):
            raise TypeError("Blueprint content must be of type", dict, "got", type(content))
        source = pkg_files("ecs_blueprint").joinpath("specs/blueprint-spec.json")
        LOG.debug(f"Validating against input schema {source}")
        jsonschema.validate(content, loads(source.read_text()))
        self.content = deepcopy(content)
        if keyisset(EcsCluster.res_key, self.content):
            self.ecs_cluster = EcsCluster.from_definition(
                self.content[EcsCluster.res_key]
            )
        self.containers = [
            ContainerDefinition.from_dict(definition)
            for definition in set_else_none("x-containers", self.content, alt_value=[])
        ]

    def override_session(self, session, profile_name, kwargs):
        """
        Method to set the session based on input params

        :param boto3.session.Session session: The session to override the API calls with
        :param str profile_name: Name of a profile configured in .aws/config
        :param dict kwargs: CLI kwargs
        """
        if profile_name and not session:
            self.session = boto3.session.Session(profile_name=profile_name)
        elif session and not (profile_name or keyisset(self.arn_arg, kwargs)):
            self.session = session
        if keyisset(self.arn_arg, kwargs):
            validate_iam_role_arn(arn=kwargs[self.arn_arg])
            self.session = get_assume_role_session(
                session if session else self.session,
                kwargs[self.arn_arg],
                session_name=f"BlueprintSettings@{set_else_none(self.command_arg, kwargs)}",
            )

    def set_output_settings(self, kwargs):
        """
        Method to set the output settings based on kwargs
        """
        if (
            keyisset(self.format_arg, kwargs)
            and kwargs[self.format_arg] in self.allowed_formats
        ):
            self.format = kwargs[self.format_arg]

        self.output_dir = (
            kwargs[self.output_dir_arg]
            if keyisset(self.output_dir_arg, kwargs)
            else self.default_output_dir
        )
