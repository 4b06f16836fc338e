#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS Container definitions, their validation and the JSON rendering used by the
task definition ContainerDefinitions field.
"""

from __future__ import annotations

import json
from copy import deepcopy

from compose_x_common.compose_x_common import keyisset, set_else_none

from ecs_blueprint.common.logging import LOG
from ecs_blueprint.exceptions import MissingField

JSON_SEPARATORS = (",", ":")


class PortMapping:
    """
    Port mapping of a container.

    Unlike the raw ECS struct mapping, which renders an unset host port as 0 and an unset
    protocol as an empty string, the host port defaults to the container port (as awsvpc
    networking requires) and the protocol defaults to tcp.
    """

    def __init__(self, container_port: int, host_port: int = None, protocol="tcp"):
        self.container_port = container_port
        self.host_port = container_port if host_port is None else host_port
        self.protocol = protocol

    def __eq__(self, other):
        return isinstance(other, PortMapping) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"{self.container_port}:{self.host_port}/{self.protocol}"

    @classmethod
    def from_dict(cls, definition: dict) -> PortMapping:
        return cls(
            definition["containerPort"],
            definition.get("hostPort"),
            set_else_none("protocol", definition, alt_value="tcp"),
        )

    def to_dict(self) -> dict:
        return {
            "containerPort": self.container_port,
            "hostPort": self.host_port,
            "protocol": self.protocol,
        }


class EnvironmentVariable:
    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value

    def __eq__(self, other):
        return (
            isinstance(other, EnvironmentVariable)
            and self.to_dict() == other.to_dict()
        )

    def __repr__(self):
        return f"{self.name}={self.value}"

    @classmethod
    def from_dict(cls, definition: dict) -> EnvironmentVariable:
        value = definition["value"]
        return cls(
            definition["name"],
            str(value).lower() if isinstance(value, bool) else str(value),
        )

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value}


class LogConfiguration:
    """
    Container log configuration.

    ``options`` and ``secret_options`` are passed through as-is to the log driver.
    """

    def __init__(self, log_driver: str, options: dict = None, secret_options=None):
        self.log_driver = log_driver
        self.options = options if options is not None else {}
        self.secret_options = secret_options if secret_options is not None else []

    def __eq__(self, other):
        return isinstance(other, LogConfiguration) and self.to_dict() == other.to_dict()

    @classmethod
    def from_dict(cls, definition: dict) -> LogConfiguration:
        return cls(
            definition["logDriver"],
            set_else_none("options", definition),
            set_else_none("secretOptions", definition),
        )

    def to_dict(self) -> dict:
        return {
            "logDriver": self.log_driver,
            "secretOptions": self.secret_options,
            "options": self.options,
        }


class LinuxParameters:
    """
    Linux kernel capabilities to add to / drop from the container
    """

    def __init__(self, add: list = None, drop: list = None):
        self.add = add if add is not None else []
        self.drop = drop if drop is not None else []

    def __eq__(self, other):
        return isinstance(other, LinuxParameters) and self.to_dict() == other.to_dict()

    @classmethod
    def from_dict(cls, definition: dict) -> LinuxParameters:
        capabilities = set_else_none("capabilities", definition, alt_value={})
        return cls(
            set_else_none("add", capabilities), set_else_none("drop", capabilities)
        )

    def to_dict(self) -> dict:
        return {"capabilities": {"add": self.add, "drop": self.drop}}


class ContainerDefinition:
    """
    Class to represent an ECS container definition.

    :ivar str name: Name of the container
    :ivar str image: Docker image of the container
    :ivar list[PortMapping] port_mappings:
    :ivar list[EnvironmentVariable] environment:
    :ivar LogConfiguration log_configuration: Optional until validated
    :ivar dict docker_labels:
    :ivar LinuxParameters linux_parameters: Optional, omitted from the JSON when not set
    """

    def __init__(
        self,
        name: str,
        image: str,
        port_mappings: list = None,
        environment: list = None,
        log_configuration: LogConfiguration = None,
        docker_labels: dict = None,
        linux_parameters: LinuxParameters = None,
    ):
        self.name = name
        self.image = image
        self.port_mappings = port_mappings
        self.environment = environment
        self.log_configuration = log_configuration
        self.docker_labels = docker_labels if docker_labels is not None else {}
        self.linux_parameters = linux_parameters

    def __eq__(self, other):
        return (
            isinstance(other, ContainerDefinition)
            and self.to_dict() == other.to_dict()
        )

    def __repr__(self):
        return f"ContainerDefinition({self.name}, {self.image})"

    def __str__(self):
        """
        The container definition rendered as the JSON list of container definitions the
        ECS task definition expects.
        """
        return "[" + json.dumps(self.to_dict(), separators=JSON_SEPARATORS) + "]"

    @classmethod
    def from_dict(cls, definition: dict) -> ContainerDefinition:
        """
        Creates the container definition from its ECS API (camelCase) representation.

        :param dict definition:
        """
        if not isinstance(definition, dict):
            raise TypeError(
                "Container definition must be of type", dict, "got", type(definition)
            )
        port_mappings = None
        environment = None
        if keyisset("portMappings", definition):
            port_mappings = [
                PortMapping.from_dict(port) for port in definition["portMappings"]
            ]
        if keyisset("environment", definition):
            environment = [
                EnvironmentVariable.from_dict(env_var)
                for env_var in definition["environment"]
            ]
        return cls(
            set_else_none("name", definition, alt_value=""),
            set_else_none("image", definition, alt_value=""),
            port_mappings=port_mappings,
            environment=environment,
            log_configuration=(
                LogConfiguration.from_dict(definition["logConfiguration"])
                if keyisset("logConfiguration", definition)
                else None
            ),
            docker_labels=set_else_none("dockerLabels", definition),
            linux_parameters=(
                LinuxParameters.from_dict(definition["linuxParameters"])
                if keyisset("linuxParameters", definition)
                else None
            ),
        )

    def validate(self) -> ContainerDefinition:
        """
        Validates the container definition and returns a normalized copy of it,
        with empty lists for the port mappings and environment when these were not set.

        :raises MissingField: if name, image or log configuration are not set
        :return: the normalized container definition
        """
        if not self.name:
            raise MissingField("ContainerDefinition.Name")
        if not self.image:
            raise MissingField("ContainerDefinition.Image")
        definition = deepcopy(self)
        if definition.port_mappings is None:
            definition.port_mappings = []
        if definition.environment is None:
            definition.environment = []
        if definition.log_configuration is None:
            raise MissingField("ContainerDefinition.LogConfiguration")
        return definition

    def to_dict(self) -> dict:
        definition = {
            "name": self.name,
            "image": self.image,
            "portMappings": [port.to_dict() for port in self.port_mappings or []],
            "environment": [env_var.to_dict() for env_var in self.environment or []],
            "logConfiguration": (
                self.log_configuration.to_dict() if self.log_configuration else None
            ),
            "dockerLabels": self.docker_labels,
        }
        if self.linux_parameters is not None:
            definition["linuxParameters"] = self.linux_parameters.to_dict()
        return definition


def render_container_definitions(definitions: list) -> list:
    """
    Validates each of the container definitions, as dict or ContainerDefinition

    :param list definitions:
    :return: the validated container definitions
    :rtype: list[ContainerDefinition]
    """
    validated = []
    for definition in definitions:
        if isinstance(definition, dict):
            definition = ContainerDefinition.from_dict(definition)
        validated.append(definition.validate())
        LOG.debug(f"Container {definition.name} is valid")
    return validated
