# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

import re
from os import environ

from troposphere import Template

from ecs_blueprint.common.logging import LOG

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")
CFN_EXPORT_DELIMITER = environ.get("ECS_BLUEPRINT_EXPORTS_SEPARATOR", r"::")
X_KEY = r"x-"


def build_template(description=None):
    """
    Entry point function to get a new troposphere template with the format version set.

    :param str description: Description of the template
    :return: template
    :rtype: troposphere.Template
    """
    template = Template()
    template.set_version()
    if description is not None:
        template.set_description(description)
    return template


def logical_name(*parts) -> str:
    """
    Joins the parts into a CloudFormation logical ID, dropping any non alphanumerical character.
    Names that only differ by such characters, i.e. ``my-demo`` and ``mydemo``, get the same ID,
    so they cannot be provisioned in the same template.

    >>> logical_name("my-cluster", "LogKey")
    'myclusterLogKey'
    """
    return "".join(NONALPHANUM.sub("", str(part)) for part in parts)
