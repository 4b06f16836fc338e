#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The provisioning context is the handle every provisioning operation declares its resources into.

Each create call builds a troposphere resource and adds it to the CloudFormation template
the context wraps. CloudFormation then owns the reconciliation of these resources.
"""

from __future__ import annotations

from troposphere import AWS_STACK_NAME, AWSObject, Export, Output, Sub, Template

from ecs_blueprint.common import CFN_EXPORT_DELIMITER, build_template, logical_name
from ecs_blueprint.common.logging import LOG
from ecs_blueprint.exceptions import BackendCallFailed


class ProvisioningContext:
    """
    Class wrapping the template resources get declared into, and the exports of a provisioning run.

    :ivar troposphere.Template template: the template holding the resources
    :ivar list[tuple] exports: ordered (name, value) pairs exported by the run
    """

    delim = CFN_EXPORT_DELIMITER

    def __init__(self, template: Template = None, description: str = None):
        if template is not None and not isinstance(template, Template):
            raise TypeError("template must be of type", Template, "got", type(template))
        self.template = template if template is not None else build_template(description)
        self.exports: list = []

    def __repr__(self):
        return f"ProvisioningContext({len(self.template.resources)} resources)"

    def create_resource(self, resource_type, title: str, **properties) -> AWSObject:
        """
        Creates the resource with the given properties and adds it to the template.

        :param resource_type: the troposphere class of the resource, i.e. troposphere.ecs.Cluster
        :param str title: logical ID of the resource
        :raises BackendCallFailed: if the properties are invalid or the logical ID is already used
        :return: the resource, to use with Ref() / GetAtt()
        """
        try:
            resource = resource_type(title, **properties)
            self.template.add_resource(resource)
        except (AttributeError, TypeError, ValueError) as error:
            reason = f"Failed to create {resource_type.resource_type} {title}"
            if title in self.template.resources:
                reason += (
                    f": logical ID {title} is already used by "
                    f"{self.template.resources[title].resource_type}"
                )
            LOG.error(f"{reason}: {error}")
            raise BackendCallFailed(reason, error) from error
        LOG.info(f"{resource.resource_type} {title} - Created")
        return resource

    def attach_role_policy(self, role, policy_arn: str) -> None:
        """
        Attaches a managed policy to an IAM role created in this context.
        Renders as an entry of the role ManagedPolicyArns.

        :param troposphere.iam.Role role:
        :param str policy_arn:
        """
        if self.template.resources.get(getattr(role, "title", None)) is not role:
            raise BackendCallFailed(
                f"Role {getattr(role, 'title', role)} was not created in this context"
            )
        policies = list(role.properties.get("ManagedPolicyArns", []))
        if policy_arn in policies:
            raise BackendCallFailed(
                f"Policy {policy_arn} is already attached to {role.title}"
            )
        policies.append(policy_arn)
        try:
            setattr(role, "ManagedPolicyArns", policies)
        except (TypeError, ValueError) as error:
            raise BackendCallFailed(
                f"Failed to attach {policy_arn} to {role.title}", error
            ) from error
        LOG.info(f"{role.title} - Attached {policy_arn}")

    def export(self, name: str, value) -> None:
        """
        Exports the value under the given name.
        The CFN export name is scoped to the stack name, i.e. ``${AWS::StackName}::CLUSTER-ID``

        :param str name:
        :param value: the value to export, usually a Ref() or GetAtt()
        """
        output = Output(
            logical_name(name),
            Value=value,
            Export=Export(Sub(f"${{{AWS_STACK_NAME}}}{self.delim}{name}")),
        )
        try:
            self.template.add_output(output)
        except ValueError as error:
            raise BackendCallFailed(f"Failed to export {name}", error) from error
        self.exports.append((name, value))
        LOG.debug(f"Exported {name}")
