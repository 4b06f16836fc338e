# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS Cluster definition and the provisioning of its resources.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from ecs_blueprint.common.context import ProvisioningContext

from compose_x_common.compose_x_common import keyisset, set_else_none
from troposphere import AWS_ACCOUNT_ID, AWS_PARTITION, GetAtt, Ref, Sub
from troposphere.ecs import (
    Cluster,
    ClusterConfiguration,
    ClusterSetting,
    ExecuteCommandConfiguration,
    ExecuteCommandLogConfiguration,
)
from troposphere.iam import Role
from troposphere.kms import Key
from troposphere.logs import LogGroup

from ecs_blueprint.common import logical_name
from ecs_blueprint.common.logging import LOG
from ecs_blueprint.ecs_cluster.ecs_cluster_params import (
    CLUSTER_ID,
    CLUSTER_LOG_GROUP_ID,
    CLUSTER_LOG_KMS_KEY_ID,
    CONTAINER_INSIGHTS,
    EXEC_LOGGING_OVERRIDE,
    LOG_KEY_DELETION_WINDOW,
    RES_KEY,
)
from ecs_blueprint.exceptions import MissingField
from ecs_blueprint.iam import TASK_EXEC_POLICY_ARN, task_exec_trust_policy


def define_default_key_policy() -> dict:
    """
    Function to return the default KMS policy of the logging key, allowing root account access
    and CloudWatch logs to use the key for the log group encryption.

    :return: policy
    :rtype: dict
    """
    policy = {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "Allow direct access to key metadata to the account",
                "Effect": "Allow",
                "Principal": {
                    "AWS": Sub(
                        f"arn:${{{AWS_PARTITION}}}:iam::${{{AWS_ACCOUNT_ID}}}:root"
                    )
                },
                "Action": ["kms:*"],
                "Resource": "*",
            },
            {
                "Sid": "Allow CloudWatch logs to use the key",
                "Effect": "Allow",
                "Principal": {"Service": Sub("logs.${AWS::Region}.amazonaws.com")},
                "Action": [
                    "kms:Encrypt*",
                    "kms:Decrypt*",
                    "kms:ReEncrypt*",
                    "kms:GenerateDataKey*",
                    "kms:Describe*",
                ],
                "Resource": "*",
            },
        ],
    }
    return policy


class ClusterLoggingMode(Enum):
    """
    How the cluster logs containers activity.

    DISABLED: no execute-command logging, container insights are enabled instead.
    EXECUTE_COMMAND: execute-command sessions are logged to a KMS encrypted log group.
    """

    DISABLED = "Disabled"
    EXECUTE_COMMAND = "ExecuteCommand"


class ClusterOutputs(NamedTuple):
    cluster: Cluster
    task_exec_role: Role


class EcsCluster:
    """
    Class to represent the ECS Cluster to provision, and the resources created for it.

    :ivar str name: name of the ECS Cluster
    :ivar ClusterLoggingMode logging: logging mode of the cluster
    :ivar troposphere.kms.Key log_key: KMS Key encrypting the execute-command logs, if any
    :ivar troposphere.logs.LogGroup log_group: Log group for the execute-command logs, if any
    :ivar troposphere.ecs.Cluster cluster: The ECS Cluster, once provisioned
    :ivar troposphere.iam.Role task_exec_role: The task execution role, once provisioned
    """

    res_key = RES_KEY

    def __init__(self, name: str, logging: ClusterLoggingMode = None):
        if logging is None:
            logging = ClusterLoggingMode.DISABLED
        elif not isinstance(logging, ClusterLoggingMode):
            raise TypeError(
                "logging must be of type", ClusterLoggingMode, "got", type(logging)
            )
        self.name = name
        self.logging = logging
        self.log_key = None
        self.log_group = None
        self.cluster = None
        self.task_exec_role = None

    def __repr__(self):
        return f"EcsCluster({self.name}, {self.logging.value})"

    @classmethod
    def from_definition(cls, definition: dict) -> EcsCluster:
        """
        Creates the cluster from its x-cluster definition.
        ``Logging`` takes precedence over the boolean ``EnableLogging``.

        :param dict definition:
        """
        if not isinstance(definition, dict):
            raise TypeError(
                f"{cls.res_key} must be of type", dict, "got", type(definition)
            )
        if keyisset("Logging", definition):
            logging = ClusterLoggingMode(definition["Logging"])
        elif keyisset("EnableLogging", definition):
            logging = ClusterLoggingMode.EXECUTE_COMMAND
        else:
            logging = ClusterLoggingMode.DISABLED
        return cls(set_else_none("Name", definition, alt_value=""), logging)

    @property
    def logging_enabled(self) -> bool:
        return self.logging is ClusterLoggingMode.EXECUTE_COMMAND

    def validate(self) -> None:
        if not self.name:
            raise MissingField("EcsCluster.Name")

    def provision(self, context: ProvisioningContext) -> ClusterOutputs:
        """
        Creates the cluster, its logging resources if enabled, and the task execution role.
        Stops at the first failing call, resources created before that are left to the backend.

        :param ecs_blueprint.common.context.ProvisioningContext context:
        :raises MissingField: if the cluster has no name
        :raises BackendCallFailed: if any of the resources failed to be created
        """
        self.validate()
        LOG.info(f"{self.name} - Provisioning cluster with logging {self.logging.value}")
        if self.logging_enabled:
            self.cluster = self.define_cluster_with_exec_logging(context)
        else:
            self.cluster = context.create_resource(
                Cluster,
                logical_name(self.name, "Cluster"),
                ClusterName=self.name,
                ClusterSettings=[
                    ClusterSetting(Name=CONTAINER_INSIGHTS, Value="enabled")
                ],
            )
        context.export(CLUSTER_ID, GetAtt(self.cluster, "Arn"))
        self.task_exec_role = self.define_task_exec_role(context)
        return ClusterOutputs(self.cluster, self.task_exec_role)

    def define_cluster_with_exec_logging(self, context: ProvisioningContext) -> Cluster:
        """
        Creates the KMS Key and Log group, and the cluster logging execute-command sessions with them.
        """
        self.log_key = context.create_resource(
            Key,
            logical_name(self.name, "LogKey"),
            Description=f"{self.name} KMS encryption key for logging container activity",
            PendingWindowInDays=LOG_KEY_DELETION_WINDOW,
            KeyPolicy=define_default_key_policy(),
        )
        context.export(CLUSTER_LOG_KMS_KEY_ID, Ref(self.log_key))

        self.log_group = context.create_resource(
            LogGroup, logical_name(self.name, "LogGroup")
        )
        context.export(CLUSTER_LOG_GROUP_ID, Ref(self.log_group))

        return context.create_resource(
            Cluster,
            logical_name(self.name, "Cluster"),
            ClusterName=self.name,
            Configuration=ClusterConfiguration(
                ExecuteCommandConfiguration=ExecuteCommandConfiguration(
                    KmsKeyId=GetAtt(self.log_key, "Arn"),
                    Logging=EXEC_LOGGING_OVERRIDE,
                    LogConfiguration=ExecuteCommandLogConfiguration(
                        CloudWatchEncryptionEnabled=True,
                        CloudWatchLogGroupName=Ref(self.log_group),
                    ),
                )
            ),
        )

    def define_task_exec_role(self, context: ProvisioningContext) -> Role:
        """
        Creates the IAM role ECS tasks use to pull images and ship logs.
        """
        role = context.create_resource(
            Role,
            logical_name(self.name, "TaskExecRole"),
            AssumeRolePolicyDocument=task_exec_trust_policy(),
        )
        context.attach_role_policy(role, TASK_EXEC_POLICY_ARN)
        return role
