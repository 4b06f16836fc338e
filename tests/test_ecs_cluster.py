#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

import pytest
from pytest import raises

from ecs_blueprint.common.context import ProvisioningContext
from ecs_blueprint.ecs_cluster import ClusterLoggingMode, ClusterOutputs, EcsCluster
from ecs_blueprint.exceptions import BackendCallFailed, MissingField
from ecs_blueprint.iam import TASK_EXEC_POLICY_ARN, task_exec_trust_policy
from tests.recording_context import RecordingContext

LOGGING_CALLS = [
    "AWS::KMS::Key",
    "AWS::Logs::LogGroup",
    "AWS::ECS::Cluster",
    "AWS::IAM::Role",
    "attach_role_policy",
]


def test_cluster_without_logging():
    context = RecordingContext()
    cluster = EcsCluster("demo")
    outputs = cluster.provision(context)
    assert context.calls == ["AWS::ECS::Cluster", "AWS::IAM::Role", "attach_role_policy"]
    assert [name for name, _ in context.exports] == ["CLUSTER-ID"]
    assert isinstance(outputs, ClusterOutputs)
    assert outputs.cluster is cluster.cluster
    assert outputs.task_exec_role is cluster.task_exec_role
    assert cluster.log_key is None and cluster.log_group is None

    template = context.template.to_dict()
    cluster_props = template["Resources"]["demoCluster"]["Properties"]
    assert cluster_props["ClusterName"] == "demo"
    assert cluster_props["ClusterSettings"] == [
        {"Name": "containerInsights", "Value": "enabled"}
    ]
    assert "Configuration" not in cluster_props
    role_props = template["Resources"]["demoTaskExecRole"]["Properties"]
    assert role_props["ManagedPolicyArns"] == [TASK_EXEC_POLICY_ARN]
    assert role_props["AssumeRolePolicyDocument"] == task_exec_trust_policy()
    assert template["Outputs"]["CLUSTERID"]["Value"] == {
        "Fn::GetAtt": ["demoCluster", "Arn"]
    }
    assert template["Outputs"]["CLUSTERID"]["Export"]["Name"] == {
        "Fn::Sub": "${AWS::StackName}::CLUSTER-ID"
    }


def test_cluster_with_logging():
    context = RecordingContext()
    cluster = EcsCluster("demo", ClusterLoggingMode.EXECUTE_COMMAND)
    cluster.provision(context)
    assert context.calls == LOGGING_CALLS
    assert [name for name, _ in context.exports] == [
        "CLUSTER-LOG-KMS-KEY-ID",
        "CLUSTER-LOG-GROUP-ID",
        "CLUSTER-ID",
    ]
    template = context.template.to_dict()
    key_props = template["Resources"]["demoLogKey"]["Properties"]
    assert key_props["PendingWindowInDays"] == 7
    assert key_props["Description"] == (
        "demo KMS encryption key for logging container activity"
    )
    exec_config = template["Resources"]["demoCluster"]["Properties"]["Configuration"][
        "ExecuteCommandConfiguration"
    ]
    assert exec_config["KmsKeyId"] == {"Fn::GetAtt": ["demoLogKey", "Arn"]}
    assert exec_config["Logging"] == "OVERRIDE"
    assert exec_config["LogConfiguration"]["CloudWatchEncryptionEnabled"] in (
        True,
        "true",
    )
    assert exec_config["LogConfiguration"]["CloudWatchLogGroupName"] == {
        "Ref": "demoLogGroup"
    }
    assert "ClusterSettings" not in template["Resources"]["demoCluster"]["Properties"]
    assert template["Outputs"]["CLUSTERLOGKMSKEYID"]["Value"] == {"Ref": "demoLogKey"}
    assert template["Outputs"]["CLUSTERLOGGROUPID"]["Value"] == {"Ref": "demoLogGroup"}
    assert template["Outputs"]["CLUSTERID"]["Value"] == {
        "Fn::GetAtt": ["demoCluster", "Arn"]
    }


def test_trust_policy():
    policy = task_exec_trust_policy()
    assert policy["Version"] == "2008-10-17"
    assert len(policy["Statement"]) == 1
    statement = policy["Statement"][0]
    assert statement["Effect"] == "Allow"
    assert statement["Principal"] == {"Service": "ecs-tasks.amazonaws.com"}
    assert statement["Action"] == "sts:AssumeRole"


@pytest.mark.parametrize("logging", list(ClusterLoggingMode))
def test_cluster_without_name(logging):
    context = RecordingContext()
    with raises(MissingField):
        EcsCluster("", logging).provision(context)
    assert context.calls == []
    assert context.exports == []
    assert not context.template.resources


@pytest.mark.parametrize("fail_at", range(1, len(LOGGING_CALLS) + 1))
def test_failure_stops_provisioning(fail_at):
    context = RecordingContext(fail_at=fail_at)
    cluster = EcsCluster("demo", ClusterLoggingMode.EXECUTE_COMMAND)
    with raises(BackendCallFailed) as error:
        cluster.provision(context)
    assert len(context.calls) == fail_at
    assert context.calls[-1] == LOGGING_CALLS[fail_at - 1]
    assert isinstance(error.value.cause, RuntimeError)


@pytest.mark.parametrize("fail_at", [1, 2, 3])
def test_failure_stops_provisioning_without_logging(fail_at):
    context = RecordingContext(fail_at=fail_at)
    with raises(BackendCallFailed):
        EcsCluster("demo").provision(context)
    assert len(context.calls) == fail_at


def test_cluster_provisioned_twice():
    """
    The second run conflicts with the resources of the first one in the same template.
    """
    context = ProvisioningContext()
    EcsCluster("demo").provision(context)
    with raises(BackendCallFailed) as error:
        EcsCluster("demo").provision(context)
    assert isinstance(error.value.__cause__, ValueError)
    assert error.value.cause is error.value.__cause__


def test_isolated_contexts():
    first = RecordingContext()
    second = RecordingContext()
    EcsCluster("demo").provision(first)
    EcsCluster("demo", ClusterLoggingMode.EXECUTE_COMMAND).provision(second)
    assert len(first.calls) == 3
    assert len(second.calls) == 5


def test_logical_names():
    context = ProvisioningContext()
    cluster = EcsCluster("my-demo_cluster", ClusterLoggingMode.EXECUTE_COMMAND)
    cluster.provision(context)
    assert set(context.template.resources.keys()) == {
        "mydemoclusterLogKey",
        "mydemoclusterLogGroup",
        "mydemoclusterCluster",
        "mydemoclusterTaskExecRole",
    }
    assert cluster.cluster.ClusterName == "my-demo_cluster"


def test_from_definition():
    assert EcsCluster.from_definition({"Name": "demo"}).logging is (
        ClusterLoggingMode.DISABLED
    )
    assert EcsCluster.from_definition(
        {"Name": "demo", "EnableLogging": True}
    ).logging_enabled
    assert not EcsCluster.from_definition(
        {"Name": "demo", "EnableLogging": False}
    ).logging_enabled
    assert (
        EcsCluster.from_definition(
            {"Name": "demo", "Logging": "ExecuteCommand"}
        ).logging
        is ClusterLoggingMode.EXECUTE_COMMAND
    )
    assert (
        EcsCluster.from_definition(
            {"Name": "demo", "Logging": "Disabled", "EnableLogging": True}
        ).logging
        is ClusterLoggingMode.DISABLED
    )
    assert EcsCluster.from_definition({}).name == ""
    with raises(ValueError):
        EcsCluster.from_definition({"Name": "demo", "Logging": "Everything"})
    with raises(TypeError):
        EcsCluster.from_definition("demo")
    with raises(TypeError):
        EcsCluster("demo", True)


def test_collapsed_names_collide():
    context = ProvisioningContext()
    EcsCluster("my-demo").provision(context)
    with raises(BackendCallFailed) as error:
        EcsCluster("mydemo").provision(context)
    assert "logical ID mydemoCluster is already used by AWS::ECS::Cluster" in str(
        error.value
    )
    assert context.template.resources["mydemoCluster"].ClusterName == "my-demo"
