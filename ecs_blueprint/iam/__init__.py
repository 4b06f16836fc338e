# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

ROLE_ARN_ARG = "RoleArn"

ECS_TASKS_SERVICE = "ecs-tasks.amazonaws.com"
TASK_EXEC_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
)


def task_exec_trust_policy() -> dict:
    """
    Trust relationship allowing ECS Tasks to assume the execution role.

    :return: policy document
    :rtype: dict
    """
    return {
        "Version": "2008-10-17",
        "Statement": [
            {
                "Sid": "",
                "Effect": "Allow",
                "Principal": {"Service": ECS_TASKS_SERVICE},
                "Action": "sts:AssumeRole",
            }
        ],
    }
