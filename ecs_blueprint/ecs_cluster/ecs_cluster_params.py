#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

RES_KEY = "x-cluster"

LOG_KEY_DELETION_WINDOW = 7

CLUSTER_LOG_KMS_KEY_ID = "CLUSTER-LOG-KMS-KEY-ID"
CLUSTER_LOG_GROUP_ID = "CLUSTER-LOG-GROUP-ID"
CLUSTER_ID = "CLUSTER-ID"

CONTAINER_INSIGHTS = "containerInsights"
EXEC_LOGGING_OVERRIDE = "OVERRIDE"
