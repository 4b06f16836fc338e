#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for ecs-blueprint
"""


class BlueprintBaseException(Exception):
    """
    Top class for ECS Blueprint Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class MissingField(BlueprintBaseException):
    """
    Exception when a required configuration field is empty or absent
    """

    def __init__(self, field_name, *args):
        super().__init__(f"missing {field_name}", *args)
        self.field_name = field_name


class BackendCallFailed(BlueprintBaseException):
    """
    Exception when the provisioning backend rejected or could not complete a resource call.
    The original exception is kept in ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, msg, cause=None, *args):
        super().__init__(msg, *args)
        self.cause = cause
