# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for ecs_blueprint.
"""

import argparse
import sys

from ecs_blueprint import __version__
from ecs_blueprint.common.aws import deploy, plan
from ecs_blueprint.common.files import FileArtifact
from ecs_blueprint.common.logging import LOG, set_log_level
from ecs_blueprint.common.settings import BlueprintSettings
from ecs_blueprint.ecs_blueprint import (
    generate_container_definitions,
    generate_full_template,
)
from ecs_blueprint.exceptions import BlueprintBaseException


class ArgparseHelper(argparse._HelpAction):
    """
    Used to help print top level '--help' arguments from argparse
    when used with subparsers
    """

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print()
        subparsers_actions = [
            action
            for action in parser._actions
            if isinstance(action, argparse._SubParsersAction)
        ]
        for subparsers_action in subparsers_actions:
            for choice, subparser in list(subparsers_action.choices.items()):
                if choice in [cmd["name"] for cmd in BlueprintSettings.all_commands]:
                    print(f"Command '{choice}'")
                    print(subparser.format_usage())
        parser.exit()


def main_parser():
    """
    Console script for ecs_blueprint.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action=ArgparseHelper,
        help="show this help message and exit",
    )

    cmd_parsers = parser.add_subparsers(
        dest=BlueprintSettings.command_arg, help="Command to execute."
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    files_parser = argparse.ArgumentParser(add_help=False)
    files_parser.add_argument(
        "-f",
        "--blueprint-file",
        dest=BlueprintSettings.input_file_arg,
        required=True,
        help="Path to the blueprint file",
    )
    files_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    base_command_parser.add_argument(
        "-n",
        "--name",
        help="Name of your stack. Defaults to the cluster name",
        required=False,
        type=str,
        dest=BlueprintSettings.name_arg,
    )
    base_command_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest=BlueprintSettings.output_dir_arg,
        default=BlueprintSettings.default_output_dir,
    )
    base_command_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=BlueprintSettings.format_arg,
        choices=BlueprintSettings.allowed_formats,
        default=BlueprintSettings.default_format,
    )
    base_command_parser.add_argument(
        "--region",
        required=False,
        dest=BlueprintSettings.region_arg,
        help="Specify the region you want to deploy to. "
        "Defaults to the region from config or environment vars",
    )
    base_command_parser.add_argument(
        "--role-arn",
        dest=BlueprintSettings.arn_arg,
        help="Allow you to run API calls using a specific IAM role, within same or for cross-account",
        required=False,
    )
    base_command_parser.add_argument(
        "--disable-rollback",
        dest="DisableRollback",
        help="On create/plan, disable stack automatic rollback.",
        required=False,
        action="store_true",
    )
    for command in BlueprintSettings.active_commands:
        cmd_parsers.add_parser(
            name=command["name"],
            help=command["help"],
            parents=[base_command_parser, files_parser],
        )
    for command in BlueprintSettings.validation_commands:
        cmd_parsers.add_parser(
            name=command["name"], help=command["help"], parents=[files_parser]
        )
    for command in BlueprintSettings.neutral_commands:
        cmd_parsers.add_parser(name=command["name"], help=command["help"])
    return parser


def main(args=None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    if args is None:
        args = sys.argv[1:]
    if not args:
        parser.print_help()
        return 0
    args = parser.parse_args(args)
    if getattr(args, "loglevel", None) and not set_log_level(LOG, args.loglevel):
        print(f"Log level value {args.loglevel} is invalid.")
    LOG.debug(args)
    if args.command == "version":
        print("ECS Blueprint", __version__)
        return 0
    try:
        settings = BlueprintSettings(**vars(args))
        LOG.debug(settings)
        if args.command == BlueprintSettings.containers_arg:
            print(generate_container_definitions(settings))
            return 0
        context = generate_full_template(settings)
        template_file = FileArtifact(settings.name, settings, context.template)
        template_file.write()
        if settings.deploy:
            deploy(settings, template_file.body)
        elif settings.plan:
            plan(settings, template_file.body)
    except BlueprintBaseException as error:
        LOG.error(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
