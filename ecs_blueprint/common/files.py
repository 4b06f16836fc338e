#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to render a template and write it to the local filesystem
"""

from os import makedirs, path

from troposphere import Template

from ecs_blueprint.common.logging import LOG

JSON_MIME = "application/json"
YAML_MIME = "application/x-yaml"


class FileArtifact:
    """
    Class to handle the template file artifact, rendered in the format of the settings.

    :cvar str file_name: the base name of the file
    :cvar str body: The rendered template
    :cvar str mime: MIME-type of the file
    :cvar str file_path: Output file path for the FileArtifact
    """

    def __init__(self, file_name, settings, template, file_format=None):
        if not isinstance(template, Template):
            raise TypeError("template must be of type", Template, "got", type(template))
        if file_format is None:
            file_format = settings.format
        if file_format not in ("json", "yaml"):
            raise ValueError("file_format must be one of", ["json", "yaml"])
        self.template = template
        self.format = file_format
        self.mime = JSON_MIME if file_format == "json" else YAML_MIME
        self.file_name = f"{file_name}.{file_format}"
        self.file_path = path.join(settings.output_dir, self.file_name)
        self.body = (
            template.to_json() if file_format == "json" else template.to_yaml()
        )

    def __repr__(self):
        return self.file_path

    def write(self):
        """
        Method to write the file to local filesystem
        """
        makedirs(path.dirname(path.abspath(self.file_path)), exist_ok=True)
        with open(self.file_path, "w") as template_fd:
            template_fd.write(self.body)
        LOG.info(f"Template for {self.file_name} written successfully at {self.file_path}")
