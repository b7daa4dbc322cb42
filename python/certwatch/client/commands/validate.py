import argparse
import sys
from pathlib import Path
from typing import List, Tuple, Type

from certwatch.client.command import Command, CommandArgs, register_command
from certwatch.constants import CONFIG_FILE
from certwatch.datamodel import load_config
from certwatch.utils.modeling.exceptions import DataParsingError, DataValidationError


@register_command
class ValidateCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.input_file: List[str] = namespace.input_file
        self.show: bool = namespace.show

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        validate = subparser.add_parser("validate", help="Validates configuration in JSON or YAML format.")
        validate.add_argument(
            "--show",
            help="Print the validated configuration with all the defaults filled in.",
            action="store_true",
            default=False,
        )
        validate.add_argument(
            "input_file",
            type=str,
            nargs="*",
            help="Files with the declarative configuration in YAML or JSON format.",
            default=[str(CONFIG_FILE)],
        )

        return validate, ValidateCommand

    def run(self, args: CommandArgs) -> None:
        failed = False
        for file in self.input_file:
            try:
                config = load_config(Path(file))
            except (DataParsingError, DataValidationError) as e:
                print(f"{file}: {e}", file=sys.stderr)
                failed = True
                continue

            print(f"{file}: configuration is valid")
            if self.show:
                print(config)

        if failed:
            sys.exit(1)
