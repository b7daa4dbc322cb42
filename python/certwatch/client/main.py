import argparse
import importlib
import os
import sys

from certwatch.constants import VERSION
from certwatch.logging import startup_logging

from .command import CommandArgs, install_commands_parsers

CERTWATCH_CLIENT_NAME = "certwatch"


def auto_import_commands() -> None:
    prefix = f"{'.'.join(__name__.split('.')[:-1])}.commands."
    for module_name in sorted(os.listdir(os.path.dirname(__file__) + "/commands")):
        if module_name[-3:] != ".py" or module_name == "__init__.py":
            continue
        importlib.import_module(f"{prefix}{module_name[:-3]}")


def create_main_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        CERTWATCH_CLIENT_NAME,
        description="Keeps long-running processes supplied with an up-to-date TLS certificate"
        " from a directory periodically renewed by an external agent, e.g. an ACME client.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=VERSION,
        help="Get version",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Enable verbose (debug) logging",
        action="store_true",
        default=False,
    )
    parser.add_argument(
        "-c",
        "--config",
        action="store",
        type=str,
        help="Optional, path to the declarative configuration in YAML or JSON format.",
        default=[],
        nargs=1,
        required=False,
    )
    return parser


def main() -> None:
    auto_import_commands()
    parser = create_main_argument_parser()
    install_commands_parsers(parser)

    namespace = parser.parse_args()
    startup_logging(namespace.verbose)

    if not hasattr(namespace, "command"):
        parser.print_help()
        sys.exit(1)

    args = CommandArgs(namespace, parser)
    command = args.command(namespace)
    command.run(args)
