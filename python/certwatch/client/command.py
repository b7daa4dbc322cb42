import argparse
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from certwatch.constants import CONFIG_FILE
from certwatch.datamodel import CertWatchConfig, load_config
from certwatch.logging import configure_logging

T = TypeVar("T", bound=Type["Command"])

_registered_commands: List[Type["Command"]] = []


def register_command(cls: T) -> T:
    _registered_commands.append(cls)
    return cls


def install_commands_parsers(parser: argparse.ArgumentParser) -> None:
    subparsers = parser.add_subparsers(help="command type")
    for command in _registered_commands:
        subparser, typ = command.register_args_subparser(subparsers)
        subparser.set_defaults(command=typ, subparser=subparser)


def determine_config_file(namespace: argparse.Namespace) -> Optional[Path]:
    # 1) config file from '--config' argument
    if len(namespace.config) > 0:
        return Path(namespace.config[0])
    # 2) default config file, only if it exists
    if CONFIG_FILE.exists():
        return CONFIG_FILE
    return None


class CommandArgs:
    def __init__(self, namespace: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        self.namespace = namespace
        self.parser = parser
        self.subparser: argparse.ArgumentParser = namespace.subparser
        self.command: Type["Command"] = namespace.command

        self.verbose: bool = namespace.verbose
        self.config_file: Optional[Path] = determine_config_file(namespace)

    def load_config(self, overrides: Dict[str, Any], use_file: bool = True) -> CertWatchConfig:
        """
        Load and validate the configuration and set up logging according to it.
        Raises 'DataParsingError' or 'DataValidationError'.
        """

        config = load_config(self.config_file if use_file else None, overrides)
        configure_logging(config.logging, self.verbose or None)
        return config


class Command(ABC):
    @staticmethod
    @abstractmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        raise NotImplementedError()

    @abstractmethod
    def __init__(self, namespace: argparse.Namespace) -> None:  # pylint: disable=[unused-argument]
        super().__init__()

    @abstractmethod
    def run(self, args: CommandArgs) -> None:
        raise NotImplementedError()
