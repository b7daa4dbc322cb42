import argparse
import asyncio
import sys
from typing import Any, Dict, Optional, Tuple, Type

from certwatch.client.command import Command, CommandArgs, register_command
from certwatch.server import start_server
from certwatch.utils.modeling.exceptions import DataParsingError, DataValidationError


@register_command
class ServeCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.source: Optional[str] = namespace.source
        self.interval: Optional[str] = namespace.interval
        self.drain_timeout: Optional[str] = namespace.drain_timeout
        self.watchdog: Optional[bool] = namespace.watchdog
        self.listen: Optional[str] = namespace.listen
        self.port: Optional[int] = namespace.port

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        serve = subparser.add_parser(
            "serve",
            help="Run an HTTPS server, which is restarted with the new certificate every time it changes.",
        )
        serve.add_argument(
            "source",
            type=str,
            nargs="?",
            help="Directory with the 'fullchain.pem' and 'privkey.pem' files."
            " Overrides 'source' from the configuration file.",
            default=None,
        )
        serve.add_argument("--interval", type=str, help="Polling interval, e.g. '30s' or '1h'.", default=None)
        serve.add_argument(
            "--drain-timeout",
            type=str,
            help="How long to wait for the replaced server to shut down, e.g. '10s'.",
            default=None,
        )
        serve.add_argument(
            "--no-watchdog",
            help="Do not watch the directory for file system events, only poll it.",
            action="store_false",
            dest="watchdog",
            default=None,
        )
        serve.add_argument("--listen", type=str, help="IP address to listen on.", default=None)
        serve.add_argument("--port", type=int, help="Port number to listen on.", default=None)

        return serve, ServeCommand

    def _overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        if self.source is not None:
            overrides["source"] = self.source
        if self.interval is not None:
            overrides["interval"] = self.interval
        if self.drain_timeout is not None:
            overrides["drain-timeout"] = self.drain_timeout
        if self.watchdog is not None:
            overrides["watchdog"] = self.watchdog

        server: Dict[str, Any] = {}
        if self.listen is not None:
            server["listen"] = self.listen
        if self.port is not None:
            server["port"] = self.port
        if server:
            overrides["server"] = server
        return overrides

    def run(self, args: CommandArgs) -> None:
        try:
            config = args.load_config(self._overrides())
        except (DataParsingError, DataValidationError) as e:
            print(e, file=sys.stderr)
            sys.exit(1)

        sys.exit(asyncio.run(start_server(config)))
