import argparse
import asyncio
import logging
import sys
from typing import Tuple, Type

from certwatch import CertWatchBaseException
from certwatch.certs.probe import CertificateSource
from certwatch.client.command import Command, CommandArgs, register_command
from certwatch.exceptions import ShutdownRequested
from certwatch.utils.async_utils import wait_for_stdin_close
from certwatch.utils.modeling.exceptions import DataParsingError, DataValidationError
from certwatch.watcher import CertWatcher, RecordWriter

logger = logging.getLogger(__name__)


async def emit_certificates(source: CertificateSource, interval: float) -> int:
    """
    Write a key-pair record to stdout every time the certificate changes,
    until stdin is closed or the certificate can't be read.
    """

    watcher = CertWatcher(source, RecordWriter(sys.stdout), interval)
    stdin_closed = asyncio.create_task(wait_for_stdin_close())
    stdin_closed.add_done_callback(lambda _: watcher.stop())

    try:
        await watcher.run()
        return 0
    except ShutdownRequested:
        logger.debug("Standard input closed, exiting")
        return 0
    except CertWatchBaseException as e:
        logger.error(e)
        return 1
    finally:
        stdin_closed.cancel()


@register_command
class EmitCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.source: str = namespace.source
        self.interval: str = namespace.interval

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        emit = subparser.add_parser(
            "emit",
            help="Write the certificate and key as a JSON record to stdout every time they change."
            " Runs until stdin is closed.",
        )
        emit.add_argument("source", type=str, help="Directory with the 'fullchain.pem' and 'privkey.pem' files.")
        emit.add_argument("--interval", type=str, help="Polling interval, e.g. '30s' or '1h'.", default="1h")

        return emit, EmitCommand

    def run(self, args: CommandArgs) -> None:
        try:
            config = args.load_config(
                {"source": self.source, "interval": self.interval, "watchdog": False}, use_file=False
            )
        except (DataParsingError, DataValidationError) as e:
            print(e, file=sys.stderr)
            sys.exit(1)

        source = CertificateSource(config.source.to_path())
        sys.exit(asyncio.run(emit_certificates(source, config.interval_seconds())))
