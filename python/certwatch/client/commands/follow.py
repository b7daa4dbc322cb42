import argparse
import asyncio
import logging
import sys
from typing import List, Tuple, Type

from certwatch import CertWatchBaseException
from certwatch.client.command import Command, CommandArgs, register_command
from certwatch.datamodel.logging_schema import LoggingSchema
from certwatch.logging import configure_logging
from certwatch.sources import CommandSource

logger = logging.getLogger(__name__)


async def follow_command(cmd: str) -> int:
    try:
        async with CommandSource(cmd) as source:
            async for cert in source:
                print(f"{cert.fingerprint()} {cert.not_valid_after.isoformat()} {cert.subject}", flush=True)
    except CertWatchBaseException as e:
        logger.error(e)
        return 1
    return 0


@register_command
class FollowCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.cmd: List[str] = namespace.cmd

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        follow = subparser.add_parser(
            "follow",
            help="Run a shell command producing key-pair records (e.g. 'certwatch emit DIR')"
            " and print the SHA-256 fingerprint, expiration and subject of every received certificate.",
        )
        follow.add_argument("cmd", type=str, nargs=argparse.REMAINDER, help="Shell command to run.")

        return follow, FollowCommand

    def run(self, args: CommandArgs) -> None:
        if not self.cmd:
            args.subparser.print_usage(sys.stderr)
            sys.exit(1)

        configure_logging(LoggingSchema(), args.verbose or None)
        sys.exit(asyncio.run(follow_command(" ".join(self.cmd))))
