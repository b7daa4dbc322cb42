import argparse
import sys
from typing import Tuple, Type

from certwatch.certs.probe import CertificateSource, probe
from certwatch.client.command import Command, CommandArgs, register_command
from certwatch.exceptions import ProbeFailure


@register_command
class TimesCommand(Command):
    def __init__(self, namespace: argparse.Namespace) -> None:
        super().__init__(namespace)
        self.source: str = namespace.source

    @staticmethod
    def register_args_subparser(
        subparser: "argparse._SubParsersAction[argparse.ArgumentParser]",
    ) -> Tuple[argparse.ArgumentParser, "Type[Command]"]:
        times = subparser.add_parser(
            "times", help="Print modification times of the watched certificate and key files."
        )
        times.add_argument("source", type=str, help="Directory with the 'fullchain.pem' and 'privkey.pem' files.")

        return times, TimesCommand

    def run(self, args: CommandArgs) -> None:
        source = CertificateSource.from_dir(self.source)
        try:
            stamps = probe(source)
        except ProbeFailure as e:
            print(e, file=sys.stderr)
            sys.exit(1)

        print(f"{source.cert_file}: {stamps.cert_mtime().isoformat()} ({stamps.cert_mtime_ns})")
        print(f"{source.key_file}: {stamps.key_mtime().isoformat()} ({stamps.key_mtime_ns})")
