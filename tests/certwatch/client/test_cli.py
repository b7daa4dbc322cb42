import asyncio
import shlex
import subprocess
import sys
from typing import List

import pytest

from certwatch.certs.loader import load_from_pem
from certwatch.certs.records import RecordStreamDecoder, X509KeyPair, encode_record
from certwatch.constants import VERSION
from certwatch.sources import CommandSource

TIMEOUT = 30

CERTWATCH = [sys.executable, "-m", "certwatch"]


def _run(*args: str) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(
        [*CERTWATCH, *args], stdin=subprocess.DEVNULL, capture_output=True, text=True, timeout=TIMEOUT, check=False
    )


def test_version():
    res = _run("--version")
    assert res.returncode == 0
    assert res.stdout.strip() == VERSION


def test_no_command():
    assert _run().returncode == 1


def test_times(cert_dir):
    res = _run("times", str(cert_dir.path))
    assert res.returncode == 0
    lines: List[str] = res.stdout.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith(f"{cert_dir.cert_file}: ")
    assert lines[1].endswith(f"({cert_dir.mtime_ns})")


def test_times_missing(empty_dir):
    res = _run("times", str(empty_dir.path))
    assert res.returncode == 1
    assert f"statting {empty_dir.cert_file}" in res.stderr


def test_validate(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(f"source: {tmp_path}\ninterval: 10m\nwatchdog: false\n")
    res = _run("validate", "--show", str(config_file))
    assert res.returncode == 0
    assert "configuration is valid" in res.stdout

    config_file.write_text(f"source: {tmp_path}\ninterval: sometimes\n")
    res = _run("validate", str(config_file))
    assert res.returncode == 1
    assert "/interval" in res.stderr


def test_serve_without_source():
    res = _run("serve", "--no-watchdog")
    assert res.returncode == 1
    assert "/source" in res.stderr


def test_emit_missing_dir(tmp_path):
    res = _run("emit", str(tmp_path / "nonexistent"))
    assert res.returncode == 1


def test_follow(tmp_path, pem_pair):
    records_file = tmp_path / "records.json"
    records_file.write_text(encode_record(X509KeyPair(*pem_pair)) * 2)

    res = _run("follow", "cat", shlex.quote(str(records_file)))
    assert res.returncode == 0
    lines = res.stdout.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith(load_from_pem(*pem_pair).fingerprint())
    assert lines[0].endswith("CN=example.com")


@pytest.mark.asyncio  # type: ignore
async def test_emit_until_stdin_closed(cert_dir):
    proc = await asyncio.create_subprocess_exec(
        *CERTWATCH,
        "emit",
        "--interval",
        "1s",
        str(cert_dir.path),
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
    )
    assert proc.stdin is not None and proc.stdout is not None

    decoder = RecordStreamDecoder()
    records: List[X509KeyPair] = []
    while not records:
        chunk = await asyncio.wait_for(proc.stdout.read(4096), TIMEOUT)
        assert chunk, "emitter finished without a record"
        records.extend(decoder.feed(chunk))

    assert records[0].cert_pem == cert_dir.cert_file.read_bytes()
    proc.stdin.close()
    assert await asyncio.wait_for(proc.wait(), TIMEOUT) == 0


@pytest.mark.asyncio  # type: ignore
async def test_emit_as_command_source(cert_dir):
    subjects = []
    source = CommandSource(shlex.join([*CERTWATCH, "emit", "--interval", "1s", str(cert_dir.path)]))
    await source.start()
    certs = source.__aiter__()

    subjects.append((await asyncio.wait_for(certs.__anext__(), TIMEOUT)).subject)
    cert_dir.renew("renewed.example.com")
    subjects.append((await asyncio.wait_for(certs.__anext__(), TIMEOUT)).subject)

    await asyncio.wait_for(source.close(), TIMEOUT)
    await certs.aclose()
    assert subjects == ["CN=example.com", "CN=renewed.example.com"]
