import asyncio
import shlex

import pytest

from certwatch import CertWatchBaseException
from certwatch.certs.records import X509KeyPair, encode_record
from certwatch.exceptions import CommandFailure, LoadFailure, RecordDecodeError
from certwatch.sources import CommandSource

TIMEOUT = 10


@pytest.fixture
def records_file(tmp_path, new_pem_pair):
    path = tmp_path / "records.json"
    pairs = [new_pem_pair("one.example.com"), new_pem_pair("two.example.com")]
    path.write_text("".join(encode_record(X509KeyPair(*pair)) for pair in pairs))
    return path


async def _collect(cmd: str):
    subjects = []
    async with CommandSource(cmd) as source:
        async for cert in source:
            subjects.append(cert.subject)
    return subjects


@pytest.mark.asyncio  # type: ignore
async def test_records(records_file):
    subjects = await asyncio.wait_for(_collect(f"cat {shlex.quote(str(records_file))}"), TIMEOUT)
    assert subjects == ["CN=one.example.com", "CN=two.example.com"]


@pytest.mark.asyncio  # type: ignore
async def test_no_records():
    assert await asyncio.wait_for(_collect("true"), TIMEOUT) == []


@pytest.mark.asyncio  # type: ignore
async def test_exit_status(records_file):
    with pytest.raises(CommandFailure) as e:
        await asyncio.wait_for(_collect(f"cat {shlex.quote(str(records_file))}; exit 3"), TIMEOUT)
    assert e.value.returncode == 3
    assert e.value.record_error is None


@pytest.mark.asyncio  # type: ignore
async def test_command_not_found():
    with pytest.raises(CommandFailure) as e:
        await asyncio.wait_for(_collect("certwatch-nonexistent-command 2>/dev/null"), TIMEOUT)
    assert e.value.returncode == 127


@pytest.mark.asyncio  # type: ignore
async def test_malformed_record():
    with pytest.raises(CommandFailure) as e:
        await asyncio.wait_for(_collect("echo garbage; exit 1"), TIMEOUT)
    assert isinstance(e.value.record_error, RecordDecodeError)
    assert "decoding JSON" in str(e.value)


@pytest.mark.asyncio  # type: ignore
async def test_invalid_certificate_record(tmp_path):
    path = tmp_path / "record.json"
    path.write_text(encode_record(X509KeyPair(b"not a certificate", b"not a key")))

    with pytest.raises(CertWatchBaseException) as e:
        await asyncio.wait_for(_collect(f"cat {shlex.quote(str(path))}"), TIMEOUT)

    # reported on its own, or together with the exit status when the command had to be terminated
    err = e.value.record_error if isinstance(e.value, CommandFailure) else e.value
    assert isinstance(err, LoadFailure)


@pytest.mark.asyncio  # type: ignore
async def test_close_terminates(records_file):
    source = CommandSource(f"cat {shlex.quote(str(records_file))} && exec sleep 60")
    await source.start()

    certs = source.__aiter__()
    first = await asyncio.wait_for(certs.__anext__(), TIMEOUT)
    assert first.subject == "CN=one.example.com"

    returncode = await asyncio.wait_for(source.close(), TIMEOUT)
    assert returncode < 0
    await certs.aclose()
