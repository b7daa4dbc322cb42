import asyncio
import io

import pytest

from certwatch.certs.records import RecordStreamDecoder
from certwatch.exceptions import ProbeFailure, ShutdownRequested
from certwatch.watcher import CertWatcher, RecordWriter, iter_certificates

TIMEOUT = 10
INTERVAL = 0.02


@pytest.mark.asyncio  # type: ignore
async def test_iter_certificates(cert_dir):
    certs = iter_certificates(cert_dir.source, INTERVAL)

    first = await asyncio.wait_for(certs.__anext__(), TIMEOUT)
    assert first.subject == "CN=example.com"

    cert_dir.renew("renewed.example.com")
    second = await asyncio.wait_for(certs.__anext__(), TIMEOUT)
    assert second.subject == "CN=renewed.example.com"

    await asyncio.wait_for(certs.aclose(), TIMEOUT)


@pytest.mark.asyncio  # type: ignore
async def test_iter_certificates_error_after_last(cert_dir):
    subjects = []
    with pytest.raises(ProbeFailure):
        async for cert in iter_certificates(cert_dir.source, INTERVAL):
            subjects.append(cert.subject)
            cert_dir.cert_file.unlink()
    assert subjects == ["CN=example.com"]


@pytest.mark.asyncio  # type: ignore
async def test_iter_certificates_missing_files(empty_dir):
    with pytest.raises(ProbeFailure):
        async for _ in iter_certificates(empty_dir.source, INTERVAL):
            pass


@pytest.mark.asyncio  # type: ignore
async def test_record_writer(cert_dir, pem_pair):
    stream = io.StringIO()
    watcher = CertWatcher(cert_dir.source, RecordWriter(stream), INTERVAL)
    task = asyncio.create_task(watcher.run())

    await asyncio.sleep(INTERVAL * 5)
    cert_dir.write(pem_pair)
    await asyncio.sleep(INTERVAL * 5)
    watcher.stop()
    with pytest.raises(ShutdownRequested):
        await asyncio.wait_for(task, TIMEOUT)

    decoder = RecordStreamDecoder()
    records = decoder.feed(stream.getvalue().encode())
    decoder.close()
    assert len(records) == 2
    assert records[1].cert_pem == pem_pair[0]
    assert records[1].key_pem == pem_pair[1]
