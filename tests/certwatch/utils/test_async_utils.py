import pytest

from certwatch.utils.async_utils import readfile_bytes


@pytest.mark.asyncio  # type: ignore
async def test_readfile_bytes(tmp_path):
    path = tmp_path / "file"
    path.write_bytes(b"\x00certwatch\xff")
    assert await readfile_bytes(path) == b"\x00certwatch\xff"


@pytest.mark.asyncio  # type: ignore
async def test_readfile_bytes_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        await readfile_bytes(tmp_path / "file")
