from typing import Any

import pytest
from pytest import raises

from certwatch.datamodel.types import Dir, IPAddress, PortNumber, TimeUnit


@pytest.mark.parametrize("val", [1, 65_535, 8443])
def test_port_number_valid(val: int):
    assert int(PortNumber(val)) == val


@pytest.mark.parametrize("val", [0, 65_636, -1, "8443", True])
def test_port_number_invalid(val: Any):
    with raises(ValueError):
        PortNumber(val)


@pytest.mark.parametrize(
    "val,seconds",
    [("250ms", 0.25), ("30s", 30.0), ("5m", 300.0), ("1h", 3600.0), ("2d", 172_800.0)],
)
def test_time_unit_valid(val: str, seconds: float):
    unit = TimeUnit(val)
    assert unit.seconds() == seconds
    assert unit.serialize() == val


@pytest.mark.parametrize("val", ["1", "1x", "-5s", "1.5h", "", 60])
def test_time_unit_invalid(val: Any):
    with raises(ValueError):
        TimeUnit(val)


def test_time_unit_equality():
    assert TimeUnit("60s") == TimeUnit("1m")
    assert TimeUnit("61s") != TimeUnit("1m")


@pytest.mark.parametrize("val", ["127.0.0.1", "::1", "0.0.0.0"])
def test_ip_address_valid(val: str):
    assert str(IPAddress(val)) == val


@pytest.mark.parametrize("val", ["localhost", "256.0.0.1", "::g"])
def test_ip_address_invalid(val: str):
    with raises(ValueError):
        IPAddress(val)


def test_dir(tmp_path):
    assert Dir(str(tmp_path)).to_path() == tmp_path.absolute()

    with raises(ValueError):
        Dir(str(tmp_path / "nonexistent"))
    with raises(ValueError):
        Dir(42)
