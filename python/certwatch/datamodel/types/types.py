import ipaddress
from typing import Any, Union

from .base_types import IntRangeBase, StrBase, UnitBase


class PortNumber(IntRangeBase):
    _min = 1
    _max = 65_535


class TimeUnit(UnitBase):
    _units = {"ms": 1, "s": 1000, "m": 60 * 1000, "h": 3600 * 1000, "d": 24 * 3600 * 1000}

    def millis(self) -> int:
        return self._base_value

    def seconds(self) -> float:
        return self._base_value / 1000


class IPAddress(StrBase):
    _value_ip: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        super().__init__(source_value, object_path)
        try:
            self._value_ip = ipaddress.ip_address(self._value)
        except ValueError as e:
            raise ValueError(f"failed to parse IP address '{self._value}'.", object_path) from e

    def to_std(self) -> Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
        return self._value_ip
