from .base_types import IntRangeBase, StrBase, UnitBase
from .files import Dir
from .types import IPAddress, PortNumber, TimeUnit

__all__ = [
    "Dir",
    "IPAddress",
    "IntRangeBase",
    "PortNumber",
    "StrBase",
    "TimeUnit",
    "UnitBase",
]
