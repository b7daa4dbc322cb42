import re
from typing import Any, ClassVar, Dict, Optional, Pattern

from certwatch.utils.modeling import BaseValueType


def _type_error(cls: type, expected: str, value: Any) -> ValueError:
    return ValueError(f"'{cls.__name__}' expects {expected}, got '{value}' of type '{type(value).__name__}'")


class IntRangeBase(BaseValueType):
    """
    Integer, optionally limited by inclusive '_min' and '_max' class attributes.
    """

    _min: ClassVar[Optional[int]] = None
    _max: ClassVar[Optional[int]] = None

    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        if not isinstance(source_value, int) or isinstance(source_value, bool):
            raise _type_error(type(self), "an integer", source_value)
        if self._min is not None and source_value < self._min:
            raise ValueError(f"value {source_value} is lower than the minimum {self._min}")
        if self._max is not None and source_value > self._max:
            raise ValueError(f"value {source_value} is higher than the maximum {self._max}")
        self._value: int = source_value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __eq__(self, o: object) -> bool:
        return isinstance(o, type(self)) and o._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def serialize(self) -> Any:
        return self._value


class StrBase(BaseValueType):
    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        if not isinstance(source_value, str):
            raise _type_error(type(self), "a string", source_value)
        self._value: str = source_value

    def __str__(self) -> str:
        return self._value

    def __eq__(self, o: object) -> bool:
        return isinstance(o, type(self)) and o._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def serialize(self) -> Any:
        return self._value


class UnitBase(StrBase):
    """
    Non-negative integer followed by a unit, e.g. '30s'. Subclasses set '_units',
    the multipliers of every unit to the base one.
    """

    _units: ClassVar[Dict[str, int]]
    _pattern: ClassVar[Pattern[str]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._pattern = re.compile(rf"^(\d+)({'|'.join(cls._units)})$")

    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        super().__init__(source_value, object_path)
        match = self._pattern.match(self._value)
        if match is None:
            raise ValueError(f"expected an integer followed by one of the units {list(self._units)}, got '{self._value}'")
        self._base_value: int = int(match.group(1)) * self._units[match.group(2)]

    def __eq__(self, o: object) -> bool:
        # '60s' and '1m' are the same
        return isinstance(o, type(self)) and o._base_value == self._base_value

    def __hash__(self) -> int:
        return hash(self._base_value)
