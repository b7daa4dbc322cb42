from pathlib import Path
from typing import Any

from certwatch.utils.modeling import BaseValueType


class Dir(BaseValueType):
    """
    Path, that is enforced to be:
    - an existing directory

    Relative paths are taken relative to the current working directory.
    """

    _value: Path

    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        if not isinstance(source_value, str):
            raise ValueError(
                f"expected directory path in a string, got '{source_value}' with type '{type(source_value).__name__}'."
            )
        self._raw_value: str = source_value
        self._value = Path(source_value).absolute()
        try:
            if not self._value.is_dir():
                raise ValueError(f"path '{self._value}' does not point to an existing directory")
        except PermissionError as e:
            raise ValueError(str(e)) from e

    def __str__(self) -> str:
        return str(self._value)

    def __eq__(self, o: object) -> bool:
        return isinstance(o, Dir) and o._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def to_path(self) -> Path:
        return self._value

    def serialize(self) -> Any:
        return self._raw_value
