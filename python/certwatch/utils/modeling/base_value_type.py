from abc import ABC, abstractmethod
from typing import Any


class BaseValueType(ABC):
    """
    Scalar configuration value with its own parsing and validation. Used as a field type
    in 'ConfigSchema', the constructor receives the raw value and raises 'ValueError'
    when it is not acceptable.
    """

    @abstractmethod
    def __init__(self, source_value: Any, object_path: str = "/") -> None:
        pass

    @abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError()

    @abstractmethod
    def serialize(self) -> Any:
        """Value to put into a dumped configuration, the constructor accepts it back."""
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f'{type(self).__name__}("{self}")'
