from typing import Iterable, List

from certwatch import CertWatchBaseException


class DataModelingBaseException(CertWatchBaseException):
    """
    Base class of the configuration parsing and validation errors.
    """


class DataParsingError(DataModelingBaseException):
    pass


class DataDescriptionError(DataModelingBaseException):
    """
    The schema itself is wrong, e.g. uses an unsupported field type.
    """


class DataValidationError(DataModelingBaseException):
    def __init__(self, msg: str, tree_path: str, child_exceptions: "Iterable[DataValidationError]" = tuple()) -> None:
        super().__init__(msg)
        self._tree_path = tree_path.replace("_", "-")
        self._children = list(child_exceptions)

    def where(self) -> str:
        return self._tree_path

    def _lines(self, depth: int) -> List[str]:
        lines = [f"{'  ' * depth}[{self.where()}] {self.args[0]}"]
        for child in self._children:
            lines.extend(child._lines(depth + 1))
        return lines

    def __str__(self) -> str:
        return "\n".join(["Configuration validation failed:", *self._lines(1)])


class AggregateDataValidationError(DataValidationError):
    """
    Several fields of one object failed at once, only the children are reported.
    """

    def __init__(self, object_path: str, child_exceptions: "Iterable[DataValidationError]") -> None:
        super().__init__("multiple errors", object_path, child_exceptions)

    def _lines(self, depth: int) -> List[str]:
        lines: List[str] = []
        for child in self._children:
            lines.extend(child._lines(depth))
        return lines
