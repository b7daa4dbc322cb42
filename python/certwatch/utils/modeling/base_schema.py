import inspect
from typing import Any, Dict, List, Optional, Type, TypeVar, Union, get_type_hints

from typing_extensions import Literal, get_args, get_origin

from .base_value_type import BaseValueType
from .exceptions import AggregateDataValidationError, DataDescriptionError, DataValidationError

NoneType = type(None)

T = TypeVar("T", bound="ConfigSchema")


def _is_union(tp: Any) -> bool:
    return get_origin(tp) is Union


def _is_literal(tp: Any) -> bool:
    return get_origin(tp) is Literal


def _is_list(tp: Any) -> bool:
    return get_origin(tp) in (list, List)


def is_obj_type(obj: Any, types: Union[type, tuple]) -> bool:  # type: ignore[type-arg]
    # To check specific type we are using 'type()' instead of 'isinstance()'
    # because for example 'bool' is instance of 'int', 'isinstance(False, int)' returns True.
    # pylint: disable=unidiomatic-typecheck
    if isinstance(types, tuple):
        return type(obj) in types
    return type(obj) is types


def _to_public(key: Any) -> Any:
    if isinstance(key, str):
        return key.replace("-", "_")
    return key


def _describe(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def _parse_value(tp: Any, value: Any, object_path: str) -> Any:  # noqa: PLR0911, PLR0912
    if tp is Any:
        return value

    if tp is NoneType:
        if value is not None:
            raise DataValidationError(f"expected none, got '{value}'", object_path)
        return None

    if _is_union(tp):
        errs: List[DataValidationError] = []
        for variant in get_args(tp):
            try:
                return _parse_value(variant, value, object_path)
            except DataValidationError as e:
                errs.append(e)
        raise DataValidationError(
            f"could not parse '{value}' as any of the allowed types", object_path, child_exceptions=errs
        )

    if _is_literal(tp):
        for expected in get_args(tp):
            if is_obj_type(value, type(expected)) and value == expected:
                return value
        raise DataValidationError(f"'{value}' does not match any of the expected values {get_args(tp)}", object_path)

    if _is_list(tp):
        if not isinstance(value, list):
            raise DataValidationError(f"expected list, got '{type(value).__name__}'", object_path)
        (inner,) = get_args(tp)
        return [_parse_value(inner, item, f"{object_path}[{i}]") for i, item in enumerate(value)]

    if tp in (bool, str):
        if not is_obj_type(value, tp):
            raise DataValidationError(f"expected {tp.__name__}, got '{type(value).__name__}'", object_path)
        return value

    if tp is int:
        if not is_obj_type(value, int):
            raise DataValidationError(f"expected int, got '{type(value).__name__}'", object_path)
        return value

    if tp is float:
        if not is_obj_type(value, (int, float)):
            raise DataValidationError(f"expected float, got '{type(value).__name__}'", object_path)
        return float(value)

    if inspect.isclass(tp) and issubclass(tp, BaseValueType):
        if isinstance(value, tp):
            return value
        if value is None:
            raise DataValidationError(f"expected {_describe(tp)}, got none", object_path)
        try:
            return tp(value, object_path=object_path)
        except ValueError as e:
            raise DataValidationError(str(e.args[0]) if e.args else str(e), object_path) from e

    if inspect.isclass(tp) and issubclass(tp, ConfigSchema):
        if isinstance(value, tp):
            return value
        if not isinstance(value, dict):
            raise DataValidationError(f"expected object, got '{type(value).__name__}'", object_path)
        return tp(value, object_path=object_path)

    raise DataDescriptionError(f"unsupported type '{_describe(tp)}' used in the schema at '{object_path}'")


class ConfigSchema:
    """
    Base class for configuration sections. Fields are declared as annotated class attributes,
    the class attribute value is the default. Keys in the source data use '-' instead of '_'.

    A schema can declare a '_LAYER' class, which the source data are parsed into first. Every
    field of the schema itself is then taken from the layer, or computed by a method named
    '_<field>(self, layer)' if there is one.

    Custom validation is done by overriding '_validate()' and raising 'ValueError'.
    """

    _LAYER: Optional[Type["ConfigSchema"]] = None

    @classmethod
    def _fields(cls) -> Dict[str, Any]:
        return {name: tp for name, tp in get_type_hints(cls).items() if not name.startswith("_")}

    def __init__(self, source: Optional[Dict[Any, Any]] = None, object_path: str = "") -> None:
        if source is None:
            source = {}
        if not isinstance(source, dict):
            raise DataValidationError(f"expected object, got '{type(source).__name__}'", object_path or "/")

        cls = type(self)
        if cls._LAYER is not None:
            layer = cls._LAYER(source, object_path)
            self._assign_from_layer(layer, object_path)
        else:
            self._assign_from_source(source, object_path)

        try:
            self._validate()
        except ValueError as e:
            raise DataValidationError(str(e.args[0]) if e.args else str(e), object_path or "/") from e

    def _assign_from_source(self, source: Dict[Any, Any], object_path: str) -> None:
        fields = self._fields()
        data = {_to_public(k): v for k, v in source.items()}

        errs: List[DataValidationError] = []
        for key in data:
            if key not in fields:
                errs.append(DataValidationError(f"unexpected extra key '{key}'", f"{object_path}/{key}"))

        for name, tp in fields.items():
            path = f"{object_path}/{name}"
            try:
                if name in data:
                    setattr(self, name, _parse_value(tp, data[name], path))
                elif hasattr(type(self), name):
                    setattr(self, name, getattr(type(self), name))
                else:
                    raise DataValidationError("missing attribute", path)
            except DataValidationError as e:
                errs.append(e)

        if len(errs) == 1:
            raise errs[0]
        if len(errs) > 1:
            raise AggregateDataValidationError(object_path or "/", errs)

    def _assign_from_layer(self, layer: "ConfigSchema", object_path: str) -> None:
        errs: List[DataValidationError] = []
        for name, tp in self._fields().items():
            path = f"{object_path}/{name}"
            try:
                compute = getattr(self, f"_{name}", None)
                value = compute(layer) if callable(compute) else getattr(layer, name)
                setattr(self, name, _parse_value(tp, value, path))
            except ValueError as e:
                errs.append(DataValidationError(str(e.args[0]) if e.args else str(e), path))
            except DataValidationError as e:
                errs.append(e)

        if len(errs) == 1:
            raise errs[0]
        if len(errs) > 1:
            raise AggregateDataValidationError(object_path or "/", errs)

    def _validate(self) -> None:
        pass

    def to_dict(self) -> Dict[str, Any]:
        res: Dict[str, Any] = {}
        for name in self._fields():
            res[name.replace("_", "-")] = _serialize(getattr(self, name))
        return res

    def __eq__(self, o: object) -> bool:
        if type(o) is not type(self):
            return False
        return all(getattr(self, name) == getattr(o, name) for name in self._fields())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


def _serialize(obj: Any) -> Any:
    if isinstance(obj, ConfigSchema):
        return obj.to_dict()
    if isinstance(obj, BaseValueType):
        return obj.serialize()
    if isinstance(obj, list):
        return [_serialize(i) for i in obj]
    return obj
