from .base_schema import ConfigSchema
from .base_value_type import BaseValueType
from .parsing import parse_json, parse_yaml, try_to_parse

__all__ = [
    "BaseValueType",
    "ConfigSchema",
    "parse_json",
    "parse_yaml",
    "try_to_parse",
]
