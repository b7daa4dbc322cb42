import json
from typing import Any, Dict, List, Tuple

import yaml
from yaml.constructor import ConstructorError
from yaml.nodes import MappingNode, Node

from .exceptions import DataParsingError


def _json_object_no_duplicates(pairs: List[Tuple[Any, Any]]) -> Dict[Any, Any]:
    obj: Dict[Any, Any] = {}
    for key, val in pairs:
        if key in obj:
            raise DataParsingError(f"duplicate key detected: {key}")
        obj[key] = val
    return obj


class _NoDuplicatesLoader(yaml.SafeLoader):
    """
    'yaml.SafeLoader' refusing mappings with a repeated key, the default one silently keeps the last value.
    """

    def construct_mapping(self, node: Node, deep: bool = False) -> Dict[Any, Any]:
        if not isinstance(node, MappingNode):
            raise ConstructorError(None, None, f"expected a mapping node, but found {node.id}", node.start_mark)

        self.flatten_mapping(node)
        mapping: Dict[Any, Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=deep)  # type: ignore
            try:
                if key in mapping:
                    raise DataParsingError(f"duplicate key detected: {key_node.start_mark}")
            except TypeError as e:
                raise ConstructorError(
                    "while constructing a mapping", node.start_mark, f"found unhashable key ({e})", key_node.start_mark
                ) from e
            mapping[key] = self.construct_object(value_node, deep=deep)  # type: ignore
        return mapping


def parse_yaml(data: str) -> Any:
    return yaml.load(data, Loader=_NoDuplicatesLoader)  # type: ignore


def parse_json(data: str) -> Any:
    return json.loads(data, object_pairs_hook=_json_object_no_duplicates)


def try_to_parse(data: str) -> Any:
    """
    Parse configuration data, JSON first and YAML when it is not JSON.
    Raises 'DataParsingError' when it is neither.
    """

    try:
        return parse_json(data)
    except json.JSONDecodeError as je:
        try:
            return parse_yaml(data)
        except yaml.YAMLError as ye:
            raise DataParsingError(f"failed to parse data, JSON: {je}, YAML: {ye}") from ye
