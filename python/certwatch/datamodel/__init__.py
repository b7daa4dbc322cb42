import logging
from pathlib import Path
from typing import Any, Dict, Optional

from certwatch.utils.modeling import try_to_parse
from certwatch.utils.modeling.exceptions import DataParsingError

from .config_schema import CertWatchConfig

logger = logging.getLogger(__name__)


def _merge(data: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Values from 'overrides' win, nested sections are merged key by key."""

    for key, val in overrides.items():
        if isinstance(val, dict) and isinstance(data.get(key), dict):
            data[key] = _merge(dict(data[key]), val)
        else:
            data[key] = val
    return data


def load_config(path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None) -> CertWatchConfig:
    """
    Load configuration from a YAML/JSON file, command-line values in 'overrides' take precedence.
    Without a file, the configuration is built from the overrides and defaults only.
    """

    data: Dict[str, Any] = {}
    if path is not None:
        try:
            text = path.read_text(encoding="utf8")
        except OSError as e:
            raise DataParsingError(f"failed to read configuration file '{path}': {e}") from e

        parsed = try_to_parse(text)
        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise DataParsingError(f"configuration file '{path}' does not contain an object")
        data = parsed
        logger.debug(f"Loaded configuration file '{path}'")

    if overrides:
        data = _merge(data, overrides)
    return CertWatchConfig(data)


__all__ = ["CertWatchConfig", "load_config"]
