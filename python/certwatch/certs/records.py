"""
JSON encoding of certificate/key pairs for passing them between processes.

A record is a JSON object with two base64-encoded byte fields:

    {
      "CertPEMBlock": "LS0tLS1CRUdJTi...",
      "KeyPEMBlock": "LS0tLS1CRUdJTi..."
    }

A stream of records is simply the records one after another, separated by any whitespace.
Field names are matched case-insensitively.
"""

import base64
import binascii
import codecs
import json
from typing import Any, Dict, List, NamedTuple

from certwatch.exceptions import RecordDecodeError

CERT_FIELD = "CertPEMBlock"
KEY_FIELD = "KeyPEMBlock"


class X509KeyPair(NamedTuple):
    cert_pem: bytes
    key_pem: bytes


def encode_record(pair: X509KeyPair) -> str:
    data = {
        CERT_FIELD: base64.b64encode(pair.cert_pem).decode("ascii"),
        KEY_FIELD: base64.b64encode(pair.key_pem).decode("ascii"),
    }
    return json.dumps(data, indent=2) + "\n"


def _field(data: Dict[str, Any], name: str) -> bytes:
    value = data.get(name.lower())
    if value is None:
        return b""
    if not isinstance(value, str):
        raise RecordDecodeError(f"decoding JSON: field '{name}' is not a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise RecordDecodeError(f"decoding JSON: field '{name}': {e}") from e


def decode_record(text: str) -> X509KeyPair:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordDecodeError(f"decoding JSON: {e}") from e
    if not isinstance(data, dict):
        raise RecordDecodeError(f"decoding JSON: expected an object, got '{type(data).__name__}'")

    lowered = {str(k).lower(): v for k, v in data.items()}
    return X509KeyPair(_field(lowered, CERT_FIELD), _field(lowered, KEY_FIELD))


class RecordStreamDecoder:
    """
    Incremental decoder of a record stream. Complete records are returned
    as soon as their closing brace has been fed in.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buffer: List[str] = []
        self._depth = 0
        self._in_string = False
        self._escaped = False

    def feed(self, data: bytes) -> List[X509KeyPair]:
        try:
            text = self._utf8.decode(data)
        except UnicodeDecodeError as e:
            raise RecordDecodeError(f"decoding JSON: {e}") from e

        records: List[X509KeyPair] = []
        for char in text:
            if self._depth == 0:
                if char.isspace():
                    continue
                if char != "{":
                    raise RecordDecodeError(f"decoding JSON: unexpected character {char!r} outside of a record")

            self._buffer.append(char)
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif char == "\\":
                    self._escaped = True
                elif char == '"':
                    self._in_string = False
            elif char == '"':
                self._in_string = True
            elif char in "{[":
                self._depth += 1
            elif char in "}]":
                self._depth -= 1
                if self._depth == 0:
                    records.append(decode_record("".join(self._buffer)))
                    self._buffer = []
        return records

    def close(self) -> None:
        """
        Signal end of the stream, fails when it ended in the middle of a record.
        """

        try:
            self._utf8.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise RecordDecodeError(f"decoding JSON: {e}") from e
        if self._buffer:
            raise RecordDecodeError("decoding JSON: unexpected end of stream inside a record")
