from typing import Any

import pytest
from pytest import raises

from certwatch.utils.modeling import parse_json, parse_yaml, try_to_parse
from certwatch.utils.modeling.exceptions import DataParsingError


@pytest.mark.parametrize(
    "text,res",
    [
        ('{"source": "/etc/letsencrypt/live/example.com"}', {"source": "/etc/letsencrypt/live/example.com"}),
        (
            "source: /etc/letsencrypt/live/example.com\ninterval: 1h\n",
            {"source": "/etc/letsencrypt/live/example.com", "interval": "1h"},
        ),
        ("server:\n  port: 8443\n", {"server": {"port": 8443}}),
    ],
)
def test_try_to_parse(text: str, res: Any):
    assert try_to_parse(text) == res


def test_try_to_parse_invalid():
    with raises(DataParsingError):
        try_to_parse("source: [unclosed")


def test_parse_yaml_duplicates():
    with raises(DataParsingError):
        parse_yaml("interval: 1h\ninterval: 2h\n")


def test_parse_json_duplicates():
    with raises(DataParsingError):
        parse_json('{"interval": "1h", "interval": "2h"}')
