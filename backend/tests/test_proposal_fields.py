import json

import pytest

from app.services.proposal_fields import (
    decode_blob,
    decode_integration_scores,
    decode_reference,
    encode_blob,
    format_cost,
    parse_cost,
)
from app.schemas.submission import Reference


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$12,500", 12500.0),
        ("12500.50", 12500.5),
        ("tbd", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("1.2.3", 0.0),
        ("1k", 1.0),
        (950, 950.0),
    ],
)
def test_parse_cost(raw, expected):
    assert parse_cost(raw) == expected


def test_format_cost():
    assert format_cost(12500.0) == "12500"
    assert format_cost(99.5) == "99.5"
    assert format_cost(0) == ""
    assert format_cost(None) == ""


def test_decode_blob_handles_double_encoding():
    payload = {"zendesk": "3"}
    assert decode_blob(json.dumps(payload)) == payload
    assert decode_blob(json.dumps(json.dumps(payload))) == payload
    assert decode_blob("{broken") is None
    assert decode_blob("[1, 2]") is None
    assert decode_blob(None) is None


def test_decoders_fall_back_to_defaults():
    scores = decode_integration_scores(json.dumps(json.dumps({"oracleSql": 2, "avinode": "3"})))
    assert scores.oracle_sql == "2"
    assert scores.avinode == "3"
    assert scores.slack == ""

    assert decode_reference("garbage") == Reference()
    ref = decode_reference(encode_blob(Reference(name="Sam", company="SkyCo")))
    assert ref.name == "Sam"
    assert ref.company == "SkyCo"
