import json

import pytest

from ocmodel.raw import Raw, canonicalize_json
from ocmodel.types import Type


def test_from_json_reads_type():
    raw = Raw.from_json(b'{"type": "test.type", "value": "foo"}')
    assert raw.type == Type(group="test", name="type")
    assert json.loads(raw.data) == {"type": "test.type", "value": "foo"}


def test_from_json_canonicalizes_key_order():
    raw = Raw.from_json('{"value": "foo", "type": "ociArtifact"}')
    assert raw.to_json() == b'{"type":"ociArtifact","value":"foo"}'


def test_canonical_numbers():
    assert canonicalize_json(b"[1.0, 100, 0.5]") == b"[1,100,0.5]"


def test_canonicalize_is_idempotent():
    doc = '{"z": [1e30, -0.0, "a\\nb"], "a": {"y": null, "x": true}}'
    once = canonicalize_json(doc)
    assert canonicalize_json(once) == once
    assert json.loads(once) == json.loads(doc)


def test_canonicalize_has_no_whitespace():
    out = canonicalize_json('{ "a" : [ 1 , 2 ] }')
    assert b" " not in out


def test_canonicalize_rejects_duplicates():
    with pytest.raises(ValueError):
        canonicalize_json('{"a": 1, "a": 2}')


def test_canonicalize_rejects_invalid():
    with pytest.raises(ValueError):
        canonicalize_json("{not json")
    with pytest.raises(ValueError):
        canonicalize_json("NaN")


def test_from_json_without_type():
    raw = Raw.from_json('{"value": 1}')
    assert raw.type == Type()


def test_from_json_errors():
    with pytest.raises(ValueError, match="could not unmarshal data into raw"):
        Raw.from_json("[1, 2]")
    with pytest.raises(ValueError):
        Raw.from_json('{"type": 123}')
    with pytest.raises(ValueError):
        Raw.from_json('{"type": "a/b/c"}')


def test_str_and_to_json():
    raw = Raw(type=Type(name="x"), data=b'{"type":"x"}')
    assert str(raw) == '{"type":"x"}'
    assert raw.to_json() == b'{"type":"x"}'


def test_type_round_trip_through_raw():
    typ = Type(group="software.ocm.accessType", name="localBlob", version="v1")
    raw = Raw.from_json(json.dumps({"type": str(typ)}))
    assert raw.type == typ