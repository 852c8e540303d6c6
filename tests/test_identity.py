import pytest

from ocmodel.identity import (
    IDENTITY_ATTRIBUTE_HOSTNAME,
    IDENTITY_ATTRIBUTE_PATH,
    IDENTITY_ATTRIBUTE_PORT,
    IDENTITY_ATTRIBUTE_SCHEME,
    Identity,
    identity_equal,
    identity_matches_path,
    match_all,
    parse_url_allow_no_scheme,
    parse_url_to_identity,
)
from ocmodel.types import Type

P = IDENTITY_ATTRIBUTE_PATH


def test_hash_of_empty_identity_is_nonzero():
    assert Identity().canonical_hash_v1() != 0
    assert Identity().canonical_hash_v1() == 14695981039346656037


def test_hash_single_and_multiple_nonzero():
    assert Identity({"key": "value"}).canonical_hash_v1() > 0
    assert Identity({"a": "1", "b": "2", "c": "3"}).canonical_hash_v1() > 0


def test_hash_order_stability():
    h1 = Identity({"a": "1", "b": "2", "c": "3"}).canonical_hash_v1()
    h2 = Identity({"c": "3", "b": "2", "a": "1"}).canonical_hash_v1()
    assert h1 == h2


def test_hash_differs_for_different_values():
    h1 = Identity({"a": "1", "b": "2"}).canonical_hash_v1()
    h2 = Identity({"a": "1", "b": "3"}).canonical_hash_v1()
    assert h1 != h2
    assert 0 <= h1 < 2**64


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("http://docker.io", {IDENTITY_ATTRIBUTE_HOSTNAME: "docker.io", IDENTITY_ATTRIBUTE_SCHEME: "http"}),
        ("https://docker.io", {IDENTITY_ATTRIBUTE_HOSTNAME: "docker.io", IDENTITY_ATTRIBUTE_SCHEME: "https"}),
        ("docker.io", {IDENTITY_ATTRIBUTE_HOSTNAME: "docker.io"}),
        ("my-registry.io:5000", {IDENTITY_ATTRIBUTE_HOSTNAME: "my-registry.io", IDENTITY_ATTRIBUTE_PORT: "5000"}),
        (
            "my-registry.io:5000/path",
            {
                IDENTITY_ATTRIBUTE_HOSTNAME: "my-registry.io",
                IDENTITY_ATTRIBUTE_PORT: "5000",
                IDENTITY_ATTRIBUTE_PATH: "path",
            },
        ),
        ("localhost:8080", {IDENTITY_ATTRIBUTE_HOSTNAME: "localhost", IDENTITY_ATTRIBUTE_PORT: "8080"}),
        ("plain-host", {IDENTITY_ATTRIBUTE_HOSTNAME: "plain-host"}),
        ("http://", {IDENTITY_ATTRIBUTE_SCHEME: "http"}),
    ],
)
def test_parse_url_to_identity(uri, expected):
    assert parse_url_to_identity(uri) == Identity(expected)


def test_parse_url_invalid_port():
    with pytest.raises(ValueError):
        parse_url_to_identity("my-registry.io:abc")


def test_parse_url_allow_no_scheme():
    parsed = parse_url_allow_no_scheme("docker.io/repo")
    assert parsed.scheme == ""
    assert parsed.netloc == "docker.io"
    assert parsed.path == "/repo"


@pytest.mark.parametrize(
    "a, b, want",
    [
        ("", "", True),
        ("path", "path", True),
        ("path", "different-path", False),
        ("base/path", "base/different-path", False),
        ("base/path", "base/*", True),
        ("base/path/abc", "base/*", False),
        ("base/path/abc", "base/*/*", True),
        ("base/path/abc", "base/**", False),
        ("base/path/abc", "base/*/abc", True),
    ],
)
def test_identity_matches_path(a, b, want):
    assert identity_matches_path(Identity({P: a}), Identity({P: b})) is want


def test_identity_matches_path_removes_path():
    a, b = Identity({P: "x", "k": "v"}), Identity({P: "x"})
    assert identity_matches_path(a, b) is True
    assert a == {"k": "v"}
    assert b == {}


def test_identity_matches_path_bad_pattern():
    assert identity_matches_path(Identity({P: "a"}), Identity({P: "[a"})) is False


def test_identity_matches_path_classes():
    assert identity_matches_path(Identity({P: "b1"}), Identity({P: "[a-c][0-9]"})) is True
    assert identity_matches_path(Identity({P: "d1"}), Identity({P: "[^a-c]?"})) is True
    assert identity_matches_path(Identity({P: "a/"}), Identity({P: "a?"})) is False


@pytest.mark.parametrize(
    "i, o, matchers, want",
    [
        ({}, {}, (), True),
        ({"key": "value"}, {"key": "value"}, (), True),
        ({P: "base/path"}, {P: "base/*"}, (), True),
        ({P: "base/path"}, {P: "base/*"}, (identity_equal,), False),
    ],
)
def test_identity_match(i, o, matchers, want):
    assert Identity(i).match(Identity(o), *matchers) is want


def test_match_does_not_mutate_inputs():
    i, o = Identity({P: "base/path"}), Identity({P: "base/*"})
    assert i.match(o) is True
    assert i == {P: "base/path"}
    assert o == {P: "base/*"}


def test_match_all_requires_every_matcher():
    matcher = match_all(lambda a, b: True, lambda a, b: False)
    assert matcher(Identity(), Identity()) is False
    assert match_all()(Identity(), Identity()) is True


def test_identity_equal_clears_both():
    a, b = Identity({"k": "v"}), Identity({"k": "v"})
    assert identity_equal(a, b) is True
    assert a == {} and b == {}


def test_clone_is_independent():
    original = Identity({"k": "v"})
    copy = original.clone()
    copy["k"] = "w"
    assert original["k"] == "v"
    assert isinstance(copy, Identity)


def test_parse_type():
    assert Identity({"type": "group.name/v1"}).parse_type() == Type("group", "v1", "name")
    assert Identity({"type": "name"}).get_type() == Type(name="name")


def test_parse_type_errors():
    with pytest.raises(ValueError, match="missing identity attribute"):
        Identity().parse_type()
    with pytest.raises(ValueError, match="invalid identity type"):
        Identity({"type": "a/b/c"}).parse_type()
    with pytest.raises(ValueError):
        Identity({"type": ""}).get_type()