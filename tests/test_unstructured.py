import json

import pytest

from ocmodel.types import Type, new_type
from ocmodel.unstructured import Unstructured

REPOSITORY = """{
	"baseUrl": "ghcr.io",
	"componentNameMapping": "urlPath",
	"subPath": "open-component-model/ocm",
	"type": "OCIRegistry"
}"""


def test_successful_unmarshal():
    un = Unstructured.from_json(REPOSITORY)
    assert un.get("componentNameMapping", str) == "urlPath"
    assert un.data["type"] == "OCIRegistry"
    # a plain string is not a Type, so no type is reported
    assert un.get_type() == Type()


def test_successful_marshal():
    un = Unstructured(
        {
            "componentNameMapping": "urlPath",
            "subPath": "open-component-model/ocm",
            "type": "OCIRegistry",
            "baseUrl": "ghcr.io",
        }
    )
    assert un.to_json() == (
        b'{"baseUrl":"ghcr.io","componentNameMapping":"urlPath",'
        b'"subPath":"open-component-model/ocm","type":"OCIRegistry"}'
    )


def test_set_type():
    un = Unstructured({"componentNameMapping": "urlPath"})
    un.set_type(new_type("group", "version", "name"))
    assert un.to_json() == b'{"componentNameMapping":"urlPath","type":"group.name/version"}'
    assert un.get_type() == Type(group="group", version="version", name="name")


def test_get_wrong_kind_or_missing():
    un = Unstructured({"count": 3})
    assert un.get("count", str) is None
    assert un.get("missing", str) is None
    assert un.get("count", int) == 3


def test_round_trip():
    un = Unstructured.from_json(REPOSITORY)
    assert json.loads(un.to_json()) == json.loads(REPOSITORY)


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        Unstructured.from_json("[1, 2]")


def test_deep_copy_is_independent():
    un = Unstructured({"nested": {"a": [1, 2]}})
    copy = un.deep_copy()
    copy.data["nested"]["a"].append(3)
    assert un.data == {"nested": {"a": [1, 2]}}
    assert copy.data == {"nested": {"a": [1, 2, 3]}}


def test_new_unstructured_is_empty():
    assert Unstructured().to_json() == b"{}"