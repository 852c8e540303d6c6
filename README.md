# ocmodel

Building blocks for describing component versions: versioned type names,
identities that can be matched against each other, typed JSON documents
kept in canonical form, and the component descriptor model with JSON and
YAML support.

## Installation

```
pip install ocmodel
```

To run the tests:

```
pip install "ocmodel[test]"
pytest
```

## Types (`ocmodel.types`)

A `Type` is a name with an optional group and an optional version. It is
written as `name`, `name/version`, `group.name` or `group.name/version`.

```python
from ocmodel.types import type_from_string, new_type

t = type_from_string("software.ocm.accessType.OCIArtifact/v1")
t.group          # "software.ocm.accessType"
t.has_version()  # True
str(new_type("group", "v1", "name"))  # "group.name/v1"
t.to_json()      # b'"software.ocm.accessType.OCIArtifact/v1"'
```

`type_from_string` raises `ValueError` for a string with more than one `/`
or without a name. `type_from_json` accepts a JSON string or a JSON object
with a `type` string field.

## Identities (`ocmodel.identity`)

An `Identity` is a `dict` of strings to strings. `Identity.match` compares
two identities: by default the `path` attribute of the other identity is
a glob pattern (`*` and `?` do not cross `/`) and all other attributes
must be equal. Matchers are callables taking two identities; they can be
passed in explicitly and combined with `match_all`.

```python
from ocmodel.identity import Identity, identity_equal, parse_url_to_identity

a = Identity({"path": "base/path"})
b = Identity({"path": "base/*"})
a.match(b)                  # True
a.match(b, identity_equal)  # False

parse_url_to_identity("my-registry.io:5000/path")
# {'port': '5000', 'hostname': 'my-registry.io', 'path': 'path'}
```

`Identity.canonical_hash_v1()` returns a 64-bit FNV hash that does not
depend on key order. `Identity.parse_type()` reads the `type` attribute as
a `Type`.

## Raw and unstructured documents

- `ocmodel.raw.Raw` holds a typed document as JSON bytes. `Raw.from_json`
  reads the `type` field and stores the document in canonical form
  (`canonicalize_json`, RFC 8785).
- `ocmodel.unstructured.Unstructured` holds a plain dictionary.
  `get(key, kind)` returns a value only if it has the given class;
  `set_type`/`get_type` store and read a `Type` under `type`; `to_json`
  writes compact JSON with sorted keys.
- `ocmodel.deepcopy.deep_copy_json` copies JSON-shaped values and raises
  `TypeError` for anything else.

## Time values (`ocmodel.descriptor.timestamps`)

`Time` wraps an aware `datetime`. It encodes as a UTC RFC 3339 string, or
`null` for the zero time, and decodes into local time. `date`, `now`,
`unix` and `new_time` build values.

## Component descriptors (`ocmodel.descriptor.model`)

```python
from ocmodel.descriptor.model import Descriptor

with open("component-descriptor.yaml") as f:
    desc = Descriptor.from_yaml(f.read())
print(desc)  # e.g. "my-component:1.0.0 (schema version v2)"
for resource in desc.component.resources:
    print(resource.to_identity())
print(desc.to_json())
```

A descriptor holds its schema metadata, the component (name, version,
provider, labels, repository contexts, resources, sources and component
references) and optional signatures. `Descriptor` reads and writes dicts,
JSON and YAML. Resource and source access specifications are kept as
`Raw`; repository contexts as `Unstructured`. Resource creation times are
`Timestamp` values rounded to whole seconds.
`new_exclude_from_signature_digest()` returns the digest that marks a
resource as left out of signing.

## What this package does not do

There is no registry that maps types to Python classes, so a `Raw`
access specification is not turned into a typed object automatically;
read its fields from `Raw.data` yourself. No access types (such as local
blobs) are defined. The package does not sign or verify descriptors,
compute digests, or talk to any repository.