"""Component descriptors: components with their resources, sources, references and signatures.

A descriptor is made of ``meta`` (the schema version), ``component`` (name,
version, labels, repository contexts, provider, resources, sources and
component references) and optional ``signatures``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, TypeVar

import yaml

from ocmodel.descriptor.timestamps import Time
from ocmodel.identity import Identity
from ocmodel.raw import Raw
from ocmodel.unstructured import Unstructured

EXCLUDE_FROM_SIGNATURE = "EXCLUDE-FROM-SIGNATURE"
NO_DIGEST = "NO-DIGEST"

IDENTITY_ATTRIBUTE_NAME = "name"
IDENTITY_ATTRIBUTE_VERSION = "version"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_T = TypeVar("_T")


class _YAMLLoader(yaml.SafeLoader):
    """A YAML loader that keeps timestamps as plain strings, as JSON would."""


_YAMLLoader.add_constructor("tag:yaml.org,2002:timestamp", _YAMLLoader.construct_yaml_str)


def _json_compatible(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            (k if isinstance(k, str) else json.dumps(k) if k is None or isinstance(k, bool) else str(k)):
            _json_compatible(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_json_compatible(item) for item in value]
    return value


def _mapping(data: Any, what: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"cannot decode {type(data).__name__} into {what}")
    return data


def _string(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _boolean(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


def _integer(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {type(value).__name__}")
    return value


def _list(data: dict[str, Any], key: str, load: Callable[[Any], _T]) -> list[_T]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list, got {type(value).__name__}")
    return [load(item) for item in value]


def _string_map(data: dict[str, Any], key: str) -> dict[str, str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise ValueError(f"field {key!r} must be a mapping of strings")
    return dict(value)


def _load_raw(value: Any) -> Raw | None:
    return None if value is None else Raw.from_json(json.dumps(value))


def _dump_raw(raw: Raw | None) -> Any:
    return None if raw is None else json.loads(raw.to_json())


def _format_rfc3339(value: datetime) -> str:
    base = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    total = int((value.utcoffset() or timedelta(0)).total_seconds())
    if total == 0:
        return base + "Z"
    sign = "+" if total > 0 else "-"
    minutes = abs(total) // 60
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


class ResourceRelation(str, Enum):
    """Whether a resource is maintained in the origin's context or by a third party."""

    LOCAL = "local"
    EXTERNAL = "external"

    def __str__(self) -> str:
        return self.value


def _load_relation(data: dict[str, Any]) -> ResourceRelation | str:
    value = _string(data, "relation")
    try:
        return ResourceRelation(value)
    except ValueError:
        return value


@dataclass
class Label:
    """A label on an element; ``signing`` includes it in the signature."""

    name: str = ""
    value: str = ""
    signing: bool = False

    def _go_string(self) -> str:
        return f"{{{self.name} {self.value} {'true' if self.signing else 'false'}}}"

    def _dump(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.signing:
            out["signing"] = True
        return out

    @classmethod
    def _load(cls, data: Any) -> Label:
        d = _mapping(data, "label")
        return cls(name=_string(d, "name"), value=_string(d, "value"), signing=_boolean(d, "signing"))


@dataclass
class Digest:
    """Hash algorithm, normalisation algorithm and digest value."""

    hash_algorithm: str = ""
    normalisation_algorithm: str = ""
    value: str = ""

    def _dump(self) -> dict[str, Any]:
        return {
            "hashAlgorithm": self.hash_algorithm,
            "normalisationAlgorithm": self.normalisation_algorithm,
            "value": self.value,
        }

    @classmethod
    def _load(cls, data: Any) -> Digest:
        d = _mapping(data, "digest")
        return cls(
            hash_algorithm=_string(d, "hashAlgorithm"),
            normalisation_algorithm=_string(d, "normalisationAlgorithm"),
            value=_string(d, "value"),
        )


@dataclass
class SignatureInfo:
    """The details of a signature."""

    algorithm: str = ""
    value: str = ""
    media_type: str = ""
    issuer: str = ""

    def _dump(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "algorithm": self.algorithm,
            "value": self.value,
            "mediaType": self.media_type,
        }
        if self.issuer:
            out["issuer"] = self.issuer
        return out

    @classmethod
    def _load(cls, data: Any) -> SignatureInfo:
        d = _mapping(data, "signature info")
        return cls(
            algorithm=_string(d, "algorithm"),
            value=_string(d, "value"),
            media_type=_string(d, "mediaType"),
            issuer=_string(d, "issuer"),
        )


@dataclass
class Signature:
    """A named signature over a digest."""

    name: str = ""
    digest: Digest = field(default_factory=Digest)
    signature: SignatureInfo = field(default_factory=SignatureInfo)

    def _dump(self) -> dict[str, Any]:
        return {"name": self.name, "digest": self.digest._dump(), "signature": self.signature._dump()}

    @classmethod
    def _load(cls, data: Any) -> Signature:
        d = _mapping(data, "signature")
        return cls(
            name=_string(d, "name"),
            digest=Digest._load(d.get("digest")),
            signature=SignatureInfo._load(d.get("signature")),
        )


@dataclass
class Meta:
    """The schema version of a descriptor."""

    version: str = ""

    def _dump(self) -> dict[str, Any]:
        return {"schemaVersion": self.version}

    @classmethod
    def _load(cls, data: Any) -> Meta:
        return cls(version=_string(_mapping(data, "meta"), "schemaVersion"))


@dataclass
class ObjectMeta:
    """An object identified by name and version, with optional labels."""

    name: str = ""
    version: str = ""
    labels: list[Label] = field(default_factory=list)

    def __str__(self) -> str:
        base = self.name
        if self.version:
            base += ":" + self.version
        if self.labels:
            base += "+labels([" + " ".join(label._go_string() for label in self.labels) + "])"
        return base

    def _dump(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "version": self.version}
        if self.labels:
            out["labels"] = [label._dump() for label in self.labels]
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": _string(data, "name"),
            "version": _string(data, "version"),
            "labels": _list(data, "labels", Label._load),
        }

    @classmethod
    def _load(cls, data: Any):
        return cls(**cls._load_kwargs(_mapping(data, cls.__name__)))


@dataclass
class ElementMeta(ObjectMeta):
    """Object metadata with an extra identity."""

    extra_identity: Identity | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.extra_identity is not None:
            pairs = " ".join(f"{k}:{v}" for k, v in sorted(self.extra_identity.items()))
            base += f"+extraIdentity(map[{pairs}])"
        return base

    def to_identity(self) -> Identity:
        """Return the extra identity together with name and version."""
        identity = Identity(self.extra_identity or {})
        identity[IDENTITY_ATTRIBUTE_NAME] = self.name
        identity[IDENTITY_ATTRIBUTE_VERSION] = self.version
        return identity

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        if self.extra_identity:
            out["extraIdentity"] = dict(self.extra_identity)
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        extra = _string_map(data, "extraIdentity")
        kwargs["extra_identity"] = None if extra is None else Identity(extra)
        return kwargs


@dataclass
class ComponentMeta(ObjectMeta):
    """Component identity metadata with an optional creation time."""

    creation_time: str = ""

    def to_identity(self) -> Identity:
        """Return the identity made of name and version."""
        return Identity({IDENTITY_ATTRIBUTE_NAME: self.name, IDENTITY_ATTRIBUTE_VERSION: self.version})

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        if self.creation_time:
            out["creationTime"] = self.creation_time
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        kwargs["creation_time"] = _string(data, "creationTime")
        return kwargs


@dataclass
class SourceRef:
    """A reference to sources by identity selector and labels."""

    identity_selector: dict[str, str] = field(default_factory=dict)
    labels: list[Label] = field(default_factory=list)

    def _dump(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.identity_selector:
            out["identitySelector"] = dict(self.identity_selector)
        if self.labels:
            out["labels"] = [label._dump() for label in self.labels]
        return out

    @classmethod
    def _load(cls, data: Any) -> SourceRef:
        d = _mapping(data, "source reference")
        return cls(
            identity_selector=_string_map(d, "identitySelector") or {},
            labels=_list(d, "labels", Label._load),
        )


@dataclass(frozen=True)
class Timestamp(Time):
    """A time rounded to whole seconds."""

    def to_json(self) -> bytes:
        """Encode as an RFC 3339 string in the time's own zone."""
        return f'"{_format_rfc3339(self.value)}"'.encode("ascii")

    @classmethod
    def from_json(cls, data: bytes | str) -> Timestamp:
        """Decode an RFC 3339 string into UTC, rounded to the second; null gives the zero time."""
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        if text == "null":
            return cls()
        value = Time.from_json(text).value.astimezone(timezone.utc)
        if value.microsecond >= 500_000:
            value += timedelta(seconds=1)
        return cls(value.replace(microsecond=0))


@dataclass
class Resource(ElementMeta):
    """A delivery artifact of a component."""

    source_refs: list[SourceRef] = field(default_factory=list)
    type: str = ""
    relation: ResourceRelation | str = ""
    access: Raw | None = None
    digest: Digest | None = None
    size: int = 0
    creation_time: Timestamp | None = None

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        if self.source_refs:
            out["sourceRefs"] = [ref._dump() for ref in self.source_refs]
        out["type"] = self.type
        out["relation"] = str(self.relation)
        out["access"] = _dump_raw(self.access)
        if self.digest is not None:
            out["digest"] = self.digest._dump()
        if self.size:
            out["size"] = self.size
        if self.creation_time is not None:
            out["creationTime"] = json.loads(self.creation_time.to_json())
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        created = data.get("creationTime")
        kwargs.update(
            source_refs=_list(data, "sourceRefs", SourceRef._load),
            type=_string(data, "type"),
            relation=_load_relation(data),
            access=_load_raw(data.get("access")),
            digest=None if data.get("digest") is None else Digest._load(data["digest"]),
            size=_integer(data, "size"),
            creation_time=None if created is None else Timestamp.from_json(json.dumps(created)),
        )
        return kwargs


@dataclass
class Source(ElementMeta):
    """An artifact from which resources were produced."""

    type: str = ""
    access: Raw | None = None

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        out["type"] = self.type
        out["access"] = _dump_raw(self.access)
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        kwargs.update(type=_string(data, "type"), access=_load_raw(data.get("access")))
        return kwargs


@dataclass
class Reference(ElementMeta):
    """A reference to another component version."""

    component: str = ""
    digest: Digest = field(default_factory=Digest)

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        out["componentName"] = self.component
        out["digest"] = self.digest._dump()
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        kwargs.update(component=_string(data, "componentName"), digest=Digest._load(data.get("digest")))
        return kwargs


@dataclass
class Component(ComponentMeta):
    """A named, versioned component with its resources, sources and references."""

    repository_contexts: list[Unstructured] = field(default_factory=list)
    provider: str = ""
    resources: list[Resource] = field(default_factory=list)
    sources: list[Source] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)

    def _dump(self) -> dict[str, Any]:
        out = super()._dump()
        if self.repository_contexts:
            out["repositoryContexts"] = [json.loads(ctx.to_json()) for ctx in self.repository_contexts]
        out["provider"] = self.provider
        if self.resources:
            out["resources"] = [resource._dump() for resource in self.resources]
        if self.sources:
            out["sources"] = [source._dump() for source in self.sources]
        if self.references:
            out["componentReferences"] = [ref._dump() for ref in self.references]
        return out

    @classmethod
    def _load_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        kwargs = super()._load_kwargs(data)
        kwargs.update(
            repository_contexts=_list(
                data, "repositoryContexts", lambda item: Unstructured.from_json(json.dumps(item))
            ),
            provider=_string(data, "provider"),
            resources=_list(data, "resources", Resource._load),
            sources=_list(data, "sources", Source._load),
            references=_list(data, "componentReferences", Reference._load),
        )
        return kwargs


@dataclass
class Descriptor:
    """A component descriptor: schema metadata, the component and its signatures."""

    meta: Meta = field(default_factory=Meta)
    component: Component = field(default_factory=Component)
    signatures: list[Signature] = field(default_factory=list)

    def __str__(self) -> str:
        base = str(self.component)
        if self.meta.version:
            base += f" (schema version {self.meta.version})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-shaped form of the descriptor."""
        out: dict[str, Any] = {"meta": self.meta._dump(), "component": self.component._dump()}
        if self.signatures:
            out["signatures"] = [signature._dump() for signature in self.signatures]
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Descriptor:
        """Build a descriptor from its JSON-shaped form; unknown keys are ignored."""
        d = _mapping(data, "descriptor")
        return cls(
            meta=Meta._load(d.get("meta")),
            component=Component._load(d.get("component")),
            signatures=_list(d, "signatures", Signature._load),
        )

    def to_json(self) -> bytes:
        """Encode as compact JSON."""
        text = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        for char, escaped in _HTML_ESCAPES.items():
            text = text.replace(char, escaped)
        return text.encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> Descriptor:
        """Decode a JSON document."""
        return cls.from_dict(json.loads(data))

    def to_yaml(self) -> bytes:
        """Encode as YAML with sorted keys."""
        return yaml.safe_dump(
            self.to_dict(),
            sort_keys=True,
            allow_unicode=True,
            default_flow_style=False,
            encoding="utf-8",
        )

    @classmethod
    def from_yaml(cls, data: bytes | str) -> Descriptor:
        """Decode a YAML document."""
        loaded = yaml.load(data, Loader=_YAMLLoader)
        return cls.from_dict(_json_compatible(loaded))


def new_exclude_from_signature_digest() -> Digest:
    """Return the digest marking content as excluded from the signature."""
    return Digest(
        hash_algorithm=NO_DIGEST,
        normalisation_algorithm=EXCLUDE_FROM_SIGNATURE,
        value=NO_DIGEST,
    )