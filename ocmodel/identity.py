"""Identities: string maps that uniquely identify resources, and their matching."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import SplitResult, unquote, urlsplit

from ocmodel.types import Type, type_from_string

IDENTITY_ATTRIBUTE_TYPE = "type"
IDENTITY_ATTRIBUTE_HOSTNAME = "hostname"
IDENTITY_ATTRIBUTE_SCHEME = "scheme"
IDENTITY_ATTRIBUTE_PATH = "path"
IDENTITY_ATTRIBUTE_PORT = "port"

_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = (1 << 64) - 1


class Identity(dict):
    """A set of string attributes that identifies an object."""

    def clone(self) -> Identity:
        """Return a copy of the identity."""
        return Identity(self)

    def canonical_hash_v1(self) -> int:
        """Return a stable 64-bit FNV-1 hash over the attributes in key order."""
        h = _FNV64_OFFSET
        for key in sorted(self):
            for byte in (key + self[key]).encode("utf-8"):
                h = (h * _FNV64_PRIME) & _MASK64
                h ^= byte
        return h

    def parse_type(self) -> Type:
        """Parse the ``type`` attribute; raise ValueError if missing or invalid."""
        if IDENTITY_ATTRIBUTE_TYPE not in self:
            raise ValueError(f"missing identity attribute {IDENTITY_ATTRIBUTE_TYPE!r}")
        value = self[IDENTITY_ATTRIBUTE_TYPE]
        try:
            return type_from_string(value)
        except ValueError as exc:
            raise ValueError(f"invalid identity type {value!r}: {exc}") from exc

    def get_type(self) -> Type:
        """Return the parsed type; for use where the type is known to be valid."""
        return self.parse_type()

    def match(self, other: Identity, *args: Callable[[Identity, Identity], bool]) -> bool:
        """Return True if any matcher accepts the pair.

        Without matchers, path matching followed by equality is used. The
        matchers work on copies and may remove attributes from them.
        """
        if not args:
            return self.match(other, match_all(identity_matches_path, identity_equal))
        mine, theirs = Identity(self), Identity(other)
        return any(matcher(mine, theirs) for matcher in args)


@dataclass
class AndMatcher:
    """A matcher that accepts only if all of its matchers accept."""

    matchers: tuple[Callable[[Identity, Identity], bool], ...] = ()

    def __call__(self, a: Identity, b: Identity) -> bool:
        return all(matcher(a, b) for matcher in self.matchers)


def match_all(*args: Callable[[Identity, Identity], bool]) -> AndMatcher:
    """Combine matchers so that all of them must accept."""
    return AndMatcher(tuple(args))


def identity_matches_path(a: Identity, b: Identity) -> bool:
    """Match the path of ``a`` against the glob pattern in the path of ``b``.

    The path attribute is removed from both identities.
    """
    a_has = IDENTITY_ATTRIBUTE_PATH in a
    a_path = a.pop(IDENTITY_ATTRIBUTE_PATH, "")
    b_has = IDENTITY_ATTRIBUTE_PATH in b
    b_path = b.pop(IDENTITY_ATTRIBUTE_PATH, "")
    if (not a_has and not b_has) or (a_path == "" and b_path == "") or b_path == "":
        return True
    try:
        return _path_match(b_path, a_path)
    except ValueError:
        return False


def identity_equal(a: Identity, b: Identity) -> bool:
    """Compare two identities for equality, then clear both."""
    try:
        return dict(a) == dict(b)
    finally:
        a.clear()
        b.clear()


def _class_char(pattern: str, pos: int) -> tuple[str, int]:
    if pos >= len(pattern) or pattern[pos] in "-]":
        raise ValueError("syntax error in pattern")
    if pattern[pos] == "\\":
        pos += 1
        if pos >= len(pattern):
            raise ValueError("syntax error in pattern")
    return pattern[pos], pos + 1


def _glob_to_regex(pattern: str) -> str:
    out: list[str] = []
    pos = 0
    end = len(pattern)
    while pos < end:
        ch = pattern[pos]
        pos += 1
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "\\":
            if pos >= end:
                raise ValueError("syntax error in pattern")
            out.append(re.escape(pattern[pos]))
            pos += 1
        elif ch == "[":
            negate = pos < end and pattern[pos] == "^"
            if negate:
                pos += 1
            ranges: list[str] = []
            count = 0
            while True:
                if pos < end and pattern[pos] == "]" and count > 0:
                    pos += 1
                    break
                lo, pos = _class_char(pattern, pos)
                hi = lo
                if pos < end and pattern[pos] == "-":
                    hi, pos = _class_char(pattern, pos + 1)
                count += 1
                if lo <= hi:
                    ranges.append(f"{re.escape(lo)}-{re.escape(hi)}")
            body = "".join(ranges)
            if body:
                out.append(f"[{'^' if negate else ''}{body}]")
            else:
                out.append("[\\s\\S]" if negate else "(?!)")
        else:
            out.append(re.escape(ch))
    return "".join(out)


def _path_match(pattern: str, name: str) -> bool:
    """Shell-style path matching where ``*`` and ``?`` do not cross ``/``."""
    return re.fullmatch(_glob_to_regex(pattern), name, re.DOTALL) is not None


def _split_host_port(netloc: str) -> tuple[str, str]:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        close = host.find("]")
        if close < 0:
            raise ValueError("missing ']' in host")
        hostname, rest = host[1:close], host[close + 1:]
        if rest and not rest.startswith(":"):
            raise ValueError(f"invalid port {rest!r} after host")
        port = rest[1:]
    elif ":" in host:
        hostname, _, port = host.rpartition(":")
    else:
        hostname, port = host, ""
    if port and not (port.isascii() and port.isdigit()):
        raise ValueError(f"invalid port {':' + port!r} after host")
    return hostname, port


def parse_url_allow_no_scheme(url: str) -> SplitResult:
    """Parse a URL, accepting input without a scheme; the scheme is then empty."""
    dummy_scheme = "dummy"
    if "://" not in url:
        url = f"{dummy_scheme}://{url}"
    parsed = urlsplit(url)
    _split_host_port(parsed.netloc)
    if parsed.scheme == dummy_scheme:
        parsed = parsed._replace(scheme="")
    return parsed


def parse_url_to_identity(url: str) -> Identity:
    """Build an identity from the scheme, port, hostname and path of a URL."""
    parsed = parse_url_allow_no_scheme(url)
    hostname, port = _split_host_port(parsed.netloc)
    identity = Identity()
    if parsed.scheme:
        identity[IDENTITY_ATTRIBUTE_SCHEME] = parsed.scheme
    if port:
        identity[IDENTITY_ATTRIBUTE_PORT] = port
    if hostname:
        identity[IDENTITY_ATTRIBUTE_HOSTNAME] = hostname
    path = unquote(parsed.path)
    if path:
        identity[IDENTITY_ATTRIBUTE_PATH] = path.removeprefix("/")
    return identity