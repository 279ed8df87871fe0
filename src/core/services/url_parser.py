"""Shard URL parser.

Accepted shape (case-insensitive scheme and host)::

    http(s)://<letters><1-3 digits>.<label>.<org|net|to><path>

Every rule lives in its own helper so the grammar can be tested piece by
piece. Anything outside the shape yields ``None``; there are no partial
results.
"""

from __future__ import annotations

import string

from core.domain.models import ParsedReference, TopLevelDomain

_SCHEMES = ("https://", "http://")
_LETTERS = frozenset(string.ascii_lowercase)
_DIGITS = frozenset(string.digits)
_LABEL_CHARS = _LETTERS | _DIGITS | {"-"}
_MAX_SHARD_DIGITS = 3


def strip_scheme(url: str) -> str | None:
    """Return what follows ``http://`` / ``https://``, or None."""

    lowered = url[:8].lower()
    for scheme in _SCHEMES:
        if lowered.startswith(scheme):
            return url[len(scheme):]
    return None


def split_authority(rest: str) -> tuple[str, str] | None:
    """Split ``host/path`` into ``(host, path)``.

    The path is empty or starts with ``/``; a query or fragment glued to the
    host (``host?x``) is not part of the grammar.
    """

    slash = rest.find("/")
    if slash == -1:
        host, path = rest, ""
    else:
        host, path = rest[:slash], rest[slash:]
    if any(ch in host for ch in "?#"):
        return None
    if "\n" in path or "\r" in path:
        return None
    return host, path


def split_subdomain(label: str) -> tuple[str, int] | None:
    """``k02`` -> ``("k", 2)``: letters followed by 1-3 digits, nothing else."""

    if not label.isascii():
        return None
    label = label.lower()
    i = 0
    while i < len(label) and label[i] in _LETTERS:
        i += 1
    prefix, digits = label[:i], label[i:]
    if not prefix:
        return None
    if not 1 <= len(digits) <= _MAX_SHARD_DIGITS:
        return None
    if not all(ch in _DIGITS for ch in digits):
        return None
    return prefix, int(digits)


def is_root_label(label: str) -> bool:
    return bool(label) and label.isascii() and all(ch in _LABEL_CHARS for ch in label.lower())


def parse_reference(url: str) -> ParsedReference | None:
    """Parse a shard URL into its fields, or return None if it does not fit."""

    if not isinstance(url, str):
        return None

    rest = strip_scheme(url)
    if rest is None:
        return None

    parts = split_authority(rest)
    if parts is None:
        return None
    host, path = parts

    labels = host.split(".")
    if len(labels) != 3:
        return None
    sub, root, tld_label = labels

    shard = split_subdomain(sub)
    if shard is None:
        return None
    if not is_root_label(root):
        return None
    tld = TopLevelDomain.from_label(tld_label)
    if tld is None:
        return None

    prefix, number = shard
    return ParsedReference(
        prefix=prefix,
        shard_number=number,
        root_domain=root.lower(),
        top_level_domain=tld,
        path=path,
    )
