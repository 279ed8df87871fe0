"""Rewrite a responsive-image descriptor (``srcset``) onto a working shard."""

from __future__ import annotations

import re

from core.services.url_parser import parse_reference

# Host not followed by another host char: leaves "...org.evil.com" and "...network" alone.
SHARD_HOST_RE = re.compile(
    r"https?://[a-z]+\d{1,3}\.[a-z0-9\-]+\.(?:org|net|to)(?![a-z0-9.\-])",
    re.IGNORECASE,
)


def rewrite_descriptor(descriptor: str | None, resolved_url: str) -> str | None:
    """Point every shard host in `descriptor` at the host of `resolved_url`.

    Paths and size hints of each entry are kept. Returns None when there is
    nothing to rewrite or `resolved_url` is not a shard URL.
    """

    if not descriptor:
        return None

    parsed = parse_reference(resolved_url)
    if parsed is None:
        return None

    new_base = f"https://{parsed.base}"
    return SHARD_HOST_RE.sub(lambda _match: new_base, descriptor)
