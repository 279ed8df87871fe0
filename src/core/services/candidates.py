"""Mirror candidate generation.

Three strategies, always in this order, each walking its configuration in
declaration order:

A. prefix swap  (k02.mbdny.org -> n02.mbdny.org)
B. root swap    (k02.mbdny.org -> k02.mbrtz.org)
C. shard sweep  (k02.mbdny.org -> k00 .. k15, skipping k02)

The resulting order is the probe priority, so generation must stay
deterministic.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator

from core.config import AppSettings
from core.domain.models import ParsedReference, TopLevelDomain, format_shard


class CandidateStrategy(str, Enum):
    PREFIX = "prefix"
    ROOT = "root"
    SHARD = "shard"


def build_candidate_url(prefix: str, shard: int, root: str, tld: str, path: str) -> str:
    return f"https://{prefix}{format_shard(shard)}.{root}.{tld}{path}"


def split_root_entry(entry: str) -> tuple[str, TopLevelDomain] | None:
    """``"mbrtz.org"`` -> ``("mbrtz", TopLevelDomain.ORG)``; None if malformed."""

    parts = entry.split(".")
    if len(parts) != 2 or not parts[0]:
        return None
    tld = TopLevelDomain.from_label(parts[1])
    if tld is None:
        return None
    return parts[0], tld


def _prefix_swaps(parsed: ParsedReference, settings: AppSettings) -> Iterator[str]:
    for letter in settings.fallback_prefixes:
        if letter != parsed.prefix:
            yield build_candidate_url(
                letter,
                parsed.shard_number,
                parsed.root_domain,
                parsed.top_level_domain.value,
                parsed.path,
            )


def _root_swaps(parsed: ParsedReference, settings: AppSettings) -> Iterator[str]:
    for entry in settings.fallback_roots:
        split = split_root_entry(entry)
        if split is None:
            continue
        root, tld = split
        if root != parsed.root_domain:
            yield build_candidate_url(
                parsed.prefix,
                parsed.shard_number,
                root,
                tld.value,
                parsed.path,
            )


def _shard_sweep(parsed: ParsedReference, settings: AppSettings) -> Iterator[str]:
    for number in range(settings.max_shard_number + 1):
        if number != parsed.shard_number:
            yield build_candidate_url(
                parsed.prefix,
                number,
                parsed.root_domain,
                parsed.top_level_domain.value,
                parsed.path,
            )


_STRATEGIES = (
    (CandidateStrategy.PREFIX, _prefix_swaps),
    (CandidateStrategy.ROOT, _root_swaps),
    (CandidateStrategy.SHARD, _shard_sweep),
)


def generate_tagged_candidates(
    parsed: ParsedReference,
    settings: AppSettings | None = None,
) -> list[tuple[str, CandidateStrategy]]:
    """Same as `generate_candidates`, keeping the strategy that produced each URL."""

    settings = settings or AppSettings()

    seen: set[str] = set()
    out: list[tuple[str, CandidateStrategy]] = []
    for strategy, produce in _STRATEGIES:
        for url in produce(parsed, settings):
            if url in seen:
                continue
            seen.add(url)
            out.append((url, strategy))
    return out[: settings.max_candidates]


def generate_candidates(parsed: ParsedReference, settings: AppSettings | None = None) -> list[str]:
    """Ordered, deduplicated, capped list of mirror URLs for `parsed`."""

    return [url for url, _ in generate_tagged_candidates(parsed, settings)]
