"""Mirror resolution.

One resolution per broken reference:

    untried -> probing -> resolved(url) | exhausted

Candidates are probed strictly one after another; the next probe starts only
once the previous one has settled, so a resolution never has more than one
request in flight. Different references resolve independently.

The per-reference `FixMarker` is claimed synchronously, before the first
await, so two triggers for the same reference cannot both start probing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from core.config import AppSettings
from core.domain.models import (
    FixMarker,
    ImageReference,
    ResolutionResult,
    ResolutionState,
)
from core.interfaces.prober import ReachabilityProber
from core.services.candidates import generate_candidates
from core.services.descriptor_rewriter import rewrite_descriptor
from core.services.url_parser import parse_reference

logger = logging.getLogger(__name__)


class MirrorResolver:
    """Finds a working mirror for shard-hosted image URLs."""

    def __init__(self, prober: ReachabilityProber, settings: AppSettings | None = None) -> None:
        self._prober = prober
        self._settings = settings or AppSettings()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def resolve_url(self, url: str) -> ResolutionResult:
        """Probe the candidates of `url` in order and stop at the first success.

        An URL outside the naming scheme ends `exhausted` without a single
        probe. Failures never raise.
        """

        result = ResolutionResult(original_url=url)

        parsed = parse_reference(url)
        if parsed is None:
            logger.debug("not a shard url, skipping: %s", url, extra={"url": url})
            result.state = ResolutionState.EXHAUSTED
            return result

        result.parsed = True
        result.candidates = generate_candidates(parsed, self._settings)
        result.state = ResolutionState.PROBING

        for attempt, candidate in enumerate(result.candidates, start=1):
            outcome = await self._prober.probe(candidate)
            result.attempts.append(outcome)
            if outcome.ok:
                result.state = ResolutionState.RESOLVED
                result.resolved_url = candidate
                logger.info(
                    "resolved %s -> %s (attempt %d/%d)",
                    url,
                    candidate,
                    attempt,
                    len(result.candidates),
                    extra={"url": url, "attempt": attempt},
                )
                return result

        result.state = ResolutionState.EXHAUSTED
        logger.debug(
            "exhausted %d candidates for %s",
            len(result.candidates),
            url,
            extra={"url": url},
        )
        return result

    def claim(self, reference: ImageReference) -> bool:
        """Check-and-set the marker. False if a resolution already started or finished."""

        if reference.marker is not FixMarker.NOT_STARTED:
            return False
        reference.marker = FixMarker.IN_PROGRESS
        return True

    def release(self, reference: ImageReference) -> bool:
        """Allow a retry after the reference changed externally. Never undoes `done`.

        Hook for observation layers that watch references change over time
        (a re-rendered page, an edited `src`); one-shot documents never call it.
        """

        if reference.marker is FixMarker.DONE:
            return False
        reference.marker = FixMarker.NOT_STARTED
        return True

    async def fix(self, reference: ImageReference) -> ResolutionResult | None:
        """Resolve `reference` and apply the result in place.

        Returns None (and probes nothing) when the reference was already
        claimed. On exhaustion the reference is left untouched and its marker
        stays `in_progress` until the caller releases it.
        """

        if not self.claim(reference):
            logger.debug(
                "already %s, skipping: %s",
                reference.marker.value,
                reference.current_url,
                extra={"url": reference.current_url},
            )
            return None

        result = await self.resolve_url(reference.current_url)
        if result.state is ResolutionState.RESOLVED and result.resolved_url:
            apply_resolution(reference, result.resolved_url)
        return result

    async def fix_all(
        self,
        references: Iterable[ImageReference],
    ) -> list[ResolutionResult | None]:
        """Fix many references concurrently; one failing never affects the others."""

        async def safe_fix(reference: ImageReference) -> ResolutionResult | None:
            try:
                return await self.fix(reference)
            except Exception:
                logger.exception(
                    "resolution crashed for %s",
                    reference.current_url,
                    extra={"url": reference.current_url},
                )
                return None

        return list(await asyncio.gather(*(safe_fix(r) for r in references)))


def apply_resolution(reference: ImageReference, resolved_url: str) -> None:
    """Commit a confirmed mirror onto the reference and mark it done."""

    if reference.descriptor:
        rewritten = rewrite_descriptor(reference.descriptor, resolved_url)
        if rewritten is not None:
            reference.descriptor = rewritten
    reference.current_url = resolved_url
    reference.marker = FixMarker.DONE
