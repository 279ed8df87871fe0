"""Reparación de imágenes rotas en documentos HTML.

Hace de "capa de observación" para documentos estáticos:
- Recoge cada `<img>` con `src` http(s) (y su `srcset`).
- Una imagen está rota si su URL actual no carga (error/timeout). Un
  placeholder diminuto sí cargó, así que no cuenta como roto.
- Las rotas se pasan al `MirrorResolver`; las reparadas se reescriben en el
  HTML con `referrerpolicy="no-referrer"`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import Tag

from core.config import AppSettings
from core.domain.models import (
    FixMarker,
    ImageReference,
    ProbeFailureReason,
    ResolutionResult,
)
from core.interfaces.prober import ReachabilityProber
from core.services.resolver import MirrorResolver
from core.services.url_parser import parse_reference

logger = logging.getLogger(__name__)

_BROKEN_REASONS = (ProbeFailureReason.ERROR, ProbeFailureReason.TIMEOUT)


@dataclass
class DocumentRepair:
    """Output of `repair_html`."""

    html: str
    references: list[ImageReference] = field(default_factory=list)
    broken: list[ImageReference] = field(default_factory=list)
    results: list[ResolutionResult] = field(default_factory=list)

    @property
    def fixed(self) -> list[ImageReference]:
        return [r for r in self.broken if r.marker is FixMarker.DONE]


def _attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _collect(soup: BeautifulSoup) -> list[tuple[Tag, ImageReference]]:
    out: list[tuple[Tag, ImageReference]] = []
    for index, tag in enumerate(soup.find_all("img")):
        src = _attr(tag, "src")
        if not src or not src.lower().startswith(("http://", "https://")):
            continue
        reference = ImageReference(
            current_url=src,
            descriptor=_attr(tag, "srcset"),
            label=_attr(tag, "alt") or f"img#{index}",
        )
        out.append((tag, reference))
    return out


def collect_references(html: str) -> list[ImageReference]:
    return [ref for _, ref in _collect(BeautifulSoup(html, "html.parser"))]


async def find_broken(
    references: list[ImageReference],
    prober: ReachabilityProber,
) -> list[ImageReference]:
    """References on a shard host whose current URL fails to load.

    A check that raises is logged and the reference is left alone.
    """

    async def is_broken(reference: ImageReference) -> bool:
        try:
            outcome = await prober.probe(reference.current_url)
        except Exception:
            logger.exception(
                "check crashed for %s",
                reference.current_url,
                extra={"url": reference.current_url},
            )
            return False
        return not outcome.ok and outcome.reason in _BROKEN_REASONS

    shard_refs = [r for r in references if parse_reference(r.current_url) is not None]
    flags = await asyncio.gather(*(is_broken(r) for r in shard_refs))
    return [ref for ref, broken in zip(shard_refs, flags) if broken]


async def repair_html(
    html: str,
    *,
    prober: ReachabilityProber,
    settings: AppSettings | None = None,
) -> DocumentRepair:
    settings = settings or AppSettings()
    soup = BeautifulSoup(html, "html.parser")
    slots = _collect(soup)
    references = [ref for _, ref in slots]

    broken = await find_broken(references, prober)
    resolver = MirrorResolver(prober, settings)
    outcomes = await resolver.fix_all(broken)

    for tag, ref in slots:
        if ref.marker is not FixMarker.DONE:
            continue
        tag["src"] = ref.current_url
        if ref.descriptor and tag.has_attr("srcset"):
            tag["srcset"] = ref.descriptor
        tag["referrerpolicy"] = "no-referrer"

    return DocumentRepair(
        html=str(soup),
        references=references,
        broken=broken,
        results=[r for r in outcomes if r is not None],
    )
