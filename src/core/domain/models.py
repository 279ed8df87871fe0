"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los valores derivados de una URL (ParsedReference) son inmutables.

Nota:
- Estos modelos describen *qué* es una referencia y su resolución, no *cómo*
  se sondea un candidato.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class TopLevelDomain(str, Enum):
    """TLDs served by the shard naming scheme."""

    ORG = "org"
    NET = "net"
    TO = "to"

    @classmethod
    def from_label(cls, label: str) -> "TopLevelDomain | None":
        try:
            return cls(label.lower())
        except ValueError:
            return None


def format_shard(number: int) -> str:
    """Zero-pad a shard id to at least two digits (2 -> "02", 123 -> "123")."""

    return str(number).zfill(2)


class ParsedReference(BaseModel):
    """Structured view of a shard URL.

    Only built by the parser; an URL outside the naming scheme has no
    ParsedReference at all.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(
        ...,
        min_length=1,
        description="Letras antes del número de shard (normalizadas a minúsculas).",
    )
    shard_number: int = Field(
        ...,
        ge=0,
        le=999,
        description="Número de shard del subdominio.",
    )
    root_domain: str = Field(
        ...,
        min_length=1,
        description="Etiqueta registrable sin TLD (p.ej. 'mbdny').",
    )
    top_level_domain: TopLevelDomain = Field(
        ...,
        description="TLD del host.",
    )
    path: str = Field(
        default="",
        description="Path + query + fragment, tal cual venía en la URL.",
    )

    @property
    def base(self) -> str:
        """Host rebuilt from the fields, e.g. ``k02.mbdny.org``."""

        return (
            f"{self.prefix}{format_shard(self.shard_number)}"
            f".{self.root_domain}.{self.top_level_domain.value}"
        )

    def to_url(self, scheme: str = "https") -> str:
        return f"{scheme}://{self.base}{self.path}"


class ProbeFailureReason(str, Enum):
    EMPTY = "empty"
    ERROR = "error"
    TIMEOUT = "timeout"


class ProbeResult(BaseModel):
    """Outcome of a single probe. ``ok`` and ``reason`` are mutually exclusive."""

    url: str = Field(..., description="URL sondeada.")
    ok: bool = Field(default=False, description="La URL sirve una imagen utilizable.")
    reason: ProbeFailureReason | None = Field(
        default=None,
        description="Motivo del fallo (None si ok).",
    )
    width: int | None = Field(default=None, ge=0, description="Ancho decodificado (px).")
    status_code: int | None = Field(default=None, description="Status HTTP si hubo respuesta.")
    detail: str | None = Field(default=None, description="Detalle libre (excepción, etc.).")
    elapsed_seconds: float = Field(default=0.0, ge=0.0)

    @classmethod
    def success(cls, url: str, *, width: int, **extra: object) -> "ProbeResult":
        return cls(url=url, ok=True, width=width, **extra)

    @classmethod
    def failure(cls, url: str, reason: ProbeFailureReason, **extra: object) -> "ProbeResult":
        return cls(url=url, ok=False, reason=reason, **extra)


class ResolutionState(str, Enum):
    UNTRIED = "untried"
    PROBING = "probing"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


class ResolutionResult(BaseModel):
    """Report of one resolution attempt for a broken reference."""

    original_url: str
    parsed: bool = Field(
        default=False,
        description="La URL original pertenece al esquema de nombres de shards.",
    )
    state: ResolutionState = ResolutionState.UNTRIED
    resolved_url: str | None = None
    candidates: list[str] = Field(default_factory=list)
    attempts: list[ProbeResult] = Field(default_factory=list)

    @property
    def probe_count(self) -> int:
        return len(self.attempts)


class FixMarker(str, Enum):
    """Per-reference guard against duplicate resolutions."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass(eq=False)
class ImageReference:
    """A broken image reference handed over by the observation layer.

    Mutable on purpose: a successful fix rewrites ``current_url`` and
    ``descriptor`` in place. Equality is identity, so two tags with the same
    ``src`` keep separate markers.
    """

    current_url: str
    descriptor: str | None = None
    marker: FixMarker = FixMarker.NOT_STARTED
    label: str | None = None
