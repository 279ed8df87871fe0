"""Exportación JSON de resoluciones.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines.
- Deja constancia de qué candidatos se probaron y por qué fallaron.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from core.domain.models import ResolutionResult


def results_payload(results: Iterable[ResolutionResult]) -> list[dict]:
    return [r.model_dump(mode="json") for r in results]


def export_results_json(*, results: Iterable[ResolutionResult], output_path: Path) -> Path:
    """Exporta resultados a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"results": results_payload(results)}
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
