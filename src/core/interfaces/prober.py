"""Contrato del prober de alcanzabilidad.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El resolver depende de esta abstracción; el prober HTTP real vive en
  adapters y los tests usan probers simulados.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ProbeResult


@runtime_checkable
class ReachabilityProber(Protocol):
    """Contrato mínimo para sondear una URL de imagen.

    Reglas de diseño:
    - `probe` es asíncrono porque hace I/O (HTTP).
    - Devuelve exactamente un `ProbeResult` por llamada; los fallos esperados
      (empty/error/timeout) son valores, no excepciones.
    """

    async def probe(self, url: str) -> ProbeResult:
        """Sondea `url` y devuelve el resultado normalizado."""

        ...
