"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y la política "no-referrer" de los probes.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

IMAGE_ACCEPT = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"


async def _strip_referer(request: httpx.Request) -> None:
    # Equivalente a `referrerPolicy = "no-referrer"`: nunca enviar Referer.
    request.headers.pop("Referer", None)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` para sondear imágenes.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los probes se comporten igual.
    - El timeout de httpx es solo un techo; el límite real por probe lo
      impone el prober con `asyncio.wait_for`.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": IMAGE_ACCEPT,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.probe_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
        event_hooks={"request": [_strip_referer]},
    )
