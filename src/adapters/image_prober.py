"""Prober HTTP de imágenes.

Implementa `core.interfaces.prober.ReachabilityProber`:
- GET sin Referer (ver `adapters.http_client`).
- Decodifica el cuerpo con Pillow y compara el ancho contra `min_image_width`.
- Cada probe corre dentro de `asyncio.wait_for`: si vence el timeout la tarea
  de carga se cancela (httpx cierra la conexión) y su resultado se descarta.
"""

from __future__ import annotations

import asyncio
import io
import logging
import time

import httpx
from PIL import Image

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import ProbeFailureReason, ProbeResult
from core.interfaces.prober import ReachabilityProber

logger = logging.getLogger(__name__)


class ImageTooLarge(Exception):
    pass


def decode_image_width(data: bytes) -> int:
    """Ancho en px de una imagen codificada. Propaga el error de Pillow si no decodifica."""

    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.width


class HttpImageProber(ReachabilityProber):
    """Sondea una URL como recurso de imagen, con timeout duro por probe."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client

    async def probe(self, url: str) -> ProbeResult:
        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                self._load(url),
                timeout=self._settings.probe_timeout_seconds,
            )
        except asyncio.TimeoutError:
            result = ProbeResult.failure(
                url,
                ProbeFailureReason.TIMEOUT,
                detail=f"no response within {self._settings.probe_timeout_seconds}s",
            )
        result.elapsed_seconds = time.perf_counter() - started
        logger.debug(
            "probe %s -> %s",
            url,
            "ok" if result.ok else result.reason.value,
            extra={"url": url, "reason": None if result.ok else result.reason.value},
        )
        return result

    async def _load(self, url: str) -> ProbeResult:
        if self._client is not None:
            return await self._fetch(self._client, url)
        async with build_async_client(self._settings) as client:
            return await self._fetch(client, url)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> ProbeResult:
        try:
            body, status = await self._read_body(client, url)
        except httpx.TimeoutException as exc:
            return ProbeResult.failure(url, ProbeFailureReason.TIMEOUT, detail=str(exc) or "timeout")
        except httpx.HTTPError as exc:
            return ProbeResult.failure(
                url,
                ProbeFailureReason.ERROR,
                detail=str(exc) or exc.__class__.__name__,
            )
        except ImageTooLarge as exc:
            return ProbeResult.failure(url, ProbeFailureReason.ERROR, detail=str(exc))

        if status >= 400:
            return ProbeResult.failure(
                url,
                ProbeFailureReason.ERROR,
                status_code=status,
                detail=f"HTTP {status}",
            )

        try:
            width = decode_image_width(body)
        except Exception as exc:
            # Pillow plugins also raise SyntaxError on corrupt chunks.
            return ProbeResult.failure(
                url,
                ProbeFailureReason.ERROR,
                status_code=status,
                detail=f"undecodable image: {exc}",
            )

        if width > self._settings.min_image_width:
            return ProbeResult.success(url, width=width, status_code=status)
        return ProbeResult.failure(
            url,
            ProbeFailureReason.EMPTY,
            width=width,
            status_code=status,
            detail=f"placeholder image ({width}px wide)",
        )

    async def _read_body(self, client: httpx.AsyncClient, url: str) -> tuple[bytes, int]:
        limit = self._settings.max_image_bytes
        async with client.stream("GET", url) as response:
            if response.status_code >= 400:
                return b"", response.status_code
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) > limit:
                    raise ImageTooLarge(f"body exceeds {limit} bytes")
            return bytes(body), response.status_code
