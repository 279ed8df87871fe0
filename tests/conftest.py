"""
Shared fixtures for shardfix tests.

Provides isolated settings (no .env files), in-memory images built with
Pillow and a scripted prober that records probe start/end order.
"""

from __future__ import annotations

import asyncio
import io
import logging

import pytest
from PIL import Image

from core.config import AppSettings
from core.domain.models import ProbeFailureReason, ProbeResult


def make_settings(**overrides) -> AppSettings:
    """AppSettings that ignores .env files on the machine running the tests."""
    return AppSettings(_env_file=None, **overrides)


def image_bytes(width: int, height: int = 20, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


def corrupt_png(width: int = 200) -> bytes:
    """Valid header, IDAT cut in half, then a chunk with a non-ASCII type."""
    data = image_bytes(width)
    start = data.index(b"IDAT") - 4
    length = int.from_bytes(data[start:start + 4], "big")
    half = length // 2
    idat = half.to_bytes(4, "big") + b"IDAT" + data[start + 8:start + 8 + half] + b"\x00" * 4
    return data[:start] + idat + b"\x00\x00\x00\x10\x01\x02\x03\x04" + b"\x00" * 20


class ScriptedProber:
    """Simulated prober: URLs in `succeed` load, everything else fails."""

    def __init__(
        self,
        succeed=(),
        *,
        delay: float = 0.0,
        reasons: dict[str, ProbeFailureReason] | None = None,
    ) -> None:
        self.succeed = set(succeed)
        self.delay = delay
        self.reasons = reasons or {}
        self.calls: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def probe(self, url: str) -> ProbeResult:
        self.calls.append(url)
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
            self.events.append(("end", url))
        if url in self.succeed:
            return ProbeResult.success(url, width=120)
        return ProbeResult.failure(url, self.reasons.get(url, ProbeFailureReason.ERROR))


class CrashingProber(ScriptedProber):
    """Raises for any URL containing "crash"."""

    async def probe(self, url: str) -> ProbeResult:
        if "crash" in url:
            raise RuntimeError("boom")
        return await super().probe(url)


@pytest.fixture
def settings() -> AppSettings:
    """Default settings, isolated from local .env files."""
    return make_settings()


@pytest.fixture
def fast_settings() -> AppSettings:
    """Short probe timeout for timeout tests."""
    return make_settings(probe_timeout_seconds=0.05)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI commands call setup_logging(); keep its handlers out of other tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
