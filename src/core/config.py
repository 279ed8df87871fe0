"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El objeto es inmutable: generador, prober y resolver lo reciben inyectado,
  así los tests pueden bajar timeouts/caps sin tocar estado global.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FALLBACK_PREFIXES: tuple[str, ...] = ("n", "x", "t", "s", "w", "m", "c", "u", "k")
DEFAULT_FALLBACK_ROOTS: tuple[str, ...] = (
    "mbdny.org",
    "mbrtz.org",
    "bato.to",
    "mbwbm.org",
    "mbznp.org",
    "mbqgu.org",
)


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "shardfix"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "shardfix"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "shardfix"
    return Path.home() / ".config" / "shardfix"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# shardfix user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHARDFIX_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    probe_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout por probe de candidato (segundos).",
    )
    max_candidates: int = Field(
        default=30,
        ge=1,
        description="Máximo de candidatos generados por referencia rota.",
    )
    max_shard_number: int = Field(
        default=15,
        ge=0,
        le=999,
        description="Último número de shard barrido por la estrategia de incremento.",
    )
    min_image_width: int = Field(
        default=10,
        ge=0,
        description="Ancho (px) que una imagen debe superar para no ser un placeholder.",
    )
    max_image_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1,
        description="Tamaño máximo de cuerpo aceptado al sondear una imagen.",
    )
    fallback_prefixes: tuple[str, ...] = Field(
        default=DEFAULT_FALLBACK_PREFIXES,
        description="Prefijos de subdominio a probar (en orden).",
    )
    fallback_roots: tuple[str, ...] = Field(
        default=DEFAULT_FALLBACK_ROOTS,
        description="Pares dominio.tld a probar (en orden).",
    )
    user_agent: str = Field(
        default="shardfix/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para los probes.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("fallback_prefixes")
    @classmethod
    def _check_prefixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(p.strip().lower() for p in value)
        for prefix in cleaned:
            if not (prefix.isascii() and prefix.isalpha()):
                raise ValueError(f"invalid fallback prefix: {prefix!r}")
        return cleaned

    @field_validator("fallback_roots")
    @classmethod
    def _normalize_roots(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(r.strip().lower() for r in value if r.strip())
