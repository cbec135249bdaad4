"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/PDF/cursor) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import LogoConfig, parse_pixels
from core.domain.report_format import ReportFormat


_ASSETS_DIR = Path(__file__).resolve().parents[1] / "adapters" / "assets"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "payout-reports"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "payout-reports"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "payout-reports"
    return Path.home() / ".config" / "payout-reports"


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

    lines = ["# payout-reports user config (.env)"]
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
        env_prefix="PAYOUT_REPORTS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        description="Secret key del ledger (Stripe). Se envía como Bearer token.",
    )
    api_base_url: str = Field(
        default="https://api.stripe.com",
        min_length=8,
        description="Base URL de la API del ledger.",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="payout-reports/0.1",
        min_length=1,
        description="User-Agent para peticiones a la API.",
    )

    output_dir: Path = Field(
        default=Path("payout_reports"),
        description="Directorio donde se escriben los reportes.",
    )
    log_dir: Path = Field(
        default=Path("logs"),
        description="Directorio para logs de exportación cuando no se pasa --log.",
    )
    default_format: ReportFormat = Field(
        default=ReportFormat.HTML,
        description="Formato por defecto de `export` (html/pdf/json).",
    )
    lastid_file: Path = Field(
        default=Path("lastid"),
        description="Fichero de cursor de continuación (ID más reciente primero).",
    )

    logo_url: str = Field(
        default="",
        description="URL del logo para reportes HTML/JSON (vacío = sin logo).",
    )
    logo_width: int | None = Field(
        default=None,
        description="Ancho del logo; acepta '150px'.",
    )
    logo_height: int | None = Field(
        default=None,
        description="Alto del logo; acepta '40px'.",
    )
    pdf_logo_path: Path = Field(
        default=_ASSETS_DIR / "logo.png",
        description="Asset local que se embebe como logo en los PDF.",
    )

    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Elementos por página al paginar la API (máximo de la API: 100).",
    )
    max_pages: int = Field(
        default=100,
        ge=1,
        description="Techo de páginas por colección; al alcanzarlo se avisa y se corta.",
    )

    @field_validator("default_format", mode="before")
    @classmethod
    def _parse_format(cls, value: object) -> object:
        if isinstance(value, str):
            return ReportFormat.parse(value)
        return value

    @field_validator("logo_width", "logo_height", mode="before")
    @classmethod
    def _parse_logo_size(cls, value: object) -> int | None:
        return parse_pixels(value)

    def logo(self) -> LogoConfig:
        """Logo configurado tal cual (lo que recibe el reporte HTML/JSON)."""

        return LogoConfig(url=self.logo_url, width=self.logo_width, height=self.logo_height)
