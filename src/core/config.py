"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el transporte (httpx) y el renderer lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "reqline"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "reqline"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "reqline"
    return Path.home() / ".config" / "reqline"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.

    Los flags de la CLI tienen prioridad sobre estos valores.
    """

    model_config = SettingsConfigDict(
        env_prefix="REQLINE_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="reqline/0.1",
        min_length=1,
        description="User-Agent por defecto.",
    )
    default_accept: str = Field(
        default="application/json, */*;q=0.5",
        min_length=1,
        description="Header Accept por defecto.",
    )
    default_scheme: Literal["http", "https"] = Field(
        default="http",
        description="Esquema que se antepone a URLs sin `scheme://`.",
    )
    follow_redirects: bool = Field(
        default=False,
        description="Seguir redirecciones 30x.",
    )
    max_redirects: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Máximo de redirecciones cuando se siguen.",
    )

    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentación para cuerpos JSON formateados.",
    )
    syntax_theme: str = Field(
        default="monokai",
        min_length=1,
        description="Tema de Pygments para resaltar JSON (vía rich).",
    )
