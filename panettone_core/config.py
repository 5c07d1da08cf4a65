# panettone_core/config.py
from dataclasses import dataclass
from functools import lru_cache
import logging
import os

from dotenv import load_dotenv

"""
panettone_core.config
=====================

Gestión centralizada de configuración del core de recetas.

Este módulo define:
- La estructura de configuración (`Settings`)
- El mecanismo para cargar variables desde entorno (.env)
- Un acceso único y cacheado a la configuración (`get_settings`)
- La configuración de logging (`setup_logging`)

Convenciones
------------
- Las variables de entorno se cargan desde un archivo `.env` si existe.
- Los defaults están pensados para desarrollo local.
- Un valor numérico mal formado en el entorno NO rompe la app: se usa el default.
"""

# Cargar variables de entorno desde .env (si existe)
load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    """
    Contenedor tipado de configuración global.

    Attributes
    ----------
    database_url:
        URL SQLAlchemy donde se persiste la colección de recetas.
    log_level:
        Nivel de logging ("DEBUG", "INFO", ...).
    default_dough_per_piece_g:
        Peso de masa por pieza con el que nace una receta nueva.
    default_category:
        Categoría con la que nace una receta nueva.
    """

    database_url: str = "sqlite:///data/panettone_core.sqlite"
    log_level: str = "INFO"
    default_dough_per_piece_g: float = 1100
    default_category: str = "Panettone"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


@lru_cache
def get_settings() -> Settings:
    """
    Devuelve una instancia única y cacheada de `Settings`.

    Variables de entorno utilizadas
    -------------------------------
    - DATABASE_URL (default: "sqlite:///data/panettone_core.sqlite")
    - LOG_LEVEL (default: "INFO")
    - DEFAULT_DOUGH_PER_PIECE_G (default: 1100)
    - DEFAULT_CATEGORY (default: "Panettone")

    Notas
    -----
    En tests, llamar `get_settings.cache_clear()` después de tocar el entorno.
    """
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/panettone_core.sqlite"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_dough_per_piece_g=_env_float("DEFAULT_DOUGH_PER_PIECE_G", 1100),
        default_category=os.getenv("DEFAULT_CATEGORY", "Panettone"),
    )


def setup_logging(level: str | None = None) -> int:
    """
    Configura el logging raíz con el formato estándar del proyecto.

    Parameters
    ----------
    level:
        Nivel explícito. Si es None se usa `Settings.log_level`.

    Returns
    -------
    int
        Nivel numérico efectivamente aplicado.
    """
    name = (level or get_settings().log_level or "INFO").upper()
    log_level = getattr(logging, name, logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(log_level)
    return log_level
