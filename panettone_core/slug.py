"""
Slugs e identificadores.

- `slugify` deriva el slug estable de una receta a partir de su nombre.
- `make_id` genera ids para recetas, masas, starters, ingredientes y pasos.
"""

from __future__ import annotations

import re
import uuid

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """
    "Panettone Classico 1kg" -> "panettone-classico-1kg".

    Solo se conservan [a-z0-9]; cualquier otra secuencia pasa a ser un guion,
    y se recortan los guiones de los extremos.
    """
    text = (value or "").lower().strip()
    text = _NON_ALNUM.sub("-", text)
    return text.strip("-")


def make_id() -> str:
    return str(uuid.uuid4())
