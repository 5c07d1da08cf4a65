"""
Perfiles de render (presentación) para la lista de compras escalada.

Controlan *qué* secciones se muestran de un mismo `ScalingResult` y con qué
títulos, según el uso (compra rápida vs. hoja de producción completa).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal

# Modo general (uso del documento)
Mode = Literal["simple", "detallado"]


@dataclass(frozen=True)
class ShoppingListProfile:
    """
    Define un perfil de render.

    Attributes
    ----------
    id:
        Identificador estable del perfil (útil para logging y tests).
    mode:
        "simple" | "detallado".
    label:
        Etiqueta humana del perfil.
    show:
        Claves de secciones a renderizar. Soportadas por
        `ShoppingListRenderer.render_markdown`: "summary", "totals", "doughs",
        "bakers", "procedure".
    titles:
        Clave de sección -> título en el documento.
    """

    id: str
    mode: Mode
    label: str
    show: List[str]
    titles: Dict[str, str]


# ============================================================
# Perfiles predefinidos (V1)
# ============================================================

SIMPLE_V1 = ShoppingListProfile(
    id="simple_v1",
    mode="simple",
    label="Simple (shopping list)",
    show=[
        "summary",
        "totals",
    ],
    titles={
        "summary": "Batch",
        "totals": "Shopping list",
    },
)

DETALLADO_V1 = ShoppingListProfile(
    id="detallado_v1",
    mode="detallado",
    label="Detailed (production sheet)",
    show=[
        "summary",
        "totals",
        "doughs",
        "bakers",
        "procedure",
    ],
    titles={
        "summary": "Batch",
        "totals": "Shopping list",
        "doughs": "Ingredients by dough",
        "procedure": "Procedure",
    },
)


def get_profile(mode: Mode) -> ShoppingListProfile:
    """
    Devuelve el perfil por defecto para un `mode`.

    Cualquier valor distinto de "simple" devuelve el detallado.
    """
    return SIMPLE_V1 if mode == "simple" else DETALLADO_V1
