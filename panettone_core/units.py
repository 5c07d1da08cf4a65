"""
panettone_core.units
====================

Tabla fija de equivalencias a gramos y conversiones de ida y vuelta.

Los gramos son la unidad canónica interna: todas las cantidades de un
`Ingredient` se guardan en gramos (salvo `count`). Convertir a la unidad de
display es un paso de presentación.

`count` NO es una unidad de peso: su conversión es la identidad. Pasar de
cantidad de piezas a gramos (vía `qty_weight_g`) es responsabilidad de quien
llama (ver `panettone_core.scaling.ingredient_grams`).
"""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

from .domain_models import IngredientUnit

# Gramos por 1 unidad de display
UNIT_TO_GRAMS: Dict[str, float] = {
    "g": 1,
    "oz": 28.3495,
    "lb": 453.592,
    "cup": 120,  # estimado, depende del ingrediente
    "count": 1,
}

UNIT_OPTIONS: List[Tuple[IngredientUnit, str]] = [
    ("g", "g"),
    ("oz", "oz"),
    ("lb", "lb"),
    ("cup", "cup (est.)"),
    ("count", "count"),
]


def _factor(unit: str) -> float:
    return UNIT_TO_GRAMS.get(unit, 1)


def is_weight_unit(unit: str) -> bool:
    """True si la unidad expresa un peso (todas menos `count`)."""
    return unit in UNIT_TO_GRAMS and unit != "count"


def to_display(grams: float, unit: str) -> float:
    """
    Convierte gramos a la unidad de display.

    Una unidad desconocida se trata como gramos (factor 1).
    """
    return grams / _factor(unit)


def to_grams(value: float, unit: str) -> float:
    """Inversa de `to_display`."""
    return value * _factor(unit)


def format_number(value, digits: int = 1) -> str:
    """
    Formatea un número con `digits` decimales.

    Si la parte fraccionaria queda toda en ceros se elimina ("12.0" -> "12"),
    pero "2.50" se mantiene. Nunca lanza: ante entrada no finita o no numérica
    devuelve "0".
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "0"
    if not math.isfinite(value):
        return "0"
    digits = max(0, int(digits))
    text = f"{value:.{digits}f}"
    if "." in text:
        whole, frac = text.split(".", 1)
        if not frac.strip("0"):
            text = whole
    if text == "-0":
        text = "0"
    return text
