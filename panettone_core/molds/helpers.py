"""
Helpers de moldes: size keys, normalización de selecciones y peso sugerido.

Todas las funciones reciben el catálogo como parámetro (con `DEFAULT_CATALOG`
como default) y ninguna lanza ante una selección desconocida: la normalización
es "best effort" para que selecciones viejas o ajenas sigan siendo usables.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

from ..domain_models import MoldSelection
from .catalog import DEFAULT_CATALOG, MoldCatalog
from .models import MoldPreset

logger = logging.getLogger(__name__)


def size_key(preset: MoldPreset) -> str:
    """Clave canónica de tamaño: H{h}-D{d}, W{w}-L{l}, H{h}-W{w} o el rating."""
    return preset.shape.key


def size_label(preset: MoldPreset) -> str:
    """Etiqueta humana de tamaño (ej: "H 12 cm × Ø 17 cm")."""
    return preset.shape.label


def normalize_mold_selection(
    selection: Optional[MoldSelection],
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> Optional[MoldSelection]:
    """
    Reescribe `mold_rating` al size key canónico si la selección matchea un
    preset por (product_type, rating crudo). Si no matchea (o ya es un size
    key) devuelve la selección tal cual.
    """
    if selection is None:
        return None
    found = catalog.find(selection.product_type, selection.mold_rating)
    if found is None:
        return selection
    key = size_key(found)
    if key != selection.mold_rating:
        logger.debug(
            f"Selección de molde normalizada: {selection.product_type} {selection.mold_rating!r} -> {key!r}"
        )
    return MoldSelection(product_type=selection.product_type, mold_rating=key)


def find_selected_preset(
    selection: Optional[MoldSelection],
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> Optional[MoldPreset]:
    """Preset de una selección, aceptando size key o rating crudo."""
    if selection is None or not selection.product_type or not selection.mold_rating:
        return None
    return catalog.find_by_key_or_rating(selection.product_type, selection.mold_rating)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def suggested_weight(preset: MoldPreset) -> int:
    """
    Peso sugerido por pieza: punto medio del rango, redondeado al gramo.

    Si min == max se devuelve ese valor.
    """
    low = preset.suggested_dough_weight_min_g
    high = preset.suggested_dough_weight_max_g
    if low == high:
        return _round_half_up(low)
    return _round_half_up((low + high) / 2)


def suggested_weight_for_selection(
    selection: Optional[MoldSelection],
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> Optional[int]:
    preset = find_selected_preset(selection, catalog)
    if preset is None:
        return None
    return suggested_weight(preset)


def weight_range_label(preset: MoldPreset) -> str:
    """"500 g" si el rango es un único valor, si no "500-550 g"."""
    low = _round_half_up(preset.suggested_dough_weight_min_g)
    high = _round_half_up(preset.suggested_dough_weight_max_g)
    if low == high:
        return f"{low} g"
    return f"{low}-{high} g"


def size_options(
    product_type: str,
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> List[Tuple[str, str]]:
    """Opciones (size key, label) para un tipo de producto."""
    if not product_type:
        return []
    return [(size_key(p), size_label(p)) for p in catalog.presets_for(product_type)]
