"""
Catálogo de moldes (dato de referencia inmutable).

El catálogo se inyecta en el normalizador y en los lookups: `DEFAULT_CATALOG`
es solo el valor por defecto, y en tests se puede reemplazar por cualquier
`MoldCatalog` armado a mano.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import MoldPreset, preset_from_dict


@dataclass(frozen=True)
class MoldCatalog:
    """
    Lista de presets agrupada por `product_type`.

    Invariante: dentro de un mismo `product_type` no puede haber dos presets
    con el mismo size key (se valida al construir).
    """

    presets: Tuple[MoldPreset, ...] = ()

    def __post_init__(self) -> None:
        seen: Dict[Tuple[str, str], str] = {}
        for preset in self.presets:
            ident = (preset.product_type, preset.shape.key)
            if ident in seen:
                raise ValueError(
                    f"Size key duplicado en el catálogo: {preset.product_type} / {preset.shape.key} "
                    f"({seen[ident]!r} y {preset.mold_rating!r})"
                )
            seen[ident] = preset.mold_rating

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "MoldCatalog":
        return cls(presets=tuple(preset_from_dict(r) for r in records))

    def extended(self, *presets: MoldPreset) -> "MoldCatalog":
        """Nuevo catálogo con `presets` agregados al final (el catálogo es append-only)."""
        return MoldCatalog(presets=self.presets + tuple(presets))

    def product_types(self) -> List[str]:
        """Tipos de producto en orden de aparición, sin repetidos."""
        out: List[str] = []
        for preset in self.presets:
            if preset.product_type not in out:
                out.append(preset.product_type)
        return out

    def presets_for(self, product_type: str) -> List[MoldPreset]:
        return [p for p in self.presets if p.product_type == product_type]

    def find(self, product_type: str, mold_rating: str) -> Optional[MoldPreset]:
        """Lookup exacto por (product_type, rating crudo)."""
        for preset in self.presets:
            if preset.product_type == product_type and preset.mold_rating == mold_rating:
                return preset
        return None

    def find_by_key_or_rating(self, product_type: str, value: str) -> Optional[MoldPreset]:
        """Lookup que acepta tanto un size key como un rating crudo."""
        for preset in self.presets:
            if preset.product_type != product_type:
                continue
            if preset.shape.key == value or preset.mold_rating == value:
                return preset
        return None


# ============================================================
# Presets predefinidos
# ============================================================

DEFAULT_MOLD_RECORDS: List[Dict[str, Any]] = [
    # Panettone: moldes de papel redondos
    {
        "product_type": "Panettone",
        "mold_rating": "100 g",
        "height_cm": 5,
        "diameter_cm": 7,
        "suggested_dough_weight_min_g": 90,
        "suggested_dough_weight_max_g": 100,
        "notes": "Mini panettone, short proof and bake.",
    },
    {
        "product_type": "Panettone",
        "mold_rating": "250 g",
        "height_cm": 7.5,
        "diameter_cm": 10.5,
        "suggested_dough_weight_min_g": 240,
        "suggested_dough_weight_max_g": 260,
        "notes": "Gift size.",
    },
    {
        "product_type": "Panettone",
        "mold_rating": "500 g",
        "height_cm": 9.5,
        "diameter_cm": 13.5,
        "suggested_dough_weight_min_g": 500,
        "suggested_dough_weight_max_g": 550,
        "notes": "",
    },
    {
        "product_type": "Panettone",
        "mold_rating": "750 g",
        "height_cm": 11,
        "diameter_cm": 15,
        "suggested_dough_weight_min_g": 750,
        "suggested_dough_weight_max_g": 800,
        "notes": "",
    },
    {
        "product_type": "Panettone",
        "mold_rating": "1 kg",
        "height_cm": 12,
        "diameter_cm": 17,
        "suggested_dough_weight_min_g": 1000,
        "suggested_dough_weight_max_g": 1100,
        "notes": "Classic tall panettone.",
    },
    {
        "product_type": "Panettone",
        "mold_rating": "1 kg basso",
        "height_cm": 9,
        "diameter_cm": 19,
        "suggested_dough_weight_min_g": 1000,
        "suggested_dough_weight_max_g": 1050,
        "notes": "Low mold, bakes faster than the tall one.",
    },
    # Pandoro: moldes metálicos de estrella (diámetro de la boca)
    {
        "product_type": "Pandoro",
        "mold_rating": "500 g",
        "height_cm": 13,
        "diameter_cm": 16,
        "suggested_dough_weight_min_g": 500,
        "suggested_dough_weight_max_g": 520,
        "notes": "Butter and dust the star mold.",
    },
    {
        "product_type": "Pandoro",
        "mold_rating": "750 g",
        "height_cm": 15,
        "diameter_cm": 18.5,
        "suggested_dough_weight_min_g": 750,
        "suggested_dough_weight_max_g": 780,
        "notes": "",
    },
    {
        "product_type": "Pandoro",
        "mold_rating": "1 kg",
        "height_cm": 17,
        "diameter_cm": 20.5,
        "suggested_dough_weight_min_g": 1000,
        "suggested_dough_weight_max_g": 1000,
        "notes": "",
    },
    # Colomba: moldes de papel con forma de paloma (planta)
    {
        "product_type": "Colomba",
        "mold_rating": "500 g",
        "height_cm": 6,
        "width_cm": 17.5,
        "length_cm": 24,
        "suggested_dough_weight_min_g": 500,
        "suggested_dough_weight_max_g": 550,
        "notes": "",
    },
    {
        "product_type": "Colomba",
        "mold_rating": "750 g",
        "height_cm": 6.5,
        "width_cm": 20,
        "length_cm": 28,
        "suggested_dough_weight_min_g": 750,
        "suggested_dough_weight_max_g": 800,
        "notes": "",
    },
    {
        "product_type": "Colomba",
        "mold_rating": "1 kg",
        "height_cm": 7,
        "width_cm": 22.5,
        "length_cm": 31,
        "suggested_dough_weight_min_g": 1000,
        "suggested_dough_weight_max_g": 1100,
        "notes": "Split the dough in two for the wings.",
    },
    # Panettone gastronomico: cilindro alto o sección cuadrada
    {
        "product_type": "Panettone Gastronomico",
        "mold_rating": "1 kg tall",
        "height_cm": 20,
        "diameter_cm": 13,
        "suggested_dough_weight_min_g": 900,
        "suggested_dough_weight_max_g": 1000,
        "notes": "Slices into even rounds for sandwiches.",
    },
    {
        "product_type": "Panettone Gastronomico",
        "mold_rating": "Square 1 kg",
        "height_cm": 14,
        "width_cm": 14,
        "suggested_dough_weight_min_g": 950,
        "suggested_dough_weight_max_g": 1050,
        "notes": "Square section, slices into even squares.",
    },
    {
        "product_type": "Other",
        "mold_rating": "Free-form",
        "suggested_dough_weight_min_g": 500,
        "suggested_dough_weight_max_g": 1000,
        "notes": "No mold; shape by hand.",
    },
]

DEFAULT_CATALOG = MoldCatalog.from_records(DEFAULT_MOLD_RECORDS)
