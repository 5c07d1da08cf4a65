"""
Modelos de molde.

La familia de forma de un molde (circular, rectangular, semi-rectangular o sin
especificar) se decide UNA vez al cargar el preset (`shape_from_dimensions`),
en lugar de inferirse en cada llamada a partir de campos nulos.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


def _dim(value: Optional[float]) -> str:
    """Dimensión tal como la escribe una persona: 10.0 -> "10", 10.5 -> "10.5"."""
    if value is None:
        return ""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


@dataclass(frozen=True)
class CircularMold:
    """Molde redondo (panettone de papel, pandoro): alto × diámetro."""
    height_cm: Optional[float]
    diameter_cm: float

    @property
    def key(self) -> str:
        return f"H{_dim(self.height_cm)}-D{_dim(self.diameter_cm)}"

    @property
    def label(self) -> str:
        return f"H {_dim(self.height_cm)} cm × Ø {_dim(self.diameter_cm)} cm"


@dataclass(frozen=True)
class RectangularMold:
    """Molde definido por planta (colomba): ancho × largo."""
    width_cm: Optional[float]
    length_cm: float

    @property
    def key(self) -> str:
        return f"W{_dim(self.width_cm)}-L{_dim(self.length_cm)}"

    @property
    def label(self) -> str:
        return f"W {_dim(self.width_cm)} cm × L {_dim(self.length_cm)} cm"


@dataclass(frozen=True)
class SemiRectangularMold:
    """Molde de sección cuadrada: alto × ancho."""
    height_cm: Optional[float]
    width_cm: float

    @property
    def key(self) -> str:
        return f"H{_dim(self.height_cm)}-W{_dim(self.width_cm)}"

    @property
    def label(self) -> str:
        return f"H {_dim(self.height_cm)} cm × W {_dim(self.width_cm)} cm"


@dataclass(frozen=True)
class UnspecifiedShape:
    """Sin dimensiones: se identifica por su rating."""
    rating: str

    @property
    def key(self) -> str:
        return self.rating

    @property
    def label(self) -> str:
        return self.rating


MoldShape = Union[CircularMold, RectangularMold, SemiRectangularMold, UnspecifiedShape]


def shape_from_dimensions(
    *,
    rating: str,
    height_cm: Optional[float] = None,
    diameter_cm: Optional[float] = None,
    width_cm: Optional[float] = None,
    length_cm: Optional[float] = None,
) -> MoldShape:
    """
    Elige la familia de forma según las dimensiones presentes.

    Precedencia: diámetro -> largo -> ancho -> rating. Una dimensión cuenta como
    presente si no es None ni 0.
    """
    if diameter_cm:
        return CircularMold(height_cm=height_cm, diameter_cm=diameter_cm)
    if length_cm:
        return RectangularMold(width_cm=width_cm, length_cm=length_cm)
    if width_cm:
        return SemiRectangularMold(height_cm=height_cm, width_cm=width_cm)
    return UnspecifiedShape(rating=rating)


@dataclass(frozen=True)
class MoldPreset:
    """
    Preset de molde del catálogo (dato de referencia, solo lectura).

    Attributes
    ----------
    product_type:
        Producto al que aplica ("Panettone", "Pandoro", "Colomba", ...).
    mold_rating:
        Rating comercial del molde (ej: "1 kg"). Es lo que guardaban las
        selecciones viejas.
    shape:
        Forma y dimensiones (variante etiquetada).
    suggested_dough_weight_min_g / suggested_dough_weight_max_g:
        Rango de masa sugerido por pieza.
    notes:
        Nota libre para la UI.
    """
    product_type: str
    mold_rating: str
    shape: MoldShape
    suggested_dough_weight_min_g: float
    suggested_dough_weight_max_g: float
    notes: str = ""


def preset_from_dict(data: Dict[str, Any]) -> MoldPreset:
    """
    Carga un preset desde su forma "plana" (campos de dimensión nullable).
    """
    rating = str(data.get("mold_rating") or "")
    return MoldPreset(
        product_type=str(data.get("product_type") or ""),
        mold_rating=rating,
        shape=shape_from_dimensions(
            rating=rating,
            height_cm=data.get("height_cm"),
            diameter_cm=data.get("diameter_cm"),
            width_cm=data.get("width_cm"),
            length_cm=data.get("length_cm"),
        ),
        suggested_dough_weight_min_g=float(data.get("suggested_dough_weight_min_g") or 0),
        suggested_dough_weight_max_g=float(data.get("suggested_dough_weight_max_g") or 0),
        notes=str(data.get("notes") or ""),
    )
