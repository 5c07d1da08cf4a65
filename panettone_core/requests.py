"""
Modelos de request para el motor de escalado.

Validan los parámetros de escala antes de pasarlos al core. A diferencia de
una API HTTP, acá un valor mal formado NO se rechaza: se clampea (piezas y
peso con piso en 1), porque la vista de escalado tiene que mostrar algo
razonable incluso con un input a medio escribir.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .domain_models import clamp_positive
from .units import is_weight_unit


class ScalingRequest(BaseModel):
    """
    Parámetros de una vista de escalado.

    Es inmutable. Para cambiar un parámetro usar `with_updates(...)`, que
    vuelve a pasar por los validadores (`model_copy` no los ejecuta).
    """

    model_config = ConfigDict(frozen=True)

    pieces: float = Field(default=1, description="Piezas a producir (>= 1, admite fracciones)")
    dough_per_piece_g: float = Field(default=1000, description="Peso objetivo de masa por pieza, en gramos (>= 1)")
    starter_id: Optional[str] = Field(
        default=None,
        description="Starter cuyos ingredientes entran en los totales (None = ninguno)",
    )
    display_unit: Optional[str] = Field(
        default=None,
        description="Unidad de peso forzada para los totales (None = la de cada ingrediente)",
    )

    @field_validator("pieces", mode="before")
    @classmethod
    def _clamp_pieces(cls, value: Any) -> float:
        return clamp_positive(value)

    @field_validator("dough_per_piece_g", mode="before")
    @classmethod
    def _clamp_weight(cls, value: Any) -> float:
        return clamp_positive(value)

    @field_validator("starter_id", mode="before")
    @classmethod
    def _blank_starter(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("display_unit", mode="before")
    @classmethod
    def _known_unit(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text if is_weight_unit(text) else None

    def with_updates(self, **changes: Any) -> "ScalingRequest":
        """Copia validada con los campos indicados reemplazados."""
        data = self.model_dump()
        data.update(changes)
        return ScalingRequest(**data)
