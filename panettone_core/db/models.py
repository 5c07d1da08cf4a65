"""
Modelo ORM de la colección de recetas.

Una fila por receta. El árbol completo (masas, starters, pasos, molde) se
guarda como JSON en `payload_json`; las columnas sueltas existen para
ordenar y buscar sin decodificar el payload.
"""

from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class RecipeRecord(Base):
    """
    Receta persistida.

    `position` define el orden de la colección (ascendente): una receta nueva
    se inserta con una posición menor a todas las existentes.
    """
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    slug: Mapped[str] = mapped_column(String(200), index=True, default="")
    name: Mapped[str] = mapped_column(String(200), default="")
    category: Mapped[str] = mapped_column(String(50), default="Other")
    position: Mapped[int] = mapped_column(Integer, index=True, default=0)

    # Receta completa serializada (ver domain_models.recipe_to_dict)
    payload_json: Mapped[str] = mapped_column(Text, default="{}")

    # ISO-8601, tal como vienen en el payload
    created_at: Mapped[str] = mapped_column(String(40), default="")
    updated_at: Mapped[str] = mapped_column(String(40), default="")
