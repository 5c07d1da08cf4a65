"""
Abstracciones (Protocols) de los colaboradores externos del core.

El core no conoce ningún backend de almacenamiento concreto: solo habla con
esta interfaz. `panettone_core.db.helpers.SqlRecipeRepository` es la
implementación por defecto; en tests se puede usar cualquier objeto que
cumpla el protocolo.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from ..domain_models import Recipe


@runtime_checkable
class RecipeRepository(Protocol):
    """
    Interfaz de persistencia de la colección de recetas.

    La colección es ordenada: `upsert` de una receta nueva la agrega al
    principio.
    """

    def load(self) -> List[Recipe]:
        """
        Carga toda la colección, en orden.

        Los registros viejos se completan (backfill) antes de devolverse.
        """
        ...

    def save(self, recipes: Sequence[Recipe]) -> None:
        """Reemplaza la colección completa por `recipes`, en ese orden."""
        ...

    def upsert(self, recipe: Recipe) -> List[Recipe]:
        """
        Reemplaza la receta con el mismo id, o la agrega al principio.

        Returns:
            La colección resultante.
        """
        ...

    def delete_by_id(self, recipe_id: str) -> List[Recipe]:
        """Elimina la receta (si existe) y devuelve la colección resultante."""
        ...

    def find_by_identifier(self, key: str) -> Optional[Recipe]:
        """Busca por slug, slug decodificado o nombre (ver `find_recipe_by_identifier`)."""
        ...
