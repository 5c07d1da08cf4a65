"""
Filtros, orden y estadísticas de la colección de recetas.

Funciones puras sobre listas de `Recipe`: no tocan persistencia.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Sequence

from .domain_models import RECIPE_CATEGORIES, Recipe

SortOrder = Literal["New", "Old", "Last edit"]

SORT_ORDERS = ("New", "Old", "Last edit")

# Etiquetas cortas de filtro -> categoría almacenada
CATEGORY_ALIASES: Dict[str, str] = {
    "Gastronomico": "Panettone Gastronomico",
}


def _resolve_category(label: str) -> str:
    label = label.strip()
    return CATEGORY_ALIASES.get(label, label)


def filter_by_categories(recipes: Iterable[Recipe], categories: Sequence[str]) -> List[Recipe]:
    """
    Recetas cuya categoría está en `categories`.

    Una selección vacía devuelve todas. Acepta los alias de `CATEGORY_ALIASES`.
    """
    items = list(recipes)
    wanted = {_resolve_category(c) for c in categories if c and c.strip()}
    if not wanted:
        return items
    return [r for r in items if r.category in wanted]


def sort_recipes(recipes: Iterable[Recipe], order: SortOrder = "New") -> List[Recipe]:
    """
    Ordena la colección.

    - "New": creación descendente
    - "Old": creación ascendente
    - "Last edit": última edición descendente (cae en `created_at` si falta)

    Los timestamps son ISO-8601, así que se comparan como strings. El orden es
    estable: ante empate se conserva el orden de entrada.
    """
    items = list(recipes)
    if order == "Old":
        return sorted(items, key=lambda r: r.created_at)
    if order == "Last edit":
        return sorted(items, key=lambda r: r.updated_at or r.created_at, reverse=True)
    if order != "New":
        raise ValueError(f"Orden desconocido: {order!r} (opciones: {', '.join(SORT_ORDERS)})")
    return sorted(items, key=lambda r: r.created_at, reverse=True)


def recipe_stats(recipes: Iterable[Recipe]) -> Dict[str, object]:
    """
    Conteos de la colección: total y por categoría (todas las categorías
    conocidas aparecen, aunque sea con 0).
    """
    by_category: Dict[str, int] = {c: 0 for c in RECIPE_CATEGORIES}
    total = 0
    for recipe in recipes:
        total += 1
        by_category[recipe.category] = by_category.get(recipe.category, 0) + 1
    return {"total": total, "by_category": by_category}
