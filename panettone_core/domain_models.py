from __future__ import annotations

"""
panettone_core.domain_models
============================

Modelos de dominio (dataclasses inmutables) de una receta de masa festiva.

Objetivo
--------
Este módulo define las estructuras de datos "neutras" del sistema:

- Ingredientes (`Ingredient`) con cantidad por pieza, sin escalar
- Fases de masa (`Dough`) y masas madre / prefermentos (`Starter`)
- Pasos del procedimiento (`RecipeStep`)
- La receta completa (`Recipe`) y la selección de molde (`MoldSelection`)

Principios de diseño
--------------------
- Dataclasses `frozen=True` con colecciones en tuplas: el motor de escalado
  recibe snapshots y no puede mutarlos por accidente.
- Este módulo NO habla con DB ni IO. La conversión dict <-> dataclass vive acá
  porque es lo que usan tanto la persistencia como los tests.
- Los números mal formados se "clampean" al parsear (nunca se rechazan).
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple


# ============================================================
# Tipos base
# ============================================================

IngredientUnit = Literal["g", "oz", "lb", "cup", "count"]

IngredientGroup = Literal[
    "Starter",
    "Flour",
    "Liquid",
    "Eggs",
    "Fat",
    "Sugar",
    "Salt",
    "Aromatic",
    "Other",
]

RecipeCategory = Literal[
    "Panettone",
    "Pandoro",
    "Panettone Gastronomico",
    "Colomba",
    "Other",
]

INGREDIENT_UNITS: Tuple[str, ...] = ("g", "oz", "lb", "cup", "count")
INGREDIENT_GROUPS: Tuple[str, ...] = (
    "Starter",
    "Flour",
    "Liquid",
    "Eggs",
    "Fat",
    "Sugar",
    "Salt",
    "Aromatic",
    "Other",
)
RECIPE_CATEGORIES: Tuple[str, ...] = (
    "Panettone",
    "Pandoro",
    "Panettone Gastronomico",
    "Colomba",
    "Other",
)

# Unidades heredadas de registros viejos
_LEGACY_UNITS = {"qty": "count"}


# ============================================================
# Helpers numéricos
# ============================================================

def coerce_number(value: Any) -> Optional[float]:
    """
    Convierte `value` a float finito. Devuelve None si no es posible
    (None, NaN, inf, strings no numéricos, bool).
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def clamp_min(value: Any, floor: float) -> float:
    """Clampea a `floor` cualquier valor mal formado o menor que `floor`."""
    number = coerce_number(value)
    if number is None or number < floor:
        return floor
    return number


def clamp_quantity(value: Any) -> float:
    """Cantidades: piso en 0."""
    return clamp_min(value, 0.0)


def clamp_positive(value: Any) -> float:
    """Piezas / pesos: piso en 1."""
    return clamp_min(value, 1.0)


def name_key(name: str) -> str:
    """Clave de agregación de un nombre de ingrediente (recortado, sin mayúsculas)."""
    return (name or "").strip().casefold()


# ============================================================
# Entidades
# ============================================================

@dataclass(frozen=True)
class Ingredient:
    """
    Ingrediente de una fase de masa o de un starter.

    Attributes:
        id:
            Identidad estable a través de ediciones (la referencian los pasos).
        name:
            Nombre libre. Para los totales se agrega por `name.strip().casefold()`.
        qty_g:
            Cantidad por pieza, sin escalar, calibrada contra la línea base de la
            receta. En gramos, salvo `unit == "count"`: ahí es cantidad de unidades.
        unit:
            Unidad de display ("g" | "oz" | "lb" | "cup" | "count").
        group:
            Grupo panadero; "Flour" define la base del porcentaje panadero.
        qty_weight_g:
            Gramos por unidad cuando `unit == "count"`. None si no se conoce.
        notes:
            Notas libres.
    """
    id: str
    name: str
    qty_g: float = 0.0
    unit: IngredientUnit = "g"
    group: IngredientGroup = "Flour"
    qty_weight_g: Optional[float] = None
    notes: str = ""

    @property
    def aggregation_key(self) -> str:
        return name_key(self.name)


@dataclass(frozen=True)
class Dough:
    """Una fase de la masa principal (primer impasto, segundo impasto, ...)."""
    id: str
    name: str
    ingredients: Tuple[Ingredient, ...] = ()


@dataclass(frozen=True)
class Starter:
    """Opción de levadura / masa madre. Solo uno puede estar activo al escalar."""
    id: str
    name: str
    description: str = ""
    ingredients: Tuple[Ingredient, ...] = ()


@dataclass(frozen=True)
class RecipeStep:
    """
    Paso del procedimiento.

    `ingredient_ids` referencia ingredientes por id; cuando se elimina la masa o
    el starter dueño de un ingrediente, la referencia se poda (ver `editing`).
    """
    id: str
    title: str
    phase: str = ""
    duration_min: Optional[float] = None
    temp_c: Optional[float] = None
    notes: str = ""
    ingredient_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MoldSelection:
    """Selección de molde: `mold_rating` puede ser un rating crudo o un size key."""
    product_type: str
    mold_rating: str


@dataclass(frozen=True)
class Recipe:
    """
    Receta completa.

    `pieces` y `dough_per_piece_g` definen la línea base (factor de escala 1.0):
    todos los `qty_g` están calibrados contra esa base, nunca contra un
    escalado transitorio de la vista.
    """
    id: str
    name: str
    slug: str
    category: RecipeCategory = "Panettone"
    pieces: float = 1
    dough_per_piece_g: float = 1100
    doughs: Tuple[Dough, ...] = ()
    starters: Tuple[Starter, ...] = ()
    steps: Tuple[RecipeStep, ...] = ()
    mold_selection: Optional[MoldSelection] = None
    created_at: str = ""
    updated_at: str = ""

    def all_ingredients(self) -> Tuple[Ingredient, ...]:
        """Ingredientes de todas las masas y de todos los starters, en orden."""
        items: List[Ingredient] = []
        for dough in self.doughs:
            items.extend(dough.ingredients)
        for starter in self.starters:
            items.extend(starter.ingredients)
        return tuple(items)

    def find_starter(self, starter_id: Optional[str]) -> Optional[Starter]:
        if not starter_id:
            return None
        for starter in self.starters:
            if starter.id == starter_id:
                return starter
        return None


# ============================================================
# Conversión dict <-> dataclass
# ============================================================

def _text(value: Any) -> str:
    return "" if value is None else str(value)


def ingredient_from_dict(data: Dict[str, Any]) -> Ingredient:
    unit = _text(data.get("unit") or "g").strip()
    unit = _LEGACY_UNITS.get(unit, unit)
    if unit not in INGREDIENT_UNITS:
        unit = "g"
    group = _text(data.get("group") or "Other").strip()
    if group not in INGREDIENT_GROUPS:
        group = "Other"
    weight = coerce_number(data.get("qty_weight_g"))
    return Ingredient(
        id=_text(data.get("id")),
        name=_text(data.get("name")),
        qty_g=clamp_quantity(data.get("qty_g")),
        unit=unit,  # type: ignore[arg-type]
        group=group,  # type: ignore[arg-type]
        qty_weight_g=weight if weight is not None and weight > 0 else None,
        notes=_text(data.get("notes")),
    )


def _ingredients(items: Optional[Iterable[Dict[str, Any]]]) -> Tuple[Ingredient, ...]:
    return tuple(ingredient_from_dict(item) for item in (items or []))


def dough_from_dict(data: Dict[str, Any]) -> Dough:
    return Dough(
        id=_text(data.get("id")),
        name=_text(data.get("name")),
        ingredients=_ingredients(data.get("ingredients")),
    )


def starter_from_dict(data: Dict[str, Any]) -> Starter:
    return Starter(
        id=_text(data.get("id")),
        name=_text(data.get("name")),
        description=_text(data.get("description")),
        ingredients=_ingredients(data.get("ingredients")),
    )


def step_from_dict(data: Dict[str, Any]) -> RecipeStep:
    return RecipeStep(
        id=_text(data.get("id")),
        title=_text(data.get("title")),
        phase=_text(data.get("phase")),
        duration_min=coerce_number(data.get("duration_min")),
        temp_c=coerce_number(data.get("temp_c")),
        notes=_text(data.get("notes")),
        ingredient_ids=tuple(_text(i) for i in (data.get("ingredient_ids") or [])),
    )


def recipe_from_dict(data: Dict[str, Any]) -> Recipe:
    """
    Construye un `Recipe` desde un dict JSON-compatible.

    No hace backfill de registros viejos (eso es de la capa de persistencia,
    ver `panettone_core.db.helpers.backfill_record`): solo tipa y clampea.
    """
    category = _text(data.get("category") or "Other")
    if category not in RECIPE_CATEGORIES:
        category = "Other"

    mold = data.get("mold_selection")
    mold_selection = None
    if isinstance(mold, dict):
        mold_selection = MoldSelection(
            product_type=_text(mold.get("product_type")),
            mold_rating=_text(mold.get("mold_rating")),
        )

    return Recipe(
        id=_text(data.get("id")),
        name=_text(data.get("name")),
        slug=_text(data.get("slug")),
        category=category,  # type: ignore[arg-type]
        pieces=clamp_positive(data.get("pieces")),
        dough_per_piece_g=clamp_positive(data.get("dough_per_piece_g")),
        doughs=tuple(dough_from_dict(d) for d in (data.get("doughs") or [])),
        starters=tuple(starter_from_dict(s) for s in (data.get("starters") or [])),
        steps=tuple(step_from_dict(s) for s in (data.get("steps") or [])),
        mold_selection=mold_selection,
        created_at=_text(data.get("created_at")),
        updated_at=_text(data.get("updated_at")),
    )


def ingredient_to_dict(ingredient: Ingredient) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": ingredient.id,
        "name": ingredient.name,
        "qty_g": ingredient.qty_g,
        "unit": ingredient.unit,
        "group": ingredient.group,
    }
    if ingredient.qty_weight_g is not None:
        data["qty_weight_g"] = ingredient.qty_weight_g
    if ingredient.notes:
        data["notes"] = ingredient.notes
    return data


def step_to_dict(step: RecipeStep) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": step.id,
        "title": step.title,
        "phase": step.phase,
        "notes": step.notes,
        "ingredient_ids": list(step.ingredient_ids),
    }
    if step.duration_min is not None:
        data["duration_min"] = step.duration_min
    if step.temp_c is not None:
        data["temp_c"] = step.temp_c
    return data


def recipe_to_dict(recipe: Recipe) -> Dict[str, Any]:
    """Serializa un `Recipe` a un dict JSON-compatible (inversa de `recipe_from_dict`)."""
    data: Dict[str, Any] = {
        "id": recipe.id,
        "name": recipe.name,
        "slug": recipe.slug,
        "category": recipe.category,
        "pieces": recipe.pieces,
        "dough_per_piece_g": recipe.dough_per_piece_g,
        "doughs": [
            {
                "id": d.id,
                "name": d.name,
                "ingredients": [ingredient_to_dict(i) for i in d.ingredients],
            }
            for d in recipe.doughs
        ],
        "starters": [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "ingredients": [ingredient_to_dict(i) for i in s.ingredients],
            }
            for s in recipe.starters
        ],
        "steps": [step_to_dict(s) for s in recipe.steps],
        "created_at": recipe.created_at,
        "updated_at": recipe.updated_at,
    }
    if recipe.mold_selection is not None:
        data["mold_selection"] = {
            "product_type": recipe.mold_selection.product_type,
            "mold_rating": recipe.mold_selection.mold_rating,
        }
    return data
