from __future__ import annotations

"""
panettone_core.editing
======================

Reglas de edición del borrador de receta.

El borrador es un valor explícito (`Recipe`, inmutable): cada operación recibe
la receta actual y devuelve una NUEVA receta. La superficie de edición es la
única dueña de la copia "viva"; este módulo no guarda estado entre llamadas.

Reglas no triviales
-------------------
1. **Reescalado ligado al peso** (`apply_dough_per_piece`):
   cambiar el peso por pieza de la receta reescala de forma permanente todos los
   `qty_g` (masas y starters) por `nuevo / viejo`. Es distinto del escalado de la
   vista (`scaling.scale_recipe`), que es transitorio y no destructivo.

2. **Modo de masas** (`set_dough_mode`):
   pasar de varias masas a una sola fusiona todas las fases en "Main dough",
   preservando el `id` de cada ingrediente (las referencias de los pasos siguen
   siendo válidas). El camino inverso no toca datos.

3. **Borrado en cascada** (`remove_dough`, `remove_starter`, `remove_ingredient`):
   al eliminar un dueño se podan sus ingredientes de `RecipeStep.ingredient_ids`
   en la misma receta devuelta: nunca existe un estado con referencias colgadas.

4. **Normalización al guardar** (`normalize_for_save`).
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Literal, Optional, Tuple

from .config import get_settings
from .domain_models import (
    Dough,
    Ingredient,
    MoldSelection,
    Recipe,
    RecipeStep,
    Starter,
    clamp_positive,
    clamp_quantity,
)
from .slug import make_id, slugify

logger = logging.getLogger(__name__)

MAIN_DOUGH_NAME = "Main dough"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# Constructores
# ============================================================

def create_ingredient(**fields: Any) -> Ingredient:
    """Ingrediente en blanco (harina en gramos), con id nuevo."""
    fields.setdefault("id", make_id())
    fields.setdefault("name", "")
    return Ingredient(**fields)


def create_dough(name: str = MAIN_DOUGH_NAME, ingredients: Iterable[Ingredient] = ()) -> Dough:
    return Dough(id=make_id(), name=name, ingredients=tuple(ingredients))


def create_starter(name: str = "Starter", ingredients: Iterable[Ingredient] = ()) -> Starter:
    return Starter(id=make_id(), name=name, description="", ingredients=tuple(ingredients))


def create_step(title: str = "", **fields: Any) -> RecipeStep:
    return RecipeStep(id=make_id(), title=title, **fields)


def new_recipe(name: str = "", category: Optional[str] = None) -> Recipe:
    """
    Receta nueva: una masa vacía ("Main dough"), sin starters ni pasos.

    Los defaults (categoría, peso por pieza) salen de `Settings`.
    """
    settings = get_settings()
    now = _now_iso()
    return Recipe(
        id=make_id(),
        name=name,
        slug=slugify(name),
        category=category or settings.default_category,  # type: ignore[arg-type]
        pieces=1,
        dough_per_piece_g=settings.default_dough_per_piece_g,
        doughs=(create_dough(MAIN_DOUGH_NAME),),
        starters=(),
        steps=(),
        mold_selection=None,
        created_at=now,
        updated_at=now,
    )


# ============================================================
# Helpers internos
# ============================================================

def _owner_ingredient_ids(owner: Dough | Starter) -> set[str]:
    return {i.id for i in owner.ingredients}


def _prune_steps(steps: Tuple[RecipeStep, ...], removed_ids: set[str]) -> Tuple[RecipeStep, ...]:
    if not removed_ids:
        return steps
    return tuple(
        replace(step, ingredient_ids=tuple(i for i in step.ingredient_ids if i not in removed_ids))
        for step in steps
    )


def _map_owner(
    recipe: Recipe,
    owner_id: str,
    fn: Callable[[Any], Any],
) -> Recipe:
    """Aplica `fn` a la masa o starter con `owner_id`. ValueError si no existe."""
    if any(d.id == owner_id for d in recipe.doughs):
        return replace(recipe, doughs=tuple(fn(d) if d.id == owner_id else d for d in recipe.doughs))
    if any(s.id == owner_id for s in recipe.starters):
        return replace(recipe, starters=tuple(fn(s) if s.id == owner_id else s for s in recipe.starters))
    raise ValueError(f"No existe una masa ni un starter con id {owner_id!r}")


def _scale_ingredients(ingredients: Tuple[Ingredient, ...], ratio: float) -> Tuple[Ingredient, ...]:
    return tuple(replace(i, qty_g=max(0.0, i.qty_g * ratio)) for i in ingredients)


# ============================================================
# Peso por pieza
# ============================================================

def apply_dough_per_piece(recipe: Recipe, new_weight: Any) -> Recipe:
    """
    Cambia el peso base por pieza y reescala TODOS los ingredientes.

    Ambos pesos se clampean a >= 1 antes de calcular la razón, así nunca hay
    razones nulas o negativas.
    """
    old = clamp_positive(recipe.dough_per_piece_g)
    new = clamp_positive(new_weight)
    ratio = new / old
    if ratio == 1:
        return replace(recipe, dough_per_piece_g=new)

    logger.debug(f"Reescalando receta {recipe.id!r}: {old} g -> {new} g (x{ratio:.4f})")
    return replace(
        recipe,
        dough_per_piece_g=new,
        doughs=tuple(replace(d, ingredients=_scale_ingredients(d.ingredients, ratio)) for d in recipe.doughs),
        starters=tuple(replace(s, ingredients=_scale_ingredients(s.ingredients, ratio)) for s in recipe.starters),
    )


def set_pieces(recipe: Recipe, pieces: Any) -> Recipe:
    """Cambia las piezas base (no toca cantidades: `qty_g` es por pieza)."""
    return replace(recipe, pieces=clamp_positive(pieces))


# ============================================================
# Masas
# ============================================================

def is_multi_dough(recipe: Recipe) -> bool:
    return len(recipe.doughs) > 1


def set_dough_mode(recipe: Recipe, multiple: bool) -> Recipe:
    """
    Cambia entre una y varias masas.

    - varias -> una: fusiona todas las fases en una única "Main dough"
      (id nuevo), conservando ids y orden de los ingredientes.
    - una -> varias: no-op sobre los datos.
    """
    if multiple or len(recipe.doughs) <= 1:
        return recipe
    merged = [i for d in recipe.doughs for i in d.ingredients]
    logger.debug(f"Fusionando {len(recipe.doughs)} masas en {MAIN_DOUGH_NAME!r} ({len(merged)} ingredientes)")
    return replace(recipe, doughs=(create_dough(MAIN_DOUGH_NAME, merged),))


def add_dough(recipe: Recipe) -> Recipe:
    """Agrega "Dough {n+1}" con un ingrediente en blanco."""
    dough = create_dough(f"Dough {len(recipe.doughs) + 1}", [create_ingredient()])
    return replace(recipe, doughs=recipe.doughs + (dough,))


def rename_dough(recipe: Recipe, dough_id: str, name: str) -> Recipe:
    return _map_owner(recipe, dough_id, lambda d: replace(d, name=name))


def remove_dough(recipe: Recipe, dough_id: str) -> Recipe:
    """
    Elimina una masa y poda sus ingredientes de todos los pasos.

    Raises
    ------
    ValueError
        Si la masa no existe o es la única de la receta.
    """
    removed = next((d for d in recipe.doughs if d.id == dough_id), None)
    if removed is None:
        raise ValueError(f"No existe una masa con id {dough_id!r}")
    if len(recipe.doughs) <= 1:
        raise ValueError("Una receta necesita al menos una masa.")
    return replace(
        recipe,
        doughs=tuple(d for d in recipe.doughs if d.id != dough_id),
        steps=_prune_steps(recipe.steps, _owner_ingredient_ids(removed)),
    )


# ============================================================
# Starters
# ============================================================

def add_starter(recipe: Recipe) -> Recipe:
    """Agrega "Starter {n+1}" con un ingrediente en blanco."""
    starter = create_starter(f"Starter {len(recipe.starters) + 1}", [create_ingredient()])
    return replace(recipe, starters=recipe.starters + (starter,))


def rename_starter(recipe: Recipe, starter_id: str, name: str) -> Recipe:
    return _map_owner(recipe, starter_id, lambda s: replace(s, name=name))


def describe_starter(recipe: Recipe, starter_id: str, description: str) -> Recipe:
    return _map_owner(recipe, starter_id, lambda s: replace(s, description=description))


def remove_starter(recipe: Recipe, starter_id: str) -> Recipe:
    """Elimina un starter y poda sus ingredientes de todos los pasos."""
    removed = next((s for s in recipe.starters if s.id == starter_id), None)
    if removed is None:
        raise ValueError(f"No existe un starter con id {starter_id!r}")
    return replace(
        recipe,
        starters=tuple(s for s in recipe.starters if s.id != starter_id),
        steps=_prune_steps(recipe.steps, _owner_ingredient_ids(removed)),
    )


# ============================================================
# Ingredientes
# ============================================================

def add_ingredient(recipe: Recipe, owner_id: str, ingredient: Optional[Ingredient] = None) -> Recipe:
    """Agrega un ingrediente (en blanco si no se pasa) al final de una masa o starter."""
    item = ingredient or create_ingredient()
    return _map_owner(recipe, owner_id, lambda o: replace(o, ingredients=o.ingredients + (item,)))


def update_ingredient(recipe: Recipe, owner_id: str, ingredient_id: str, **changes: Any) -> Recipe:
    """
    Actualiza campos de un ingrediente. `qty_g` se clampea a >= 0 y un
    `qty_weight_g` <= 0 se guarda como None.
    """
    if "id" in changes:
        raise ValueError("El id de un ingrediente no se puede cambiar")
    if "qty_g" in changes:
        changes["qty_g"] = clamp_quantity(changes["qty_g"])
    if "qty_weight_g" in changes:
        weight = changes["qty_weight_g"]
        weight = clamp_quantity(weight) if weight is not None else None
        changes["qty_weight_g"] = weight if weight else None

    def _update(owner):
        return replace(
            owner,
            ingredients=tuple(replace(i, **changes) if i.id == ingredient_id else i for i in owner.ingredients),
        )

    return _map_owner(recipe, owner_id, _update)


def remove_ingredient(recipe: Recipe, owner_id: str, ingredient_id: str) -> Recipe:
    """Quita un ingrediente y poda su id de los pasos."""
    updated = _map_owner(
        recipe,
        owner_id,
        lambda o: replace(o, ingredients=tuple(i for i in o.ingredients if i.id != ingredient_id)),
    )
    return replace(updated, steps=_prune_steps(updated.steps, {ingredient_id}))


# ============================================================
# Pasos
# ============================================================

def add_step(recipe: Recipe, step: Optional[RecipeStep] = None) -> Recipe:
    return replace(recipe, steps=recipe.steps + (step or create_step(),))


def update_step(recipe: Recipe, step_id: str, **changes: Any) -> Recipe:
    if "id" in changes:
        raise ValueError("El id de un paso no se puede cambiar")
    if "ingredient_ids" in changes:
        changes["ingredient_ids"] = tuple(changes["ingredient_ids"] or ())
    return replace(
        recipe,
        steps=tuple(replace(s, **changes) if s.id == step_id else s for s in recipe.steps),
    )


def remove_step(recipe: Recipe, step_id: str) -> Recipe:
    return replace(recipe, steps=tuple(s for s in recipe.steps if s.id != step_id))


def move_step(recipe: Recipe, step_id: str, direction: Literal["up", "down"]) -> Recipe:
    """Mueve un paso una posición. Fuera de rango (o id desconocido) es no-op."""
    steps = list(recipe.steps)
    index = next((n for n, s in enumerate(steps) if s.id == step_id), -1)
    if index < 0:
        return recipe
    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(steps):
        return recipe
    moved = steps.pop(index)
    steps.insert(target, moved)
    return replace(recipe, steps=tuple(steps))


def toggle_step_ingredient(recipe: Recipe, step_id: str, ingredient_id: str) -> Recipe:
    """Agrega o quita una referencia de ingrediente en un paso."""

    def _toggle(step: RecipeStep) -> RecipeStep:
        if ingredient_id in step.ingredient_ids:
            ids = tuple(i for i in step.ingredient_ids if i != ingredient_id)
        else:
            ids = step.ingredient_ids + (ingredient_id,)
        return replace(step, ingredient_ids=ids)

    return replace(recipe, steps=tuple(_toggle(s) if s.id == step_id else s for s in recipe.steps))


# ============================================================
# Molde
# ============================================================

def set_mold_selection(recipe: Recipe, selection: Optional[MoldSelection]) -> Recipe:
    return replace(recipe, mold_selection=selection)


# ============================================================
# Guardado
# ============================================================

def normalize_for_save(recipe: Recipe, now: Optional[str] = None) -> Recipe:
    """
    Limpia el borrador antes de persistirlo.

    - nombre recortado (obligatorio) y slug re-derivado
    - ingredientes con nombre en blanco: se descartan
    - masas / starters sin nombre: "Dough {n}" / "Starter {n}" (1-indexado)
    - descripciones de starters recortadas
    - pasos sin título: se descartan
    - piezas y peso por pieza con piso en 1
    - `created_at` se conserva; `updated_at` pasa a `now`

    Raises
    ------
    ValueError
        Si la receta no tiene nombre.
    """
    name = recipe.name.strip()
    if not name:
        raise ValueError("La receta necesita un nombre.")
    timestamp = now or _now_iso()

    doughs = tuple(
        replace(
            d,
            name=d.name.strip() or f"Dough {n}",
            ingredients=tuple(i for i in d.ingredients if i.name.strip()),
        )
        for n, d in enumerate(recipe.doughs, start=1)
    )
    starters = tuple(
        replace(
            s,
            name=s.name.strip() or f"Starter {n}",
            description=(s.description or "").strip(),
            ingredients=tuple(i for i in s.ingredients if i.name.strip()),
        )
        for n, s in enumerate(recipe.starters, start=1)
    )
    kept = {i.id for o in doughs + starters for i in o.ingredients}
    blank_ids = {i.id for i in recipe.all_ingredients()} - kept
    steps = _prune_steps(tuple(s for s in recipe.steps if s.title.strip()), blank_ids)

    dropped = (
        sum(len(d.ingredients) for d in recipe.doughs)
        + sum(len(s.ingredients) for s in recipe.starters)
        - sum(len(d.ingredients) for d in doughs)
        - sum(len(s.ingredients) for s in starters)
    )
    if dropped or len(steps) != len(recipe.steps):
        logger.debug(
            f"Normalización de {name!r}: {dropped} ingredientes y "
            f"{len(recipe.steps) - len(steps)} pasos en blanco descartados"
        )

    return replace(
        recipe,
        name=name,
        slug=slugify(name),
        pieces=clamp_positive(recipe.pieces),
        dough_per_piece_g=clamp_positive(recipe.dough_per_piece_g),
        doughs=doughs,
        starters=starters,
        steps=steps,
        created_at=recipe.created_at or timestamp,
        updated_at=timestamp,
    )
