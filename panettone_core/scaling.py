from __future__ import annotations

"""
panettone_core.scaling
======================

Motor de escalado y agregación (funciones puras).

Dado un `Recipe` (snapshot de solo lectura) y parámetros de escala
(piezas, peso objetivo por pieza, starter elegido) devuelve valores derivados:

- factor de escala (`compute_scale_factor`)
- gramos por pieza de cada ingrediente (`ingredient_grams`)
- totales de lista de compras agregados por nombre (`build_totals`)
- porcentaje panadero relativo a la harina (`flour_base`, `bakers_percentage`)
- vista por masa / starter con cantidades escaladas (`build_sections`)

Reglas clave
------------
- El factor de escala se aplica a TODOS los ingredientes, sin importar la unidad:
  modela el escalado proporcional de la receta, no solo de los gramos.
- Un ingrediente `count` sin `qty_weight_g` NO tiene gramos: su aporte en gramos
  es None (no 0) y se propaga como None a los totales; la lista de compras
  debe poder marcar "peso desconocido".
- El porcentaje panadero se calcula por pieza: no cambia al cambiar `pieces`.
- Mismo input => mismo output (bit a bit). Nada de estado entre llamadas.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .domain_models import Ingredient, Recipe, Starter, clamp_positive, name_key

logger = logging.getLogger(__name__)


# ============================================================
# Vistas derivadas
# ============================================================

@dataclass(frozen=True)
class TotalRow:
    """
    Fila de la lista de compras (un ingrediente agregado por nombre).

    Attributes:
        name:
            Nombre (recortado) de la primera aparición.
        key:
            Clave de agregación (`name.strip().casefold()`).
        unit:
            Unidad de la primera aparición (se usa para el display).
        total_g:
            Gramos totales del batch, o None si ninguna aparición resolvió gramos.
        total_count:
            Unidades totales del batch (solo suman las apariciones `count`).
        units:
            Todas las unidades vistas para este nombre, en orden de aparición.
    """
    name: str
    key: str
    unit: str
    total_g: Optional[float]
    total_count: float
    units: Tuple[str, ...]

    @property
    def has_known_weight(self) -> bool:
        return self.total_g is not None


@dataclass(frozen=True)
class IngredientLine:
    """Un ingrediente escalado, tal como se muestra dentro de su masa o starter."""
    ingredient_id: str
    name: str
    unit: str
    group: str
    scaled_qty_per_piece: float
    grams_per_piece: Optional[float]
    batch_value: float
    batch_grams: Optional[float]
    bakers_pct: Optional[float]


@dataclass(frozen=True)
class SectionView:
    """Una masa (o el starter activo) con sus líneas escaladas."""
    id: str
    name: str
    kind: str  # "dough" | "starter"
    description: str
    lines: Tuple[IngredientLine, ...]


@dataclass(frozen=True)
class ScalingResult:
    """
    Resultado completo de escalar una receta.

    `total_dough_g` es un número de control para el usuario (piezas × peso por
    pieza); NO se exige que coincida con la suma de gramos de los ingredientes.
    """
    scale_factor: float
    pieces: float
    dough_per_piece_g: float
    total_dough_g: float
    flour_base_g: float
    starter_id: Optional[str]
    totals: Tuple[TotalRow, ...]
    sections: Tuple[SectionView, ...]

    def line_for(self, ingredient_id: str) -> Optional[IngredientLine]:
        for section in self.sections:
            for line in section.lines:
                if line.ingredient_id == ingredient_id:
                    return line
        return None

    def total_for(self, name: str) -> Optional[TotalRow]:
        key = name_key(name)
        for row in self.totals:
            if row.key == key:
                return row
        return None


# ============================================================
# Cálculos unitarios
# ============================================================

def compute_scale_factor(baseline_dough_per_piece_g: float, target_dough_per_piece_g: float) -> float:
    """
    target / max(1, baseline).

    Una línea base no finita, 0 o negativa se trata como 1 (evita dividir por 0);
    el objetivo mal formado también se clampea a 1.
    """
    base = clamp_positive(baseline_dough_per_piece_g)
    target = clamp_positive(target_dough_per_piece_g)
    return target / base


def ingredient_grams(ingredient: Ingredient, scaled_qty: float) -> Optional[float]:
    """
    Gramos equivalentes de una cantidad escalada por pieza.

    - unidad != count: la cantidad ya está en gramos.
    - unidad == count: cantidad × `qty_weight_g`, o None si no hay peso por unidad.
    """
    if ingredient.unit == "count":
        if not ingredient.qty_weight_g or ingredient.qty_weight_g <= 0:
            return None
        return scaled_qty * ingredient.qty_weight_g
    return scaled_qty


def active_ingredients(recipe: Recipe, starter: Optional[Starter] = None) -> Tuple[Ingredient, ...]:
    """Ingredientes de todas las masas más los del starter elegido (si hay)."""
    items: List[Ingredient] = []
    for dough in recipe.doughs:
        items.extend(dough.ingredients)
    if starter is not None:
        items.extend(starter.ingredients)
    return tuple(items)


def flour_base(ingredients: Iterable[Ingredient], scale_factor: float) -> float:
    """
    Base del porcentaje panadero: gramos por pieza (escalados) de los
    ingredientes del grupo "Flour". La harina en `count` se excluye.
    """
    total = 0.0
    for ingredient in ingredients:
        if ingredient.group != "Flour" or ingredient.unit == "count":
            continue
        total += ingredient.qty_g * scale_factor
    return total


def bakers_percentage(grams_per_piece: Optional[float], base: float) -> Optional[float]:
    """100 × gramos / harina; None si no hay gramos o la base es 0."""
    if grams_per_piece is None or base <= 0:
        return None
    return 100 * grams_per_piece / base


def total_dough_weight(pieces: float, dough_per_piece_g: float) -> float:
    return clamp_positive(pieces) * clamp_positive(dough_per_piece_g)


# ============================================================
# Agregación
# ============================================================

class _TotalAccumulator:
    """Acumulador mutable interno; se congela en `TotalRow` al final."""

    def __init__(self, name: str, key: str, unit: str) -> None:
        self.name = name
        self.key = key
        self.unit = unit
        self.total_g: Optional[float] = None
        self.total_count = 0.0
        self.units: List[str] = []

    def add(self, unit: str, grams_total: Optional[float], count_total: float) -> None:
        if grams_total is not None:
            self.total_g = (self.total_g or 0.0) + grams_total
        self.total_count += count_total
        if unit not in self.units:
            self.units.append(unit)

    def freeze(self) -> TotalRow:
        return TotalRow(
            name=self.name,
            key=self.key,
            unit=self.unit,
            total_g=self.total_g,
            total_count=self.total_count,
            units=tuple(self.units),
        )


def build_totals(
    ingredients: Iterable[Ingredient],
    pieces: float,
    scale_factor: float,
) -> Tuple[TotalRow, ...]:
    """
    Agrega ingredientes por nombre (recortado, sin distinguir mayúsculas).

    - Los gramos suman solo cuando están definidos; si ninguna aparición
      resolvió gramos, el total queda en None.
    - Las unidades `count` suman siempre, independientemente de los gramos.
    - Los nombres en blanco se ignoran.
    - Filas ordenadas por nombre, case-insensitive ascendente.
    """
    pieces = clamp_positive(pieces)
    rows: Dict[str, _TotalAccumulator] = {}
    for ingredient in ingredients:
        name = ingredient.name.strip()
        if not name:
            continue
        key = ingredient.aggregation_key
        scaled = ingredient.qty_g * scale_factor
        grams = ingredient_grams(ingredient, scaled)
        count_total = scaled * pieces if ingredient.unit == "count" else 0.0
        grams_total = grams * pieces if grams is not None else None

        acc = rows.get(key)
        if acc is None:
            acc = _TotalAccumulator(name=name, key=key, unit=ingredient.unit)
            rows[key] = acc
        acc.add(ingredient.unit, grams_total, count_total)

    frozen = [acc.freeze() for acc in rows.values()]
    frozen.sort(key=lambda row: (row.key, row.name))
    return tuple(frozen)


def _line(
    ingredient: Ingredient,
    pieces: float,
    scale_factor: float,
    base: float,
) -> IngredientLine:
    scaled = ingredient.qty_g * scale_factor
    grams = ingredient_grams(ingredient, scaled)
    return IngredientLine(
        ingredient_id=ingredient.id,
        name=ingredient.name,
        unit=ingredient.unit,
        group=ingredient.group,
        scaled_qty_per_piece=scaled,
        grams_per_piece=grams,
        batch_value=scaled * pieces,
        batch_grams=grams * pieces if grams is not None else None,
        bakers_pct=bakers_percentage(grams, base),
    )


def build_sections(
    recipe: Recipe,
    starter: Optional[Starter],
    pieces: float,
    scale_factor: float,
    base: float,
) -> Tuple[SectionView, ...]:
    """
    Vista por bloque: primero el starter activo (si hay), después cada masa.
    """
    pieces = clamp_positive(pieces)
    sections: List[SectionView] = []
    if starter is not None:
        sections.append(
            SectionView(
                id=starter.id,
                name=starter.name,
                kind="starter",
                description=starter.description,
                lines=tuple(_line(i, pieces, scale_factor, base) for i in starter.ingredients),
            )
        )
    for dough in recipe.doughs:
        sections.append(
            SectionView(
                id=dough.id,
                name=dough.name,
                kind="dough",
                description="",
                lines=tuple(_line(i, pieces, scale_factor, base) for i in dough.ingredients),
            )
        )
    return tuple(sections)


def ingredient_lookup(recipe: Recipe, starter: Optional[Starter] = None) -> Dict[str, str]:
    """id -> nombre de los ingredientes activos (para resolver referencias de pasos)."""
    return {i.id: i.name for i in active_ingredients(recipe, starter)}


# ============================================================
# Punto de entrada
# ============================================================

def scale_recipe(
    recipe: Recipe,
    pieces: float,
    dough_per_piece_g: float,
    starter_id: Optional[str] = None,
) -> ScalingResult:
    """
    Escala una receta a `pieces` piezas de `dough_per_piece_g` gramos.

    Parameters
    ----------
    recipe:
        Snapshot de la receta (no se muta).
    pieces:
        Piezas objetivo (se clampea a >= 1).
    dough_per_piece_g:
        Peso objetivo por pieza (se clampea a >= 1).
    starter_id:
        Starter a incluir en los totales. Un id desconocido equivale a ninguno.

    Returns
    -------
    ScalingResult
    """
    pieces = clamp_positive(pieces)
    target = clamp_positive(dough_per_piece_g)
    factor = compute_scale_factor(recipe.dough_per_piece_g, target)
    starter = recipe.find_starter(starter_id)
    if starter_id and starter is None:
        logger.debug(f"Starter {starter_id!r} no existe en la receta {recipe.id!r}; se escala sin starter")

    ingredients = active_ingredients(recipe, starter)
    base = flour_base(ingredients, factor)

    logger.debug(
        f"Escalando receta {recipe.id!r}: piezas={pieces} peso={target} factor={factor:.4f} "
        f"harina/pieza={base:.1f} ingredientes={len(ingredients)}"
    )

    return ScalingResult(
        scale_factor=factor,
        pieces=pieces,
        dough_per_piece_g=target,
        total_dough_g=total_dough_weight(pieces, target),
        flour_base_g=base,
        starter_id=starter.id if starter is not None else None,
        totals=build_totals(ingredients, pieces, factor),
        sections=build_sections(recipe, starter, pieces, factor, base),
    )
