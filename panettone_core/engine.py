from __future__ import annotations

"""
panettone_core.engine
=====================

Orquestador de alto nivel de una vista de escalado.

Este módulo expone una **API interna** y estable para correr el flujo completo
(request → escalado → normalización de molde → render) sin preocuparse por:

- persistencia
- detalles de la UI que lo consuma

Cualquier capa externa debería llamar a `run_scaling` en vez de combinar a mano
`scaling`, `molds` y `render`.
"""

import logging
from typing import Optional, TypedDict

from .domain_models import MoldSelection, Recipe
from .molds.catalog import DEFAULT_CATALOG, MoldCatalog
from .molds.helpers import (
    find_selected_preset,
    normalize_mold_selection,
    suggested_weight,
    suggested_weight_for_selection,
)
from .render.profiles import DETALLADO_V1, ShoppingListProfile
from .render.renderer import ShoppingListRenderer
from .requests import ScalingRequest
from .scaling import ScalingResult, scale_recipe

logger = logging.getLogger(__name__)


class ScalingRunResult(TypedDict):
    """
    Resultado de una vista de escalado.

    Estructura simple pensada para:
    - Mostrar la vista (Markdown o valores tipados).
    - Realizar asserts en tests de integración.
    """

    result: ScalingResult
    """Valores escalados tipados (fuente de verdad para cualquier presentación)."""

    markdown: str
    """Markdown renderizado según el perfil indicado."""

    mold_selection: Optional[MoldSelection]
    """Selección de molde de la receta, normalizada al size key canónico."""

    suggested_weight_g: Optional[int]
    """Peso por pieza sugerido por el molde seleccionado (None si no hay preset)."""


def default_request(recipe: Recipe) -> ScalingRequest:
    """
    Request inicial de la vista: la línea base de la receta y el primer starter.
    """
    starter_id = recipe.starters[0].id if recipe.starters else None
    return ScalingRequest(
        pieces=recipe.pieces,
        dough_per_piece_g=recipe.dough_per_piece_g,
        starter_id=starter_id,
    )


def apply_mold_suggestion(
    request: ScalingRequest,
    selection: Optional[MoldSelection],
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> ScalingRequest:
    """
    Devuelve un request con el peso por pieza sugerido por el molde.

    Si la selección no matchea ningún preset, el request vuelve sin cambios.
    """
    preset = find_selected_preset(selection, catalog)
    if preset is None:
        return request
    weight = suggested_weight(preset)
    logger.debug(f"Peso sugerido por molde {preset.product_type} {preset.mold_rating!r}: {weight} g")
    return request.with_updates(dough_per_piece_g=weight)


def run_scaling(
    recipe: Recipe,
    request: Optional[ScalingRequest] = None,
    *,
    profile: ShoppingListProfile = DETALLADO_V1,
    catalog: MoldCatalog = DEFAULT_CATALOG,
) -> ScalingRunResult:
    """
    Calcula una vista de escalado completa.

    Flujo:
    ------
    1) Request por defecto si no se pasa uno (`default_request`).
    2) Escalado puro (`scaling.scale_recipe`).
    3) Normalización de la selección de molde contra `catalog`.
    4) Render a Markdown con `profile`.

    No muta `recipe` ni toca persistencia.
    """
    if request is None:
        request = default_request(recipe)

    result = scale_recipe(
        recipe,
        pieces=request.pieces,
        dough_per_piece_g=request.dough_per_piece_g,
        starter_id=request.starter_id,
    )
    selection = normalize_mold_selection(recipe.mold_selection, catalog)
    markdown = ShoppingListRenderer().render_markdown(
        recipe,
        result,
        profile=profile,
        display_unit=request.display_unit,
    )

    logger.info(
        f"Vista de escalado lista para {recipe.name!r}: {result.pieces:g} × {result.dough_per_piece_g:g} g "
        f"({len(result.totals)} ingredientes en la lista de compras)"
    )

    return {
        "result": result,
        "markdown": markdown,
        "mold_selection": selection,
        "suggested_weight_g": suggested_weight_for_selection(selection, catalog),
    }
