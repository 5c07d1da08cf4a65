"""
Renderer de la lista de compras escalada.

Renderiza un `ScalingResult` (más la receta de origen) a Markdown según un
`ShoppingListProfile`. También expone los formateadores de celda que usa
cualquier presentación (`format_total`, `format_line`, `format_bakers`).

Regla de display importante: un peso desconocido se muestra con
`UNKNOWN_WEIGHT` ("—"), NUNCA como 0.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..domain_models import Recipe, RecipeStep
from ..scaling import IngredientLine, ScalingResult, TotalRow, ingredient_lookup
from ..units import format_number, to_display
from .profiles import DETALLADO_V1, ShoppingListProfile

UNKNOWN_WEIGHT = "—"


def _weight(grams: float, unit: str) -> str:
    if unit == "g":
        return f"{format_number(grams, 0)} g"
    return f"{format_number(to_display(grams, unit), 2)} {unit}"


def format_total(row: TotalRow, display_unit: Optional[str] = None) -> str:
    """
    Celda de total de la lista de compras.

    - count: "12 (600 g)" o "12 (—)" si no se conoce el peso por unidad
    - peso desconocido: "—"
    - g: sin decimales; otras unidades: convertidas, 2 decimales
    - fila de peso que también juntó unidades `count`: "600 g + 4"
    """
    if row.unit == "count":
        grams = format_number(row.total_g, 0) + " g" if row.total_g is not None else UNKNOWN_WEIGHT
        return f"{format_number(row.total_count, 0)} ({grams})"
    if row.total_g is None:
        text = UNKNOWN_WEIGHT
    else:
        text = _weight(row.total_g, display_unit or row.unit)
    if row.total_count:
        text += f" + {format_number(row.total_count, 0)}"
    return text


def format_line(line: IngredientLine) -> str:
    """Celda de cantidad del batch para un ingrediente dentro de su masa."""
    if line.unit == "count":
        grams = format_number(line.batch_grams, 0) + " g" if line.batch_grams is not None else UNKNOWN_WEIGHT
        return f"{format_number(line.batch_value, 0)} ({grams})"
    return _weight(line.batch_value, line.unit)


def format_bakers(pct: Optional[float]) -> str:
    if pct is None:
        return UNKNOWN_WEIGHT
    return f"{format_number(pct, 1)}%"


def _step_meta(step: RecipeStep) -> str:
    parts: List[str] = []
    if step.duration_min is not None:
        parts.append(f"{format_number(step.duration_min, 0)} min")
    if step.temp_c is not None:
        parts.append(f"{format_number(step.temp_c, 1)} °C")
    return ", ".join(parts)


class ShoppingListRenderer:
    """
    Renderer de recetas escaladas.

    Funciona solo con valores ya calculados: no recalcula nada del escalado,
    salvo el lookup id -> nombre para los pasos.
    """

    def render_markdown(
        self,
        recipe: Recipe,
        result: ScalingResult,
        profile: ShoppingListProfile = DETALLADO_V1,
        display_unit: Optional[str] = None,
    ) -> str:
        """
        Renderiza la receta escalada a Markdown según el perfil indicado.
        """
        def title(key: str, fallback: str) -> str:
            t = (profile.titles.get(key, "") or "").strip()
            return t if t else fallback

        starter = recipe.find_starter(result.starter_id)
        lines: List[str] = []
        lines.append(f"# {recipe.name.strip() or 'Untitled recipe'}\n\n")

        # RESUMEN
        if "summary" in profile.show:
            lines.append(f"## {title('summary', 'Batch')}\n\n")
            lines.append(f"- **Category**: {recipe.category}\n")
            lines.append(
                f"- **Base recipe**: {format_number(recipe.pieces, 1)} pieces · "
                f"{format_number(recipe.dough_per_piece_g, 0)} g per piece\n"
            )
            lines.append(
                f"- **Scaled to**: {format_number(result.pieces, 1)} × "
                f"{format_number(result.dough_per_piece_g, 0)} g "
                f"(x{format_number(result.scale_factor, 2)})\n"
            )
            lines.append(f"- **Total dough**: {format_number(result.total_dough_g, 0)} g\n")
            if starter is not None:
                lines.append(f"- **Starter**: {starter.name}\n")
            lines.append("\n")

        # LISTA DE COMPRAS
        if "totals" in profile.show:
            lines.append(f"## {title('totals', 'Shopping list')}\n\n")
            if not result.totals:
                lines.append("_Add ingredients to see totals._\n\n")
            else:
                lines.append("| Ingredient | Total |\n")
                lines.append("|---|---|\n")
                for row in result.totals:
                    lines.append(f"| {row.name} | {format_total(row, display_unit)} |\n")
                lines.append("\n")

        # POR MASA
        if "doughs" in profile.show:
            show_bakers = "bakers" in profile.show
            lines.append(f"## {title('doughs', 'Ingredients by dough')}\n\n")
            for section in result.sections:
                heading = f"Starter: {section.name}" if section.kind == "starter" else section.name
                lines.append(f"### {heading}\n\n")
                if section.description.strip():
                    lines.append(f"{section.description.strip()}\n\n")
                if not section.lines:
                    lines.append("_No ingredients._\n\n")
                    continue
                if show_bakers:
                    lines.append("| Ingredient | Total | Baker's % |\n")
                    lines.append("|---|---|---|\n")
                else:
                    lines.append("| Ingredient | Total |\n")
                    lines.append("|---|---|\n")
                for line in section.lines:
                    row = f"| {line.name} | {format_line(line)} |"
                    if show_bakers:
                        row += f" {format_bakers(line.bakers_pct)} |"
                    lines.append(row + "\n")
                lines.append("\n")

        # PROCEDIMIENTO
        if "procedure" in profile.show:
            lines.append(f"## {title('procedure', 'Procedure')}\n\n")
            if not recipe.steps:
                lines.append("_No steps yet._\n\n")
            else:
                names: Dict[str, str] = ingredient_lookup(recipe, starter)
                for n, step in enumerate(recipe.steps, start=1):
                    header = f"{n}. **{step.title.strip()}**"
                    if step.phase.strip():
                        header += f" _{step.phase.strip()}_"
                    meta = _step_meta(step)
                    if meta:
                        header += f" ({meta})"
                    lines.append(header + "\n")
                    if step.notes.strip():
                        lines.append(f"   {step.notes.strip()}\n")
                    referenced = [names[i] for i in step.ingredient_ids if i in names]
                    if referenced:
                        lines.append(f"   Ingredients: {', '.join(referenced)}\n")
                lines.append("\n")

        return "".join(lines).rstrip() + "\n"
