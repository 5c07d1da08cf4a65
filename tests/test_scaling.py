"""
Tests del motor de escalado (funciones puras de `panettone_core.scaling`).
"""

from dataclasses import replace

import pytest

from panettone_core.domain_models import Dough, Ingredient, Recipe, Starter
from panettone_core.scaling import (
    compute_scale_factor,
    flour_base,
    ingredient_grams,
    scale_recipe,
)


@pytest.fixture
def recipe():
    """Receta base de 1000 g por pieza, con dos masas y un starter."""
    return Recipe(
        id="r1",
        name="Panettone classico",
        slug="panettone-classico",
        pieces=1,
        dough_per_piece_g=1000,
        doughs=(
            Dough(
                id="d1",
                name="First dough",
                ingredients=(
                    Ingredient(id="flour1", name="Flour", qty_g=500, group="Flour"),
                    Ingredient(id="water", name="Water", qty_g=300, group="Liquid"),
                ),
            ),
            Dough(
                id="d2",
                name="Second dough",
                ingredients=(
                    Ingredient(id="sugar", name="Sugar", qty_g=150, group="Sugar"),
                    Ingredient(id="butter", name="Butter", qty_g=50, group="Fat"),
                ),
            ),
        ),
        starters=(
            Starter(
                id="s1",
                name="Lievito madre",
                ingredients=(
                    Ingredient(id="lm-flour", name="flour ", qty_g=100, group="Flour"),
                    Ingredient(id="lm-water", name="Water", qty_g=50, group="Liquid"),
                ),
            ),
        ),
    )


def _eggs_recipe(qty_weight_g):
    return Recipe(
        id="r2",
        name="Eggs only",
        slug="eggs-only",
        dough_per_piece_g=1000,
        doughs=(
            Dough(
                id="d1",
                name="Main dough",
                ingredients=(
                    Ingredient(id="flour", name="Flour", qty_g=500, group="Flour"),
                    Ingredient(
                        id="eggs",
                        name="Eggs",
                        qty_g=2,
                        unit="count",
                        group="Eggs",
                        qty_weight_g=qty_weight_g,
                    ),
                ),
            ),
        ),
    )


def test_scale_factor_guards_baseline():
    assert compute_scale_factor(1000, 1100) == pytest.approx(1.1)
    assert compute_scale_factor(0, 500) == 500
    assert compute_scale_factor(float("nan"), 500) == 500
    assert compute_scale_factor(1000, -3) == pytest.approx(0.001)


def test_target_1100_by_3_pieces(recipe):
    result = scale_recipe(recipe, pieces=3, dough_per_piece_g=1100)

    assert result.scale_factor == pytest.approx(1.1)
    assert result.total_dough_g == pytest.approx(3300)
    assert result.total_for("Flour").total_g == pytest.approx(1650)
    assert result.total_for("Water").total_g == pytest.approx(990)

    flour_line = result.line_for("flour1")
    water_line = result.line_for("water")
    assert flour_line.bakers_pct == pytest.approx(100)
    assert water_line.bakers_pct == pytest.approx(60)
    assert water_line.batch_value == pytest.approx(990)


def test_bakers_percentage_ignores_pieces(recipe):
    one = scale_recipe(recipe, pieces=1, dough_per_piece_g=900, starter_id="s1")
    many = scale_recipe(recipe, pieces=50, dough_per_piece_g=900, starter_id="s1")
    for ingredient in recipe.all_ingredients():
        assert one.line_for(ingredient.id).bakers_pct == pytest.approx(many.line_for(ingredient.id).bakers_pct)


def test_totals_are_linear_in_pieces(recipe):
    single = scale_recipe(recipe, pieces=1, dough_per_piece_g=1100)
    double = scale_recipe(recipe, pieces=2, dough_per_piece_g=1100)
    for row in single.totals:
        assert double.total_for(row.name).total_g == pytest.approx(2 * row.total_g)


def test_names_merge_case_insensitively(recipe):
    result = scale_recipe(recipe, pieces=1, dough_per_piece_g=1000, starter_id="s1")

    flour = result.total_for("FLOUR")
    assert flour.name == "Flour"
    assert flour.total_g == pytest.approx(600)
    assert result.total_for("water").total_g == pytest.approx(350)
    assert [row.name for row in result.totals] == ["Butter", "Flour", "Sugar", "Water"]


def test_starter_only_counts_when_selected(recipe):
    without = scale_recipe(recipe, pieces=1, dough_per_piece_g=1000)
    with_starter = scale_recipe(recipe, pieces=1, dough_per_piece_g=1000, starter_id="s1")

    assert without.starter_id is None
    assert without.total_for("Flour").total_g == pytest.approx(500)
    assert without.flour_base_g == pytest.approx(500)
    assert with_starter.flour_base_g == pytest.approx(600)
    assert [s.kind for s in with_starter.sections] == ["starter", "dough", "dough"]


def test_unknown_starter_is_ignored(recipe):
    result = scale_recipe(recipe, pieces=1, dough_per_piece_g=1000, starter_id="missing")
    assert result.starter_id is None
    assert len(result.sections) == 2


def test_count_ingredient_with_weight():
    result = scale_recipe(_eggs_recipe(50), pieces=3, dough_per_piece_g=1000)
    eggs = result.total_for("Eggs")
    assert eggs.total_count == pytest.approx(6)
    assert eggs.total_g == pytest.approx(300)
    assert result.line_for("eggs").bakers_pct == pytest.approx(20)


def test_count_ingredient_without_weight_has_unknown_grams():
    result = scale_recipe(_eggs_recipe(None), pieces=3, dough_per_piece_g=1000)
    eggs = result.total_for("Eggs")
    assert eggs.total_count == pytest.approx(6)
    assert eggs.total_g is None
    assert not eggs.has_known_weight
    assert result.line_for("eggs").batch_grams is None
    assert result.line_for("eggs").bakers_pct is None


def test_count_flour_is_not_part_of_the_flour_base():
    counted = Ingredient(id="x", name="Flour bag", qty_g=1, unit="count", group="Flour", qty_weight_g=1000)
    assert flour_base([counted], 1.0) == 0
    assert ingredient_grams(counted, 2) == 2000


def test_no_flour_means_no_percentages():
    recipe = Recipe(
        id="r3",
        name="Syrup",
        slug="syrup",
        doughs=(Dough(id="d", name="Main dough", ingredients=(Ingredient(id="w", name="Water", qty_g=100, group="Liquid"),)),),
    )
    result = scale_recipe(recipe, pieces=1, dough_per_piece_g=1100)
    assert result.flour_base_g == 0
    assert result.line_for("w").bakers_pct is None


def test_malformed_targets_are_clamped(recipe):
    result = scale_recipe(recipe, pieces=0, dough_per_piece_g=float("inf"))
    assert result.pieces == 1
    assert result.dough_per_piece_g == 1
    assert result.total_dough_g == 1


def test_per_piece_grams_are_linear_in_weight(recipe):
    base = scale_recipe(recipe, pieces=3, dough_per_piece_g=800, starter_id="s1")
    doubled = scale_recipe(recipe, pieces=3, dough_per_piece_g=1600, starter_id="s1")

    for ingredient in recipe.all_ingredients():
        line = base.line_for(ingredient.id)
        assert doubled.line_for(ingredient.id).grams_per_piece == pytest.approx(2 * line.grams_per_piece)
        assert doubled.line_for(ingredient.id).batch_grams == pytest.approx(2 * line.batch_grams)
    for row in base.totals:
        assert doubled.total_for(row.name).total_g == pytest.approx(2 * row.total_g)


def test_names_merge_across_doughs(recipe):
    second = Dough(
        id="d3",
        name="Third dough",
        ingredients=(Ingredient(id="flour3", name="flour ", qty_g=200, group="Flour"),),
    )
    result = scale_recipe(replace(recipe, doughs=recipe.doughs + (second,)), pieces=2, dough_per_piece_g=1000)

    assert [row.name for row in result.totals].count("Flour") == 1
    assert result.total_for("flour").total_g == pytest.approx(1400)
    assert Ingredient(id="x", name=" FLOUR ").aggregation_key == "flour"


def test_merged_row_keeps_every_unit_seen():
    recipe = Recipe(
        id="r4",
        name="Mixed eggs",
        slug="mixed-eggs",
        dough_per_piece_g=1000,
        doughs=(
            Dough(id="d1", name="First dough", ingredients=(Ingredient(id="e1", name="Eggs", qty_g=100, group="Eggs"),)),
            Dough(
                id="d2",
                name="Second dough",
                ingredients=(Ingredient(id="e2", name="eggs", qty_g=2, unit="count", group="Eggs", qty_weight_g=50),),
            ),
        ),
    )
    row = scale_recipe(recipe, pieces=2, dough_per_piece_g=1000).total_for("Eggs")

    assert row.unit == "g"
    assert row.units == ("g", "count")
    assert row.total_g == pytest.approx(400)
    assert row.total_count == pytest.approx(4)
