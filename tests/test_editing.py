"""
Tests de las reglas de edición del borrador.

Verifica que:
1) Cambiar el peso por pieza reescala todas las cantidades
2) Pasar a una sola masa fusiona las fases conservando ids
3) Borrar un dueño poda las referencias de los pasos
4) La normalización al guardar limpia el borrador
"""

from dataclasses import replace

import pytest

from panettone_core import editing
from panettone_core.domain_models import (
    Dough,
    Ingredient,
    MoldSelection,
    Recipe,
    RecipeStep,
    Starter,
)


@pytest.fixture
def recipe():
    return Recipe(
        id="r1",
        name="  Colomba pasquale ",
        slug="",
        category="Colomba",
        pieces=2,
        dough_per_piece_g=1000,
        doughs=(
            Dough(
                id="d1",
                name="First dough",
                ingredients=(
                    Ingredient(id="flour", name="Flour", qty_g=400, group="Flour"),
                    Ingredient(id="water", name="Water", qty_g=200, group="Liquid"),
                ),
            ),
            Dough(
                id="d2",
                name="",
                ingredients=(
                    Ingredient(id="sugar", name="Sugar", qty_g=120, group="Sugar"),
                    Ingredient(id="blank", name="  ", qty_g=10),
                ),
            ),
        ),
        starters=(
            Starter(
                id="s1",
                name="",
                description="  stiff  ",
                ingredients=(Ingredient(id="lm", name="Lievito madre", qty_g=80, group="Starter"),),
            ),
        ),
        steps=(
            RecipeStep(id="st1", title="Mix first dough", ingredient_ids=("flour", "water", "lm")),
            RecipeStep(id="st2", title="Mix second dough", ingredient_ids=("sugar", "blank")),
            RecipeStep(id="st3", title="   "),
        ),
        created_at="2025-11-01T10:00:00+00:00",
        updated_at="2025-11-01T10:00:00+00:00",
    )


def _ingredient(recipe, ingredient_id):
    return next(i for i in recipe.all_ingredients() if i.id == ingredient_id)


def test_apply_dough_per_piece_rescales_everything(recipe):
    updated = editing.apply_dough_per_piece(recipe, 1100)

    assert updated.dough_per_piece_g == 1100
    assert _ingredient(updated, "flour").qty_g == pytest.approx(440)
    assert _ingredient(updated, "lm").qty_g == pytest.approx(88)
    # la receta de entrada no se toca
    assert _ingredient(recipe, "flour").qty_g == 400


def test_apply_dough_per_piece_clamps_new_weight(recipe):
    updated = editing.apply_dough_per_piece(recipe, 0)
    assert updated.dough_per_piece_g == 1
    assert _ingredient(updated, "flour").qty_g == pytest.approx(0.4)


def test_single_dough_mode_merges_phases(recipe):
    assert editing.is_multi_dough(recipe)

    merged = editing.set_dough_mode(recipe, multiple=False)

    assert len(merged.doughs) == 1
    assert merged.doughs[0].name == editing.MAIN_DOUGH_NAME
    assert merged.doughs[0].id not in ("d1", "d2")
    assert [i.id for i in merged.doughs[0].ingredients] == ["flour", "water", "sugar", "blank"]
    assert merged.steps == recipe.steps


def test_multi_dough_mode_is_a_noop(recipe):
    assert editing.set_dough_mode(recipe, multiple=True) is recipe


def test_remove_dough_prunes_step_references(recipe):
    updated = editing.remove_dough(recipe, "d2")

    assert [d.id for d in updated.doughs] == ["d1"]
    assert updated.steps[1].ingredient_ids == ()
    assert updated.steps[0].ingredient_ids == ("flour", "water", "lm")


def test_remove_last_dough_is_rejected(recipe):
    single = editing.remove_dough(recipe, "d2")
    with pytest.raises(ValueError):
        editing.remove_dough(single, "d1")
    with pytest.raises(ValueError):
        editing.remove_dough(recipe, "missing")


def test_remove_starter_prunes_step_references(recipe):
    updated = editing.remove_starter(recipe, "s1")
    assert updated.starters == ()
    assert updated.steps[0].ingredient_ids == ("flour", "water")


def test_remove_ingredient_prunes_step_references(recipe):
    updated = editing.remove_ingredient(recipe, "d1", "water")
    assert [i.id for i in updated.doughs[0].ingredients] == ["flour"]
    assert updated.steps[0].ingredient_ids == ("flour", "lm")


def test_unknown_owner_is_rejected(recipe):
    with pytest.raises(ValueError):
        editing.add_ingredient(recipe, "nope")


def test_update_ingredient_clamps_values(recipe):
    updated = editing.update_ingredient(recipe, "d1", "flour", qty_g=-5, qty_weight_g=0, name="Manitoba")
    flour = _ingredient(updated, "flour")
    assert flour.qty_g == 0
    assert flour.qty_weight_g is None
    assert flour.name == "Manitoba"
    with pytest.raises(ValueError):
        editing.update_ingredient(recipe, "d1", "flour", id="other")


def test_add_dough_and_starter_names(recipe):
    updated = editing.add_starter(editing.add_dough(recipe))
    assert updated.doughs[-1].name == "Dough 3"
    assert updated.starters[-1].name == "Starter 2"
    assert len(updated.doughs[-1].ingredients) == 1
    assert updated.doughs[-1].ingredients[0].name == ""


def test_move_and_toggle_steps(recipe):
    moved = editing.move_step(recipe, "st2", "up")
    assert [s.id for s in moved.steps] == ["st2", "st1", "st3"]
    assert editing.move_step(moved, "st2", "up") is moved
    assert editing.move_step(recipe, "st3", "down") is recipe

    toggled = editing.toggle_step_ingredient(recipe, "st1", "water")
    assert toggled.steps[0].ingredient_ids == ("flour", "lm")
    toggled = editing.toggle_step_ingredient(toggled, "st1", "water")
    assert toggled.steps[0].ingredient_ids == ("flour", "lm", "water")


def test_set_mold_selection(recipe):
    selection = MoldSelection("Colomba", "1 kg")
    assert editing.set_mold_selection(recipe, selection).mold_selection == selection


def test_normalize_for_save(recipe):
    saved = editing.normalize_for_save(recipe, now="2025-12-01T08:00:00+00:00")

    assert saved.name == "Colomba pasquale"
    assert saved.slug == "colomba-pasquale"
    assert saved.doughs[1].name == "Dough 2"
    assert [i.id for i in saved.doughs[1].ingredients] == ["sugar"]
    assert saved.starters[0].name == "Starter 1"
    assert saved.starters[0].description == "stiff"
    assert [s.id for s in saved.steps] == ["st1", "st2"]
    assert saved.steps[1].ingredient_ids == ("sugar",)
    assert saved.created_at == "2025-11-01T10:00:00+00:00"
    assert saved.updated_at == "2025-12-01T08:00:00+00:00"


def test_normalize_for_save_requires_a_name(recipe):
    with pytest.raises(ValueError):
        editing.normalize_for_save(replace(recipe, name="   "))


def test_new_recipe_uses_settings(monkeypatch):
    from panettone_core.config import get_settings

    monkeypatch.setenv("DEFAULT_DOUGH_PER_PIECE_G", "750")
    monkeypatch.setenv("DEFAULT_CATEGORY", "Pandoro")
    get_settings.cache_clear()
    try:
        draft = editing.new_recipe()
    finally:
        get_settings.cache_clear()

    assert draft.dough_per_piece_g == 750
    assert draft.category == "Pandoro"
    assert [d.name for d in draft.doughs] == [editing.MAIN_DOUGH_NAME]
    assert draft.starters == () and draft.steps == ()
    assert draft.created_at == draft.updated_at
