"""
Tests de persistencia contra un SQLite temporal.

Verifica que:
1) Los registros viejos se completan al cargar y se vuelven a guardar
2) Un payload inválido se omite sin romper la carga
3) upsert reemplaza por id o inserta al principio
4) La resolución de identificadores acepta slug, nombre y slug codificado
"""

import json
from dataclasses import replace

import pytest

from panettone_core.core.abstractions import RecipeRepository
from panettone_core.db.database import create_db_engine, get_db_session
from panettone_core.db.helpers import (
    SqlRecipeRepository,
    backfill_record,
    find_recipe_by_identifier,
)
from panettone_core.db.models import RecipeRecord
from panettone_core.editing import new_recipe, normalize_for_save


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'recipes.sqlite'}")
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine):
    return SqlRecipeRepository(engine)


def _draft(name):
    return normalize_for_save(new_recipe(name))


def _insert_raw(engine, record_id, payload, position=0):
    with get_db_session(engine) as session:
        session.add(RecipeRecord(id=record_id, position=position, payload_json=payload))


def test_backfill_legacy_record():
    record, changed = backfill_record(
        {
            "id": "old",
            "name": "Nonna's Panettone",
            "ingredients": [{"id": "i1", "name": "Flour", "qty_g": 500}],
            "starters": [{"id": "s1", "name": "LM"}],
        }
    )
    assert changed
    assert record["slug"] == "nonna-s-panettone"
    assert record["doughs"] == [
        {"id": "dough-old", "name": "Main dough", "ingredients": [{"id": "i1", "name": "Flour", "qty_g": 500}]}
    ]
    assert record["starters"][0]["description"] == ""
    assert "ingredients" not in record


def test_backfill_leaves_complete_records_alone():
    complete = {"id": "x", "name": "X", "slug": "x", "doughs": [{"id": "d"}], "starters": []}
    record, changed = backfill_record(complete)
    assert not changed
    assert record == complete


def test_load_backfills_and_writes_back(engine, repo):
    legacy = {
        "id": "r-old",
        "name": "Old Panettone",
        "dough_per_piece_g": 1000,
        "ingredients": [{"id": "i1", "name": "Eggs", "qty_g": 4, "unit": "qty"}],
    }
    _insert_raw(engine, "r-old", json.dumps(legacy))

    recipes = repo.load()

    assert len(recipes) == 1
    recipe = recipes[0]
    assert recipe.slug == "old-panettone"
    assert recipe.doughs[0].id == "dough-r-old"
    assert recipe.doughs[0].ingredients[0].unit == "count"

    with get_db_session(engine) as session:
        stored = json.loads(session.get(RecipeRecord, "r-old").payload_json)
    assert stored["doughs"][0]["name"] == "Main dough"
    assert stored["slug"] == "old-panettone"


def test_invalid_payload_is_skipped(engine, repo, caplog):
    _insert_raw(engine, "broken", "{not json", position=0)
    _insert_raw(engine, "ok", json.dumps({"id": "ok", "name": "Fine", "slug": "fine", "doughs": [{"id": "d"}], "starters": []}), position=1)

    recipes = repo.load()

    assert [r.id for r in recipes] == ["ok"]
    assert "broken" in caplog.text


def test_upsert_prepends_and_replaces(repo):
    first = _draft("Classico")
    second = _draft("Colomba")

    repo.upsert(first)
    recipes = repo.upsert(second)
    assert [r.id for r in recipes] == [second.id, first.id]

    renamed = normalize_for_save(replace(first, name="Classico milanese"))
    recipes = repo.upsert(renamed)
    assert [r.id for r in recipes] == [second.id, first.id]
    assert recipes[1].name == "Classico milanese"


def test_save_and_delete(repo):
    a, b, c = _draft("A"), _draft("B"), _draft("C")
    repo.save([a, b, c])
    assert [r.id for r in repo.load()] == [a.id, b.id, c.id]

    assert [r.id for r in repo.delete_by_id(b.id)] == [a.id, c.id]
    assert [r.id for r in repo.delete_by_id("missing")] == [a.id, c.id]


def test_find_by_identifier(repo):
    recipe = _draft("Panettone al cioccolato")
    repo.upsert(recipe)

    assert repo.find_by_identifier("panettone-al-cioccolato").id == recipe.id
    assert repo.find_by_identifier("PANETTONE-AL-CIOCCOLATO").id == recipe.id
    assert repo.find_by_identifier("Panettone%20al%20cioccolato").id == recipe.id
    assert repo.find_by_identifier("pandoro") is None
    assert find_recipe_by_identifier([recipe], "") is None


def test_sql_repository_satisfies_protocol(repo):
    assert isinstance(repo, RecipeRepository)
