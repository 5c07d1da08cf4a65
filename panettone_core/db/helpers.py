"""
Funciones helper para persistir la colección de recetas.

Estas funciones facilitan:
- Completar registros guardados por versiones viejas (`backfill_record`)
- Resolver una receta por slug / nombre / slug codificado en URL
  (`find_recipe_by_identifier`)
- Leer y escribir la colección con `SqlRecipeRepository`
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import unquote

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ..domain_models import Recipe, recipe_from_dict, recipe_to_dict
from ..editing import MAIN_DOUGH_NAME
from ..slug import slugify
from .database import get_db_session
from .models import RecipeRecord

logger = logging.getLogger(__name__)


# ============================================================
# Backfill y búsqueda
# ============================================================

def backfill_record(data: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
    """
    Completa un registro crudo guardado por una versión anterior.

    - Sin slug: se deriva del nombre.
    - Sin masas: la lista plana heredada `ingredients` pasa a una única
      "Main dough" con id `dough-{id}`.
    - Sin starters (o no es lista): lista vacía.
    - Starter sin descripción: "".

    Args:
        data: Registro crudo (no se muta).

    Returns:
        (registro completado, hubo cambios que conviene volver a guardar)
    """
    record = dict(data)
    changed = False

    if not record.get("slug"):
        record["slug"] = slugify(str(record.get("name") or ""))
        changed = True

    if not record.get("doughs"):
        record["doughs"] = [
            {
                "id": f"dough-{record.get('id', '')}",
                "name": MAIN_DOUGH_NAME,
                "ingredients": list(record.get("ingredients") or []),
            }
        ]
        changed = True

    if not isinstance(record.get("starters"), list):
        record["starters"] = []
        changed = True

    starters = []
    for starter in record["starters"]:
        if not isinstance(starter, dict):
            changed = True
            continue
        starter = dict(starter)
        if starter.get("description") is None:
            starter["description"] = ""
            changed = True
        starters.append(starter)
    record["starters"] = starters

    if "ingredients" in record:
        # La lista plana ya vive en la masa principal
        del record["ingredients"]
        changed = True

    return record, changed


def find_recipe_by_identifier(recipes: Iterable[Recipe], key: str) -> Optional[Recipe]:
    """
    Primera receta que matchea `key` (sin distinguir mayúsculas) por:

    - slug guardado == key
    - slug guardado == key decodificado (percent-encoding)
    - nombre == key decodificado
    - slugify(nombre) == key

    Nunca lanza: un key vacío devuelve None.
    """
    if not key:
        return None
    normalized = str(key).lower()
    decoded = unquote(str(key)).lower()
    for recipe in recipes:
        slug = (recipe.slug or "").lower()
        name = (recipe.name or "").lower()
        if slug == normalized or slug == decoded or name == decoded or slugify(name) == normalized:
            return recipe
    return None


# ============================================================
# Repositorio SQLAlchemy
# ============================================================

def _apply(record: RecipeRecord, recipe: Recipe) -> None:
    record.slug = recipe.slug
    record.name = recipe.name
    record.category = recipe.category
    record.payload_json = json.dumps(recipe_to_dict(recipe), ensure_ascii=False)
    record.created_at = recipe.created_at
    record.updated_at = recipe.updated_at


class SqlRecipeRepository:
    """
    Implementación de `RecipeRepository` sobre SQLAlchemy.

    Args:
        engine: Engine explícito (tests). Si es None se usa el engine global
            configurado por `DATABASE_URL`.
    """

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self.engine = engine

    def _session(self):
        return get_db_session(self.engine)

    def _load(self, session: Session) -> List[Recipe]:
        rows = session.execute(
            select(RecipeRecord).order_by(RecipeRecord.position, RecipeRecord.id)
        ).scalars().all()

        recipes: List[Recipe] = []
        for row in rows:
            try:
                data = json.loads(row.payload_json or "")
            except json.JSONDecodeError as e:
                logger.warning(f"Receta {row.id!r} con payload inválido, se omite: {e}")
                continue
            if not isinstance(data, dict):
                logger.warning(f"Receta {row.id!r} con payload que no es un objeto, se omite")
                continue

            data.setdefault("id", row.id)
            data, changed = backfill_record(data)
            recipe = recipe_from_dict(data)
            if changed:
                logger.info(f"Backfill de la receta {row.id!r} ({recipe.name!r})")
                _apply(row, recipe)
            recipes.append(recipe)
        return recipes

    def load(self) -> List[Recipe]:
        with self._session() as session:
            return self._load(session)

    def save(self, recipes: Sequence[Recipe]) -> None:
        """Reemplaza la colección completa (el orden de `recipes` es el guardado)."""
        with self._session() as session:
            session.execute(delete(RecipeRecord))
            for position, recipe in enumerate(recipes):
                record = RecipeRecord(id=recipe.id, position=position)
                _apply(record, recipe)
                session.add(record)
        logger.info(f"Colección guardada: {len(recipes)} recetas")

    def upsert(self, recipe: Recipe) -> List[Recipe]:
        """Reemplaza por id, o inserta al principio de la colección."""
        with self._session() as session:
            record = session.get(RecipeRecord, recipe.id)
            if record is None:
                first = session.execute(select(func.min(RecipeRecord.position))).scalar()
                record = RecipeRecord(id=recipe.id, position=(first - 1) if first is not None else 0)
                session.add(record)
                logger.info(f"Receta nueva {recipe.id!r} ({recipe.name!r})")
            _apply(record, recipe)
            session.flush()
            return self._load(session)

    def delete_by_id(self, recipe_id: str) -> List[Recipe]:
        with self._session() as session:
            session.execute(delete(RecipeRecord).where(RecipeRecord.id == recipe_id))
            return self._load(session)

    def find_by_identifier(self, key: str) -> Optional[Recipe]:
        return find_recipe_by_identifier(self.load(), key)
