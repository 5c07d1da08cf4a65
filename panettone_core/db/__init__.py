"""
Persistencia de recetas con SQLAlchemy.

- `database`: engine, sesiones y `Base` declarativa
- `models`: tabla `recipes` (una fila por receta, payload JSON)
- `helpers`: backfill de registros viejos, resolución de identificadores y
  `SqlRecipeRepository`
"""
