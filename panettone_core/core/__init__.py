"""
Interfaces del core hacia sus colaboradores externos.

- `RecipeRepository`: persistencia de la colección de recetas
"""
