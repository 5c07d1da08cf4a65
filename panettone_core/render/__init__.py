"""
Presentación de recetas escaladas.

- Perfiles de documento (qué secciones y con qué títulos)
- Renderer a Markdown y formateadores de celdas
"""
