"""
Catálogo de moldes y normalización de selecciones.

- Modelos de forma (variante etiquetada) y `MoldPreset`
- `MoldCatalog` inyectable y `DEFAULT_CATALOG`
- Helpers: size keys, normalización, peso sugerido
"""
