"""
panettone_core
==============

Motor de escalado de recetas de masas festivas (panettone, pandoro, colomba).

Punto de entrada recomendado: `panettone_core.engine.run_scaling`.
"""
