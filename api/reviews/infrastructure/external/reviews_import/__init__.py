"""
Pipeline de importacion one-way: API upstream de reviews -> base de datos.

Este paquete está diseñado para ejecutarse como job (arranque de la app,
cron o script), no como parte del request/response del API.

Objetivos de diseño:
- Idempotencia: se puede ejecutar N veces sin duplicar datos.
- Full re-pull: no hay cursor incremental; la correctitud depende del UPSERT
  por la clave natural (source, external_id).
- Tolerancia a fallos: registros invalidos se cuentan y se omiten; un fallo
  de pagina termina la corrida con los totales acumulados, sin propagar.
"""
