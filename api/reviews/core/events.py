"""
Ciclo de vida de la aplicacion (inicio y cierre).
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from fastapi import FastAPI
from loguru import logger

from reviews.core.config import settings
from reviews.infrastructure.database.session import init_db, close_db, create_sync_engine
from reviews.infrastructure.external.reviews_import.import_service import (
    ImportResult,
    build_from_settings,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan de FastAPI: inicializa recursos, cede el control a la app
    mientras atiende requests y los libera al cerrar.

    Args:
        app: Instancia de FastAPI
    """
    sink_id = await _startup(app)
    try:
        yield
    finally:
        await _shutdown(sink_id)


async def _startup(app: FastAPI) -> int:
    """Inicializa recursos al inicio de la aplicacion. Retorna el id del sink de log."""
    try:
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")

        # Configurar logging adicional
        sink_id = logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL
        )

        # Validar configuracion critica
        _validate_config()

        # Inicializar base de datos (crea tablas si no existen)
        await init_db()
        logger.info("Base de datos inicializada")

        logger.success("Aplicacion iniciada correctamente")

    except Exception as e:
        logger.error(f"Error durante startup: {e}")
        logger.exception("Detalle del error:")
        raise

    app.state.last_import = None
    if settings.IMPORT_ON_STARTUP:
        app.state.last_import = await run_startup_import()

    return sink_id


async def _shutdown(sink_id: Optional[int] = None) -> None:
    """Libera recursos al cerrar la aplicacion."""
    logger.info("Cerrando aplicacion...")

    # Cerrar conexiones de base de datos
    await close_db()
    logger.info("Conexiones de base de datos cerradas")

    logger.success("Aplicacion cerrada correctamente")
    if sink_id is not None:
        logger.remove(sink_id)


async def run_startup_import() -> Optional[ImportResult]:
    """
    Ejecuta una importacion de reviews en un thread separado.
    Nunca propaga errores: la app debe arrancar aunque la importacion falle.

    La sesion HTTP y el engine sincrono se crean para esta corrida y se
    liberan al terminar.
    """
    engine = None
    service = None
    try:
        engine = create_sync_engine()
        service = build_from_settings(settings, engine=engine)
        result = await asyncio.to_thread(service.import_all)
    except Exception:
        logger.exception("No se pudo ejecutar la importacion de reviews al arrancar")
        return None
    finally:
        if service is not None:
            service.close()
        if engine is not None:
            engine.dispose()

    logger.info(
        f"Importacion al arrancar completada: affected={result.total_affected}, "
        f"skipped={result.total_skipped}, motivo={result.stop_reason.value}"
    )
    return result


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.REVIEWS_API_URL:
        warnings.append("REVIEWS_API_URL no configurada - no se importaran reviews")
    if not settings.REVIEWS_API_KEY:
        warnings.append("REVIEWS_API_KEY no configurada - no se importaran reviews")

    # Mostrar advertencias
    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")
