"""
CLI: API upstream de reviews -> base de datos (one-way import).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) o a mano tras un fallo.
  - Cada corrida es un full re-pull; el UPSERT la hace idempotente.

Variables de entorno requeridas:
  - REVIEWS_API_URL
  - REVIEWS_API_KEY
  - DATABASE_URL (o DATABASE_HOST/PORT/USER/PASSWORD/NAME)

Ejecución:
  python scripts/import_reviews.py
  python scripts/import_reviews.py --page-size 200
  python scripts/import_reviews.py --create-schema
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `reviews/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Cargar variables desde .env si existe (api/.env o raiz del repo).
# Debe ocurrir antes de importar settings.
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from sqlalchemy.exc import SQLAlchemyError

from reviews.core.config import settings
from reviews.infrastructure.database.session import Base, create_sync_engine
from reviews.infrastructure.database.models import ReviewModel
from reviews.infrastructure.external.reviews_import.errors import ReviewImportError
from reviews.infrastructure.external.reviews_import.import_service import build_from_settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Importa reviews del API upstream.")
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help=f"Items por pagina (default: REVIEWS_API_PAGE_SIZE={settings.REVIEWS_API_PAGE_SIZE}).",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Crea la tabla reviews si no existe antes de importar.",
    )
    args = parser.parse_args(argv)

    if args.page_size is not None:
        if args.page_size < 1:
            parser.error("--page-size debe ser positivo")
        settings.REVIEWS_API_PAGE_SIZE = args.page_size

    engine = None
    try:
        engine = create_sync_engine()
        if args.create_schema:
            Base.metadata.create_all(engine, tables=[ReviewModel.__table__])
            logger.info("Tabla reviews verificada/creada")

        service = build_from_settings(settings, engine=engine)
    except (ReviewImportError, SQLAlchemyError) as e:
        logger.error(f"No se pudo preparar la importacion: {e}")
        if engine is not None:
            engine.dispose()
        return 1

    try:
        logger.info("Iniciando importacion de reviews...")
        result = service.import_all()
    finally:
        service.close()
        engine.dispose()

    logger.info(
        f"Importacion OK: affected={result.total_affected}, skipped={result.total_skipped}, "
        f"paginas={result.pages_processed}, motivo={result.stop_reason.value}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
