"""
Servicio de importacion API upstream -> base de datos.

Diseño (resumen):
- Pide paginas 1..totalPages al upstream (1-based); si el upstream no
  informa totalPages se sigue hasta la primera pagina vacia
- Parsea el payload (envelope o array plano)
- Descarta registros invalidos (se cuentan, no abortan la pagina)
- UPSERT del batch valido por (source, external_id), una transaccion por pagina
- Acumula totales y decide cuando parar

Politica de fallos:
- Sin URL/API key: no hay importacion, totales en cero.
- Fallo de fetch, pagina vacia/no parseable o fallo de escritura: la corrida
  termina con los totales acumulados. No se salta a la pagina siguiente para
  no perder en silencio un rango contiguo del upstream.
- Nada se propaga al caller: import_all() siempre retorna un resumen.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .batch_writer import ReviewBatchWriter
from .errors import BatchWriteError, ImportConfigError, TransportError, UpstreamError
from .payload_parser import PayloadParser
from .upstream_client import ReviewsApiClient
from .validator import ReviewValidator

DEFAULT_PAGE_SIZE = 50
# Tope de paginas por corrida cuando el upstream no informa totalPages.
DEFAULT_MAX_PAGES = 10_000


class ImportStopReason(str, enum.Enum):
    NOT_CONFIGURED = "not_configured"
    COMPLETED = "completed"
    EMPTY_PAGE = "empty_page"
    FETCH_FAILED = "fetch_failed"
    WRITE_FAILED = "write_failed"
    PAGE_LIMIT = "page_limit"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class ImportResult:
    total_affected: int
    total_skipped: int
    pages_processed: int
    stop_reason: ImportStopReason


class ReviewImportService:
    """
    Orquestador del pipeline de importacion.

    Estrictamente secuencial: a lo sumo un fetch y una escritura en curso.
    """

    def __init__(
        self,
        *,
        client: ReviewsApiClient,
        writer: ReviewBatchWriter,
        api_key: Optional[str],
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        parser: Optional[PayloadParser] = None,
        validator: Optional[ReviewValidator] = None,
    ) -> None:
        self._client = client
        self._writer = writer
        self._api_key = api_key
        self._page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
        self._max_pages = max_pages if max_pages and max_pages > 0 else DEFAULT_MAX_PAGES
        self._parser = parser or PayloadParser()
        self._validator = validator or ReviewValidator()

    def import_all(self) -> ImportResult:
        """
        Ejecuta una corrida completa de importacion.

        Returns:
            ImportResult: totales de filas afectadas y omitidas
        """
        try:
            self._ensure_configured()
        except ImportConfigError as e:
            logger.warning(f"{e}; se omite la importacion")
            return ImportResult(0, 0, 0, ImportStopReason.NOT_CONFIGURED)

        base_url = self._client.base_url
        page = 1
        total_pages = 1
        total_pages_known = False
        total_affected = 0
        total_skipped = 0
        pages_processed = 0
        stop_reason = ImportStopReason.COMPLETED

        logger.info(f"Iniciando importacion de reviews desde {base_url} (pagina inicial={page}, page_size={self._page_size})")

        while not total_pages_known or page <= total_pages:
            if page > self._max_pages:
                logger.warning(f"Se alcanzo el tope de {self._max_pages} paginas; fin de la corrida")
                stop_reason = ImportStopReason.PAGE_LIMIT
                break

            try:
                body = self._client.fetch(page, self._page_size, self._api_key)

                parsed = self._parser.parse(body)
                if parsed.received == 0:
                    logger.warning(f"Pagina {page}: el upstream no devolvio reviews; fin de la corrida")
                    stop_reason = ImportStopReason.EMPTY_PAGE
                    break

                if not total_pages_known and parsed.total_pages is not None:
                    total_pages = max(1, parsed.total_pages)
                    total_pages_known = True

                result = self._validator.filter(parsed.items)
                affected = self._writer.upsert(result.valid)

                total_affected += affected
                total_skipped += result.skipped
                pages_processed += 1

                logger.info(
                    f"Pagina {page}/{total_pages if total_pages_known else '?'}: received={parsed.received}, batched={len(result.valid)}, "
                    f"skipped={result.skipped}, affected={affected}"
                )
                page += 1

            except (TransportError, UpstreamError) as e:
                logger.error(f"Pagina {page}: no se pudo obtener del upstream ({e}); fin de la corrida")
                stop_reason = ImportStopReason.FETCH_FAILED
                break
            except BatchWriteError as e:
                logger.error(f"Pagina {page}: fallo la escritura del batch ({e}); fin de la corrida")
                stop_reason = ImportStopReason.WRITE_FAILED
                break
            except Exception:
                logger.exception(
                    f"Error inesperado procesando la pagina {page} "
                    f"(affected={total_affected}, skipped={total_skipped}); fin de la corrida"
                )
                stop_reason = ImportStopReason.UNEXPECTED_ERROR
                break

        logger.info(
            f"Importacion terminada ({stop_reason.value}). Total affected: {total_affected} "
            f"(skipped: {total_skipped}, paginas: {pages_processed})"
        )
        return ImportResult(total_affected, total_skipped, pages_processed, stop_reason)

    def close(self) -> None:
        """Libera la sesion HTTP del cliente. El engine es de quien lo creo."""
        self._client.close()

    def _ensure_configured(self) -> None:
        if not self._client.base_url:
            raise ImportConfigError("URL del upstream de reviews no configurada")
        if not self._api_key:
            raise ImportConfigError("API key del upstream de reviews no configurada")


def build_from_settings(settings, *, engine=None) -> ReviewImportService:
    """
    Constructor "oficial" del pipeline a partir de Settings.

    Args:
        settings: instancia de reviews.core.config.Settings
        engine: Engine sincrono opcional (por defecto create_sync_engine())
    """
    from reviews.infrastructure.database.session import create_sync_engine

    writer = ReviewBatchWriter(engine if engine is not None else create_sync_engine())
    client = ReviewsApiClient(
        settings.REVIEWS_API_URL,
        api_key_header=settings.REVIEWS_API_KEY_HEADER,
        timeout_s=settings.REVIEWS_API_TIMEOUT_S,
    )
    return ReviewImportService(
        client=client,
        writer=writer,
        api_key=settings.REVIEWS_API_KEY,
        page_size=settings.REVIEWS_API_PAGE_SIZE,
        max_pages=settings.REVIEWS_API_MAX_PAGES,
    )
