"""
Errores del pipeline de importacion de reviews.

Ninguno de estos errores escapa de ReviewImportService.import_all():
el orquestador los convierte en contadores o en una parada limpia.
"""


class ReviewImportError(RuntimeError):
    """Error base del pipeline de importacion."""


class ImportConfigError(ReviewImportError):
    """Falta URL o API key del upstream: la importacion no esta configurada."""


class TransportError(ReviewImportError):
    """Fallo de red/conexion al llamar al upstream (incluye timeouts)."""


class UpstreamError(ReviewImportError):
    """El upstream respondio con status no-2xx o con body vacio."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PayloadParseError(ReviewImportError):
    """
    Payload que no se pudo decodificar con ninguna de las formas aceptadas.

    No se lanza: viaja como `reason` en InvalidPayload y la pagina
    se trata como vacia.
    """


class BatchWriteError(ReviewImportError):
    """Fallo la transaccion del batch; ninguna fila del batch quedo escrita."""

    def __init__(self, message: str, batch_size: int = 0) -> None:
        super().__init__(message)
        self.batch_size = batch_size
