"""
Cliente mínimo del API upstream de reviews (sin SDKs externos).

Contrato:
- una request GET por llamada a fetch(), sin reintentos internos
- solo retorna si el status es 2xx y el body no esta vacio
- el timeout por llamada es responsabilidad de este cliente
"""

from __future__ import annotations

from typing import Optional

import requests
from loguru import logger

from .errors import TransportError, UpstreamError


class ReviewsApiClient:
    """
    Cliente HTTP del API de reviews. Se construye explicitamente y se
    inyecta en el orquestador (no hay sesion HTTP global).

    Importante:
    - No interpreta el body: el parseo es del PayloadParser.
    - No reintenta: un fallo termina la corrida (ver ReviewImportService).
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        api_key_header: str = "x-api-key",
        timeout_s: float = 30,
    ) -> None:
        self._base_url = (base_url or "").strip()
        self._api_key_header = api_key_header
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch(self, page: int, size: int, api_key: str) -> str:
        """
        Trae una pagina del upstream.

        Args:
            page: numero de pagina (1-based)
            size: items por pagina
            api_key: valor del header de API key

        Returns:
            str: body crudo (no vacio)

        Raises:
            TransportError: fallo de conexion/red/timeout
            UpstreamError: status no-2xx o body vacio
        """
        if not self._base_url:
            raise ValueError("base_url no puede estar vacia")
        if page < 1 or size < 1:
            raise ValueError(f"page y size deben ser positivos (page={page}, size={size})")

        params = {"page": page, "size": size}
        headers = {self._api_key_header: api_key, "Accept": "application/json"}

        try:
            resp = self._session.get(
                self._base_url,
                params=params,
                headers=headers,
                timeout=self._timeout_s,
            )
        except requests.RequestException as e:
            logger.error(f"HTTP GET fallo: url={self._base_url} params={params}: {e}")
            raise TransportError(f"Fallo de transporte al pedir la pagina {page}: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.error(f"Respuesta no-2xx: url={self._base_url} page={page} status={resp.status_code}")
            raise UpstreamError(
                f"Upstream respondio {resp.status_code} para la pagina {page}",
                status_code=resp.status_code,
            )

        body = resp.text
        if not body or not body.strip():
            logger.error(f"Body vacio del upstream: url={self._base_url} page={page} status={resp.status_code}")
            raise UpstreamError(
                f"Upstream respondio sin body para la pagina {page}",
                status_code=resp.status_code,
            )

        return body

    def close(self) -> None:
        self._session.close()
