"""This module defines the repository for IBGE municipality reference data."""

import re
from urllib.parse import urljoin

import requests
from licita_brasil.exceptions.query import QueryValidationError
from licita_brasil.exceptions.upstream import UpstreamError, UpstreamTimeoutError
from licita_brasil.models.municipalities import Municipality, RawMunicipality
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.http import HttpProvider
from licita_brasil.providers.logging import Logger, LoggingProvider
from licita_brasil.providers.store import MemoryStore
from pydantic import TypeAdapter, ValidationError

_STATE_CODE = re.compile(r"^[A-Z]{2}$")
_RAW_LIST = TypeAdapter(list[RawMunicipality])


class MunicipalityRepository:
    """Lists the municipalities of a state, caching each list forever.

    Municipality lists are static reference data, so the cache has no
    expiry and a transient timeout is retried by the HTTP provider.
    """

    logger: Logger
    config: Config
    http_provider: HttpProvider
    cache: MemoryStore[list[Municipality]]

    def __init__(
        self,
        http_provider: HttpProvider,
        cache: MemoryStore[list[Municipality]],
        config: Config | None = None,
    ) -> None:
        """Initializes the repository with its dependencies.

        Args:
            http_provider: The provider for HTTP requests.
            cache: The store of lists already fetched, keyed by state code.
            config: The application configuration.
        """
        self.logger = LoggingProvider().get_logger()
        self.config = config or ConfigProvider.get_config()
        self.http_provider = http_provider
        self.cache = cache

    def list_by_state(self, state: str) -> list[Municipality]:
        """Returns the municipalities of a state, ordered by name.

        Args:
            state: The two-letter state code, in any case.

        Returns:
            The municipalities, as returned by IBGE.

        Raises:
            QueryValidationError: If `state` is not a two-letter code.
            UpstreamTimeoutError: If IBGE keeps timing out.
            UpstreamError: For any other IBGE failure.
        """
        code = (state or "").strip().upper()
        if not _STATE_CODE.match(code):
            raise QueryValidationError("Sigla de UF inválida.")

        cached = self.cache.get(code)
        if cached is not None:
            return cached

        url = urljoin(self.config.IBGE_API_URL, f"estados/{code}/municipios")
        timeout = self.config.MUNICIPALITY_TIMEOUT_SECONDS
        try:
            response = self.http_provider.get(url, params={"orderBy": "nome"}, timeout=timeout)
        except requests.Timeout as e:
            raise UpstreamTimeoutError(url, timeout) from e
        except requests.RequestException as e:
            raise UpstreamError(None, str(e), message=f"Erro ao buscar municípios: {e}") from e

        if not response.ok:
            raise UpstreamError(response.status_code, response.text, message=f"IBGE {response.status_code}")

        try:
            raw_list = _RAW_LIST.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(response.status_code, response.text, message="IBGE returned an unreadable payload") from e

        municipalities = [Municipality(name=item.name, ibge_code=str(item.id)) for item in raw_list]
        self.cache.put(code, municipalities)
        self.logger.info(f"Cached {len(municipalities)} municipalities for {code}.")
        return municipalities
