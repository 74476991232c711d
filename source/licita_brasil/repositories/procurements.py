"""This module defines the repository for querying the PNCP procurement registry.

It provides the `ProcurementsRepository` class, which issues one bounded-time
query against the PNCP (Plataforma Nacional de Contratações Públicas) public
query API for a given location, date range, modality and page, and normalizes
the records it returns.
"""

from http import HTTPStatus
from urllib.parse import urlencode, urljoin

from licita_brasil.exceptions.upstream import UpstreamError
from licita_brasil.models.procurements import Procurement, ProcurementListResponse
from licita_brasil.models.search import PartialResult, ProcurementQuery, clamp_page_size
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.date import DateProvider
from licita_brasil.providers.deadline import CancellationToken, Deadline
from licita_brasil.providers.http import HttpProvider
from licita_brasil.providers.logging import Logger, LoggingProvider
from pydantic import ValidationError

MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


class ProcurementsRepository:
    """Fetches pages of procurements from the PNCP query API.

    Attributes:
        logger: An instance of the application's logger.
        config: The application's configuration object.
        http_provider: The provider for HTTP requests.
    """

    _ENDPOINT = "contratacoes/publicacao"

    logger: Logger
    config: Config
    http_provider: HttpProvider

    def __init__(self, http_provider: HttpProvider, config: Config | None = None) -> None:
        """Initializes the repository with its dependencies.

        Args:
            http_provider: The provider for HTTP requests.
            config: The application configuration. Loaded from the
                environment when omitted.
        """
        self.logger = LoggingProvider().get_logger()
        self.config = config or ConfigProvider.get_config()
        self.http_provider = http_provider

    def build_params(self, query: ProcurementQuery, modality: str, page: int, page_size: int) -> dict[str, str]:
        """Builds the query string for one registry call.

        Args:
            query: The search query.
            modality: The concrete modality code to query.
            page: The page to fetch.
            page_size: The page size, already clamped.

        Returns:
            The query parameters, in the order the registry documents them.
        """
        params = {
            "dataInicial": DateProvider.to_pncp(query.start_date),
            "dataFinal": DateProvider.to_pncp(query.end_date),
            "codigoModalidadeContratacao": modality,
            "pagina": str(page),
            "tamanhoPagina": str(page_size),
        }
        if query.state:
            params["uf"] = query.state.upper()
        if query.municipality_code:
            params["codigoMunicipioIbge"] = query.municipality_code
        return params

    def fetch_page(
        self,
        query: ProcurementQuery,
        modality: str,
        page_size: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> PartialResult:
        """Fetches one page of procurements for a single modality.

        The page size is clamped to [10, 50] before the request is sent.
        A `204 No Content` answer is treated as an empty page.

        Args:
            query: The search query. Its page number is used as is.
            modality: The modality code. The registry requires one, so the
                "all modalities" case must be resolved by the caller.
            page_size: The page size to request. Defaults to the query's.
            cancel_token: An optional token that aborts the call when set.

        Returns:
            The normalized records and the registry's pagination metadata.

        Raises:
            UpstreamError: If the registry answers with a non-success status
                or with a payload that cannot be read.
            UpstreamTimeoutError: If the registry does not answer in time.
            UpstreamCancelledError: If the cancellation token is set.
        """
        size = clamp_page_size(page_size if page_size is not None else query.page_size, MIN_PAGE_SIZE, MAX_PAGE_SIZE)
        params = self.build_params(query, modality, query.page, size)
        url = urljoin(self.config.PNCP_PUBLIC_QUERY_API_URL, self._ENDPOINT)
        self.logger.info(f"PNCP request: {url}?{urlencode(params)}")

        deadline = Deadline(self.config.REGISTRY_TIMEOUT_SECONDS)
        response = self.http_provider.get_within_deadline(url, deadline, cancel_token, params=params)

        if response.status_code == HTTPStatus.NO_CONTENT:
            return PartialResult(records=[], total_records=0, total_pages=1, page_number=query.page)
        if not response.ok:
            raise UpstreamError(
                response.status_code, response.text, message=f"PNCP {response.status_code}: {response.text[:500]}"
            )

        try:
            parsed = ProcurementListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self.logger.error(f"Unreadable PNCP payload for modality {modality}: {e}")
            raise UpstreamError(response.status_code, response.text, message="PNCP returned an unreadable payload") from e

        records = [Procurement.from_raw(item, self.config.PNCP_EDITAIS_URL) for item in parsed.data]
        return PartialResult(
            records=records,
            total_records=parsed.total_records or 0,
            total_pages=parsed.total_pages or 1,
            page_number=parsed.page_number or query.page,
        )
