"""This module defines the repository for company profiles from the CNPJ registry."""

from http import HTTPStatus
from urllib.parse import urljoin

from licita_brasil.exceptions.upstream import CompanyNotFoundError, UpstreamError, UpstreamRateLimitedError
from licita_brasil.models.companies import Company, RawCompany
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.deadline import Deadline
from licita_brasil.providers.http import HttpProvider
from licita_brasil.providers.logging import Logger, LoggingProvider
from licita_brasil.providers.store import TimedStore
from pydantic import ValidationError


class CompanyRegistryRepository:
    """Looks up company profiles, caching each one for a fixed time.

    Attributes:
        logger: An instance of the application's logger.
        config: The application's configuration object.
        http_provider: The provider for HTTP requests.
        cache: The store of recently fetched profiles, keyed by CNPJ.
    """

    logger: Logger
    config: Config
    http_provider: HttpProvider
    cache: TimedStore[Company]

    def __init__(self, http_provider: HttpProvider, cache: TimedStore[Company], config: Config | None = None) -> None:
        """Initializes the repository with its dependencies.

        Args:
            http_provider: The provider for HTTP requests.
            cache: The store used to cache profiles. Its TTL sets the
                freshness window.
            config: The application configuration.
        """
        self.logger = LoggingProvider().get_logger()
        self.config = config or ConfigProvider.get_config()
        self.http_provider = http_provider
        self.cache = cache

    def lookup(self, cnpj: str) -> Company:
        """Returns the profile of the company registered under `cnpj`.

        A fresh cached profile is returned without any network call.
        Otherwise the registry is called once, within the company deadline,
        and the cache is refreshed with the result.

        Args:
            cnpj: The cleaned 14-digit CNPJ.

        Returns:
            The normalized company profile.

        Raises:
            CompanyNotFoundError: If the registry has no such company.
            UpstreamRateLimitedError: If the registry is throttling us.
            UpstreamTimeoutError: If the registry does not answer in time.
            UpstreamError: For any other registry failure.
        """
        cached = self.cache.get_fresh(cnpj)
        if cached is not None:
            self.logger.debug(f"Company {cnpj} served from cache.")
            return cached

        url = urljoin(self.config.CNPJ_API_URL, cnpj)
        response = self.http_provider.get_within_deadline(url, Deadline(self.config.COMPANY_TIMEOUT_SECONDS))

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            raise UpstreamRateLimitedError(
                response.status_code, response.text, message="Limite de consultas CNPJ atingido. Tente em 1 minuto."
            )
        if response.status_code == HTTPStatus.NOT_FOUND:
            raise CompanyNotFoundError(
                response.status_code, response.text, message="CNPJ não encontrado na base da Receita Federal."
            )
        if not response.ok:
            raise UpstreamError(response.status_code, response.text, message=f"cnpj.ws retornou {response.status_code}")

        try:
            raw = RawCompany.model_validate(response.json())
        except ValueError as e:
            raise UpstreamError(response.status_code, response.text, message="cnpj.ws returned an unreadable payload") from e

        company = Company.from_raw(cnpj, raw)
        self.cache.put_fresh(cnpj, company)
        self.logger.info(f"Company {cnpj} fetched and cached.")
        return company
