"""Composition root and FastAPI dependencies for the web application.

Every store, repository and service is built once, when the application is
created, and kept on `app.state.container`. Route handlers receive them
through the dependency functions below.
"""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from licita_brasil.exceptions.auth import AuthenticationError
from licita_brasil.models.companies import Company
from licita_brasil.models.municipalities import Municipality
from licita_brasil.models.users import User
from licita_brasil.providers.config import Config
from licita_brasil.providers.http import HttpProvider
from licita_brasil.providers.store import MemoryStore, TimedStore
from licita_brasil.repositories.companies import CompanyRegistryRepository
from licita_brasil.repositories.municipalities import MunicipalityRepository
from licita_brasil.repositories.procurements import ProcurementsRepository
from licita_brasil.repositories.users import UsersRepository
from licita_brasil.services.auth import AuthService
from licita_brasil.services.search import ProcurementSearchService

_bearer = HTTPBearer(auto_error=False)


@dataclass
class ServiceContainer:
    """Holds the process-wide collaborators of the web application."""

    config: Config
    http_provider: HttpProvider
    auth_service: AuthService
    search_service: ProcurementSearchService
    company_repo: CompanyRegistryRepository
    municipality_repo: MunicipalityRepository
    company_cache: TimedStore[Company]

    def close(self) -> None:
        """Releases the network resources held by the container."""
        self.http_provider.close()


def build_container(config: Config) -> ServiceContainer:
    """Wires every store, repository and service together.

    Args:
        config: The application configuration.

    Returns:
        The ready-to-use container.
    """
    http_provider = HttpProvider(pool_size=max(10, len(config.DEFAULT_MODALITIES)))
    users_store: MemoryStore[User] = MemoryStore()
    company_cache: TimedStore[Company] = TimedStore(ttl_seconds=config.COMPANY_CACHE_TTL_SECONDS)
    municipality_cache: MemoryStore[list[Municipality]] = MemoryStore()

    return ServiceContainer(
        config=config,
        http_provider=http_provider,
        auth_service=AuthService(UsersRepository(users_store), config=config),
        search_service=ProcurementSearchService(ProcurementsRepository(http_provider, config=config), config=config),
        company_repo=CompanyRegistryRepository(http_provider, company_cache, config=config),
        municipality_repo=MunicipalityRepository(http_provider, municipality_cache, config=config),
        company_cache=company_cache,
    )


def get_container(request: Request) -> ServiceContainer:
    """Returns the container attached to the running application."""
    container: ServiceContainer = request.app.state.container
    return container


def request_correlation_id(request: Request) -> str | None:
    """Returns the correlation ID assigned to the request by the middleware."""
    return getattr(request.state, "correlation_id", None)


def get_auth_service(container: ServiceContainer = Depends(get_container)) -> AuthService:  # noqa: B008
    """Provides the authentication service."""
    return container.auth_service


def get_search_service(container: ServiceContainer = Depends(get_container)) -> ProcurementSearchService:  # noqa: B008
    """Provides the procurement search service."""
    return container.search_service


def get_company_repo(container: ServiceContainer = Depends(get_container)) -> CompanyRegistryRepository:  # noqa: B008
    """Provides the company registry repository."""
    return container.company_repo


def get_municipality_repo(container: ServiceContainer = Depends(get_container)) -> MunicipalityRepository:  # noqa: B008
    """Provides the municipality repository."""
    return container.municipality_repo


def get_current_subject(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),  # noqa: B008
    auth_service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> str:
    """Resolves the CNPJ of the authenticated caller from its bearer token.

    Args:
        credentials: The bearer credentials, if the header was sent.
        auth_service: The authentication service.

    Returns:
        The CNPJ the token was issued for.

    Raises:
        AuthenticationError: If no token was sent or it does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Token de autenticação necessário.")
    return auth_service.verify_token(credentials.credentials)
