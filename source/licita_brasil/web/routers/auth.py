"""Registration and login endpoints."""

from fastapi import APIRouter, Depends, Request
from licita_brasil.models.users import AuthSession
from licita_brasil.providers.logging import LoggingProvider
from licita_brasil.services.auth import AuthService
from licita_brasil.web.dependencies import get_auth_service, request_correlation_id
from licita_brasil.web.rate_limit import AUTH_LIMIT, limiter
from pydantic import BaseModel

router = APIRouter(prefix="/api/auth", tags=["auth"])


class Credentials(BaseModel):
    """The CNPJ and password sent by a business user."""

    cnpj: str = ""
    password: str = ""


@router.post("/register", status_code=201, response_model=AuthSession, response_model_exclude_none=True)
@limiter.limit(AUTH_LIMIT, override_defaults=False)
def register(
    request: Request,
    credentials: Credentials,
    auth_service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> AuthSession:
    """Creates an account for a company and returns its first token.

    Args:
        request: The incoming request, used by the rate limiter.
        credentials: The CNPJ and password to register.
        auth_service: The authentication service.

    Returns:
        The new session.
    """
    with LoggingProvider().set_correlation_id(request_correlation_id(request)):
        return auth_service.register(credentials.cnpj, credentials.password)


@router.post("/login", response_model=AuthSession, response_model_exclude_none=True)
@limiter.limit(AUTH_LIMIT, override_defaults=False)
def login(
    request: Request,
    credentials: Credentials,
    auth_service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> AuthSession:
    """Checks a CNPJ and password and returns a fresh token.

    Args:
        request: The incoming request, used by the rate limiter.
        credentials: The CNPJ and password.
        auth_service: The authentication service.

    Returns:
        The session.
    """
    with LoggingProvider().set_correlation_id(request_correlation_id(request)):
        return auth_service.login(credentials.cnpj, credentials.password)
