"""Maps application exceptions to structured JSON error responses.

Every failure leaves the API as `{"error": <message>, "kind": <kind>}` with
the status code registered for its exception class.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from licita_brasil.exceptions.auth import AuthenticationError, RegistrationError, UserAlreadyExistsError
from licita_brasil.exceptions.query import QueryValidationError
from licita_brasil.exceptions.upstream import (
    CompanyNotFoundError,
    UpstreamCancelledError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from licita_brasil.providers.logging import LoggingProvider
from slowapi.errors import RateLimitExceeded

CLIENT_CLOSED_REQUEST = 499

STATUS_BY_EXCEPTION: dict[type[Exception], int] = {
    QueryValidationError: HTTPStatus.BAD_REQUEST,
    RegistrationError: HTTPStatus.BAD_REQUEST,
    AuthenticationError: HTTPStatus.UNAUTHORIZED,
    CompanyNotFoundError: HTTPStatus.NOT_FOUND,
    UserAlreadyExistsError: HTTPStatus.CONFLICT,
    UpstreamRateLimitedError: HTTPStatus.TOO_MANY_REQUESTS,
    UpstreamTimeoutError: HTTPStatus.GATEWAY_TIMEOUT,
    UpstreamCancelledError: CLIENT_CLOSED_REQUEST,
    UpstreamError: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def error_response(status_code: int, message: str, kind: str) -> JSONResponse:
    """Builds the JSON body shared by every error answer."""
    return JSONResponse(status_code=int(status_code), content={"error": message, "kind": kind})


def _message_for(exc: Exception) -> str:
    if isinstance(exc, UpstreamTimeoutError):
        return "Timeout ao consultar serviço externo. Tente novamente."
    if isinstance(exc, UpstreamCancelledError):
        return "Requisição cancelada."
    if type(exc) is UpstreamError:
        return f"Erro ao consultar serviço externo: {exc}"
    return str(exc)


async def handle_application_error(request: Request, exc: Exception) -> JSONResponse:
    """Answers with the status registered for the exception's class.

    Args:
        request: The failed request.
        exc: The exception raised while serving it.

    Returns:
        The structured error response.
    """
    status_code = next(
        (status for exc_type, status in STATUS_BY_EXCEPTION.items() if isinstance(exc, exc_type)),
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        correlation_id = getattr(request.state, "correlation_id", None)
        with LoggingProvider().set_correlation_id(correlation_id):
            LoggingProvider().get_logger().error(
                f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc}"
            )
    return error_response(status_code, _message_for(exc), getattr(exc, "kind", "internal_error"))


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answers malformed request bodies and parameters with a 400."""
    details = "; ".join(str(error.get("msg", "")) for error in exc.errors())
    return error_response(HTTPStatus.BAD_REQUEST, f"Requisição inválida: {details}", "validation_error")


async def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answers a throttled client with a structured 429."""
    return error_response(
        HTTPStatus.TOO_MANY_REQUESTS,
        f"Muitas requisições. Tente novamente mais tarde. ({exc.detail})",
        "rate_limited",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Installs every exception handler on the application.

    Args:
        app: The FastAPI application.
    """
    for exc_type in STATUS_BY_EXCEPTION:
        app.add_exception_handler(exc_type, handle_application_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
