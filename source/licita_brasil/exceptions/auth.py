"""This module defines exceptions related to registration and authentication."""


class AuthenticationError(Exception):
    """Raised when credentials or a bearer token cannot be verified."""

    kind = "unauthorized"


class RegistrationError(Exception):
    """Raised when a registration request is rejected (invalid CNPJ, weak password)."""

    kind = "validation_error"


class UserAlreadyExistsError(Exception):
    """Raised when registering a CNPJ that already has an account."""

    kind = "conflict"
