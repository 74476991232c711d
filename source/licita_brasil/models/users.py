"""This module defines the models for registered users and their sessions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """A registered business user, identified by the company CNPJ.

    Attributes:
        cnpj: The cleaned CNPJ, used as the login.
        password_hash: The bcrypt hash of the password.
        created_at: When the account was created, in UTC.
    """

    model_config = ConfigDict(frozen=True)

    cnpj: str
    password_hash: str
    created_at: datetime


class AuthSession(BaseModel):
    """The result of a successful registration or login."""

    token: str
    cnpj: str
    message: str | None = None
