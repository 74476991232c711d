"""This module defines the AuthService.

Business users register and log in with their company CNPJ and a password.
A successful registration or login yields a signed bearer token whose
subject is the CNPJ.
"""

import re
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from licita_brasil.exceptions.auth import AuthenticationError, RegistrationError, UserAlreadyExistsError
from licita_brasil.models.users import AuthSession, User
from licita_brasil.providers.cnpj import clean_cnpj, is_valid_cnpj
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.logging import Logger, LoggingProvider
from licita_brasil.repositories.users import UsersRepository

MIN_PASSWORD_LENGTH = 8


class AuthService:
    """Registers users, checks their credentials and issues bearer tokens."""

    users_repo: UsersRepository
    config: Config
    logger: Logger

    def __init__(self, users_repo: UsersRepository, config: Config | None = None) -> None:
        """Initializes the service with its dependencies.

        Args:
            users_repo: The repository of registered users.
            config: The application configuration, holding the JWT secret.
        """
        self.users_repo = users_repo
        self.config = config or ConfigProvider.get_config()
        self.logger = LoggingProvider().get_logger()

    @staticmethod
    def validate_password_strength(password: str) -> None:
        """Checks that a password is long enough and mixes character classes.

        Args:
            password: The candidate password.

        Raises:
            RegistrationError: If the password is too short, or lacks an
                uppercase letter, a lowercase letter, a digit or a symbol.
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres.")
        required = (r"[A-Z]", r"[a-z]", r"[0-9]", r"[^A-Za-z0-9]")
        if not all(re.search(pattern, password) for pattern in required):
            raise RegistrationError(
                "Senha muito fraca. Use letras maiúsculas, minúsculas, números e caracteres especiais."
            )

    def register(self, cnpj: str, password: str) -> AuthSession:
        """Creates an account for a company and logs it in.

        Args:
            cnpj: The company CNPJ, with or without punctuation.
            password: The chosen password.

        Returns:
            The session for the new account.

        Raises:
            RegistrationError: If a field is missing, the CNPJ is invalid or
                the password is weak.
            UserAlreadyExistsError: If the CNPJ already has an account.
        """
        if not cnpj or not password:
            raise RegistrationError("CNPJ e senha são obrigatórios.")
        cnpj_clean = clean_cnpj(cnpj)
        if not is_valid_cnpj(cnpj_clean):
            raise RegistrationError("CNPJ inválido.")
        self.validate_password_strength(password)

        if self.users_repo.get(cnpj_clean) is not None:
            raise UserAlreadyExistsError("CNPJ já cadastrado. Faça login.")

        salt = bcrypt.gensalt(rounds=self.config.BCRYPT_ROUNDS)
        password_hash = bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
        user = User(cnpj=cnpj_clean, password_hash=password_hash, created_at=datetime.now(timezone.utc))
        if not self.users_repo.create(user):
            raise UserAlreadyExistsError("CNPJ já cadastrado. Faça login.")

        self.logger.info(f"Registered user {cnpj_clean}.")
        return AuthSession(token=self.issue_token(cnpj_clean), cnpj=cnpj_clean, message="Cadastro realizado com sucesso!")

    def login(self, cnpj: str, password: str) -> AuthSession:
        """Checks a CNPJ and password pair.

        Args:
            cnpj: The company CNPJ, with or without punctuation.
            password: The password.

        Returns:
            A new session for the user.

        Raises:
            RegistrationError: If a field is missing.
            AuthenticationError: If the CNPJ is unknown or the password is wrong.
        """
        if not cnpj or not password:
            raise RegistrationError("CNPJ e senha são obrigatórios.")
        cnpj_clean = clean_cnpj(cnpj)
        user = self.users_repo.get(cnpj_clean)
        if user is None:
            raise AuthenticationError("CNPJ não encontrado. Faça o cadastro.")
        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            raise AuthenticationError("Senha incorreta.")
        return AuthSession(token=self.issue_token(cnpj_clean), cnpj=cnpj_clean)

    def issue_token(self, cnpj: str) -> str:
        """Signs a bearer token for `cnpj`.

        Args:
            cnpj: The cleaned CNPJ, used as the token subject.

        Returns:
            The encoded token.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": cnpj,
            "iat": now,
            "exp": now + timedelta(hours=self.config.JWT_EXPIRATION_HOURS),
        }
        return jwt.encode(payload, self.config.JWT_SECRET, algorithm=self.config.JWT_ALGORITHM)

    def verify_token(self, token: str) -> str:
        """Verifies a bearer token and returns its subject.

        Args:
            token: The encoded token.

        Returns:
            The CNPJ the token was issued for.

        Raises:
            AuthenticationError: If the token is malformed, forged or expired.
        """
        try:
            payload = jwt.decode(token, self.config.JWT_SECRET, algorithms=[self.config.JWT_ALGORITHM])
        except jwt.PyJWTError as e:
            raise AuthenticationError("Token inválido ou expirado. Faça login novamente.") from e
        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Token inválido ou expirado. Faça login novamente.")
        return str(subject)
