"""This module defines the configuration management for the application.

It uses Pydantic's BaseSettings to create a strongly-typed configuration
class that reads from environment variables and .env files. This ensures
all required configuration is present and valid at startup.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MODALITY_ELECTRONIC_REVERSE_AUCTION = "6"
MODALITY_IN_PERSON_COMPETITION = "5"
MODALITY_ELECTRONIC_AUCTION = "1"
MODALITY_COMPETITIVE_DIALOGUE = "2"


class Config(BaseSettings):
    """A Pydantic model for managing application settings.

    It automatically loads configuration from environment variables and .env files.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PNCP_PUBLIC_QUERY_API_URL: str = "https://pncp.gov.br/api/consulta/v1/"
    PNCP_EDITAIS_URL: str = "https://pncp.gov.br/app/editais/"
    CNPJ_API_URL: str = "https://publica.cnpj.ws/cnpj/"
    IBGE_API_URL: str = "https://servicodados.ibge.gov.br/api/v1/localidades/"

    REGISTRY_TIMEOUT_SECONDS: float = 20.0
    COMPANY_TIMEOUT_SECONDS: float = 15.0
    MUNICIPALITY_TIMEOUT_SECONDS: float = 15.0
    COMPANY_CACHE_TTL_SECONDS: int = 3600

    DEFAULT_MODALITIES: list[str] = [
        MODALITY_ELECTRONIC_REVERSE_AUCTION,
        MODALITY_IN_PERSON_COMPETITION,
        MODALITY_ELECTRONIC_AUCTION,
        MODALITY_COMPETITIVE_DIALOGUE,
    ]

    USER_AGENT: str = "LicitaBrasil/1.0"

    JWT_SECRET: str = "licitabrasil-jwt-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    RATE_LIMIT_DEFAULT: str = "60/minute"
    RATE_LIMIT_AUTH: str = "10 per 5 minutes"
    RATE_LIMIT_ENABLED: bool = True

    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    LOG_LEVEL: str = "INFO"

    @field_validator("DEFAULT_MODALITIES")
    @classmethod
    def require_modalities(cls, value: list[str]) -> list[str]:
        """Rejects an empty default modality set.

        The aggregated search fans out over these codes, so at least one
        must be configured.

        Args:
            value: The configured list of modality codes.

        Returns:
            The list, with surrounding whitespace removed from each code.

        Raises:
            ValueError: If no modality code is configured.
        """
        codes = [code.strip() for code in value if code and code.strip()]
        if not codes:
            raise ValueError("DEFAULT_MODALITIES must contain at least one modality code")
        return codes


class ConfigProvider:
    """A provider class that acts as a factory for the application's configuration.

    It does not hold state but provides a method to create fresh config instances.
    """

    @staticmethod
    def get_config() -> Config:
        """Factory method that instantiates and returns a new Config object.

        Calling this function will always create a new instance of the Config model,
        which forces Pydantic to reload and re-validate all settings from the
        current environment variables. This ensures the configuration is always fresh.

        Returns:
            A new, validated Config object.
        """
        return Config()
