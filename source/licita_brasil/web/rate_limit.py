"""Per-client request throttling for the API.

The limiter keys clients by remote address. Every route is held to the
default limit, and the authentication routes carry a stricter one on top.
"""

from licita_brasil.providers.config import Config, ConfigProvider
from slowapi import Limiter
from slowapi.util import get_remote_address


def create_limiter(config: Config) -> Limiter:
    """Builds a limiter from the configured rates.

    Args:
        config: The application configuration.

    Returns:
        The limiter, enabled or not according to `RATE_LIMIT_ENABLED`.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[config.RATE_LIMIT_DEFAULT],
        enabled=config.RATE_LIMIT_ENABLED,
    )


_config = ConfigProvider.get_config()

limiter = create_limiter(_config)
AUTH_LIMIT = _config.RATE_LIMIT_AUTH
