"""Unit tests for the CompanyRegistryRepository."""

import json
from unittest.mock import MagicMock

import pytest
from licita_brasil.exceptions.upstream import (
    CompanyNotFoundError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
)
from licita_brasil.models.companies import Company
from licita_brasil.providers.config import Config
from licita_brasil.providers.deadline import Deadline
from licita_brasil.providers.http import BufferedResponse
from licita_brasil.providers.store import TimedStore
from licita_brasil.repositories.companies import CompanyRegistryRepository

CNPJ = "11222333000181"
COMPANY_URL = f"https://publica.cnpj.ws/cnpj/{CNPJ}"


def _response(status_code: int, body: str) -> BufferedResponse:
    return BufferedResponse(COMPANY_URL, status_code, {}, body.encode("utf-8"), "utf-8")


@pytest.fixture
def http_provider() -> MagicMock:
    """A mocked HttpProvider."""
    return MagicMock()


@pytest.fixture
def cache() -> TimedStore[Company]:
    """An empty company cache."""
    return TimedStore(ttl_seconds=3600)


@pytest.fixture
def repo(http_provider: MagicMock, cache: TimedStore[Company], config: Config) -> CompanyRegistryRepository:
    """A repository wired to the mocked HttpProvider."""
    return CompanyRegistryRepository(http_provider, cache, config=config)


def test_lookup_fetches_and_caches(repo: CompanyRegistryRepository, http_provider: MagicMock, cache) -> None:
    """Tests that a miss calls the registry once and a second lookup hits the cache."""
    http_provider.get_within_deadline.return_value = _response(200, json.dumps({"razao_social": "EXEMPLO LTDA"}))

    first = repo.lookup(CNPJ)
    second = repo.lookup(CNPJ)

    assert first.legal_name == "EXEMPLO LTDA"
    assert second is first
    assert cache.get_fresh(CNPJ) is first
    http_provider.get_within_deadline.assert_called_once()
    url, deadline = http_provider.get_within_deadline.call_args.args
    assert url == COMPANY_URL
    assert isinstance(deadline, Deadline)
    assert deadline.seconds == 15.0


def test_lookup_ignores_expired_cache_entries(http_provider: MagicMock, config: Config) -> None:
    """Tests that an entry older than the TTL triggers a new registry call."""
    clock = MagicMock(side_effect=[0.0, 10.0, 10.0])
    cache: TimedStore[Company] = TimedStore(ttl_seconds=5, clock=clock)
    cache.put_fresh(CNPJ, Company(cnpj=CNPJ, legal_name="OLD"))
    http_provider.get_within_deadline.return_value = _response(200, json.dumps({"razao_social": "NEW"}))

    company = CompanyRegistryRepository(http_provider, cache, config=config).lookup(CNPJ)

    assert company.legal_name == "NEW"


@pytest.mark.parametrize(
    "status_code, error_type, message",
    [
        (404, CompanyNotFoundError, "CNPJ não encontrado"),
        (429, UpstreamRateLimitedError, "Limite de consultas"),
        (500, UpstreamError, "500"),
    ],
)
def test_lookup_maps_error_statuses(
    repo: CompanyRegistryRepository,
    http_provider: MagicMock,
    cache,
    status_code: int,
    error_type: type[Exception],
    message: str,
) -> None:
    """Tests the error raised for each failure status, and that nothing is cached."""
    http_provider.get_within_deadline.return_value = _response(status_code, "{}")

    with pytest.raises(error_type, match=message):
        repo.lookup(CNPJ)

    assert CNPJ not in cache


def test_lookup_propagates_timeouts(repo: CompanyRegistryRepository, http_provider: MagicMock) -> None:
    """Tests that a slow registry surfaces as a timeout."""
    http_provider.get_within_deadline.side_effect = UpstreamTimeoutError(COMPANY_URL, 15.0)

    with pytest.raises(UpstreamTimeoutError):
        repo.lookup(CNPJ)
