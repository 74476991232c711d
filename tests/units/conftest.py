"""This module contains shared fixtures for all unit tests."""

import os
from collections.abc import Callable, Generator

import pytest
from licita_brasil.models.procurements import Procurement
from licita_brasil.models.search import PartialResult
from licita_brasil.providers.config import Config


@pytest.fixture(scope="session", autouse=True)
def isolate_environment() -> Generator[None, None, None]:
    """Removes settings that would make unit tests depend on the host.

    Unit tests never reach the real registries, so any URL or secret set on
    the machine running them is dropped for the session.
    """
    keys = [key for key in os.environ if key.startswith(("PNCP_", "CNPJ_", "IBGE_", "JWT_", "RATE_LIMIT_"))]
    saved = {key: os.environ.pop(key) for key in keys}
    yield
    os.environ.update(saved)


@pytest.fixture
def config() -> Config:
    """A configuration suited to unit tests: fast hashing and no throttling."""
    return Config(
        _env_file=None,
        JWT_SECRET="unit-test-secret",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def make_procurement() -> Callable[..., Procurement]:
    """Returns a builder of normalized procurements holding only the fields a test cares about."""

    def _make(control_number: str, publication_date: str | None = None, **fields: str) -> Procurement:
        return Procurement(control_number=control_number, publication_date=publication_date, **fields)

    return _make


@pytest.fixture
def make_partial() -> Callable[..., PartialResult]:
    """Returns a builder of single registry call results."""

    def _make(records: list[Procurement], total_records: int, total_pages: int = 1) -> PartialResult:
        return PartialResult(records=records, total_records=total_records, total_pages=total_pages, page_number=1)

    return _make
