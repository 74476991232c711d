"""This module initializes the services package.

It re-exports the services so that the web layer and the CLI can import
them from a single place.
"""

from licita_brasil.services.auth import AuthService
from licita_brasil.services.search import ProcurementSearchService

__all__ = [
    "AuthService",
    "ProcurementSearchService",
]
