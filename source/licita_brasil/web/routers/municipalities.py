"""Municipality listing endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from licita_brasil.providers.logging import LoggingProvider
from licita_brasil.repositories.municipalities import MunicipalityRepository
from licita_brasil.web.dependencies import get_municipality_repo, request_correlation_id

router = APIRouter(prefix="/api/municipios", tags=["municipalities"])


@router.get("/{uf}")
def list_municipalities(
    request: Request,
    uf: str,
    municipality_repo: MunicipalityRepository = Depends(get_municipality_repo),  # noqa: B008
) -> list[dict[str, Any]]:
    """Lists the municipalities of a state, ordered by name."""
    with LoggingProvider().set_correlation_id(request_correlation_id(request)):
        municipalities = municipality_repo.list_by_state(uf)
    return [municipality.model_dump(by_alias=True) for municipality in municipalities]
