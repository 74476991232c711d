"""Procurement search endpoint.

The search blocks on upstream I/O, so it runs on the thread pool. The
request owns a cancellation token: when the client goes away and the
endpoint task is cancelled, the token is set and every registry call still
in flight for the request is abandoned.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from licita_brasil.models.search import DEFAULT_PAGE_SIZE, ProcurementQuery, ProcurementSearchResponse, SearchResult
from licita_brasil.providers.deadline import CancellationToken
from licita_brasil.providers.logging import LoggingProvider
from licita_brasil.services.search import ProcurementSearchService
from licita_brasil.web.dependencies import get_current_subject, get_search_service, request_correlation_id
from starlette.concurrency import run_in_threadpool

router = APIRouter(prefix="/api/licitacoes", tags=["procurements"])


def _run_search(
    service: ProcurementSearchService,
    query: ProcurementQuery,
    cancel_token: CancellationToken,
    correlation_id: str | None,
) -> SearchResult:
    with LoggingProvider().set_correlation_id(correlation_id):
        return service.search(query, cancel_token)


@router.get("")
async def search_procurements(
    request: Request,
    uf: str | None = Query(None),  # noqa: B008
    municipality_code: str | None = Query(None, alias="codigoMunicipioIbge"),  # noqa: B008
    start_date: str | None = Query(None, alias="dataInicial"),  # noqa: B008
    end_date: str | None = Query(None, alias="dataFinal"),  # noqa: B008
    page: str | None = Query("1", alias="pagina"),  # noqa: B008
    page_size: str | None = Query(str(DEFAULT_PAGE_SIZE), alias="tamanhoPagina"),  # noqa: B008
    modality: str | None = Query(None, alias="modalidade"),  # noqa: B008
    subject: str = Depends(get_current_subject),  # noqa: B008
    service: ProcurementSearchService = Depends(get_search_service),  # noqa: B008
) -> dict[str, Any]:
    """Searches procurements published for a location and period.

    Without `modalidade` every default modality is searched and merged into
    one page; with it, the registry page is returned as is.

    Args:
        request: The incoming request.
        uf: The state code.
        municipality_code: The IBGE municipality code.
        start_date: The start date, `YYYYMMDD` or `YYYY-MM-DD`.
        end_date: The end date, in the same formats.
        page: The page number.
        page_size: The requested page size.
        modality: An optional modality code.
        subject: The CNPJ of the authenticated caller.
        service: The search service.

    Returns:
        The page of records with its pagination metadata.
    """
    query = ProcurementQuery.from_params(uf, municipality_code, start_date, end_date, modality, page, page_size)
    cancel_token = CancellationToken()
    try:
        result = await run_in_threadpool(
            _run_search, service, query, cancel_token, request_correlation_id(request)
        )
    except asyncio.CancelledError:
        cancel_token.cancel()
        raise
    return ProcurementSearchResponse.from_result(result).model_dump(mode="json", by_alias=True)
