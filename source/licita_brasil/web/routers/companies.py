"""Company lookup endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from licita_brasil.exceptions.query import QueryValidationError
from licita_brasil.providers.cnpj import clean_cnpj
from licita_brasil.providers.logging import LoggingProvider
from licita_brasil.repositories.companies import CompanyRegistryRepository
from licita_brasil.web.dependencies import get_company_repo, get_current_subject, request_correlation_id

router = APIRouter(prefix="/api/cnpj", tags=["companies"])


@router.get("/{cnpj}")
def get_company(
    request: Request,
    cnpj: str,
    subject: str = Depends(get_current_subject),  # noqa: B008
    company_repo: CompanyRegistryRepository = Depends(get_company_repo),  # noqa: B008
) -> dict[str, Any]:
    """Returns the registry data of a company.

    Args:
        request: The incoming request.
        cnpj: The CNPJ, with or without punctuation.
        subject: The CNPJ of the authenticated caller.
        company_repo: The company registry repository.

    Returns:
        The normalized company, keyed in camelCase.
    """
    cnpj_clean = clean_cnpj(cnpj)
    if len(cnpj_clean) != 14:
        raise QueryValidationError("CNPJ inválido.")
    with LoggingProvider().set_correlation_id(request_correlation_id(request)):
        LoggingProvider().get_logger().info(f"Company lookup for {cnpj_clean} requested by {subject}.")
        company = company_repo.lookup(cnpj_clean)
    return company.model_dump(mode="json", by_alias=True)
