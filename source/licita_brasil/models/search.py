"""This module defines the models exchanged by the procurement search.

A search starts from a `ProcurementQuery`, produces one `PartialResult` per
upstream call, folds them into a single `SearchResult` and is finally shaped
into a `ProcurementSearchResponse` for the API consumer.
"""

from datetime import date

from licita_brasil.exceptions.query import QueryValidationError
from licita_brasil.models.procurements import Procurement
from licita_brasil.providers.date import DateProvider
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_PAGE_SIZE = 20


class ProcurementQuery(BaseModel):
    """A validated procurement search request.

    `start_date <= end_date` is deliberately not checked: the registry is
    the authority on date ranges and receives whatever the caller sent.

    Attributes:
        state: The two-letter state code (UF), if filtering by state.
        municipality_code: The IBGE municipality code, if filtering by city.
        start_date: The first publication date of the range, inclusive.
        end_date: The last publication date of the range, inclusive.
        modality: A modality code. When empty, every default modality is
            searched and the results are merged.
        page: The page to fetch, starting at 1.
        page_size: The page size requested by the caller, before clamping.
    """

    model_config = ConfigDict(frozen=True)

    state: str | None = None
    municipality_code: str | None = None
    start_date: date
    end_date: date
    modality: str | None = None
    page: int = Field(1, ge=1)
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_params(
        cls,
        state: str | None,
        municipality_code: str | None,
        start_date: str | date | None,
        end_date: str | date | None,
        modality: str | None = None,
        page: int | str | None = 1,
        page_size: int | str | None = DEFAULT_PAGE_SIZE,
    ) -> "ProcurementQuery":
        """Builds a query from loosely typed request parameters.

        Args:
            state: The state code, possibly blank.
            municipality_code: The IBGE municipality code, possibly blank.
            start_date: The start date, as `YYYYMMDD`, `YYYY-MM-DD` or a date.
            end_date: The end date, in the same formats.
            modality: The modality code, possibly blank.
            page: The page number.
            page_size: The requested page size.

        Returns:
            The validated query.

        Raises:
            QueryValidationError: If a required field is missing or a field
                is malformed.
        """
        state = (state or "").strip().upper() or None
        municipality_code = (municipality_code or "").strip() or None
        modality = (modality or "").strip() or None

        if not state and not municipality_code:
            raise QueryValidationError("Informe pelo menos um Estado (UF).")
        if not start_date or not end_date:
            raise QueryValidationError("Informe o período de pesquisa.")

        try:
            parsed_start = DateProvider.parse_query_date(start_date)
            parsed_end = DateProvider.parse_query_date(end_date)
        except ValueError as e:
            raise QueryValidationError(f"Data inválida: {e}") from e

        page_number = _to_int(page, "pagina", default=1)
        if page_number < 1:
            raise QueryValidationError("A página deve ser maior ou igual a 1.")

        return cls(
            state=state,
            municipality_code=municipality_code,
            start_date=parsed_start,
            end_date=parsed_end,
            modality=modality,
            page=page_number,
            page_size=_to_int(page_size, "tamanhoPagina", default=DEFAULT_PAGE_SIZE),
        )


def _to_int(value: int | str | None, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise QueryValidationError(f"Parâmetro '{name}' deve ser um número inteiro.") from e


def clamp_page_size(page_size: int, lower: int, upper: int) -> int:
    """Forces a page size into the inclusive range [lower, upper].

    Out-of-range sizes are corrected silently instead of being rejected.

    Args:
        page_size: The requested size.
        lower: The smallest size allowed.
        upper: The largest size allowed.

    Returns:
        The corrected size.
    """
    return max(lower, min(page_size, upper))


class PartialResult(BaseModel):
    """One page returned by a single registry call."""

    model_config = ConfigDict(frozen=True)

    records: list[Procurement] = Field(default_factory=list)
    total_records: int = 0
    total_pages: int = 1
    page_number: int = 1


class SearchResult(BaseModel):
    """The outcome of a search, from either the single or the aggregated path.

    Attributes:
        records: The records of the requested page.
        total_records: The total reported by the registry. When aggregated,
            the sum over the successful modality calls.
        total_pages: The page count reported by the registry. When
            aggregated, the largest count among the successful calls.
        current_page: The page that was requested.
        aggregated: Whether the records were merged from several modalities.
    """

    model_config = ConfigDict(frozen=True)

    records: list[Procurement] = Field(default_factory=list)
    total_records: int = 0
    total_pages: int | None = None
    current_page: int = 1
    aggregated: bool = False


class ProcurementSearchResponse(BaseModel):
    """The payload returned to API consumers for a search."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    records: list[Procurement]
    total_records: int
    total_pages: int
    current_page: int
    aggregated: bool

    @classmethod
    def from_result(cls, result: SearchResult) -> "ProcurementSearchResponse":
        """Shapes a search result for the API, whichever path produced it.

        Args:
            result: The search result.

        Returns:
            The response, with `total_pages` defaulting to 1 when absent.
        """
        return cls(
            records=result.records,
            total_records=result.total_records,
            total_pages=result.total_pages or 1,
            current_page=result.current_page,
            aggregated=result.aggregated,
        )
