"""This module defines the ProcurementSearchService.

It answers a procurement search either with a single registry call, when the
caller filters by modality, or by querying every default modality in
parallel and merging the pages into one listing.
"""

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime

from licita_brasil.exceptions.upstream import UpstreamCancelledError, UpstreamError
from licita_brasil.models.procurements import Procurement, ProcurementModality
from licita_brasil.models.search import PartialResult, ProcurementQuery, SearchResult, clamp_page_size
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.date import DateProvider
from licita_brasil.providers.deadline import CancellationToken
from licita_brasil.providers.logging import Logger, LoggingProvider
from licita_brasil.repositories.procurements import ProcurementsRepository

AGGREGATED_MIN_PAGE_SIZE = 10
AGGREGATED_MAX_PAGE_SIZE = 20


def merge_partials(partials: Iterable[PartialResult | None]) -> tuple[list[Procurement], int, int]:
    """Folds the successful partial results of an aggregated search.

    Failed calls are passed as None and contribute nothing. Records are
    concatenated in the order the partials are given. No de-duplication is
    done, so an item returned under two modalities appears, and is counted,
    twice.

    Args:
        partials: One entry per modality call, in default-modality order.

    Returns:
        The concatenated records, the sum of the reported totals and the
        largest reported page count (at least 1).
    """
    records: list[Procurement] = []
    total_records = 0
    total_pages = 1
    for partial in partials:
        if partial is None:
            continue
        records.extend(partial.records)
        total_records += partial.total_records
        total_pages = max(total_pages, partial.total_pages)
    return records, total_records, total_pages


def sort_by_publication_date(records: Sequence[Procurement]) -> list[Procurement]:
    """Sorts records by publication date, newest first.

    The sort is stable. Records whose publication date is missing or cannot
    be parsed are placed after every dated record, in their original order.

    Args:
        records: The records to sort.

    Returns:
        A new, sorted list.
    """
    dated: list[tuple[datetime, Procurement]] = []
    undated: list[Procurement] = []
    for record in records:
        published_at = DateProvider.parse_timestamp(record.publication_date)
        if published_at is None:
            undated.append(record)
        else:
            dated.append((published_at, record))
    dated.sort(key=lambda item: item[0], reverse=True)
    return [record for _, record in dated] + undated


class ProcurementSearchService:
    """Runs procurement searches against the PNCP registry.

    Attributes:
        procurement_repo: The repository that issues registry calls.
        config: The application configuration, which holds the default
            modality set.
        logger: An instance of the application's logger.
    """

    procurement_repo: ProcurementsRepository
    config: Config
    logger: Logger

    def __init__(self, procurement_repo: ProcurementsRepository, config: Config | None = None) -> None:
        """Initializes the service with its dependencies.

        Args:
            procurement_repo: The repository that issues registry calls.
            config: The application configuration.
        """
        self.procurement_repo = procurement_repo
        self.config = config or ConfigProvider.get_config()
        self.logger = LoggingProvider().get_logger()

    @property
    def default_modalities(self) -> list[str]:
        """The modality codes searched when the caller does not pick one."""
        return list(self.config.DEFAULT_MODALITIES)

    def search(self, query: ProcurementQuery, cancel_token: CancellationToken | None = None) -> SearchResult:
        """Searches procurements for a location and date range.

        Args:
            query: The validated search query.
            cancel_token: An optional token that aborts every registry call
                issued for this search when set.

        Returns:
            One page of records with its pagination metadata.

        Raises:
            UpstreamError: On the single-modality path, if the registry call
                fails. Subclasses signal timeouts and cancellation.
            UpstreamCancelledError: On the aggregated path, if the search was
                cancelled while in flight.
        """
        if query.modality:
            return self._search_single_modality(query, query.modality, cancel_token)
        return self._search_all_modalities(query, cancel_token)

    def _search_single_modality(
        self, query: ProcurementQuery, modality: str, cancel_token: CancellationToken | None
    ) -> SearchResult:
        """Answers a modality-filtered search with exactly one registry call.

        The registry's pagination metadata is passed through unchanged and
        any failure propagates to the caller.

        Args:
            query: The search query.
            modality: The modality code the query is filtered by.
            cancel_token: An optional cancellation token.

        Returns:
            The registry page, flagged as not aggregated.
        """
        partial = self.procurement_repo.fetch_page(query, modality, query.page_size, cancel_token)
        return SearchResult(
            records=partial.records,
            total_records=partial.total_records,
            total_pages=partial.total_pages,
            current_page=partial.page_number,
            aggregated=False,
        )

    def _search_all_modalities(self, query: ProcurementQuery, cancel_token: CancellationToken | None) -> SearchResult:
        """Answers an unfiltered search by merging every default modality.

        One registry call per default modality runs concurrently. The calls
        are awaited as a batch, a failed call contributes nothing, and the
        merged records are sorted and cut down to one page.

        Args:
            query: The search query, without a modality.
            cancel_token: An optional cancellation token shared by all calls.

        Returns:
            The merged page, flagged as aggregated.

        Raises:
            UpstreamCancelledError: If the token was set during the search.
        """
        page_size = clamp_page_size(query.page_size, AGGREGATED_MIN_PAGE_SIZE, AGGREGATED_MAX_PAGE_SIZE)
        modalities = self.default_modalities
        token = cancel_token or CancellationToken()
        correlation_id = LoggingProvider.get_correlation_id()

        self.logger.info(
            f"Aggregated search over modalities {', '.join(modalities)} "
            f"(page {query.page}, page size {page_size})."
        )
        with ThreadPoolExecutor(max_workers=len(modalities), thread_name_prefix="pncp-modality") as executor:
            futures = [
                executor.submit(self._fetch_isolated, query, modality, page_size, token, correlation_id)
                for modality in modalities
            ]
            wait(futures)
        partials = [future.result() for future in futures]

        if token.cancelled:
            raise UpstreamCancelledError("aggregated search")

        succeeded = sum(1 for partial in partials if partial is not None)
        if succeeded == 0:
            self.logger.warning(f"All {len(modalities)} modality calls failed; returning an empty result.")
        elif succeeded < len(modalities):
            self.logger.warning(f"{len(modalities) - succeeded} of {len(modalities)} modality calls failed.")

        records, total_records, total_pages = merge_partials(partials)
        page = sort_by_publication_date(records)[:page_size]
        return SearchResult(
            records=page,
            total_records=total_records,
            total_pages=total_pages,
            current_page=query.page,
            aggregated=True,
        )

    def _fetch_isolated(
        self,
        query: ProcurementQuery,
        modality: str,
        page_size: int,
        cancel_token: CancellationToken,
        correlation_id: str | None,
    ) -> PartialResult | None:
        """Fetches one modality page, turning any failure into None.

        Runs on a worker thread, so the caller's correlation ID is bound
        again for the duration of the call.

        Args:
            query: The search query.
            modality: The modality code to fetch.
            page_size: The clamped page size.
            cancel_token: The token shared by the whole search.
            correlation_id: The correlation ID of the calling thread.

        Returns:
            The partial result, or None if the call failed.
        """
        label = ProcurementModality.describe(modality)
        with LoggingProvider().set_correlation_id(correlation_id):
            try:
                partial = self.procurement_repo.fetch_page(query, modality, page_size, cancel_token)
            except UpstreamCancelledError:
                self.logger.info(f"Modality {label} call cancelled.")
                return None
            except UpstreamError as e:
                self.logger.warning(f"Modality {label} call failed ({type(e).__name__}): {e}")
                return None
            except Exception:
                self.logger.exception(f"Unexpected error while fetching modality {label}.")
                return None
            self.logger.info(
                f"Modality {label}: {len(partial.records)} records on this page, "
                f"{partial.total_records} in total."
            )
            return partial
