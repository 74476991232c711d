"""This module defines the 'search' command, which runs a procurement search locally."""

import click
from licita_brasil.exceptions.query import QueryValidationError
from licita_brasil.exceptions.upstream import UpstreamError
from licita_brasil.models.search import DEFAULT_PAGE_SIZE, ProcurementQuery, ProcurementSearchResponse
from licita_brasil.providers.config import ConfigProvider
from licita_brasil.providers.http import HttpProvider
from licita_brasil.repositories.procurements import ProcurementsRepository
from licita_brasil.services.search import ProcurementSearchService


@click.command("search")
@click.option("--uf", "state", help="Two-letter state code, e.g. SP.")
@click.option("--municipio", "municipality_code", help="IBGE municipality code.")
@click.option("--data-inicial", "start_date", required=True, help="Start date, YYYYMMDD or YYYY-MM-DD.")
@click.option("--data-final", "end_date", required=True, help="End date, YYYYMMDD or YYYY-MM-DD.")
@click.option("--modalidade", "modality", help="Modality code. Omit to merge the default modalities.")
@click.option("--pagina", "page", default=1, type=int, show_default=True, help="Page number.")
@click.option("--tamanho", "page_size", default=DEFAULT_PAGE_SIZE, type=int, show_default=True, help="Page size.")
def search_command(
    state: str | None,
    municipality_code: str | None,
    start_date: str,
    end_date: str,
    modality: str | None,
    page: int,
    page_size: int,
) -> None:
    """Searches the PNCP registry and prints the page as JSON.

    Args:
        state: The state code.
        municipality_code: The IBGE municipality code.
        start_date: The start date.
        end_date: The end date.
        modality: An optional modality code.
        page: The page number.
        page_size: The requested page size.
    """
    config = ConfigProvider.get_config()
    http_provider = HttpProvider(pool_size=max(10, len(config.DEFAULT_MODALITIES)))
    service = ProcurementSearchService(ProcurementsRepository(http_provider, config=config), config=config)

    try:
        query = ProcurementQuery.from_params(state, municipality_code, start_date, end_date, modality, page, page_size)
        result = service.search(query)
    except (QueryValidationError, UpstreamError) as e:
        click.secho(f"Error ({e.kind}): {e}", fg="red", err=True)
        raise SystemExit(1) from e
    finally:
        http_provider.close()

    click.echo(ProcurementSearchResponse.from_result(result).model_dump_json(by_alias=True, indent=2))
