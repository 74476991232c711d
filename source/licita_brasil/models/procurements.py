"""This module defines the Pydantic models for representing procurement data.

The `Raw*` models mirror the records returned by the PNCP
(Plataforma Nacional de Contratações Públicas) query API, with every field
optional so that an incomplete record never fails validation. `Procurement`
is the normalized, immutable record handed to API consumers.
"""

from enum import IntEnum
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProcurementModality(IntEnum):
    """Enumeration for procurement modalities (modalidades de contratação)."""

    ELECTRONIC_AUCTION = 1
    COMPETITIVE_DIALOGUE = 2
    CONTEST = 3
    ELECTRONIC_COMPETITION = 4
    IN_PERSON_COMPETITION = 5
    ELECTRONIC_REVERSE_AUCTION = 6
    IN_PERSON_REVERSE_AUCTION = 7
    BIDDING_WAIVER = 8
    BIDDING_UNENFORCEABILITY = 9
    EXPRESSION_OF_INTEREST = 10
    PRE_QUALIFICATION = 11
    ACCREDITATION = 12
    IN_PERSON_AUCTION = 13

    @classmethod
    def describe(cls, code: str) -> str:
        """Returns a readable label for a modality code, for log messages.

        Args:
            code: The modality code as sent to the registry.

        Returns:
            The member name followed by the code, or the bare code if it is
            not a known modality.
        """
        try:
            return f"{cls(int(code)).name}({code})"
        except ValueError:
            return code


class RawGovernmentEntity(BaseModel):
    """The government entity (órgão) block of a PNCP record."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    cnpj: str | None = None
    name: str | None = Field(None, alias="razaoSocial")


class RawEntityUnit(BaseModel):
    """The administrative unit (unidade) block of a PNCP record."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    state_acronym: str | None = Field(None, alias="ufSigla")
    municipality_name: str | None = Field(None, alias="municipioNome")


class RawProcurement(BaseModel):
    """A procurement record as returned by `contratacoes/publicacao`.

    Attributes:
        pncp_control_number: The unique control number assigned by PNCP.
        object_description: A description of what is being procured.
        total_estimated_value: The estimated total value.
        total_awarded_value: The value at which the contract was awarded.
        government_entity: The government entity conducting the procurement.
        entity_unit: The administrative unit managing the procurement.
        modality_name: The human readable modality.
        status_name: The human readable status (situação da compra).
        pncp_publication_date: When the record was published on PNCP.
        inclusion_date: When the record was first included on PNCP.
        proposal_opening_date: When proposals start being accepted.
        proposal_closing_date: The deadline for submitting proposals.
        source_system_link: A URL to the procurement in its origin system.
        procurement_year: The year the procurement was initiated.
        procurement_sequence: The sequential number within the year.
        process_number: The administrative process number.
        procurement_number: The formatted number of the procurement.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    pncp_control_number: str | None = Field(None, alias="numeroControlePNCP")
    object_description: str | None = Field(None, alias="objetoCompra")
    total_estimated_value: float | None = Field(None, alias="valorTotalEstimado")
    total_awarded_value: float | None = Field(None, alias="valorTotalHomologado")
    government_entity: RawGovernmentEntity | None = Field(None, alias="orgaoEntidade")
    entity_unit: RawEntityUnit | None = Field(None, alias="unidadeOrgao")
    modality_name: str | None = Field(None, alias="modalidadeNome")
    status_name: str | None = Field(None, alias="situacaoCompraNome")
    pncp_publication_date: str | None = Field(None, alias="dataPublicacaoPncp")
    inclusion_date: str | None = Field(None, alias="dataInclusao")
    proposal_opening_date: str | None = Field(None, alias="dataAberturaProposta")
    proposal_closing_date: str | None = Field(None, alias="dataEncerramentoProposta")
    source_system_link: str | None = Field(None, alias="linkSistemaOrigem")
    procurement_year: int | None = Field(None, alias="anoCompra")
    procurement_sequence: int | None = Field(None, alias="sequencialCompra")
    process_number: str | None = Field(None, alias="processo")
    procurement_number: str | None = Field(None, alias="numeroCompra")


class ProcurementListResponse(BaseModel):
    """Represents the paginated response from the procurement list endpoint.

    Attributes:
        data: The raw procurement records of the current page.
        total_records: The total number of records across all pages.
        total_pages: The total number of pages, if reported.
        page_number: The number of the current page, if reported.
    """

    model_config = ConfigDict(extra="allow")

    data: list[RawProcurement] = Field(default_factory=list)
    total_records: int | None = Field(None, alias="totalRegistros")
    total_pages: int | None = Field(None, alias="totalPaginas")
    page_number: int | None = Field(None, alias="numeroPagina")


class Procurement(BaseModel):
    """A normalized procurement record, immutable once built.

    Serialized with camelCase keys (`controlNumber`, `publicationDate`, ...).
    Display names default to an empty string when the registry omits them;
    every other missing field is None.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    control_number: str | None = None
    object_description: str | None = None
    estimated_value: float | None = None
    awarded_value: float | None = None
    entity_name: str = ""
    entity_cnpj: str = ""
    municipality_name: str = ""
    state_acronym: str = ""
    modality_name: str = ""
    status_name: str = ""
    publication_date: str | None = None
    proposal_opening_date: str | None = None
    proposal_closing_date: str | None = None
    source_system_link: str | None = None
    registry_link: str | None = None
    process_number: str | None = None
    procurement_number: str | None = None

    @classmethod
    def from_raw(cls, raw: RawProcurement, editais_url: str) -> "Procurement":
        """Builds the normalized record from a raw PNCP record.

        The registry link is only derived when the entity CNPJ, the year and
        the sequence number are all present.

        Args:
            raw: The raw record.
            editais_url: The base URL of the public PNCP notice pages.

        Returns:
            The normalized record.
        """
        entity = raw.government_entity or RawGovernmentEntity()
        unit = raw.entity_unit or RawEntityUnit()

        registry_link = None
        if entity.cnpj and raw.procurement_year is not None and raw.procurement_sequence is not None:
            registry_link = urljoin(editais_url, f"{entity.cnpj}/{raw.procurement_year}/{raw.procurement_sequence}")

        return cls(
            control_number=raw.pncp_control_number,
            object_description=raw.object_description,
            estimated_value=raw.total_estimated_value,
            awarded_value=raw.total_awarded_value,
            entity_name=entity.name or "",
            entity_cnpj=entity.cnpj or "",
            municipality_name=unit.municipality_name or "",
            state_acronym=unit.state_acronym or "",
            modality_name=raw.modality_name or "",
            status_name=raw.status_name or "",
            publication_date=raw.pncp_publication_date or raw.inclusion_date,
            proposal_opening_date=raw.proposal_opening_date,
            proposal_closing_date=raw.proposal_closing_date,
            source_system_link=raw.source_system_link or None,
            registry_link=registry_link,
            process_number=raw.process_number,
            procurement_number=raw.procurement_number,
        )
