"""Unit tests for the procurement models."""

from licita_brasil.models.procurements import Procurement, ProcurementListResponse, ProcurementModality, RawProcurement

EDITAIS_URL = "https://pncp.gov.br/app/editais/"


def _raw_record(**overrides: object) -> dict:
    record = {
        "numeroControlePNCP": "46395000000139-1-000123/2024",
        "objetoCompra": "Aquisição de material de escritório",
        "valorTotalEstimado": 15000.5,
        "valorTotalHomologado": None,
        "orgaoEntidade": {"cnpj": "46395000000139", "razaoSocial": "MUNICIPIO DE SAO PAULO"},
        "unidadeOrgao": {"ufSigla": "SP", "municipioNome": "São Paulo"},
        "modalidadeNome": "Pregão - Eletrônico",
        "situacaoCompraNome": "Divulgada no PNCP",
        "dataPublicacaoPncp": "2024-01-15T10:30:00",
        "dataInclusao": "2024-01-14T09:00:00",
        "dataAberturaProposta": "2024-01-20T08:00:00",
        "dataEncerramentoProposta": "2024-02-01T18:00:00",
        "linkSistemaOrigem": "https://compras.example/123",
        "anoCompra": 2024,
        "sequencialCompra": 123,
        "processo": "2024/0001",
        "numeroCompra": "90001/2024",
    }
    record.update(overrides)
    return record


def test_from_raw_maps_every_field() -> None:
    """Tests normalization of a complete registry record."""
    raw = RawProcurement.model_validate(_raw_record())

    procurement = Procurement.from_raw(raw, EDITAIS_URL)

    assert procurement.control_number == "46395000000139-1-000123/2024"
    assert procurement.estimated_value == 15000.5
    assert procurement.awarded_value is None
    assert procurement.entity_name == "MUNICIPIO DE SAO PAULO"
    assert procurement.entity_cnpj == "46395000000139"
    assert procurement.municipality_name == "São Paulo"
    assert procurement.state_acronym == "SP"
    assert procurement.modality_name == "Pregão - Eletrônico"
    assert procurement.status_name == "Divulgada no PNCP"
    assert procurement.publication_date == "2024-01-15T10:30:00"
    assert procurement.registry_link == "https://pncp.gov.br/app/editais/46395000000139/2024/123"
    assert procurement.process_number == "2024/0001"


def test_from_raw_falls_back_to_inclusion_date_and_empty_names() -> None:
    """Tests the fallbacks used for sparse records."""
    raw = RawProcurement.model_validate(
        _raw_record(dataPublicacaoPncp=None, orgaoEntidade=None, unidadeOrgao=None, modalidadeNome=None)
    )

    procurement = Procurement.from_raw(raw, EDITAIS_URL)

    assert procurement.publication_date == "2024-01-14T09:00:00"
    assert procurement.entity_name == ""
    assert procurement.state_acronym == ""
    assert procurement.modality_name == ""
    assert procurement.registry_link is None


def test_from_raw_tolerates_numeric_identifiers() -> None:
    """Tests that numbers sent where text is expected are accepted."""
    raw = RawProcurement.model_validate(_raw_record(processo=123, orgaoEntidade={"cnpj": 46395000000139}))

    procurement = Procurement.from_raw(raw, EDITAIS_URL)

    assert procurement.process_number == "123"
    assert procurement.entity_cnpj == "46395000000139"


def test_serializes_with_camel_case_keys() -> None:
    """Tests the keys exposed to API consumers."""
    procurement = Procurement(control_number="1", publication_date="2024-01-15")

    payload = procurement.model_dump(by_alias=True)

    assert payload["controlNumber"] == "1"
    assert payload["publicationDate"] == "2024-01-15"
    assert "registryLink" in payload


def test_list_response_tolerates_missing_metadata() -> None:
    """Tests that a page without pagination metadata still parses."""
    response = ProcurementListResponse.model_validate({"data": [_raw_record()]})

    assert len(response.data) == 1
    assert response.total_records is None
    assert response.total_pages is None


def test_modality_describe() -> None:
    """Tests the readable labels used in log messages."""
    assert ProcurementModality.describe("6") == "ELECTRONIC_REVERSE_AUCTION(6)"
    assert ProcurementModality.describe("99") == "99"
    assert ProcurementModality.describe("x") == "x"
