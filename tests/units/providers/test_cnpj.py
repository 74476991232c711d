"""Unit tests for the CNPJ helpers."""

import pytest
from licita_brasil.providers.cnpj import clean_cnpj, is_valid_cnpj


def test_clean_cnpj_keeps_digits_only() -> None:
    """Tests that punctuation is removed."""
    assert clean_cnpj("11.222.333/0001-81") == "11222333000181"
    assert clean_cnpj("") == ""


@pytest.mark.parametrize("cnpj", ["11.222.333/0001-81", "11222333000181"])
def test_valid_cnpj(cnpj: str) -> None:
    """Tests a CNPJ with correct check digits, with and without punctuation."""
    assert is_valid_cnpj(cnpj)


@pytest.mark.parametrize(
    "cnpj",
    [
        "11222333000182",
        "11222333000191",
        "1122233300018",
        "00000000000000",
        "",
    ],
)
def test_invalid_cnpj(cnpj: str) -> None:
    """Tests wrong check digits, wrong length and repeated digits."""
    assert not is_valid_cnpj(cnpj)
