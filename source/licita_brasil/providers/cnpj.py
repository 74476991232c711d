"""This module provides helpers for Brazilian company tax ids (CNPJ)."""

import re

_NON_DIGITS = re.compile(r"\D")
_FIRST_DIGIT_WEIGHTS = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_SECOND_DIGIT_WEIGHTS = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def clean_cnpj(cnpj: str) -> str:
    """Strips punctuation from a CNPJ, keeping only its digits.

    Args:
        cnpj: A CNPJ such as `11.222.333/0001-81`.

    Returns:
        The digits only, e.g. `11222333000181`.
    """
    return _NON_DIGITS.sub("", cnpj or "")


def _check_digit(digits: str, weights: tuple[int, ...]) -> int:
    total = sum(int(digit) * weight for digit, weight in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cnpj(cnpj: str) -> bool:
    """Checks the length and both check digits of a CNPJ.

    Sequences of a single repeated digit pass the check-digit arithmetic but
    are not valid registrations, so they are rejected too.

    Args:
        cnpj: The CNPJ, with or without punctuation.

    Returns:
        True if the CNPJ is well formed.
    """
    digits = clean_cnpj(cnpj)
    if len(digits) != 14 or len(set(digits)) == 1:
        return False
    if _check_digit(digits[:12], _FIRST_DIGIT_WEIGHTS) != int(digits[12]):
        return False
    return _check_digit(digits[:13], _SECOND_DIGIT_WEIGHTS) == int(digits[13])
