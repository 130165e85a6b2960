"""National ID (CPF) and postal code (CEP) helpers. Pure functions."""

import re

CPF_LENGTH = 11
POSTAL_CODE_LENGTH = 8

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def _check_digit(digits: str, weight: int) -> int:
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    rest = 11 - (total % 11)
    return 0 if rest >= 10 else rest


def is_valid_cpf(value: str | None) -> bool:
    """Return True if value has 11 digits and both check digits match.

    Sequences of one repeated digit (e.g. 111.111.111-11) satisfy the
    arithmetic but are not issued, so they are rejected.
    """
    cpf = digits_only(value)
    if len(cpf) != CPF_LENGTH:
        return False
    if cpf == cpf[0] * CPF_LENGTH:
        return False
    first = _check_digit(cpf[:9], 10)
    second = _check_digit(cpf[:10], 11)
    return int(cpf[9]) == first and int(cpf[10]) == second


def format_cpf(value: str | None) -> str:
    """Progressively format up to 11 digits as 000.000.000-00."""
    cpf = digits_only(value)[:CPF_LENGTH]
    if len(cpf) <= 3:
        return cpf
    if len(cpf) <= 6:
        return f"{cpf[:3]}.{cpf[3:]}"
    if len(cpf) <= 9:
        return f"{cpf[:3]}.{cpf[3:6]}.{cpf[6:]}"
    return f"{cpf[:3]}.{cpf[3:6]}.{cpf[6:9]}-{cpf[9:]}"


def format_postal_code(value: str | None) -> str:
    """Format up to 8 digits as 00000-000."""
    cep = digits_only(value)[:POSTAL_CODE_LENGTH]
    if len(cep) <= 5:
        return cep
    return f"{cep[:5]}-{cep[5:]}"
