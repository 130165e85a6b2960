"""Tests for national ID (CPF) and postal code helpers."""

from geocontacts.domain.national_id import (
    digits_only,
    format_cpf,
    format_postal_code,
    is_valid_cpf,
)


def test_valid_cpf_plain_and_formatted():
    assert is_valid_cpf("52998224725")
    assert is_valid_cpf("529.982.247-25")
    assert is_valid_cpf("111.444.777-35")
    assert is_valid_cpf("12345678909")


def test_wrong_check_digit_is_invalid():
    assert not is_valid_cpf("52998224724")
    assert not is_valid_cpf("12345678900")


def test_repeated_digits_are_invalid():
    assert not is_valid_cpf("11111111111")
    assert not is_valid_cpf("000.000.000-00")


def test_wrong_length_is_invalid():
    assert not is_valid_cpf("")
    assert not is_valid_cpf(None)
    assert not is_valid_cpf("5299822472")
    assert not is_valid_cpf("529982247250")


def test_format_cpf_progressively():
    assert format_cpf("529") == "529"
    assert format_cpf("5299") == "529.9"
    assert format_cpf("5299822") == "529.982.2"
    assert format_cpf("5299822472") == "529.982.247-2"
    assert format_cpf("52998224725") == "529.982.247-25"
    assert format_cpf("529.982.247-25999") == "529.982.247-25"


def test_format_postal_code():
    assert format_postal_code("80010") == "80010"
    assert format_postal_code("80010000") == "80010-000"
    assert format_postal_code("80010-000") == "80010-000"


def test_digits_only():
    assert digits_only("(41) 99999-8888") == "41999998888"
    assert digits_only(None) == ""
