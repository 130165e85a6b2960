"""Phone number formatting for display and storage."""

import phonenumbers

from geocontacts.domain.national_id import digits_only

DEFAULT_REGION = "BR"
# Area code plus a 9-digit mobile number.
MAX_PHONE_DIGITS = 11


def format_phone(raw: str | None, region: str = DEFAULT_REGION) -> str:
    """Format digits as the user types, e.g. "11987654321" -> "11 98765-4321".

    Digits beyond MAX_PHONE_DIGITS are dropped.
    """
    digits = digits_only(raw)[:MAX_PHONE_DIGITS]
    if not digits:
        return ""
    formatter = phonenumbers.AsYouTypeFormatter(region)
    formatted = ""
    for digit in digits:
        formatted = formatter.input_digit(digit)
    return formatted


def normalize_phone(raw: str | None, default_region: str = DEFAULT_REGION) -> str | None:
    """Parse and return E.164 form of the number, or None if invalid."""
    if not raw or not str(raw).strip():
        return None
    try:
        parsed = phonenumbers.parse(str(raw).strip(), default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
