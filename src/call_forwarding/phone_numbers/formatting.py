"""
Phone number normalisation helpers backed by phonenumbers.
"""

import phonenumbers

from call_forwarding.utils.logger import logger

DEFAULT_REGION = "US"


def _parse(phone_number: str) -> phonenumbers.PhoneNumber | None:
    try:
        return phonenumbers.parse(phone_number, DEFAULT_REGION)
    except phonenumbers.NumberParseException:
        logger.warning("Could not parse phone number", phone_number=phone_number)
        return None


def _strip(phone_number: str) -> str:
    digits = "".join(ch for ch in phone_number if ch.isdigit())
    return f"+{digits}" if phone_number.strip().startswith("+") else digits


def to_e164(phone_number: str) -> str:
    """
    Normalise a number to E.164 (+15551234567).

    Numbers that cannot be parsed are returned with formatting characters
    removed rather than rejected; the assignment service owns validation.
    """
    parsed = _parse(phone_number)
    if parsed is None:
        return _strip(phone_number)
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def to_national_digits(phone_number: str) -> str:
    """Return the national significant number (5551234567), digits only."""
    parsed = _parse(phone_number)
    if parsed is None:
        return _strip(phone_number).lstrip("+")
    return phonenumbers.national_significant_number(parsed)


def is_default_region(phone_number: str) -> bool:
    """Whether the number belongs to the default region's country code."""
    parsed = _parse(phone_number)
    if parsed is None:
        return False
    return parsed.country_code == phonenumbers.country_code_for_region(DEFAULT_REGION)


def to_display(phone_number: str) -> str:
    """Human-friendly rendering for the dashboard, e.g. (555) 123-4567."""
    parsed = _parse(phone_number)
    if parsed is None:
        return phone_number
    if parsed.country_code == phonenumbers.country_code_for_region(DEFAULT_REGION):
        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.NATIONAL)
    return phonenumbers.format_number(
        parsed, phonenumbers.PhoneNumberFormat.INTERNATIONAL
    )
