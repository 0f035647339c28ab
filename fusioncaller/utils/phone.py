"""Phone number normalization."""

import phonenumbers

from fusioncaller.utils.logger import logger


def format_phone_number(phone_number: str | None) -> str | None:
    """
    Format phone number to E.164 format.

    Defaults to US region if no country code is provided.

    Args:
        phone_number: Phone number string in any format

    Returns:
        E.164 formatted phone number (e.g., +15551234567), the input unchanged
        if it cannot be parsed, or None for empty input
    """
    if not phone_number:
        return None

    try:
        parsed = phonenumbers.parse(phone_number, "US")
        if phonenumbers.is_valid_number(parsed):
            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)

        # Not valid as a US number, try as international
        if phone_number.startswith("+"):
            parsed = phonenumbers.parse(phone_number, None)
            if phonenumbers.is_valid_number(parsed):
                return phonenumbers.format_number(
                    parsed, phonenumbers.PhoneNumberFormat.E164
                )

    except phonenumbers.NumberParseException:
        logger.warning("Could not parse phone number", phone_number=phone_number)

    return phone_number
