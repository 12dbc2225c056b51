"""Phone number entry helpers: country calling codes and number composition."""

import phonenumbers


def calling_codes() -> list[str]:
    """Return every known country calling code as "+<code>", ascending."""
    return [f"+{code}" for code in sorted(phonenumbers.COUNTRY_CODE_TO_REGION_CODE)]


def compose_phone_number(country_code: str, local_number: str) -> str:
    """Join a calling code and a local number as "+<code> <number>".

    The number itself is not validated or normalized; it is kept as typed so it
    stays comparable with numbers stored by other clients. A blank local number
    returns "" so the caller's empty-field check rejects it. Raises ValueError
    for an unknown calling code.
    """
    code = (country_code or "").strip().lstrip("+")
    if not code.isdigit() or int(code) not in phonenumbers.COUNTRY_CODE_TO_REGION_CODE:
        raise ValueError(f"Unknown country calling code: {country_code!r}")
    number = (local_number or "").strip()
    if not number:
        return ""
    return f"+{int(code)} {number}"
