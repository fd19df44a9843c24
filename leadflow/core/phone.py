"""Phone helpers - normalization for matching and US display format"""
import re
from typing import NamedTuple, Optional


US_FORMAT_RE = re.compile(r"^\+1 \(\d{3}\) \d{3}-\d{4}$")


class PhoneFormatResult(NamedTuple):
    formatted: Optional[str]
    is_valid: bool
    was_already_formatted: bool


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, used to match chat senders against stored leads"""
    return re.sub(r"\D", "", phone or "")


def format_us_phone(phone: Optional[str]) -> PhoneFormatResult:
    """
    Format a number as +1 (XXX) XXX-XXXX.

    Accepts 10 digits, or 11 digits starting with the country code 1.
    """
    if not phone or not phone.strip():
        return PhoneFormatResult(None, False, False)

    if US_FORMAT_RE.match(phone):
        return PhoneFormatResult(phone, True, True)

    digits = normalize_phone(phone)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return PhoneFormatResult(None, False, False)

    formatted = f"+1 ({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return PhoneFormatResult(formatted, True, False)
