import re
from datetime import datetime, timezone
from typing import Optional

# 2-digit state code + PAN (5 letters, 4 digits, 1 letter) + entity + 'Z' + checksum
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
HSN_PATTERN = re.compile(r"^[0-9]{6,8}$")
PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")


def validate_gst_number(gst_number: str) -> bool:
    if not gst_number:
        return False
    return bool(GSTIN_PATTERN.match(gst_number.strip().upper()))


def validate_hsn_code(hsn_code: str) -> bool:
    if not hsn_code:
        return False
    return bool(HSN_PATTERN.match(hsn_code.strip()))


def validate_pincode(pincode: str) -> bool:
    if not pincode:
        return False
    return bool(PINCODE_PATTERN.match(pincode.strip()))


def normalize_phone_number(raw_phone: str, country_code: str = "+91") -> str:
    """Strip spaces, '+', a matching country code prefix and any non-digits."""
    cleaned = re.sub(r"\s+", "", raw_phone or "")
    cleaned = cleaned.lstrip("+")

    code = country_code.lstrip("+")
    # a bare 10-digit mobile number may itself start with the code digits
    if code and cleaned.startswith(code) and len(cleaned) > 10:
        cleaned = cleaned[len(code):]

    return re.sub(r"\D", "", cleaned)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; convert aware ones, leave naive ones alone."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
