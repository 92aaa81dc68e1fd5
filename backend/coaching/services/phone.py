import re
from typing import List, Optional

from coaching.core.config import settings

_SEPARATORS = re.compile(r"[\s\-()]")


def normalize_phone(raw: str, country_code: Optional[str] = None) -> str:
    """
    Canonical E.164 form used as the OTP key and for identity lookups.

    "9876543210", "91 98765 43210" and "+919876543210" all give "+919876543210".
    """
    if not raw:
        return ""
    prefix = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = prefix.lstrip("+")
    clean = _SEPARATORS.sub("", raw)
    if clean.startswith("+"):
        return clean
    if clean.startswith(digits) and len(clean) == len(digits) + 10:
        return f"+{clean}"
    return f"{prefix}{clean}"


def phone_lookup_candidates(raw: str) -> List[str]:
    """Normalized form first, then the raw input for records stored before normalization."""
    candidates = []
    for value in (normalize_phone(raw), raw):
        if value and value not in candidates:
            candidates.append(value)
    return candidates
