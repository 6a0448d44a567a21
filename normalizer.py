"""
Name normalizer: raw name -> uppercase, whitespace-collapsed, token-sorted canonical form.
"""
import re
import unicodedata
from typing import List, Optional


def _norm(s: Optional[str]) -> str:
    if not s:
        return ""
    return " ".join(str(s).split()).strip()


def normalize_name(raw: Optional[str]) -> str:
    return " ".join(sorted(_norm(raw).upper().split()))


def name_tokens(normalized: Optional[str]) -> List[str]:
    return [t for t in (normalized or "").split(" ") if t]


def strip_diacritics(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s or "")
    return _norm("".join(ch for ch in decomposed if not unicodedata.combining(ch)))


def collapse_upper(s: Optional[str]) -> str:
    """Case- and spacing-insensitive form used for literal substring checks."""
    return _norm(strip_diacritics(s or "")).upper()


def normalize_token(token: str) -> str:
    return re.sub(r"[\W_]", "", token.upper())
