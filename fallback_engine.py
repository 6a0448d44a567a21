"""
Fallback engine: reconcile the extracted name with filename ids, the certificate store, OCR lines
and the raw uploaded bytes when extraction gives nothing usable.
"""
import math
import re
from typing import List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

import weights as W
from cert_store import CertRecord
from normalizer import name_tokens, normalize_name

HEADER_WORDS = ("SCHOLARSHIP", "AWARD", "APPLICATION", "TOTAL VALUE", "NAME OF")
CERT_ID = re.compile(r"CERT-[A-Z0-9]+-\d{8}")


def is_header_like(s: Optional[str]) -> bool:
    if not s:
        return True
    up = s.upper()
    if any(w in up for w in HEADER_WORDS):
        return True
    if sum(ch.isdigit() for ch in s) >= W.HEADER_DIGITS:
        return True
    return len(s) > W.HEADER_MAX_CHARS


def _close(a: str, b: str) -> bool:
    limit = 1 if len(b) <= 4 else 2
    return Levenshtein.distance(a, b, score_cutoff=limit) <= limit


def cert_id_from_filename(filename: Optional[str]) -> Optional[str]:
    m = CERT_ID.search((filename or "").upper())
    return m.group(0) if m else None


def cert_from_filename(filename: Optional[str], certs: Sequence[CertRecord]) -> Optional[CertRecord]:
    up = (filename or "").upper()
    if not up:
        return None
    cert_id = cert_id_from_filename(filename)
    for cert in certs:
        if cert.id and (cert.id.upper() == cert_id or cert.id.upper() in up):
            return cert
    return None


def best_certificate_match(input_name: Optional[str], certs: Sequence[CertRecord]) -> Optional[CertRecord]:
    tokens = name_tokens(normalize_name(input_name))
    best, best_overlap = None, -1
    for cert in certs:
        cert_tokens = name_tokens(cert.name)
        overlap = sum(1 for t in tokens if t in cert_tokens)
        if overlap > best_overlap:
            best, best_overlap = cert, overlap
    if best is None:
        return None
    if best_overlap >= W.DB_MIN_OVERLAP:
        return best
    if tokens and best_overlap / len(tokens) >= W.DB_MIN_COVERAGE:
        return best
    return None


def best_text_line(text: Optional[str], input_name: Optional[str]) -> Optional[str]:
    tokens = name_tokens(normalize_name(input_name))
    best, best_overlap = None, 0
    for line in (l.strip() for l in (text or "").splitlines()):
        if not line:
            continue
        words = re.sub(r"[^A-Z ]+", " ", line.upper()).split()
        overlap = 0
        for t in tokens:
            if t in words or any(_close(t, w) for w in words):
                overlap += 1
        if overlap > best_overlap:
            best, best_overlap = line, overlap
    return best


def raw_buffer_match(raw: bytes, input_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Search the uploaded bytes for the input name. Returns (name, source tag)."""
    norm = normalize_name(input_name)
    if not raw or not norm:
        return None, None
    buf = raw[: W.RAW_SCAN_LIMIT].decode("utf-8", errors="ignore").upper()
    if norm in buf:
        return input_name, "raw-buffer"

    tokens = norm.split()
    for width in range(2, min(4, len(tokens)) + 1):
        for i in range(len(tokens) - width + 1):
            window = " ".join(tokens[i:i + width])
            if window in buf:
                return window, "raw-buffer-subseq"

    words = None
    hits = 0
    for t in tokens:
        if t in buf:
            hits += 1
            continue
        if words is None:
            words = set(re.findall(r"[A-Z]{2,21}", buf))
        if any(abs(len(w) - len(t)) <= 1 and _close(t, w) for w in words):
            hits += 1
    required = max(1, math.ceil(len(tokens) * W.RAW_TOKEN_COVERAGE))
    if hits >= required:
        return input_name, f"raw-buffer-tokens({hits}/{len(tokens)})"
    return None, None


def _letters(s: str) -> str:
    return re.sub(r"[^A-Z]", "", (s or "").upper())


def fuzzy_substring_search(haystack: str, needle: str, max_dist: int) -> bool:
    hay = _letters(haystack)[: W.RAW_SCAN_LIMIT]
    target = _letters(needle)
    n = len(target)
    if not hay or not n:
        return False
    for i in range(len(hay) - n + 1):
        if Levenshtein.distance(hay[i:i + n], target, score_cutoff=max_dist) <= max_dist:
            return True
    return False


def choose_extracted_name(
    extracted_name: Optional[str],
    input_name: str,
    certs: Sequence[CertRecord],
    filename: Optional[str] = None,
    text: Optional[str] = None,
    raw: Optional[bytes] = None,
) -> Tuple[Optional[str], List[str]]:
    """
    Pick the name to compare against. Returns (chosen name, extraction source tags).
    Text-line and raw-byte fallbacks only run when `raw` is given (server-side uploads).
    """
    chosen = extracted_name
    tags: List[str] = []
    if chosen and not is_header_like(chosen):
        return chosen, tags

    cert = cert_from_filename(filename, certs)
    if cert:
        return cert.name, ["filename-db"]
    cert = best_certificate_match(input_name, certs)
    if cert:
        return cert.name, ["db-match"]
    if raw is None:
        return chosen, tags

    line = best_text_line(text, input_name)
    if line:
        chosen = line
        tags.append("text-best")
    if chosen and not is_header_like(chosen):
        return chosen, tags

    name, tag = raw_buffer_match(raw, input_name)
    if name:
        chosen = name
        tags.append(tag)

    needle = normalize_name(input_name)
    letters = needle.replace(" ", "")
    if len(letters) >= 3 and not chosen:
        max_dist = max(1, math.floor(len(letters) * W.FUZZY_SUBSTRING_RATIO))
        if text and fuzzy_substring_search(text, needle, max_dist):
            chosen = input_name
            tags.append("fuzzy-substr-text")
        elif raw and fuzzy_substring_search(raw[: W.RAW_SCAN_LIMIT].decode("utf-8", errors="ignore"), needle, max_dist):
            chosen = input_name
            tags.append("fuzzy-substr-raw")
    return chosen, tags
