"""
Extraction engine: pattern rules + line scoring + direct hint search -> best candidate name and email.
"""
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from rapidfuzz.distance import Levenshtein

import weights as W
from normalizer import _norm, collapse_upper, normalize_name, strip_diacritics
from result_types import ExtractionResult

NAME_WORD = r"[A-Z][A-Za-z'\u2019]+"
NAME_SEQ = rf"({NAME_WORD}(?:[ \t]+{NAME_WORD}){{0,4}})"

NAME_PATTERNS = [
    re.compile(rf"(?i:\b(?:name|student|candidate|applicant|recipient)(?:\s*[:\-]\s*|[ \t]+)){NAME_SEQ}"),
    re.compile(rf"(?i:\bthis\s+is\s+to\s+certify\s+that\s+){NAME_SEQ}"),
    re.compile(rf"(?i:\b(?:presented|awarded)\s+to\s+){NAME_SEQ}"),
    re.compile(rf"(?i:\bhereby\s+certify\s+that\s+){NAME_SEQ}"),
]
CAPITALIZED_RUN = re.compile(r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*\b")

CERT_PHRASES = [
    re.compile(r"this\s+is\s+to\s+certify\s+that\s+(.+?)(?:\s+has\s+|$)", re.I),
    re.compile(r"(?:presented|awarded)\s+to\s+(.+?)(?:\s+for\s+|$)", re.I),
    re.compile(r"name\s*[:\-]\s*(.+?)(?:\s*(?:roll|id|class|course)\b|$)", re.I),
    re.compile(r"student\s*[:\-]\s*(.+?)(?:\s*(?:roll|id|class|course)\b|$)", re.I),
]
FRAGMENT_SPLIT = re.compile(r",|;|\sand\s|/", re.I)
LEADING_LABEL = re.compile(r"[:\-]\s*([^:\-]+)$")
EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

NAME_KEYWORDS = re.compile(r"\b(?:NAME|APPLICANT|STUDENT|CANDIDATE|RECIPIENT|AWARDED TO|PRESENTED TO)\b")
CERT_OPENERS = re.compile(r"\b(?:THIS IS TO CERTIFY|HEREBY CERTIFY|CERTIFICATE OF)\b")
ADMIN_ID_WORDS = re.compile(r"\b(?:APPLICATION|NUMBER|ID|REGISTRATION|SERIAL|CODE|REF)\b")
CATEGORY_WORDS = re.compile(r"\b(?:SCHOLARSHIP|PROGRAM|COURSE|SUBJECT|MARKS|GRADE|CGPA|PERCENTAGE)\b")
METADATA_WORDS = re.compile(r"\b(?:DATE|YEAR|MONTH|SIGNATURE|SEAL|PRINCIPAL|DIRECTOR)\b")
REFERENCE_CODES = re.compile(r"\b(?:RFSCH|CERT-|REF|BATCH|ROLL)\b")
PROPER_WORD = re.compile(r"^[A-Z][a-z]{2,14}$")
STOP_WORDS = {"THE", "AND", "OF", "IN", "AT", "ON", "FOR", "WITH", "BY"}

SOURCE_PRIORITY = {"direct-match": 4, "pattern": 3, "fragment": 2, "single-token": 1, "raw": 0}


@dataclass(frozen=True)
class Candidate:
    name: str
    score: float
    source: str

    def rank(self):
        return (self.score, SOURCE_PRIORITY.get(self.source, 0), len(alpha_tokens(self.name)))


def alpha_tokens(s: str) -> List[str]:
    return re.findall(r"[A-Za-z]{2,}", s or "")


def _hint_tokens(hint: Optional[str]) -> List[str]:
    return _norm(hint).upper().split()


def _fuzzy_hit(a: str, b: str) -> bool:
    limit = max(1, math.floor(min(len(a), len(b)) * W.HINT_FUZZY_RATIO))
    return Levenshtein.distance(a, b, score_cutoff=limit) <= limit


def score_line(line: str, hint_tokens: Optional[List[str]] = None) -> float:
    score = 0
    up = line.upper()
    tokens = alpha_tokens(line)

    if NAME_KEYWORDS.search(up):
        score += W.NAME_KEYWORD_BONUS
    if CERT_OPENERS.search(up):
        score += W.CERT_PHRASE_BONUS

    if ADMIN_ID_WORDS.search(up):
        score -= W.ADMIN_ID_PENALTY
    if CATEGORY_WORDS.search(up):
        score -= W.CATEGORY_PENALTY
    if METADATA_WORDS.search(up):
        score -= W.METADATA_PENALTY

    digits = sum(ch.isdigit() for ch in line)
    specials = len(re.findall(r"[^\w\s]", line))
    if digits > W.MAX_LINE_DIGITS:
        score -= W.DIGIT_PENALTY
    if specials > W.MAX_LINE_SPECIALS:
        score -= W.SPECIAL_CHAR_PENALTY
    if REFERENCE_CODES.search(up):
        score -= W.REFERENCE_CODE_PENALTY

    if 2 <= len(tokens) <= 4:
        score += W.NAME_SHAPE_BONUS
    elif len(tokens) > 4:
        score -= W.TOO_MANY_TOKENS_PENALTY
    proper = [t for t in tokens if PROPER_WORD.match(t) and t.upper() not in STOP_WORDS]
    score += len(proper) * W.PROPER_WORD_BONUS

    if hint_tokens and tokens:
        up_tokens = [t.upper() for t in tokens]
        for ht in hint_tokens:
            if ht in up_tokens:
                score += W.HINT_EXACT_BONUS
            elif any(_fuzzy_hit(ht, ut) for ut in up_tokens):
                score += W.HINT_FUZZY_BONUS

    if re.fullmatch(r"[A-Z\s]{1,20}", up) and len(tokens) <= 1:
        score -= W.SINGLE_CAPS_PENALTY
    if len(line) > W.LONG_LINE_CHARS:
        score -= W.LONG_LINE_PENALTY
    if len(line) < W.SHORT_LINE_CHARS:
        score -= W.SHORT_LINE_PENALTY
    return score


def find_pattern_names(text: str) -> List[str]:
    out = []
    for pattern in NAME_PATTERNS:
        for m in pattern.finditer(text):
            v = _norm(m.group(1))
            if len(v) > 2 and re.fullmatch(r"[A-Za-z'\u2019\s]+", v):
                out.append(v)
    for m in CAPITALIZED_RUN.finditer(text):
        if 2 <= len(m.group(0).split()) <= 4:
            out.append(_norm(m.group(0)))
    return out


def _line_fragments(line: str, hint_tokens: List[str]) -> List[Candidate]:
    base = strip_diacritics(line)
    out = []
    for phrase in CERT_PHRASES:
        m = phrase.search(base)
        if m and m.group(1):
            v = m.group(1).strip()
            if 2 < len(v) < W.LONG_LINE_CHARS:
                out.append(Candidate(v, score_line(v, hint_tokens) + W.CERT_PHRASE_FRAGMENT_BONUS, "fragment"))
    # "Jane Roe (24CE55)" keeps only the part before the parenthetical id.
    pre_paren = base.split("(")[0].strip()
    for part in FRAGMENT_SPLIT.split(pre_paren):
        part = part.strip()
        if part:
            out.append(Candidate(part, score_line(part, hint_tokens), "fragment"))
    if pre_paren:
        out.append(Candidate(pre_paren, score_line(pre_paren, hint_tokens), "fragment"))
    return out


def clean_fragment(frag: Candidate, hint_tokens: List[str]) -> Optional[Candidate]:
    m = LEADING_LABEL.search(frag.name)
    value = m.group(1).strip() if m else frag.name
    tokens = alpha_tokens(value)
    if len(tokens) >= 2:
        return Candidate(" ".join(tokens), frag.score, "fragment")
    if len(tokens) == 1 and tokens[0].upper() in hint_tokens:
        return Candidate(tokens[0], frag.score, "single-token")
    raw = value.strip()
    if W.SHORT_LINE_CHARS < len(raw) <= W.LONG_LINE_CHARS:
        return Candidate(raw, frag.score - W.RAW_FRAGMENT_PENALTY, "raw")
    return None


def direct_match(text: str, hint: Optional[str]) -> Optional[str]:
    typed = collapse_upper(hint)
    if not typed:
        return None
    hay = collapse_upper(text)
    if typed in hay or normalize_name(typed) in hay:
        return _norm(hint)
    return None


def extract_email(text: str) -> Optional[str]:
    for line in (text or "").splitlines():
        m = EMAIL.search(line)
        if m:
            return m.group(0)
    return None


def extract_fields(text: Optional[str], input_name_hint: Optional[str] = None) -> ExtractionResult:
    text = text or ""
    hint_tokens = _hint_tokens(input_name_hint)
    lines = [l.strip() for l in text.splitlines() if l.strip()]
    candidates: List[Candidate] = []

    for name in find_pattern_names(text):
        candidates.append(Candidate(name, score_line(name, hint_tokens) + W.PATTERN_BONUS, "pattern"))

    fragments: List[Candidate] = []
    for line in lines:
        fragments.extend(_line_fragments(line, hint_tokens))
    fragments.sort(key=lambda c: c.score, reverse=True)
    for frag in fragments[: W.TOP_FRAGMENTS]:
        if frag.score <= W.FRAGMENT_FLOOR:
            continue
        cleaned = clean_fragment(frag, hint_tokens)
        if cleaned:
            candidates.append(cleaned)

    direct = direct_match(text, input_name_hint)
    if direct:
        best = max((c.score for c in candidates), default=W.DIRECT_MATCH_SCORE)
        candidates.append(Candidate(direct, max(W.DIRECT_MATCH_SCORE, best + 1), "direct-match"))

    email = extract_email(text)
    if not candidates:
        return ExtractionResult(email=email)
    top = max(candidates, key=Candidate.rank)
    if top.score <= W.CANDIDATE_FLOOR:
        return ExtractionResult(email=email)
    return ExtractionResult(name=top.name, email=email, source=top.source)
