"""
Document engine: certificate structure checks and eligibility factors over the extracted text.
"""
import math
import re
from itertools import permutations
from typing import List, Optional

import weights as W
from normalizer import collapse_upper, normalize_name
from result_types import DocumentAnalysis, EligibilityAssessment
from validation_engine import compare_names

VALID_INDICATORS = [
    "CERTIFICATE", "CERTIFY", "AWARDED", "PRESENTED", "SCHOLARSHIP",
    "ACHIEVEMENT", "COMPLETION", "GRADUATION", "DEGREE", "DIPLOMA",
]
EXPECTED_FIELDS = ["NAME", "DATE", "SIGNATURE", "SEAL"]
FORGERY_INDICATORS = ["FAKE", "COPY", "SAMPLE", "TEMPLATE", "DRAFT"]
ACADEMIC_TERMS = ["STUDENT", "ACADEMIC", "EDUCATION", "UNIVERSITY", "COLLEGE", "SCHOOL"]
ACHIEVEMENT_TERMS = ["ACHIEVEMENT", "EXCELLENCE", "OUTSTANDING", "MERIT", "DISTINCTION"]
AUTHORITY_TERMS = ["PRINCIPAL", "DIRECTOR", "DEAN", "REGISTRAR", "SIGNATURE", "SEAL"]
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")


def analyze_structure(text: Optional[str]) -> DocumentAnalysis:
    text = text or ""
    up = text.upper()
    suspicious = []
    if len(text) < W.MIN_DOCUMENT_CHARS:
        suspicious.append("Document too short")
    if not re.search(r"[0-9]", text):
        suspicious.append("No dates or numbers found")
    if len(text.split("\n")) < W.MIN_DOCUMENT_LINES:
        suspicious.append("Insufficient line breaks")
    for word in FORGERY_INDICATORS:
        if word in up:
            suspicious.append(f'Contains "{word}"')
    return DocumentAnalysis(
        has_valid_structure=any(w in up for w in VALID_INDICATORS),
        contains_expected_fields=sum(1 for f in EXPECTED_FIELDS if f in up) >= W.MIN_EXPECTED_FIELDS,
        suspicious_patterns=tuple(suspicious),
    )


def name_orderings(tokens: List[str]) -> List[List[str]]:
    if len(tokens) > W.MAX_PERMUTATION_TOKENS:
        return [tokens]
    return [list(p) for p in dict.fromkeys(permutations(tokens))]


def _score_extracted_name(input_name: str, extracted_name: str, factors: List[str]):
    cmp = compare_names(normalize_name(input_name), normalize_name(extracted_name))
    if cmp.equivalent and cmp.score >= W.FLEXIBLE_SCORE:
        factors.append("Perfect name match via OCR extraction")
        return W.OCR_PERFECT_BONUS, True
    if cmp.score >= W.STRONG_NAME_SCORE and cmp.token_overlap >= 2:
        factors.append(f"Strong name match via OCR: {cmp.score}% similarity")
        return W.OCR_STRONG_BONUS, True
    if cmp.score >= W.GOOD_NAME_SCORE and cmp.token_overlap >= 2 and cmp.overlap_fraction >= W.GOOD_NAME_FRACTION:
        factors.append(f"Good name match via OCR: {cmp.score}% similarity")
        return W.OCR_GOOD_BONUS, True
    factors.append(
        f'Name mismatch detected: Input "{input_name}" vs Document "{extracted_name}" '
        f"({cmp.score}% similarity, {cmp.token_overlap} tokens overlap)"
    )
    return -W.NAME_MISMATCH_PENALTY, False


def _score_text_search(input_name: str, up_text: str, factors: List[str]):
    typed = collapse_upper(input_name)
    tokens = typed.split()
    if not tokens:
        return 0, False
    if typed in up_text:
        factors.append("Full name found in document text - PERFECT MATCH")
        return W.TEXT_FULL_NAME_BONUS, True
    for ordering in name_orderings(tokens)[1:]:
        candidate = " ".join(ordering)
        if candidate in up_text:
            factors.append(f'Name found in different order in text: "{candidate}"')
            return W.TEXT_REORDERED_BONUS, True

    found = [t for t in tokens if len(t) >= W.TEXT_MIN_TOKEN_CHARS and t in up_text]
    if found and len(found) >= math.ceil(len(tokens) * W.TEXT_MAJORITY_FRACTION):
        factors.append(f"Partial name match in text: {len(found)}/{len(tokens)} tokens found")
        return W.TEXT_MAJORITY_TOKENS_BONUS, True
    if len(found) >= 2:
        factors.append(f"Some name tokens in text: {len(found)}/{len(tokens)} tokens found")
        return W.TEXT_SOME_TOKENS_BONUS, True
    if len(found) == 1 and len(tokens) == 1:
        factors.append("Single name token found in document")
        return W.TEXT_SINGLE_NAME_BONUS, True
    if len(found) == 1:
        factors.append("One name token found in document")
        return W.TEXT_ONE_TOKEN_BONUS, False
    return 0, False


def assess_eligibility(input_name: Optional[str], text: Optional[str], extracted_name: Optional[str] = None) -> EligibilityAssessment:
    input_name = input_name or ""
    text = text or ""
    up_text = collapse_upper(text)
    factors: List[str] = []
    score = W.ELIGIBILITY_BASE
    found = False

    if extracted_name and extracted_name.strip():
        delta, found = _score_extracted_name(input_name, extracted_name, factors)
        score = max(0, score + delta)

    if not found and text:
        delta, found = _score_text_search(input_name, up_text, factors)
        score += delta

    if not found:
        factors.append("No name tokens found in document - potential mismatch")
        score = max(0, score - W.NO_NAME_PENALTY)

    for term in ACADEMIC_TERMS:
        if term in up_text:
            factors.append(f"Academic context: {term}")
            score += W.ACADEMIC_BONUS
    for term in ACHIEVEMENT_TERMS:
        if term in up_text:
            factors.append(f"Achievement indicator: {term}")
            score += W.ACHIEVEMENT_BONUS
    if YEAR_PATTERN.search(text):
        factors.append("Valid date format found")
        score += W.YEAR_BONUS
    for term in AUTHORITY_TERMS:
        if term in up_text:
            factors.append(f"Authority indicator: {term}")
            score += W.AUTHORITY_BONUS

    return EligibilityAssessment(factors=tuple(factors), score=max(0, min(100, score)))
