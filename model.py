"""
Certificate verification: decision engine (Y = A ∧ E) plus orchestration of OCR, extraction and fallbacks.
"""
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import weights as W
from audit_log import AuditLog
from cert_store import CertRecord
from discrete_math import analyze_boolean, analyze_combinatorics, analyze_probability, analyze_sets
from document_engine import analyze_structure, assess_eligibility
from extraction_engine import extract_fields
from fallback_engine import choose_extracted_name
from normalizer import collapse_upper, name_tokens, normalize_name
from ocr_engine import get_document_text_debug
from result_types import DiscreteMathAnalysis, ExtractionResult, Proposition, TruthTable, VerifyOutput
from validation_engine import compare_names

logging.basicConfig(level=logging.INFO)
FORMULA = "Y = A ∧ E"
TEXT_SAMPLE_LEN = 500


def _clamp(v: float) -> float:
    return max(0.0, min(100.0, v))


def _name_bonus(cmp) -> int:
    if cmp.equivalent:
        return W.EXACT_NAME_BONUS
    if cmp.score >= W.STRONG_NAME_SCORE:
        return W.STRONG_NAME_BONUS
    if cmp.score >= W.FAIR_NAME_SCORE:
        return W.FAIR_NAME_BONUS
    return 0


def verify_document(name: Optional[str], extracted_name: Optional[str] = None, extracted_text: Optional[str] = None) -> VerifyOutput:
    """
    Decide whether `name` matches the certificate and whether the document looks eligible.
    Never raises for string or None inputs; empty evidence yields "denied".
    """
    name = name or ""
    text = extracted_text or ""
    extraction = None
    if not (extracted_name or "").strip() and text.strip():
        extraction = extract_fields(text, name)
        extracted_name = extraction.name

    norm_input = normalize_name(name)
    norm_extracted = normalize_name(extracted_name)
    comparison = compare_names(norm_input, norm_extracted)
    document = analyze_structure(text)
    eligibility = assess_eligibility(name, text, extracted_name)

    if (not norm_extracted or comparison.score < W.TEXT_FALLBACK_SCORE) and norm_input:
        if norm_input in collapse_upper(text):
            logging.info("Input name found verbatim in document text, using self-comparison")
            comparison = compare_names(norm_input, norm_input)

    input_tokens = name_tokens(norm_input)
    extracted_tokens = name_tokens(norm_extracted)
    sets = analyze_sets(input_tokens, extracted_tokens)
    combinatorics = analyze_combinatorics(input_tokens, extracted_tokens)

    authenticity_score = _clamp(
        comparison.score * W.NAME_WEIGHT
        + (W.STRUCTURE_BONUS if document.has_valid_structure else 0)
        + (W.EXPECTED_FIELDS_BONUS if document.contains_expected_fields else 0)
        + sets.jaccard_similarity * W.JACCARD_WEIGHT
        + combinatorics.combinatorial_score * W.COMBINATORICS_WEIGHT
        - len(document.suspicious_patterns) * W.SUSPICIOUS_PATTERN_PENALTY
    )
    base_eligibility = eligibility.score
    adjusted_eligibility = _clamp(
        base_eligibility + _name_bonus(comparison) + combinatorics.combinatorial_score * W.COMBINATORICS_WEIGHT
    )
    probability = analyze_probability(comparison.score, authenticity_score)

    a = (
        comparison.equivalent
        or comparison.score >= W.AUTHENTICITY_NAME_THRESHOLD
        or authenticity_score >= W.AUTHENTICITY_SCORE_THRESHOLD
        or sets.jaccard_similarity >= W.AUTHENTICITY_JACCARD_THRESHOLD
    )
    e = (
        adjusted_eligibility >= W.ELIGIBILITY_THRESHOLD
        or base_eligibility >= W.BASE_ELIGIBILITY_THRESHOLD
        or probability.bayesian_confidence >= W.CONFIDENCE_THRESHOLD
        or len(text) > W.MIN_CONTENT_CHARS
    )
    y = a and e

    logging.info(
        "verify: input=%r extracted=%r name=%s/%s authenticity=%.1f eligibility=%.1f A=%s E=%s Y=%s",
        norm_input, norm_extracted, comparison.score, comparison.method,
        authenticity_score, adjusted_eligibility, a, e, y,
    )

    authenticity_score = round(authenticity_score, 2)
    adjusted_eligibility = round(adjusted_eligibility, 2)
    return VerifyOutput(
        authenticity=Proposition(
            a,
            f"Authenticity verified: {a} (score: {authenticity_score:.1f}/100, "
            f"name match: {comparison.score}/100 via {comparison.method}, exact: {comparison.equivalent})",
            authenticity_score,
        ),
        eligibility=Proposition(
            e,
            f"Eligibility confirmed: {e} (base score: {base_eligibility}/100, "
            f"adjusted: {adjusted_eligibility}/100, factors: {len(eligibility.factors)})",
            adjusted_eligibility,
        ),
        math_logic=Proposition(
            y,
            f"Y = A ∧ E => {y} (Authenticity={a}[{authenticity_score:.1f}], "
            f"Eligibility={e}[{adjusted_eligibility:.1f}])",
            100.0 if y else 0.0,
        ),
        formula=FORMULA,
        truth_table=TruthTable(a=int(a), e=int(e), y=int(y)),
        discrete_math=_discrete(sets, probability, combinatorics, a, e),
        final_decision="allowed" if y else "denied",
        normalized_input=norm_input,
        normalized_extracted=norm_extracted or None,
        name_match=comparison,
        document_analysis=document,
        eligibility_factors=eligibility.factors,
        extraction=extraction,
    )


def _discrete(sets, probability, combinatorics, a: bool, e: bool):
    return DiscreteMathAnalysis(
        set_theory=sets,
        probability_theory=probability,
        combinatorics=combinatorics,
        boolean_algebra=analyze_boolean(a, e),
    )


def _pipeline_result(
    verify_out: VerifyOutput,
    extracted: ExtractionResult,
    chosen: Optional[str],
    source: str,
    text: str,
    name: str,
    email: str,
    filename: str,
) -> Dict[str, Any]:
    result = verify_out.to_dict()
    result.update({
        "extractionSource": source,
        "textSample": text[:TEXT_SAMPLE_LEN],
        "extracted": {**extracted.to_dict(), "chosen": chosen},
        "input": {"name": name, "email": email},
        "file": {"filename": filename},
    })
    return result


def _log_attempt(audit: Optional[AuditLog], out: VerifyOutput, extracted: ExtractionResult, name: str, email: str, filename: str, source: str) -> None:
    if audit is None:
        return
    audit.append({
        "input": {"name": name, "email": email},
        "extracted": extracted.to_dict(),
        "matches": {
            "name": out.authenticity.passed,
            "eligibility": out.eligibility.passed,
            "email": bool(extracted.email) and extracted.email == email,
        },
        "file": filename or None,
        "extractionSource": source,
    })


def _join_source(base: str, tags) -> str:
    return ",".join([x for x in [base, *tags] if x])


def verify_text(
    name: str,
    extracted_text: str,
    certs: Sequence[CertRecord] = (),
    filename: str = "",
    email: str = "",
    audit: Optional[AuditLog] = None,
) -> Dict[str, Any]:
    """Client-side OCR path: the caller already holds the document text."""
    text = extracted_text or ""
    extracted = extract_fields(text, name)
    chosen, tags = choose_extracted_name(extracted.name, name, certs, filename=filename)
    source = _join_source("client-ocr", tags)
    out = verify_document(name, chosen, text)
    _log_attempt(audit, out, extracted, name, email, filename, source)
    return _pipeline_result(out, extracted, chosen, source, text, name, email, filename)


def verify_upload(
    file_bytes: bytes,
    name: str,
    filename: str = "document.pdf",
    certs: Sequence[CertRecord] = (),
    email: str = "",
    audit: Optional[AuditLog] = None,
    ocr_attempts: int = 2,
    ocr_backoff: float = 0.25,
) -> Dict[str, Any]:
    ext = Path(filename).suffix.lower() or ".pdf"
    with tempfile.NamedTemporaryFile(suffix=ext, delete=False) as tmp:
        tmp.write(file_bytes)
        tmp.flush()
        path = Path(tmp.name)
    try:
        payload = get_document_text_debug(path, ocr_attempts, ocr_backoff)
    finally:
        path.unlink(missing_ok=True)
    text = payload["text"]
    base_source = payload["debug"]["source"]
    logging.info("Extracted text length: %d (source: %s)", len(text), base_source)

    extracted = extract_fields(text, name) if text.strip() else ExtractionResult()
    chosen, tags = choose_extracted_name(
        extracted.name, name, certs, filename=filename, text=text, raw=file_bytes,
    )
    source = _join_source(base_source, tags)
    out = verify_document(name, chosen, text)
    _log_attempt(audit, out, extracted, name, email, filename, source)
    result = _pipeline_result(out, extracted, chosen, source, text, name, email, filename)
    result["debug"] = payload["debug"]
    return result
