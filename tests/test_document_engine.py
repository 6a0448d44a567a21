from document_engine import analyze_structure, assess_eligibility, name_orderings

CERT_TEXT = (
    "UNIVERSITY OF EXAMPLE\n"
    "Certificate of Achievement\n"
    "This is to certify that Heet Hitesh Mehta has completed the program.\n"
    "Date: 12 March 2024\n"
    "Signature of the Registrar"
)


def test_structure_of_real_certificate():
    doc = analyze_structure(CERT_TEXT)
    assert doc.has_valid_structure
    assert doc.contains_expected_fields
    assert doc.suspicious_patterns == ()


def test_structure_flags_short_and_forgery_words():
    doc = analyze_structure("SAMPLE draft")
    assert not doc.has_valid_structure
    assert not doc.contains_expected_fields
    assert "Document too short" in doc.suspicious_patterns
    assert "No dates or numbers found" in doc.suspicious_patterns
    assert "Insufficient line breaks" in doc.suspicious_patterns
    assert 'Contains "SAMPLE"' in doc.suspicious_patterns
    assert 'Contains "DRAFT"' in doc.suspicious_patterns


def test_structure_empty():
    doc = analyze_structure(None)
    assert not doc.has_valid_structure
    assert len(doc.suspicious_patterns) == 3


def test_eligibility_perfect_extracted_name():
    res = assess_eligibility("Heet Hitesh Mehta", CERT_TEXT, "HEET HITESH MEHTA")
    assert "Perfect name match via OCR extraction" in res.factors
    assert res.score == 100


def test_eligibility_mismatch_penalty():
    res = assess_eligibility("John Smith", "", "Heet Hitesh Mehta")
    assert res.factors[0].startswith("Name mismatch detected")
    assert "No name tokens found in document - potential mismatch" in res.factors
    assert res.score == 0


def test_eligibility_text_search_full_and_reordered():
    full = assess_eligibility("Heet Mehta", "awarded to heet mehta")
    assert "Full name found in document text - PERFECT MATCH" in full.factors
    assert full.score == 90

    reordered = assess_eligibility("Heet Mehta", "awarded to MEHTA HEET")
    assert reordered.factors[0] == 'Name found in different order in text: "MEHTA HEET"'
    assert reordered.score == 85


def test_eligibility_partial_tokens():
    res = assess_eligibility("Heet Hitesh Mehta", "HEET ... MEHTA ... HITES")
    assert res.factors[0] == "Some name tokens in text: 2/3 tokens found"
    assert res.score == 40


def test_eligibility_no_name():
    res = assess_eligibility("Alice Bob", "")
    assert res.factors == ("No name tokens found in document - potential mismatch",)
    assert res.score == 5


def test_eligibility_bonus_terms_and_clamp():
    res = assess_eligibility("Heet Hitesh Mehta", CERT_TEXT)
    assert "Academic context: UNIVERSITY" in res.factors
    assert "Achievement indicator: ACHIEVEMENT" in res.factors
    assert "Valid date format found" in res.factors
    assert "Authority indicator: REGISTRAR" in res.factors
    assert 0 <= res.score <= 100


def test_name_orderings():
    assert len(name_orderings(["A", "B", "C"])) == 6
    assert name_orderings(["A", "B", "C", "D", "E"]) == [["A", "B", "C", "D", "E"]]
