from cert_store import CertRecord, SAMPLE_CERTIFICATES
from fallback_engine import (
    best_certificate_match,
    best_text_line,
    cert_from_filename,
    cert_id_from_filename,
    choose_extracted_name,
    fuzzy_substring_search,
    is_header_like,
    raw_buffer_match,
)


def test_header_like():
    assert is_header_like(None)
    assert is_header_like("")
    assert is_header_like("Merit Scholarship Award")
    assert is_header_like("Jane 2024 01")
    assert is_header_like("x" * 121)
    assert not is_header_like("Jane Roe")


def test_filename_lookup():
    assert cert_id_from_filename("scan_cert-hhm-20250928.pdf") == "CERT-HHM-20250928"
    assert cert_from_filename("scan_cert-hhm-20250928.pdf", SAMPLE_CERTIFICATES).name == "HEET HITESH MEHTA"
    assert cert_from_filename("random.pdf", SAMPLE_CERTIFICATES) is None
    assert cert_from_filename(None, SAMPLE_CERTIFICATES) is None


def test_best_certificate_match_thresholds():
    assert best_certificate_match("Heet Mehta", SAMPLE_CERTIFICATES).id == "CERT-HHM-20250928"
    assert best_certificate_match("Bob", SAMPLE_CERTIFICATES).id == "CERT-ABC-20240101"
    assert best_certificate_match("Heet Someone Else", SAMPLE_CERTIFICATES) is None
    assert best_certificate_match("Heet Mehta", []) is None


def test_best_text_line_tolerates_typos():
    text = "GOVERNMENT OF EXAMPLE\nName of student: HEAT HITESH MEHTA\nTotal value 25000"
    assert best_text_line(text, "Heet Hitesh Mehta") == "Name of student: HEAT HITESH MEHTA"
    assert best_text_line("", "Heet") is None


def test_raw_buffer_full_name():
    raw = b"%PDF-1.4\n(HEET HITESH MEHTA) Tj\n%%EOF"
    assert raw_buffer_match(raw, "Mehta Heet Hitesh") == ("Mehta Heet Hitesh", "raw-buffer")


def test_raw_buffer_window():
    raw = b"%PDF-1.4\n(HITESH MEHTA) Tj\n%%EOF"
    assert raw_buffer_match(raw, "Heet Hitesh Mehta") == ("HITESH MEHTA", "raw-buffer-subseq")


def test_raw_buffer_tokens():
    raw = b"%PDF-1.4\n(MEHTA) Tj (HEETT) Tj\n%%EOF"
    name, tag = raw_buffer_match(raw, "Heet Mehta")
    assert name == "Heet Mehta"
    assert tag == "raw-buffer-tokens(2/2)"


def test_raw_buffer_miss():
    assert raw_buffer_match(b"%PDF-1.4 nothing here", "Alice Bob") == (None, None)
    assert raw_buffer_match(b"", "Alice Bob") == (None, None)


def test_fuzzy_substring_search():
    assert fuzzy_substring_search("xx a-l-i-c-e  b.o.x yy", "ALICE BOB", 1)
    assert not fuzzy_substring_search("completely different", "ALICE BOB", 1)
    assert not fuzzy_substring_search("", "ALICE BOB", 1)


def test_choose_keeps_good_extraction():
    assert choose_extracted_name("Jane Roe", "Jane Roe", SAMPLE_CERTIFICATES) == ("Jane Roe", [])


def test_choose_filename_before_db():
    certs = SAMPLE_CERTIFICATES + [CertRecord(id="CERT-XYZ-20240505", name="BOB ALICE ZED")]
    chosen, tags = choose_extracted_name(None, "Alice Bob", certs, filename="CERT-XYZ-20240505.png")
    assert (chosen, tags) == ("BOB ALICE ZED", ["filename-db"])


def test_choose_client_text_skips_raw_fallbacks():
    chosen, tags = choose_extracted_name("Award 2024", "Jane Roe", [], text="Jane Roe")
    assert (chosen, tags) == ("Award 2024", [])


def test_choose_text_best_line():
    chosen, tags = choose_extracted_name(None, "Jane Roe", [], text="Header\nJane Roe\n", raw=b"")
    assert (chosen, tags) == ("Jane Roe", ["text-best"])


def test_choose_raw_buffer():
    chosen, tags = choose_extracted_name(None, "Jane Roe", [], text="", raw=b"..JANE ROE..")
    assert (chosen, tags) == ("Jane Roe", ["raw-buffer"])


def test_choose_fuzzy_substring_in_raw():
    chosen, tags = choose_extracted_name(None, "Janet Roeburnson", [], text="", raw=b"~JANITROEBURNSOM~")
    assert (chosen, tags) == ("Janet Roeburnson", ["fuzzy-substr-raw"])
