from normalizer import normalize_name
from validation_engine import compare_names, match_tokens, max_token_distance


def test_order_invariance():
    cmp = compare_names(normalize_name("A B C"), normalize_name("C A B"))
    assert cmp.exact_match
    assert cmp.score == 100
    assert cmp.method == "exact-match"


def test_equal_normalized_names_match_both_ways():
    a, b = "heet hitesh mehta", "MEHTA HEET  HITESH"
    assert normalize_name(a) == normalize_name(b)
    for x, y in [(a, b), (b, a)]:
        cmp = compare_names(normalize_name(x), normalize_name(y))
        assert cmp.exact_match and cmp.score == 100


def test_two_part_reorder():
    cmp = compare_names("MEHTA HEET", "HEET MEHTA")
    assert cmp.method == "two-part-reorder"
    assert cmp.equivalent
    assert cmp.score == 95
    out = cmp.to_dict()
    assert out["exact"] is True
    assert out["exactSet"] is False
    assert out["flexible"] is True


def test_three_part_reorder():
    cmp = compare_names("MEHTA HEET HITESH", "HEET HITESH MEHTA")
    assert cmp.method == "three-part-reorder"
    assert cmp.equivalent and cmp.score == 95


def test_flexible_subset():
    cmp = compare_names(normalize_name("Heet Mehta"), normalize_name("Heet Hitesh Mehta"))
    assert cmp.method == "flexible-order-match"
    assert cmp.flexible_match and not cmp.exact_match
    assert cmp.equivalent
    assert cmp.score == 95
    assert cmp.token_overlap == 2


def test_partial_name_single_token():
    cmp = compare_names("HEET", "HEET MEHTA")
    assert cmp.method == "partial-name-match"
    assert cmp.score == 90
    assert not cmp.equivalent


def test_fuzzy_typo():
    cmp = compare_names(normalize_name("HEET HITESH MEHTA"), normalize_name("HEET HITESH MEHTAA"))
    assert cmp.token_overlap == 2
    assert cmp.fuzzy_overlap == 3
    assert cmp.fuzzy_match
    assert cmp.method == "fuzzy-match"
    assert cmp.score >= 90
    assert not cmp.equivalent


def test_fuzzy_only():
    cmp = compare_names(normalize_name("JOHNATHAN SMYTHE"), normalize_name("JONATHAN SMYTH"))
    assert cmp.token_overlap == 0
    assert cmp.fuzzy_overlap == 2
    assert cmp.method == "fuzzy-match"
    assert cmp.score == 30


def test_no_overlap_is_weak():
    cmp = compare_names(normalize_name("JOHN SMITH"), normalize_name("HEET HITESH MEHTA"))
    assert cmp.method == "weak-match"
    assert cmp.score == 0
    assert cmp.token_overlap == 0
    assert not cmp.exact_match


def test_empty_side():
    for a, b in [("", "HEET"), ("HEET", ""), ("", ""), (None, None)]:
        cmp = compare_names(a, b)
        assert cmp.method == "no-tokens"
        assert cmp.score == 0
        assert not cmp.exact_match


def test_adding_matching_token_never_lowers_overlap():
    inp = normalize_name("ANNA MARIA LOPEZ")
    base = compare_names(inp, normalize_name("ANNA QUINN")).token_overlap
    more = compare_names(inp, normalize_name("ANNA QUINN LOPEZ")).token_overlap
    assert more >= base


def test_no_double_counting_of_extracted_token():
    cmp = compare_names("ANNA ANNA", "ANNA BOB")
    assert cmp.token_overlap == 1


def test_token_distance_limits():
    assert max_token_distance("BOB") == 1
    assert max_token_distance("MEHTA") == 1
    assert max_token_distance("JOHNATHAN") == 1
    assert max_token_distance("ABCDEFGHIJ") == 2


def test_match_tokens_prefers_closest():
    pairs = match_tokens(["SMITH", "SMYTH"], ["SMYTH"])
    assert pairs == [(1, 0, 0)]


def test_deterministic():
    a = compare_names("HEET HITESH MEHTA", "HEAT HITESH MEHTA")
    b = compare_names("HEET HITESH MEHTA", "HEAT HITESH MEHTA")
    assert a == b
