from normalizer import collapse_upper, name_tokens, normalize_name, normalize_token, strip_diacritics


def test_sorts_and_uppercases():
    assert normalize_name("  heet   Hitesh mehta ") == "HEET HITESH MEHTA"
    assert normalize_name("Mehta Heet") == "HEET MEHTA"


def test_idempotent():
    for raw in ["", "   ", "c a b", "José  de la Cruz", "O'Neil, Mary-Ann", "x"]:
        once = normalize_name(raw)
        assert normalize_name(once) == once


def test_empty_and_none():
    assert normalize_name("") == ""
    assert normalize_name("  \t\n ") == ""
    assert normalize_name(None) == ""
    assert name_tokens("") == []


def test_single_letter_tokens_kept():
    assert normalize_name("j r smith") == "J R SMITH"
    assert name_tokens("J R SMITH") == ["J", "R", "SMITH"]


def test_collapse_upper_drops_diacritics():
    assert strip_diacritics("José Müller") == "Jose Muller"
    assert collapse_upper("  heet\n hitesh   mehta ") == "HEET HITESH MEHTA"


def test_normalize_token_strips_punctuation():
    assert normalize_token("o'neil,") == "ONEIL"
    assert normalize_token("mary-ann") == "MARYANN"
