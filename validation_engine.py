"""
Validation engine: compare input name vs extracted name -> exact / flexible / fuzzy match and a 0-100 score.
"""
import math
from collections import Counter
from typing import Callable, List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

import weights as W
from normalizer import name_tokens, normalize_token
from result_types import NameComparison


def max_token_distance(token: str) -> int:
    if len(token) >= W.FUZZY_LONG_TOKEN:
        return max(1, math.floor(len(token) * W.FUZZY_TOKEN_RATIO))
    return 1


def match_tokens(inp: Sequence[str], ext: Sequence[str]) -> List[Tuple[int, int, int]]:
    """
    Greedy bipartite pairing of input tokens to extracted tokens.
    Returns (input_index, extracted_index, distance); every token is used at most once,
    closest pairs are accepted first, so identical tokens always pair with each other.
    """
    pairs = []
    for i, a in enumerate(inp):
        limit = max_token_distance(a)
        for j, b in enumerate(ext):
            d = Levenshtein.distance(a, b, score_cutoff=limit)
            if d <= limit:
                pairs.append((d, i, j))
    pairs.sort()
    used_in, used_ext = set(), set()
    out = []
    for d, i, j in pairs:
        if i in used_in or j in used_ext:
            continue
        used_in.add(i)
        used_ext.add(j)
        out.append((i, j, d))
    return out


def _two_part_swap(inp: List[str], ext: List[str]) -> bool:
    return len(inp) == 2 and len(ext) == 2 and inp != ext and inp == ext[::-1]


def _three_part_permutation(inp: List[str], ext: List[str]) -> bool:
    return len(inp) == 3 and len(ext) == 3 and inp != ext and sorted(inp) == sorted(ext)


def _near_containment(inp: List[str], ext: List[str]) -> bool:
    # "HEET MEHTA" vs "HEET HITESH MEHTA": one side holds the other plus at most one token.
    shorter, longer = sorted((inp, ext), key=len)
    if len(shorter) < 2 or len(longer) > len(shorter) + 1:
        return False
    return not Counter(shorter) - Counter(longer)


# Reorders only show up when callers pass tokens in document order rather than sorted.
REORDER_PATTERNS: List[Tuple[str, Callable[[List[str], List[str]], bool]]] = [
    ("two-part-reorder", _two_part_swap),
    ("three-part-reorder", _three_part_permutation),
]


def _flexible_method(inp: List[str], ext: List[str], same_set: bool) -> Optional[str]:
    for method, pattern in REORDER_PATTERNS:
        if pattern(inp, ext):
            return method
    if not same_set and _near_containment(inp, ext):
        return "flexible-order-match"
    return None


def compare_names(input_normalized: Optional[str], extracted_normalized: Optional[str]) -> NameComparison:
    inp = [t for t in (normalize_token(x) for x in name_tokens(input_normalized)) if t]
    ext = [t for t in (normalize_token(x) for x in name_tokens(extracted_normalized)) if t]
    if not inp or not ext:
        return NameComparison(
            exact_match=False, token_overlap=0, overlap_fraction=0.0,
            fuzzy_match=False, score=0, method="no-tokens",
        )

    same_set = set(inp) == set(ext)
    flexible = _flexible_method(inp, ext, same_set)
    exact_match = same_set and not flexible

    pairs = match_tokens(inp, ext)
    exact_overlap = sum(1 for _, _, d in pairs if d == 0)
    fuzzy_overlap = len(pairs)
    if flexible:
        exact_overlap = max(exact_overlap, min(len(inp), len(ext)))

    fraction = exact_overlap / len(inp)
    fuzzy_match = fuzzy_overlap / len(inp) >= W.FUZZY_MATCH_FRACTION

    if exact_match:
        score, method = W.EXACT_SCORE, "exact-match"
    elif flexible:
        score, method = W.FLEXIBLE_SCORE, flexible
    else:
        score = (
            exact_overlap * W.EXACT_TOKEN_WEIGHT
            + (fuzzy_overlap - exact_overlap) * W.FUZZY_TOKEN_WEIGHT
            + fraction * W.OVERLAP_FRACTION_WEIGHT
        )
        if exact_overlap >= min(len(inp), len(ext)) and abs(len(inp) - len(ext)) <= 1:
            score, method = W.PARTIAL_NAME_SCORE, "partial-name-match"
        elif len(inp) >= 2 and exact_overlap >= 2 and fraction >= W.MULTI_TOKEN_MIN_FRACTION:
            score, method = score + W.MULTI_TOKEN_BONUS, "multi-token"
        elif fuzzy_match and fuzzy_overlap >= math.ceil(len(inp) * W.FUZZY_MATCH_FRACTION):
            score, method = score + W.FUZZY_MATCH_BONUS, "fuzzy-match"
        else:
            score, method = max(0, score - W.WEAK_MATCH_PENALTY), "weak-match"

    return NameComparison(
        exact_match=exact_match,
        token_overlap=exact_overlap,
        overlap_fraction=round(fraction, 4),
        fuzzy_match=fuzzy_match,
        score=round(min(100, score), 2),
        method=method,
        flexible_match=bool(flexible),
        fuzzy_overlap=fuzzy_overlap,
    )
