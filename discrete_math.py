"""
Discrete-math diagnostics: token-set algebra, a toy Bayesian confidence, combinatorial coverage, boolean table.

These are explanatory weights, not calibrated probabilities.
"""
import math
from typing import Iterable, List

import weights as W
from result_types import (
    BooleanAnalysis,
    CombinatoricsAnalysis,
    ProbabilityAnalysis,
    SetTheoryAnalysis,
)


def _ordered_set(tokens: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(t.upper() for t in tokens))


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    sa, sb = set(a), set(b)
    union = sa | sb
    return len(sa & sb) / (len(union) or 1)


def analyze_sets(input_tokens: List[str], extracted_tokens: List[str]) -> SetTheoryAnalysis:
    inp = _ordered_set(input_tokens)
    ext = _ordered_set(extracted_tokens)
    ext_set, inp_set = set(ext), set(inp)
    intersection = [t for t in inp if t in ext_set]
    union = inp + [t for t in ext if t not in inp_set]
    return SetTheoryAnalysis(
        input_token_set=tuple(input_tokens),
        extracted_token_set=tuple(extracted_tokens),
        intersection=tuple(intersection),
        union=tuple(union),
        jaccard_similarity=round(jaccard(inp, ext), 4),
        set_difference=tuple(t for t in inp if t not in ext_set),
    )


def analyze_probability(name_score: float, document_score: float) -> ProbabilityAnalysis:
    likelihood = (name_score / 100 + document_score / 100) / 2
    posterior = likelihood * W.PRIOR_PROBABILITY / W.EVIDENCE_PROBABILITY
    confidence = min(1.0, posterior) * 100
    return ProbabilityAnalysis(
        bayesian_confidence=round(confidence, 2),
        prior_probability=W.PRIOR_PROBABILITY,
        likelihood=round(likelihood, 4),
        posterior_probability=round(posterior, 4),
        confidence_interval=(
            round(max(0.0, confidence - W.CONFIDENCE_MARGIN), 2),
            round(min(100.0, confidence + W.CONFIDENCE_MARGIN), 2),
        ),
    )


def analyze_combinatorics(input_tokens: List[str], extracted_tokens: List[str]) -> CombinatoricsAnalysis:
    n = len(input_tokens)
    permutations = math.factorial(min(n, W.MAX_PERMUTATION_FACTOR))
    k = len(set(t.upper() for t in input_tokens) & set(t.upper() for t in extracted_tokens))
    combinations = math.comb(n, k) if n - k >= 0 else 0
    return CombinatoricsAnalysis(
        possible_name_permutations=permutations,
        actual_matches=k,
        combinatorial_score=round(min(100.0, combinations / permutations * 100), 2),
    )


def _b(v: bool) -> str:
    return "true" if v else "false"


def analyze_boolean(a: bool, e: bool) -> BooleanAnalysis:
    operations = (
        f"A ∧ E = {_b(a and e)}",
        f"A ∨ E = {_b(a or e)}",
        f"¬A = {_b(not a)}",
        f"¬E = {_b(not e)}",
        f"A → E = {_b((not a) or e)}",
        f"A ↔ E = {_b(a == e)}",
        f"A ⊕ E = {_b(a != e)}",
    )
    return BooleanAnalysis(
        logical_operations=operations,
        truth_table_size=2 ** 2,
        satisfiability_score=sum((a, e)) / 2 * 100,
    )
