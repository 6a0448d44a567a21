"""
Value records produced by one verification call, with the camelCase JSON shape the UI reads.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class ExtractionResult:
    name: Optional[str] = None
    email: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.name is not None:
            out["name"] = self.name
        if self.email is not None:
            out["email"] = self.email
        return out


@dataclass(frozen=True)
class NameComparison:
    """
    Outcome of comparing two normalized names.

    `exact_match` is strict token-set equality with no reordering involved and is
    emitted as `exactSet`. A recognised reorder ("MEHTA HEET" vs "HEET MEHTA") scores
    95 with `exactSet` false and `flexible` true. The JSON `exact` field carries
    `equivalent`, which is true in both cases.
    """

    exact_match: bool
    token_overlap: int
    overlap_fraction: float
    fuzzy_match: bool
    score: float
    method: str
    flexible_match: bool = False
    fuzzy_overlap: int = 0

    @property
    def equivalent(self) -> bool:
        """Exact or flexible-order match; both count as a full match for decisions."""
        return self.exact_match or self.flexible_match

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exact": self.equivalent,
            "exactSet": self.exact_match,
            "flexible": self.flexible_match,
            "score": self.score,
            "method": self.method,
            "tokenOverlap": self.token_overlap,
            "fuzzyOverlap": self.fuzzy_overlap,
            "overlapFraction": self.overlap_fraction,
            "fuzzyMatch": self.fuzzy_match,
        }


@dataclass(frozen=True)
class DocumentAnalysis:
    has_valid_structure: bool
    contains_expected_fields: bool
    suspicious_patterns: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasValidStructure": self.has_valid_structure,
            "containsExpectedFields": self.contains_expected_fields,
            "suspiciousPatterns": list(self.suspicious_patterns),
        }


@dataclass(frozen=True)
class EligibilityAssessment:
    factors: Tuple[str, ...]
    score: float


@dataclass(frozen=True)
class SetTheoryAnalysis:
    input_token_set: Tuple[str, ...]
    extracted_token_set: Tuple[str, ...]
    intersection: Tuple[str, ...]
    union: Tuple[str, ...]
    jaccard_similarity: float
    set_difference: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputTokenSet": list(self.input_token_set),
            "extractedTokenSet": list(self.extracted_token_set),
            "intersection": list(self.intersection),
            "union": list(self.union),
            "jaccardSimilarity": self.jaccard_similarity,
            "setDifference": list(self.set_difference),
        }


@dataclass(frozen=True)
class ProbabilityAnalysis:
    bayesian_confidence: float
    prior_probability: float
    likelihood: float
    posterior_probability: float
    confidence_interval: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bayesianConfidence": self.bayesian_confidence,
            "priorProbability": self.prior_probability,
            "likelihood": self.likelihood,
            "posteriorProbability": self.posterior_probability,
            "confidenceInterval": list(self.confidence_interval),
        }


@dataclass(frozen=True)
class CombinatoricsAnalysis:
    possible_name_permutations: int
    actual_matches: int
    combinatorial_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "possibleNamePermutations": self.possible_name_permutations,
            "actualMatches": self.actual_matches,
            "combinatorialScore": self.combinatorial_score,
        }


@dataclass(frozen=True)
class BooleanAnalysis:
    logical_operations: Tuple[str, ...]
    truth_table_size: int
    satisfiability_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logicalOperations": list(self.logical_operations),
            "truthTableSize": self.truth_table_size,
            "satisfiabilityScore": self.satisfiability_score,
        }


@dataclass(frozen=True)
class DiscreteMathAnalysis:
    set_theory: SetTheoryAnalysis
    probability_theory: ProbabilityAnalysis
    combinatorics: CombinatoricsAnalysis
    boolean_algebra: BooleanAnalysis

    def to_dict(self) -> Dict[str, Any]:
        return {
            "setTheory": self.set_theory.to_dict(),
            "probabilityTheory": self.probability_theory.to_dict(),
            "combinatorics": self.combinatorics.to_dict(),
            "booleanAlgebra": self.boolean_algebra.to_dict(),
        }


@dataclass(frozen=True)
class Proposition:
    passed: bool
    detail: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"pass": self.passed, "detail": self.detail, "score": self.score}


@dataclass(frozen=True)
class TruthTable:
    a: int
    e: int
    y: int
    rows: Tuple[Tuple[int, int, int], ...] = ((0, 0, 0), (0, 1, 0), (1, 0, 0), (1, 1, 1))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "A": self.a,
            "E": self.e,
            "Y": self.y,
            "table": [
                {"A": a, "E": e, "Y": y, "current": (a, e) == (self.a, self.e)}
                for a, e, y in self.rows
            ],
        }


@dataclass(frozen=True)
class VerifyOutput:
    authenticity: Proposition
    eligibility: Proposition
    math_logic: Proposition
    formula: str
    truth_table: TruthTable
    discrete_math: DiscreteMathAnalysis
    final_decision: str
    normalized_input: str
    normalized_extracted: Optional[str]
    name_match: NameComparison
    document_analysis: DocumentAnalysis
    eligibility_factors: Tuple[str, ...] = field(default_factory=tuple)
    extraction: Optional[ExtractionResult] = None

    @property
    def allowed(self) -> bool:
        return self.final_decision == "allowed"

    def to_dict(self) -> Dict[str, Any]:
        normalized: Dict[str, Any] = {"input": self.normalized_input}
        if self.normalized_extracted is not None:
            normalized["extracted"] = self.normalized_extracted
        math_logic = self.math_logic.to_dict()
        math_logic.pop("score")
        math_logic["formula"] = self.formula
        return {
            "authenticity": self.authenticity.to_dict(),
            "eligibility": self.eligibility.to_dict(),
            "mathLogic": math_logic,
            "truthTable": self.truth_table.to_dict(),
            "discreteMathAnalysis": self.discrete_math.to_dict(),
            "finalDecision": self.final_decision,
            "normalizedNames": normalized,
            "verificationDetails": {
                "nameMatch": self.name_match.to_dict(),
                "documentAnalysis": self.document_analysis.to_dict(),
                "eligibilityFactors": list(self.eligibility_factors),
            },
        }
