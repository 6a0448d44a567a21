"""
Scoring table: every heuristic threshold, bonus and penalty used by the engines.
"""

# Field extraction (line / fragment scoring).
NAME_KEYWORD_BONUS = 50
CERT_PHRASE_BONUS = 40
ADMIN_ID_PENALTY = 40
CATEGORY_PENALTY = 30
METADATA_PENALTY = 25
REFERENCE_CODE_PENALTY = 30
MAX_LINE_DIGITS = 3
DIGIT_PENALTY = 30
MAX_LINE_SPECIALS = 2
SPECIAL_CHAR_PENALTY = 20
NAME_SHAPE_BONUS = 30
TOO_MANY_TOKENS_PENALTY = 10
PROPER_WORD_BONUS = 15
HINT_EXACT_BONUS = 30
HINT_FUZZY_BONUS = 15
HINT_FUZZY_RATIO = 0.3
SINGLE_CAPS_PENALTY = 15
LONG_LINE_CHARS = 100
LONG_LINE_PENALTY = 20
SHORT_LINE_CHARS = 5
SHORT_LINE_PENALTY = 10
PATTERN_BONUS = 20
CERT_PHRASE_FRAGMENT_BONUS = 30
TOP_FRAGMENTS = 5
FRAGMENT_FLOOR = -10
RAW_FRAGMENT_PENALTY = 10
DIRECT_MATCH_SCORE = 100
CANDIDATE_FLOOR = -5

# Name comparison.
EXACT_SCORE = 100
FLEXIBLE_SCORE = 95
PARTIAL_NAME_SCORE = 90
EXACT_TOKEN_WEIGHT = 35
FUZZY_TOKEN_WEIGHT = 10
OVERLAP_FRACTION_WEIGHT = 25
MULTI_TOKEN_BONUS = 15
MULTI_TOKEN_MIN_FRACTION = 0.7
FUZZY_MATCH_BONUS = 10
FUZZY_MATCH_FRACTION = 0.8
WEAK_MATCH_PENALTY = 20
FUZZY_LONG_TOKEN = 5
FUZZY_TOKEN_RATIO = 0.2

# Document structure.
MIN_DOCUMENT_CHARS = 50
MIN_DOCUMENT_LINES = 3
MIN_EXPECTED_FIELDS = 2

# Eligibility assessment.
ELIGIBILITY_BASE = 30
OCR_PERFECT_BONUS = 50
OCR_STRONG_BONUS = 30
OCR_GOOD_BONUS = 20
GOOD_NAME_SCORE = 80
GOOD_NAME_FRACTION = 0.8
NAME_MISMATCH_PENALTY = 60
TEXT_FULL_NAME_BONUS = 60
TEXT_REORDERED_BONUS = 55
TEXT_MAJORITY_TOKENS_BONUS = 25
TEXT_SOME_TOKENS_BONUS = 10
TEXT_SINGLE_NAME_BONUS = 15
TEXT_ONE_TOKEN_BONUS = 5
TEXT_MIN_TOKEN_CHARS = 3
TEXT_MAJORITY_FRACTION = 0.7
NO_NAME_PENALTY = 25
ACADEMIC_BONUS = 5
ACHIEVEMENT_BONUS = 10
YEAR_BONUS = 15
AUTHORITY_BONUS = 10
MAX_PERMUTATION_TOKENS = 4

# Discrete-math analysis.
PRIOR_PROBABILITY = 0.7
EVIDENCE_PROBABILITY = 0.5
CONFIDENCE_MARGIN = 5
MAX_PERMUTATION_FACTOR = 5

# Decision engine.
NAME_WEIGHT = 0.7
STRUCTURE_BONUS = 20
EXPECTED_FIELDS_BONUS = 10
JACCARD_WEIGHT = 15
COMBINATORICS_WEIGHT = 0.1
SUSPICIOUS_PATTERN_PENALTY = 3
AUTHENTICITY_NAME_THRESHOLD = 50
AUTHENTICITY_SCORE_THRESHOLD = 50
AUTHENTICITY_JACCARD_THRESHOLD = 0.3
EXACT_NAME_BONUS = 30
STRONG_NAME_BONUS = 20
STRONG_NAME_SCORE = 90
FAIR_NAME_BONUS = 10
FAIR_NAME_SCORE = 75
ELIGIBILITY_THRESHOLD = 50
BASE_ELIGIBILITY_THRESHOLD = 40
CONFIDENCE_THRESHOLD = 50
MIN_CONTENT_CHARS = 20
TEXT_FALLBACK_SCORE = 50

# Reconciliation fallbacks.
HEADER_DIGITS = 3
HEADER_MAX_CHARS = 120
DB_MIN_OVERLAP = 2
DB_MIN_COVERAGE = 0.6
RAW_TOKEN_COVERAGE = 0.5
FUZZY_SUBSTRING_RATIO = 0.15
RAW_SCAN_LIMIT = 200_000
