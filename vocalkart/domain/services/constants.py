# Constants for the alternatives pipeline.
# Runtime values (pool size, K, weights) are read from Settings; these are the defaults and fixed vocabularies.

CANDIDATE_POOL_LIMIT = 200  # Max domestic products pulled per category before scoring
RANKED_CANDIDATES_K = 10  # Candidates kept after nutrition ranking
PROMPT_CANDIDATES_K = 5  # Candidates shown to the LLM in ranking mode
MAX_ALTERNATIVES = 3  # Alternatives taken from one LLM reply

DEFAULT_MATCH_SCORE = 85
MIN_MATCH_SCORE = 1
MAX_MATCH_SCORE = 100

# Nutrition distance weights (energy, sugar, fat). No derivation, keep configurable.
WEIGHT_ENERGY = 0.6
WEIGHT_SUGAR = 0.3
WEIGHT_FAT = 0.1

# Prompt modes
MODE_RANKING = "ranking"
MODE_GENERATION = "generation"

# Keyword rules: first rule whose keywords appear in the label wins, else "similar"
QUALITY_RULES = (
    ("better", ("better", "superior")),
    ("good", ("good", "decent")),
)
PRICE_RULES = (
    ("cheaper", ("cheap", "lower", "affordable", "less")),
    ("more_expensive", ("expensive", "higher", "more")),
)
COMPARISON_DEFAULT = "similar"

CONFIDENCE_VALUES = ("low", "medium", "high")

# Defaults applied to AI-created alternative products
ALT_BARCODE_PREFIX = "ALT"
AI_SEARCH_BARCODE_PREFIX = "AI"
ALT_COUNTRY = "India"
ALT_AVAILABILITY = "widely_available"
ALT_WHERE_TO_BUY = ["Local Stores", "Amazon.in", "Flipkart"]
ALT_RATING = 4
ALT_DESCRIPTION = "Indian alternative product"
DEFAULT_REASON = "Similar product category and quality"
DEFAULT_REASON_TAGS = ["same_category"]

# Request limits
MAX_BARCODE_LEN = 50
MAX_QUERY_LEN = 200
SEARCH_LIMIT = 10
OFF_SEARCH_PAGE_SIZE = 10
OFF_SEARCH_MAPPED = 5
