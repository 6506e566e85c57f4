"""
Crustdata vocabulary - valid enum values and keyword mappings

Read-only tables shared by the canonicalizer, payload builders and the
Crustdata client.
"""

from typing import Dict, List, Optional, Tuple

from models.filters import OPEN_HEADCOUNT_SENTINEL


# ── Industries ───────────────────────────────────────────────────────────────

CANONICAL_INDUSTRIES = [
    "Software Development",
    "Financial Services",
    "Retail",
    "Real Estate",
    "Telecommunications",
]

# Lower-cased user term → canonical industry label
INDUSTRY_SYNONYMS: Dict[str, str] = {
    "ai": "Software Development",
    "artificial intelligence": "Software Development",
    "machine learning": "Software Development",
    "tech": "Software Development",
    "technology": "Software Development",
    "software": "Software Development",
    "saas": "Software Development",
    "cybersecurity": "Software Development",
    "edtech": "Software Development",
    "cleantech": "Software Development",
    "healthcare": "Software Development",
    "healthtech": "Software Development",
    "fintech": "Financial Services",
    "financial": "Financial Services",
    "finance": "Financial Services",
    "financial technology": "Financial Services",
    "banking": "Financial Services",
    "payments": "Financial Services",
    "insurtech": "Financial Services",
    "e-commerce": "Retail",
    "ecommerce": "Retail",
    "online retail": "Retail",
    "consumer goods": "Retail",
    "proptech": "Real Estate",
    "property technology": "Real Estate",
    "telecom": "Telecommunications",
    "communications": "Telecommunications",
}
INDUSTRY_SYNONYMS.update({label.lower(): label for label in CANONICAL_INDUSTRIES})


def canonical_industry(term: str) -> Optional[str]:
    """Map a user or LLM industry term to a canonical label (None if unknown)"""
    if not isinstance(term, str):
        return None
    return INDUSTRY_SYNONYMS.get(term.strip().lower())


def canonical_industries(terms: List[str]) -> List[str]:
    """Map terms to canonical labels, dropping unknown ones and duplicates"""
    labels: List[str] = []
    for term in terms or []:
        label = canonical_industry(term)
        if label and label not in labels:
            labels.append(label)
    return labels


# ── Locations ────────────────────────────────────────────────────────────────

# regex (applied to the lower-cased prompt) → country
COUNTRY_PATTERNS: List[Tuple[str, str]] = [
    (r"\bindia\b", "India"),
    (r"\bunited states\b|\busa\b|\bu\.s\.|\bus-based\b|\b(?:in|across|from) the us\b|(?<!north )(?<!south )(?<!latin )\bamerica\b", "United States"),
    (r"\bsingapore\b", "Singapore"),
    (r"\bunited kingdom\b|\buk\b|\bbritain\b|\bbritish\b", "United Kingdom"),
    (r"\bgermany\b|\bgerman\b", "Germany"),
    (r"\bfrance\b|\bfrench\b", "France"),
    (r"\bcanada\b|\bcanadian\b", "Canada"),
    (r"\bisrael\b|\bisraeli\b", "Israel"),
    (r"\baustralia\b|\baustralian\b", "Australia"),
    (r"\bbrazil\b", "Brazil"),
]

# regex (applied to the prompt as typed) → country; "us" is also a pronoun
CASED_COUNTRY_PATTERNS: List[Tuple[str, str]] = [
    (r"\bUS\b", "United States"),
]

REGION_PATTERNS: List[Tuple[str, str]] = [
    (r"\beurope\b|\beuropean\b", "Europe"),
    (r"\bnorth america\b", "North America"),
    (r"\blatin america\b|\blatam\b", "Latin America"),
    (r"\basia\b|\bapac\b", "Asia"),
    (r"\bmiddle east\b|\bmena\b", "Middle East"),
]


# ── Funding ──────────────────────────────────────────────────────────────────

FUNDING_STAGES = [
    "Pre-Seed", "Angel", "Seed",
    "Series A", "Series B", "Series C", "Series D", "Series E",
    "Bridge", "Growth",
]

FUNDING_PATTERNS: List[Tuple[str, str]] = [
    (r"\bpre[- ]seed\b", "Pre-Seed"),
    (r"\bangel\b", "Angel"),
    (r"(?<!pre-)(?<!pre )\bseed\b", "Seed"),
    (r"\bseries a\b", "Series A"),
    (r"\bseries b\b", "Series B"),
    (r"\bseries c\b", "Series C"),
    (r"\bseries d\b", "Series D"),
    (r"\bseries e\b", "Series E"),
    (r"\bbridge round\b", "Bridge"),
    (r"\bgrowth stage\b|\bgrowth equity\b", "Growth"),
]


# ── Headcount ────────────────────────────────────────────────────────────────

# Company Search bucket label → inclusive numeric bounds
HEADCOUNT_BUCKETS: List[Tuple[str, int, int]] = [
    ("1-10", 1, 10),
    ("11-50", 11, 50),
    ("51-200", 51, 200),
    ("201-500", 201, 500),
    ("501-1,000", 501, 1000),
    ("1,001-5,000", 1001, 5000),
    ("5,001-10,000", 5001, 10000),
    ("10,001+", 10001, OPEN_HEADCOUNT_SENTINEL),
]


def buckets_for_range(minimum: int, maximum: int) -> List[str]:
    """Every bucket label whose range intersects [minimum, maximum]"""
    if maximum >= OPEN_HEADCOUNT_SENTINEL:
        maximum = float("inf")
    return [
        label for label, low, high in HEADCOUNT_BUCKETS
        if low <= maximum and (high >= minimum or high == OPEN_HEADCOUNT_SENTINEL)
    ]


def range_for_buckets(labels: List[str]) -> Optional[Tuple[int, int]]:
    """Numeric [min, max] spanned by known bucket labels (None if none known)"""
    bounds = {label: (low, high) for label, low, high in HEADCOUNT_BUCKETS}
    known = [bounds[label] for label in labels if label in bounds]
    if not known:
        return None
    return min(low for low, _ in known), max(high for _, high in known)


# ── People / enrichment ──────────────────────────────────────────────────────

DEFAULT_PERSON_TITLES = ["Founder", "Co-Founder", "CEO", "CTO", "VP Engineering", "Head of Product"]

ENRICHMENT_FIELDS = [
    "company_name",
    "company_website_domain",
    "taxonomy.industries",
    "headcount.headcount",
    "headcount.headcount_total_growth_percent.six_months",
    "FundingAndInvestment.total_investment_usd",
    "FundingAndInvestment.days_since_last_fundraise",
]

MAX_ENRICH_DOMAINS = 25
