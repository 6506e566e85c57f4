"""
Filter Canonicalizer - natural-language prompt → CanonicalFilters

Uses an injected LLM (any object with ``complete(system_prompt, user_prompt)``
returning text) when one is supplied, and always runs the deterministic
keyword parser so fields the LLM leaves out still get populated.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from models.filters import OPEN_HEADCOUNT_SENTINEL, CanonicalFilters
from services.vocabulary import (
    CANONICAL_INDUSTRIES,
    CASED_COUNTRY_PATTERNS,
    COUNTRY_PATTERNS,
    FUNDING_PATTERNS,
    FUNDING_STAGES,
    HEADCOUNT_BUCKETS,
    INDUSTRY_SYNONYMS,
    REGION_PATTERNS,
    canonical_industries,
    canonical_industry,
)

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


def _bullets(values: List[str]) -> str:
    return "\n".join(f'- "{value}"' for value in values)


def _industry_mapping_lines() -> str:
    lines = []
    for label in CANONICAL_INDUSTRIES:
        terms = [term for term, target in INDUSTRY_SYNONYMS.items() if target == label and term != label.lower()]
        lines.append(f'- "{label}" (use for {", ".join(terms)})' if terms else f'- "{label}"')
    return "\n".join(lines)


CRUSTDATA_API_DOCS = f"""
CRUSTDATA API DOCUMENTATION:

VALID COMPANY_HEADCOUNT VALUES:
{_bullets([label for label, _, _ in HEADCOUNT_BUCKETS])}

VALID INDUSTRY VALUES (MUST USE THESE EXACT VALUES):
{_industry_mapping_lines()}

VALID REGION/COUNTRY VALUES:
- Full country names such as "United States", "India", "United Kingdom", "Singapore"
- Regions: "Europe", "North America", "Latin America", "Asia", "Middle East"

FUNDING ROUND TYPES:
{_bullets(FUNDING_STAGES)}
"""

SYSTEM_PROMPT = f"""You are an expert at converting natural language queries into structured filters for the Crustdata API.
{CRUSTDATA_API_DOCS}
GUIDELINES:
1. Only extract information that is explicitly mentioned in the query
2. Use ONLY the valid values listed above
3. ALWAYS map industry terms to one of the valid industry values, never the user's own term (e.g. "AI" → "Software Development", "Fintech" → "Financial Services")
4. Use full country names (United States, not US)
5. For open-ended headcounts like "1000+" use [1000, {OPEN_HEADCOUNT_SENTINEL}]
6. Qualitative growth ("fast growth", "hiring spree") means hcGrowth6mPctMin 20

CANONICAL FILTER FORMAT (every key optional):
{{
  "industry": ["Software Development"],
  "categories": ["SaaS"],
  "countries": ["United States", "India"],
  "regions": ["North America", "Europe"],
  "headcountRange": [50, 200],
  "fundingStages": ["Series A"],
  "foundedAfter": "2020",
  "foundedBefore": "2023",
  "hcGrowth6mPctMin": 20,
  "limit": 50,
  "page": 1
}}

EXAMPLES:

Query: "AI startups in India with 50-200 employees, Series A funding"
Response: {{"industry": ["Software Development"], "countries": ["India"], "headcountRange": [50, 200], "fundingStages": ["Series A"]}}

Query: "European fintech companies, 1000+ employees, fast growth"
Response: {{"industry": ["Financial Services"], "regions": ["Europe"], "headcountRange": [1000, {OPEN_HEADCOUNT_SENTINEL}], "hcGrowth6mPctMin": 20}}

Query: "US cybersecurity companies, Series B to D, founded after 2018"
Response: {{"industry": ["Software Development"], "countries": ["United States"], "fundingStages": ["Series B", "Series C", "Series D"], "foundedAfter": "2018"}}

Return ONLY the JSON object, no prose and no markdown."""


QUALITATIVE_GROWTH_PCT = 20

_BUCKET_LABELS = {label for label, _, _ in HEADCOUNT_BUCKETS}

_NUMBER = r"(\d[\d,]*)"
_STAFF = r"(?:employees?|people|staff|headcount)"
_INDUSTRY_PATTERNS = [
    (re.compile(r"\b" + re.escape(term) + r"\b"), label)
    for term, label in INDUSTRY_SYNONYMS.items()
]
_COUNTRY_PATTERNS = [(re.compile(pattern), country) for pattern, country in COUNTRY_PATTERNS]
_CASED_COUNTRY_PATTERNS = [(re.compile(pattern), country) for pattern, country in CASED_COUNTRY_PATTERNS]
_REGION_PATTERNS = [(re.compile(pattern), region) for pattern, region in REGION_PATTERNS]
_FUNDING_PATTERNS = [(re.compile(pattern), stage) for pattern, stage in FUNDING_PATTERNS]
_SERIES_RANGE = re.compile(r"\bseries\s+([a-e])\s*(?:to|through|-|–)\s*(?:series\s+)?([a-e])\b")
_SEED_RANGE = re.compile(r"\bseed\s*(?:to|through|-|–)\s*series\s+([a-e])\b")
_HEADCOUNT_RANGE = re.compile(_NUMBER + r"\s*(?:-|–|to)\s*" + _NUMBER + r"\s*" + _STAFF)
_HEADCOUNT_OPEN = re.compile(_NUMBER + r"\s*\+\s*" + _STAFF)
_FOUNDED_AFTER = re.compile(r"founded\s+(?:after|since|in or after)\s+(\d{4})")
_FOUNDED_BEFORE = re.compile(r"founded\s+before\s+(\d{4})")
_GROWTH_PCT = [
    re.compile(r"(\d+(?:\.\d+)?)\s*%\s*(?:headcount\s+)?growth"),
    re.compile(r"growth\s+(?:of\s+|above\s+|over\s+|at least\s+)?(\d+(?:\.\d+)?)\s*%"),
]
_GROWTH_WORDS = re.compile(r"fast[- ]growing|fast growth|rapid growth|rapidly growing|high[- ]growth|hiring spree")
_LIMIT = [
    re.compile(r"\b(?:top|first|limit)\s+(\d+)\b"),
    re.compile(r"\b(\d+)\s+(?:companies|results)\b"),
]
_PAGE = re.compile(r"\bpage\s+(\d+)\b")


def _to_int(text: str) -> int:
    return int(text.replace(",", ""))


def _first_hits(text: str, patterns) -> List[Tuple[int, str]]:
    hits: List[Tuple[int, str]] = []
    for pattern, label in patterns:
        match = pattern.search(text)
        if match:
            hits.append((match.start(), label))
    return hits


def _ordered_labels(hits: List[Tuple[int, str]]) -> List[str]:
    """Labels ordered by first mention, de-duplicated"""
    labels: List[str] = []
    for _, label in sorted(hits, key=lambda hit: hit[0]):
        if label not in labels:
            labels.append(label)
    return labels


def _ordered_matches(text: str, patterns) -> List[str]:
    return _ordered_labels(_first_hits(text, patterns))


def _funding_stages(text: str) -> List[str]:
    hits: List[Tuple[int, str]] = []
    for match in _SEED_RANGE.finditer(text):
        hits.append((match.start(), "Seed"))
        for letter in "abcde"[: "abcde".index(match.group(1)) + 1]:
            hits.append((match.start(), f"Series {letter.upper()}"))
    for match in _SERIES_RANGE.finditer(text):
        first, last = sorted(("abcde".index(match.group(1)), "abcde".index(match.group(2))))
        for letter in "abcde"[first:last + 1]:
            hits.append((match.start(), f"Series {letter.upper()}"))
    hits.extend(_first_hits(text, _FUNDING_PATTERNS))
    return _ordered_labels(hits)


def fallback_parse(prompt: str) -> CanonicalFilters:
    """Deterministic keyword-based parsing; fields with no trigger stay absent"""
    text = prompt.lower()
    filters: Dict[str, Any] = {}

    industries = _ordered_matches(text, _INDUSTRY_PATTERNS)
    if industries:
        filters["industry"] = industries

    countries = _ordered_labels(
        _first_hits(text, _COUNTRY_PATTERNS) + _first_hits(prompt, _CASED_COUNTRY_PATTERNS)
    )
    if countries:
        filters["countries"] = countries

    regions = _ordered_matches(text, _REGION_PATTERNS)
    if regions:
        filters["regions"] = regions

    match = _HEADCOUNT_RANGE.search(text)
    if match:
        low, high = sorted((_to_int(match.group(1)), _to_int(match.group(2))))
        filters["headcountRange"] = [low, high]
    else:
        match = _HEADCOUNT_OPEN.search(text)
        if match:
            filters["headcountRange"] = [_to_int(match.group(1)), OPEN_HEADCOUNT_SENTINEL]

    stages = _funding_stages(text)
    if stages:
        filters["fundingStages"] = stages

    match = _FOUNDED_AFTER.search(text)
    if match:
        filters["foundedAfter"] = match.group(1)
    match = _FOUNDED_BEFORE.search(text)
    if match:
        filters["foundedBefore"] = match.group(1)

    for pattern in _GROWTH_PCT:
        match = pattern.search(text)
        if match:
            filters["hcGrowth6mPctMin"] = float(match.group(1))
            break
    else:
        if _GROWTH_WORDS.search(text):
            filters["hcGrowth6mPctMin"] = QUALITATIVE_GROWTH_PCT

    for pattern in _LIMIT:
        match = pattern.search(text)
        if match:
            filters["limit"] = int(match.group(1))
            break

    match = _PAGE.search(text)
    if match:
        filters["page"] = int(match.group(1))

    return CanonicalFilters.model_validate(filters)


def _strip_code_fences(text: str) -> str:
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    return text.strip()


class FilterCanonicalizer:
    """Turn free text into CanonicalFilters; never raises"""

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm

    def canonicalize(self, prompt: str) -> CanonicalFilters:
        fallback = fallback_parse(prompt)
        logger.debug(f"Keyword parse: {fallback.to_payload()}")

        if self.llm is None:
            return self._normalize(fallback)

        llm_filters = self._ask_llm(prompt)
        if llm_filters is None:
            logger.info("⚠️ Using keyword-based filters only")
            return self._normalize(fallback)

        # normalize first so terms the LLM could not map leave the keyword values in place
        llm_filters = self._normalize(llm_filters)
        merged = {**fallback.to_payload(), **llm_filters.to_payload()}
        return self._normalize(CanonicalFilters.model_validate(merged))

    def _ask_llm(self, prompt: str) -> Optional[CanonicalFilters]:
        try:
            logger.info(f"🤖 Asking LLM to parse prompt ({len(prompt)} chars)")
            text = self.llm.complete(SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.error(f"❌ LLM request failed, using fallback: {e}")
            return None

        if not isinstance(text, str):
            logger.error(f"❌ LLM returned {type(text).__name__}, expected text")
            return None

        cleaned = _strip_code_fences(text)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Failed to parse LLM response as JSON: {e}")
            logger.error(f"Raw LLM response: {cleaned[:1000]}")
            return None

        if not isinstance(data, dict):
            logger.error(f"❌ LLM returned {type(data).__name__}, expected a JSON object")
            return None

        try:
            filters = CanonicalFilters.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ LLM filters failed validation: {e}")
            return None

        logger.info(f"✅ LLM parsed filters: {filters.to_payload()}")
        return filters

    @staticmethod
    def _normalize(filters: CanonicalFilters) -> CanonicalFilters:
        update: Dict[str, Any] = {}

        if filters.industry is not None:
            dropped = [term for term in filters.industry if canonical_industry(term) is None]
            if dropped:
                logger.warning(f"⚠️ Dropping unmapped industry terms: {dropped}")
            update["industry"] = canonical_industries(filters.industry) or None

        headcount = filters.headcount_range
        if headcount and all(isinstance(item, str) for item in headcount):
            unknown = [label for label in headcount if label not in _BUCKET_LABELS]
            if unknown:
                logger.warning(f"⚠️ Dropping unknown headcount buckets: {unknown}")
            update["headcount_range"] = [label for label in headcount if label in _BUCKET_LABELS] or None

        return filters.model_copy(update=update) if update else filters
