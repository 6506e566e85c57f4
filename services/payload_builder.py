"""
Payload builders - CanonicalFilters → Crustdata request bodies

Pure functions: no I/O, never raise. A canonical field with no mapped output
is left out of the payload.
"""

from typing import List, Optional, Tuple, Union

from models.filters import (
    OPEN_HEADCOUNT_SENTINEL,
    CanonicalFilters,
    CompanySearchByFilters,
    CompanySearchFilter,
    Condition,
    FilterGroup,
    ScreeningRequest,
)
from services.vocabulary import (
    DEFAULT_PERSON_TITLES,
    buckets_for_range,
    canonical_industries,
    range_for_buckets,
)

DEFAULT_SCREEN_COUNT = 50
MAX_SCREEN_COUNT = 100


def _numeric_headcount(canonical: CanonicalFilters) -> Optional[Tuple[int, int]]:
    rng = canonical.headcount_range
    if not rng:
        return None
    if all(isinstance(bound, int) for bound in rng):
        return rng[0], rng[1]
    return range_for_buckets(rng)


def _year(value: str) -> Union[int, str]:
    return int(value) if value.isdigit() else value


def build_screening_payload(canonical: CanonicalFilters) -> ScreeningRequest:
    """Screener body: one condition per present field under a single AND group"""
    conditions: List[Condition] = []

    if canonical.industry:
        conditions.append(Condition(column="taxonomy.industries", type="(.)", value=",".join(canonical.industry)))

    if canonical.categories:
        conditions.append(Condition(column="taxonomy.categories", type="(.)", value=",".join(canonical.categories)))

    if canonical.countries:
        conditions.append(Condition(column="largest_headcount_country", type="in", value=",".join(canonical.countries)))

    headcount = _numeric_headcount(canonical)
    if headcount:
        low, high = headcount
        conditions.append(Condition(column="headcount", type="=>", value=low))
        if high < OPEN_HEADCOUNT_SENTINEL:
            conditions.append(Condition(column="headcount", type="=<", value=high))

    if canonical.founded_after:
        conditions.append(Condition(column="year_founded", type="=>", value=_year(canonical.founded_after)))

    if canonical.founded_before:
        conditions.append(Condition(column="year_founded", type="=<", value=_year(canonical.founded_before)))

    if canonical.funding_stages:
        conditions.append(Condition(
            column="FundingAndInvestment.last_funding_round_type",
            type="in",
            value=",".join(canonical.funding_stages),
        ))

    if canonical.hc_growth_6m_pct_min is not None:
        conditions.append(Condition(
            column="headcount_total_growth_percent.six_months",
            type="=>",
            value=canonical.hc_growth_6m_pct_min,
        ))

    count = canonical.limit if canonical.limit and canonical.limit > 0 else DEFAULT_SCREEN_COUNT
    return ScreeningRequest(
        filters=FilterGroup(op="and", conditions=conditions),
        offset=0,
        count=min(count, MAX_SCREEN_COUNT),
        sorts=[],
    )


def _location_filter(canonical: CanonicalFilters) -> Optional[CompanySearchFilter]:
    locations = list(canonical.countries or []) + list(canonical.regions or [])
    if not locations:
        return None
    return CompanySearchFilter(filter_type="REGION", type="in", value=locations)


def _industry_filter(canonical: CanonicalFilters) -> Optional[CompanySearchFilter]:
    industries = canonical_industries(canonical.industry or [])
    if not industries:
        return None
    return CompanySearchFilter(filter_type="INDUSTRY", type="in", value=industries)


def _headcount_filter(canonical: CanonicalFilters) -> Optional[CompanySearchFilter]:
    rng = canonical.headcount_range
    if not rng:
        return None
    if all(isinstance(bound, str) for bound in rng):
        labels = list(rng)
    else:
        labels = buckets_for_range(rng[0], rng[1])
    if not labels:
        return None
    return CompanySearchFilter(filter_type="COMPANY_HEADCOUNT", type="in", value=labels)


def build_company_search_payload(canonical: CanonicalFilters) -> CompanySearchByFilters:
    """Company Search body: discrete filters with canonical industries and bucket labels"""
    filters = [
        search_filter for search_filter in (
            _industry_filter(canonical),
            _location_filter(canonical),
            _headcount_filter(canonical),
        )
        if search_filter is not None
    ]
    page = canonical.page if canonical.page and canonical.page > 0 else 1
    return CompanySearchByFilters(filters=filters, page=page)


def build_person_search_payload(canonical: CanonicalFilters) -> CompanySearchByFilters:
    """People Search body: decision-maker titles plus any region/industry filters"""
    filters = [CompanySearchFilter(filter_type="CURRENT_TITLE", type="in", value=list(DEFAULT_PERSON_TITLES))]
    for search_filter in (_location_filter(canonical), _industry_filter(canonical)):
        if search_filter is not None:
            filters.append(search_filter)
    return CompanySearchByFilters(filters=filters, page=1)
