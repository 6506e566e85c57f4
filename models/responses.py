"""
Pydantic models for API responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from .filters import CanonicalFilters, CompanySearchByFilters, PersonLite, ScreeningRequest


class ParseCurls(BaseModel):
    """Commands for the two company-lookup calls"""
    screen: str
    search: str


class RunCurls(ParseCurls):
    """Commands for every call the pipeline makes"""
    enrich: str
    people: str


class ParseResponse(BaseModel):
    """Response model for /api/parse endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    canonical: CanonicalFilters
    screen_payload: ScreeningRequest = Field(alias="screenPayload")
    company_search_payload: CompanySearchByFilters = Field(alias="companySearchPayload")
    curls: ParseCurls


class RunResponse(BaseModel):
    """Response model for /api/run endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    canonical: CanonicalFilters
    curls: RunCurls
    screen_res: Optional[Any] = Field(default=None, alias="screenRes")
    companies_enriched: List[Dict[str, Any]] = Field(default_factory=list, alias="companiesEnriched")
    people_matched: Dict[str, List[PersonLite]] = Field(default_factory=dict, alias="peopleMatched")
