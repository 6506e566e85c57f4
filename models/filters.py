"""
Pydantic models for canonical filters and Crustdata request payloads
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator


# Headcount upper bound used for open-ended ranges such as "1000+"
OPEN_HEADCOUNT_SENTINEL = 100000

NumericRange = Annotated[List[int], Field(min_length=2, max_length=2)]

ComparisonOperator = Literal["=>", "=<", "=", "<", ">", "!=", "in", "(.)", "[.]"]
BooleanOperator = Literal["and", "or"]
SearchFilterType = Literal[
    "COMPANY_HEADCOUNT", "CURRENT_TITLE", "COMPANY_HEADQUARTERS", "INDUSTRY", "REGION"
]
SearchComparison = Literal["in", "not in", "between"]


def _is_count(item: Any) -> bool:
    if isinstance(item, bool):
        return False
    if isinstance(item, int):
        return True
    return isinstance(item, str) and item.replace(",", "").strip().isdecimal()


class _OmitNoneModel(BaseModel):
    """Serializes without keys whose value is None (absent means no constraint)"""

    @model_serializer(mode="wrap")
    def _omit_none(self, handler):
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class CanonicalFilters(_OmitNoneModel):
    """Provider-agnostic representation of a user's search intent"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    industry: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    regions: Optional[List[str]] = None
    countries: Optional[List[str]] = None
    headcount_range: Optional[Union[NumericRange, List[str]]] = Field(default=None, alias="headcountRange")
    founded_after: Optional[str] = Field(default=None, alias="foundedAfter")
    founded_before: Optional[str] = Field(default=None, alias="foundedBefore")
    funding_stages: Optional[List[str]] = Field(default=None, alias="fundingStages")
    hc_growth_6m_pct_min: Optional[float] = Field(default=None, alias="hcGrowth6mPctMin")
    limit: Optional[int] = None
    page: Optional[int] = None

    @field_validator("founded_after", "founded_before", mode="before")
    @classmethod
    def _year_as_string(cls, value):
        # LLM replies often carry years as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value

    @field_validator("headcount_range", mode="before")
    @classmethod
    def _quoted_numbers_as_range(cls, value):
        # ["50", "200"] is a numeric range, not two bucket labels
        if isinstance(value, (list, tuple)) and len(value) == 2 and all(_is_count(item) for item in value):
            return [int(str(item).replace(",", "").strip()) for item in value]
        return value

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and absent fields omitted"""
        return self.model_dump(by_alias=True)


class Condition(_OmitNoneModel):
    """Leaf of a screener filter tree: (column, comparison, value)"""

    model_config = ConfigDict(extra="forbid")

    column: str
    type: ComparisonOperator
    value: Union[int, float, str]
    allow_null: Optional[bool] = None


class FilterGroup(BaseModel):
    """Boolean node of a screener filter tree"""

    model_config = ConfigDict(extra="forbid")

    op: BooleanOperator
    conditions: List[Union[Condition, "FilterGroup"]] = Field(default_factory=list)


class ScreeningRequest(BaseModel):
    """Body for POST /screener/screen/"""

    filters: FilterGroup
    offset: int = Field(default=0, ge=0)
    count: int = Field(default=50, ge=1, le=100)
    sorts: List[Dict[str, Any]] = Field(default_factory=list)


class CompanySearchFilter(BaseModel):
    """One discrete filter for the company/person search endpoints"""

    model_config = ConfigDict(extra="forbid")

    filter_type: SearchFilterType
    type: SearchComparison = "in"
    value: List[str]

    @model_validator(mode="after")
    def _check_between_bounds(self):
        if self.type == "between" and len(self.value) != 2:
            raise ValueError("'between' filters need exactly two values")
        return self


class CompanySearchByFilters(BaseModel):
    """Body for POST /screener/company/search and /screener/person/search"""

    filters: List[CompanySearchFilter] = Field(default_factory=list)
    page: int = 1


class PersonLite(_OmitNoneModel):
    """A person matched to an enriched company (derived, not authoritative)"""

    name: str
    title: str
    linkedin: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None


FilterGroup.model_rebuild()
