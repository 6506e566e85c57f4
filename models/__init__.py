"""
Initialize models package
"""

from .filters import (
    OPEN_HEADCOUNT_SENTINEL,
    CanonicalFilters, Condition, FilterGroup, ScreeningRequest,
    CompanySearchFilter, CompanySearchByFilters, PersonLite
)
from .requests import PromptRequest
from .responses import ParseResponse, RunResponse, ParseCurls, RunCurls

__all__ = [
    'OPEN_HEADCOUNT_SENTINEL',
    'CanonicalFilters', 'Condition', 'FilterGroup', 'ScreeningRequest',
    'CompanySearchFilter', 'CompanySearchByFilters', 'PersonLite',
    'PromptRequest', 'ParseResponse', 'RunResponse', 'ParseCurls', 'RunCurls'
]
