"""
cURL builders - render Crustdata calls as copy-pasteable shell commands

Presentation only: nothing here is executed. The credential is always the
``$CRUSTDATA_API_KEY`` placeholder, never a real key.
"""

import json
from typing import List
from urllib.parse import quote

from models.filters import CompanySearchByFilters, ScreeningRequest
from services.vocabulary import ENRICHMENT_FIELDS, MAX_ENRICH_DOMAINS

DEFAULT_BASE_URL = "https://api.crustdata.com"
AUTH_HEADER = 'Authorization: Bearer $CRUSTDATA_API_KEY'

NO_DOMAINS_MESSAGE = "No domains available for enrichment"


def escape_for_double_quotes(text: str) -> str:
    """Escape text so it survives inside a double-quoted shell argument"""
    for char in ("\\", '"', "$", "`"):
        text = text.replace(char, "\\" + char)
    return text


def _post_curl(url: str, body: dict) -> str:
    escaped_json = escape_for_double_quotes(json.dumps(body, indent=2, ensure_ascii=False))
    return (
        f'curl -sX POST "{url}" \\\n'
        f'  -H "{AUTH_HEADER}" \\\n'
        f'  -H "Content-Type: application/json" \\\n'
        f'  -d "{escaped_json}"'
    )


def build_screen_curl(payload: ScreeningRequest, base_url: str = DEFAULT_BASE_URL) -> str:
    return _post_curl(f"{base_url.rstrip('/')}/screener/screen/", payload.model_dump())


def build_company_search_curl(payload: CompanySearchByFilters, base_url: str = DEFAULT_BASE_URL) -> str:
    return _post_curl(f"{base_url.rstrip('/')}/screener/company/search", payload.model_dump())


def build_person_search_curl(payload: CompanySearchByFilters, base_url: str = DEFAULT_BASE_URL) -> str:
    return _post_curl(f"{base_url.rstrip('/')}/screener/person/search", payload.model_dump())


def build_enrich_curl(domains: List[str], base_url: str = DEFAULT_BASE_URL) -> str:
    """GET /screener/company with the first 25 domains and the enrichment field list"""
    domains_csv = quote(",".join(domains[:MAX_ENRICH_DOMAINS]), safe="")
    fields_csv = quote(",".join(ENRICHMENT_FIELDS), safe="")
    return (
        f'curl -sX GET "{base_url.rstrip("/")}/screener/company'
        f'?company_domain={domains_csv}&fields={fields_csv}" \\\n'
        f'  -H "{AUTH_HEADER}"'
    )
