"""
Crustdata API Client - screener, company search, enrichment and people search
"""

import logging
import re
import requests
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models.filters import CompanySearchByFilters, PersonLite, ScreeningRequest
from services.vocabulary import ENRICHMENT_FIELDS, MAX_ENRICH_DOMAINS

logger = logging.getLogger(__name__)

_PROTOCOL = re.compile(r"^https?://")


def clean_domain(value: str) -> str:
    """Strip a leading http(s):// and a trailing slash"""
    return _PROTOCOL.sub("", value.strip()).rstrip("/")


def _append_unique(bucket: List[str], value: str) -> None:
    if value and value not in bucket:
        bucket.append(value)


class CrustdataClient:
    """Client for the Crustdata company-data API (one bearer credential)"""

    BASE_URL = "https://api.crustdata.com"

    def __init__(self, api_key: str, base_url: Optional[str] = None, timeout: int = 60):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Issue one call and return the decoded JSON body

        Raises:
            requests.HTTPError: non-2xx response
            requests.RequestException: network failure or timeout
        """
        url = f"{self.base_url}{path}"
        start_time = datetime.now()

        response = requests.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)

        response_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"📡 Crustdata {method} {path} responded in {response_time:.2f}s (Status: {response.status_code})")

        if not 200 <= response.status_code < 300:
            logger.error(f"❌ Crustdata API error {response.status_code}: {response.text[:500]}")
        response.raise_for_status()
        return response.json()

    def screen_companies(self, payload: ScreeningRequest) -> Any:
        return self._request("POST", "/screener/screen/", json=payload.model_dump())

    def search_companies(self, payload: CompanySearchByFilters) -> Any:
        return self._request("POST", "/screener/company/search", json=payload.model_dump())

    def search_people(self, payload: CompanySearchByFilters) -> Any:
        return self._request("POST", "/screener/person/search", json=payload.model_dump())

    def enrich_companies(self, domains: List[str]) -> List[Dict[str, Any]]:
        """Look up the fixed enrichment fields for up to 25 domains"""
        params = {
            "company_domain": ",".join(domains[:MAX_ENRICH_DOMAINS]),
            "fields": ",".join(ENRICHMENT_FIELDS),
        }
        data = self._request("GET", "/screener/company", params=params)
        if data is None:
            return []
        companies = data if isinstance(data, list) else [data]
        skipped = sum(1 for company in companies if not isinstance(company, dict))
        if skipped:
            logger.warning(f"⚠️ Ignoring {skipped} enrichment item(s) that are not objects")
        return [company for company in companies if isinstance(company, dict)]

    # ── Response post-processing ─────────────────────────────────────────────

    @staticmethod
    def extract_domains_from_screen_response(screen_response: Any) -> List[str]:
        """Cleaned values of every domain/website column, de-duplicated, max 25"""
        domains: List[str] = []
        if not isinstance(screen_response, dict):
            return domains

        fields = screen_response.get("fields") or []
        rows = screen_response.get("rows") or []

        indices = [
            index for index, field in enumerate(fields)
            if isinstance(field, dict)
            and isinstance(field.get("api_name"), str)
            and ("domain" in field["api_name"] or "website" in field["api_name"])
        ]

        for row in rows:
            for index in indices:
                value = row[index] if isinstance(row, list) and index < len(row) else None
                if isinstance(value, str):
                    _append_unique(domains, clean_domain(value))

        return domains[:MAX_ENRICH_DOMAINS]

    @staticmethod
    def extract_company_names_from_screen_response(screen_response: Any) -> List[str]:
        names: List[str] = []
        if not isinstance(screen_response, dict):
            return names

        fields = screen_response.get("fields") or []
        rows = screen_response.get("rows") or []

        index = next(
            (i for i, field in enumerate(fields) if isinstance(field, dict) and field.get("api_name") == "company_name"),
            None
        )
        if index is None:
            return names

        for row in rows:
            value = row[index] if isinstance(row, list) and index < len(row) else None
            if isinstance(value, str):
                _append_unique(names, value)
        return names

    @staticmethod
    def extract_domains_from_search_response(search_response: Any) -> List[str]:
        domains: List[str] = []
        if not isinstance(search_response, dict):
            return domains

        for company in search_response.get("companies") or []:
            website = company.get("website") if isinstance(company, dict) else None
            if isinstance(website, str):
                _append_unique(domains, clean_domain(website))

        return domains[:MAX_ENRICH_DOMAINS]

    @staticmethod
    def join_people_to_companies(
        people_response: Any,
        companies_enriched: List[Dict[str, Any]]
    ) -> Dict[str, List[PersonLite]]:
        """
        Match people to enriched companies by employer name (case-insensitive)

        A person appears once per employer entry that names an enriched
        company, keyed by the lower-cased employer name.
        """
        matched: Dict[str, List[PersonLite]] = {}
        if not isinstance(people_response, dict):
            return matched

        known = {
            company["company_name"].lower(): company
            for company in companies_enriched or []
            if isinstance(company, dict) and isinstance(company.get("company_name"), str)
        }

        for person in people_response.get("profiles") or []:
            employers = person.get("employer") if isinstance(person, dict) else None
            if not isinstance(employers, list):
                continue

            for employment in employers:
                company_name = employment.get("company_name") if isinstance(employment, dict) else None
                if not isinstance(company_name, str):
                    continue

                key = company_name.lower()
                if key not in known:
                    continue

                try:
                    person_lite = PersonLite(
                        name=person.get("name") or "Unknown",
                        title=employment.get("title") or person.get("current_title") or "Unknown",
                        linkedin=person.get("linkedin_profile_url") or "",
                        start_date=employment.get("start_date"),
                        end_date=employment.get("end_date"),
                        location=employment.get("location") or person.get("location"),
                    )
                except ValidationError as e:
                    logger.warning(f"⚠️ Skipping malformed profile for {company_name}: {e.error_count()} invalid field(s)")
                    continue

                matched.setdefault(key, []).append(person_lite)

        return matched
