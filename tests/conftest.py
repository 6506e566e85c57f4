"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from services.crustdata_client import CrustdataClient


class FakeLLM:
    """LLM stand-in returning a canned reply (or raising a canned error)."""

    def __init__(self, reply: Any = None, error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, str]] = []

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt})
        if self.error is not None:
            raise self.error
        return self.reply


class StubCrustdataClient(CrustdataClient):
    """Crustdata client whose four calls return (or raise) canned outcomes."""

    def __init__(self, screen=None, search=None, enrich=None, people=None):
        super().__init__(api_key="test-key")
        self.outcomes = {"screen": screen, "search": search, "enrich": enrich, "people": people}
        self.calls: List[str] = []
        self.enriched_domains: List[str] = []

    def _respond(self, name: str):
        self.calls.append(name)
        outcome = self.outcomes[name]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def screen_companies(self, payload):
        return self._respond("screen")

    def search_companies(self, payload):
        return self._respond("search")

    def enrich_companies(self, domains):
        self.enriched_domains = list(domains)
        return self._respond("enrich")

    def search_people(self, payload):
        return self._respond("people")


@pytest.fixture
def fake_llm():
    """Factory for FakeLLM instances."""
    return FakeLLM


@pytest.fixture
def stub_client():
    """Factory for StubCrustdataClient instances."""
    return StubCrustdataClient


@pytest.fixture
def screen_response() -> Dict[str, Any]:
    """Screener response with a domain column, a website column and duplicates."""
    return {
        "fields": [
            {"api_name": "company_name", "type": "string"},
            {"api_name": "company_website_domain", "type": "string"},
            {"api_name": "headcount", "type": "number"},
            {"api_name": "company_website", "type": "string"},
        ],
        "rows": [
            ["Acme", "https://acme.com/", 120, "https://acme.com"],
            ["Globex", "globex.io", 80, None],
            ["Acme", "acme.com", 120, ""],
            ["Initech", None, 60, "http://initech.in/"],
        ],
    }


@pytest.fixture
def search_response() -> Dict[str, Any]:
    """Company Search response."""
    return {
        "companies": [
            {"name": "Hooli", "website": "https://hooli.xyz/"},
            {"name": "Pied Piper", "website": "http://piedpiper.com"},
            {"name": "No Site"},
            {"name": "Hooli again", "website": "hooli.xyz"},
        ],
        "total_display_count": 4,
    }


@pytest.fixture
def enriched_companies() -> List[Dict[str, Any]]:
    """Enrichment results."""
    return [
        {"company_name": "ACME", "company_website_domain": "acme.com"},
        {"company_name": "Globex", "company_website_domain": "globex.io"},
    ]


@pytest.fixture
def people_response() -> Dict[str, Any]:
    """People Search response with mixed-case employer names."""
    return {
        "profiles": [
            {
                "name": "Jane Doe",
                "current_title": "CTO",
                "linkedin_profile_url": "https://linkedin.com/in/janedoe",
                "location": "Bengaluru",
                "employer": [
                    {"company_name": "Acme", "title": "CTO", "start_date": "2021-01-01"},
                    {"company_name": "acme", "title": "Engineer", "end_date": "2020-12-31"},
                    {"company_name": "Umbrella", "title": "Intern"},
                ],
            },
            {
                "current_title": "Founder",
                "employer": [{"company_name": "GLOBEX", "location": "Pune"}],
            },
            {
                "name": "No Employers",
            },
        ],
        "total_display_count": 3,
    }
