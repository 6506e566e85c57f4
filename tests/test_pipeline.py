"""
Tests for the search pipeline state machine and parse flow.
"""

import requests

from services.canonicalizer import FilterCanonicalizer
from services.curl_builder import NO_DOMAINS_MESSAGE
from services.pipeline import PipelineState, SearchPipeline, StepOutcome, parse_prompt


PROMPT = "AI startups in India with 50-200 employees, Series A funding"


def _run(client, prompt=PROMPT):
    return SearchPipeline(FilterCanonicalizer(), client).run(prompt)


class TestStateMachine:
    """Which steps run, and in what order."""

    def test_screen_domains_skip_company_search(self, stub_client, screen_response, enriched_companies, people_response):
        client = stub_client(screen=screen_response, enrich=enriched_companies, people=people_response)

        result = _run(client)

        assert client.calls == ["screen", "enrich", "people"]
        assert client.enriched_domains == ["acme.com", "globex.io", "initech.in"]
        assert result.trace == [
            PipelineState.SCREEN_PENDING,
            PipelineState.SCREEN_DONE,
            PipelineState.SEARCH_SKIPPED,
            PipelineState.ENRICH_PENDING,
            PipelineState.PEOPLE_SEARCH_PENDING,
            PipelineState.DONE,
        ]
        assert result.outcomes == {
            "screen": StepOutcome.OK,
            "search": StepOutcome.SKIPPED,
            "enrich": StepOutcome.OK,
            "people": StepOutcome.OK,
        }
        assert result.company_names == ["Acme", "Globex", "Initech"]
        assert set(result.people_matched) == {"acme", "globex"}

    def test_failed_screen_falls_back_to_search(self, stub_client, search_response, enriched_companies, people_response):
        client = stub_client(
            screen=requests.HTTPError("500 Server Error"),
            search=search_response,
            enrich=enriched_companies,
            people=people_response,
        )

        result = _run(client)

        assert client.calls == ["screen", "search", "enrich", "people"]
        assert client.enriched_domains == ["hooli.xyz", "piedpiper.com"]
        assert result.screen_res is None
        assert result.companies_enriched == enriched_companies
        assert result.outcomes["screen"] is StepOutcome.FAILED
        assert result.outcomes["search"] is StepOutcome.OK
        assert result.outcomes["people"] is StepOutcome.OK
        assert PipelineState.SEARCH_PENDING in result.trace
        assert "hooli.xyz" in result.curls["enrich"]

    def test_screen_without_domains_falls_back_to_search(self, stub_client, search_response):
        client = stub_client(screen={"fields": [], "rows": []}, search=search_response, enrich=[], people={})

        result = _run(client)

        assert client.calls == ["screen", "search", "enrich", "people"]
        assert result.outcomes["screen"] is StepOutcome.OK
        assert result.screen_res == {"fields": [], "rows": []}

    def test_no_domains_skips_enrichment(self, stub_client):
        client = stub_client(
            screen=requests.ConnectionError("down"),
            search={"companies": []},
            people={"profiles": []},
        )

        result = _run(client)

        assert client.calls == ["screen", "search", "people"]
        assert result.outcomes["enrich"] is StepOutcome.SKIPPED
        assert PipelineState.ENRICH_SKIPPED in result.trace
        assert result.curls["enrich"] == NO_DOMAINS_MESSAGE
        assert result.companies_enriched == []

    def test_every_call_failing_still_completes(self, stub_client):
        error = requests.HTTPError("401 Unauthorized")
        client = stub_client(screen=error, search=error, enrich=error, people=error)

        result = _run(client)

        assert client.calls == ["screen", "search", "people"]
        assert result.trace[-1] is PipelineState.DONE
        assert result.people_matched == {}
        assert set(result.curls) == {"screen", "search", "enrich", "people"}

    def test_enrich_failure_is_absorbed(self, stub_client, screen_response, people_response):
        client = stub_client(screen=screen_response, enrich=requests.Timeout("slow"), people=people_response)

        result = _run(client)

        assert client.calls == ["screen", "enrich", "people"]
        assert result.outcomes["enrich"] is StepOutcome.FAILED
        assert result.companies_enriched == []
        assert result.people_matched == {}

    def test_enrich_result_without_objects_still_succeeds(self, stub_client, screen_response, people_response):
        client = stub_client(screen=screen_response, enrich=["acme.com", {"company_name": "ACME"}], people=people_response)

        result = _run(client)

        assert result.outcomes["enrich"] is StepOutcome.OK
        assert result.companies_enriched == ["acme.com", {"company_name": "ACME"}]
        assert set(result.people_matched) == {"acme"}

    def test_people_failure_is_absorbed(self, stub_client, screen_response, enriched_companies):
        client = stub_client(screen=screen_response, enrich=enriched_companies, people=requests.HTTPError("502"))

        result = _run(client)

        assert result.outcomes["people"] is StepOutcome.FAILED
        assert result.companies_enriched == enriched_companies
        assert result.people_matched == {}

    def test_each_call_attempted_once(self, stub_client):
        client = stub_client(screen=requests.HTTPError("500"), search=requests.HTTPError("500"), people=requests.HTTPError("500"))

        _run(client)

        assert client.calls.count("screen") == 1
        assert client.calls.count("search") == 1
        assert client.calls.count("people") == 1


class TestRunOutput:
    """Aggregate response shape."""

    def test_response_uses_camel_case_keys(self, stub_client, screen_response, enriched_companies, people_response):
        client = stub_client(screen=screen_response, enrich=enriched_companies, people=people_response)

        body = _run(client).to_response().model_dump(by_alias=True)

        assert set(body) == {"canonical", "curls", "screenRes", "companiesEnriched", "peopleMatched"}
        assert body["canonical"]["headcountRange"] == [50, 200]
        assert body["screenRes"] == screen_response
        assert body["peopleMatched"]["acme"][0]["name"] == "Jane Doe"
        assert set(body["curls"]) == {"screen", "search", "enrich", "people"}

    def test_canonical_filters_match_prompt(self, stub_client):
        client = stub_client(screen={}, search={}, people={})

        result = _run(client)

        assert result.canonical.industry == ["Software Development"]
        assert result.canonical.countries == ["India"]


class TestParsePrompt:
    """Parse-only flow."""

    def test_payloads_and_curls(self):
        response = parse_prompt(FilterCanonicalizer(), PROMPT)

        body = response.model_dump(by_alias=True)
        assert set(body) == {"canonical", "screenPayload", "companySearchPayload", "curls"}
        assert set(body["curls"]) == {"screen", "search"}
        assert body["screenPayload"]["filters"]["op"] == "and"
        assert body["screenPayload"]["count"] == 50
        assert {"filter_type": "INDUSTRY", "type": "in", "value": ["Software Development"]} in \
            body["companySearchPayload"]["filters"]
