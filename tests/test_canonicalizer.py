"""
Tests for prompt canonicalization (keyword fallback and LLM merge).
"""

import pytest

from models.filters import OPEN_HEADCOUNT_SENTINEL, CanonicalFilters
from services.canonicalizer import SYSTEM_PROMPT, FilterCanonicalizer, fallback_parse
from services.payload_builder import build_screening_payload
from services.vocabulary import CANONICAL_INDUSTRIES


class TestFallbackParse:
    """Deterministic keyword parsing."""

    def test_reference_prompt(self):
        filters = fallback_parse("AI startups in India with 50-200 employees, Series A funding")

        assert filters.to_payload() == {
            "industry": ["Software Development"],
            "countries": ["India"],
            "headcountRange": [50, 200],
            "fundingStages": ["Series A"],
        }

    def test_us_not_matched_inside_words(self):
        filters = fallback_parse("startups focused on business users")
        assert filters.countries is None

    def test_us_pronoun_is_not_a_country(self):
        filters = fallback_parse("Show us AI startups in India")
        assert filters.countries == ["India"]

    @pytest.mark.parametrize("prompt", [
        "us-based fintech startups",
        "fintech startups in the us",
        "fintech startups in the U.S.",
    ])
    def test_us_in_lower_case_context(self, prompt):
        assert fallback_parse(prompt).countries == ["United States"]

    def test_cased_us_keeps_mention_order(self):
        assert fallback_parse("India and US fintechs").countries == ["India", "United States"]

    def test_us_matched_as_word(self):
        filters = fallback_parse("US cybersecurity companies, Series B to D, founded after 2018")

        assert filters.countries == ["United States"]
        assert filters.industry == ["Software Development"]
        assert filters.funding_stages == ["Series B", "Series C", "Series D"]
        assert filters.founded_after == "2018"

    def test_open_ended_headcount_and_growth(self):
        filters = fallback_parse("European fintech companies, 1000+ employees, fast growth")

        assert filters.industry == ["Financial Services"]
        assert filters.regions == ["Europe"]
        assert filters.countries is None
        assert filters.headcount_range == [1000, OPEN_HEADCOUNT_SENTINEL]
        assert filters.hc_growth_6m_pct_min == 20

    def test_north_america_is_a_region_not_a_country(self):
        filters = fallback_parse("saas companies in north america")

        assert filters.regions == ["North America"]
        assert filters.countries is None

    def test_industries_keep_first_mention_order(self):
        filters = fallback_parse("fintech and e-commerce and AI and software")
        assert filters.industry == ["Financial Services", "Retail", "Software Development"]

    def test_seed_to_series_a(self):
        filters = fallback_parse("seed to series a startups")
        assert filters.funding_stages == ["Seed", "Series A"]

    def test_pre_seed_is_not_seed(self):
        filters = fallback_parse("pre-seed companies")
        assert filters.funding_stages == ["Pre-Seed"]

    def test_explicit_growth_percentage(self):
        assert fallback_parse("headcount growth of 35%").hc_growth_6m_pct_min == 35
        assert fallback_parse("15% growth in six months").hc_growth_6m_pct_min == 15

    def test_founded_before(self):
        assert fallback_parse("companies founded before 2015").founded_before == "2015"

    def test_limit_and_page(self):
        filters = fallback_parse("top 20 fintech companies, page 2")

        assert filters.limit == 20
        assert filters.page == 2

    def test_reversed_range_is_sorted(self):
        assert fallback_parse("500-100 employees").headcount_range == [100, 500]

    def test_no_triggers_gives_empty_filters(self):
        assert fallback_parse("show me something interesting").to_payload() == {}

    @pytest.mark.parametrize("prompt", ["", "   ", "🚀🚀🚀", "founded after", "series z", "10-5 employees", "%%%"])
    def test_never_raises(self, prompt):
        assert isinstance(fallback_parse(prompt), CanonicalFilters)


class TestFilterCanonicalizer:
    """LLM delegation with deterministic fallback."""

    PROMPT = "AI startups in India with 50-200 employees, Series A funding"

    def test_without_llm_uses_fallback(self):
        filters = FilterCanonicalizer().canonicalize(self.PROMPT)
        assert filters.industry == ["Software Development"]
        assert filters.headcount_range == [50, 200]

    def test_llm_fields_take_precedence(self, fake_llm):
        llm = fake_llm(reply='{"countries": ["Singapore"], "limit": 10}')

        filters = FilterCanonicalizer(llm=llm).canonicalize(self.PROMPT)

        assert filters.countries == ["Singapore"]
        assert filters.limit == 10
        # fields the LLM left out still come from the keyword pass
        assert filters.headcount_range == [50, 200]
        assert filters.funding_stages == ["Series A"]

    def test_llm_receives_instruction_document(self, fake_llm):
        llm = fake_llm(reply="{}")

        FilterCanonicalizer(llm=llm).canonicalize(self.PROMPT)

        assert len(llm.calls) == 1
        assert llm.calls[0]["user"] == self.PROMPT
        assert llm.calls[0]["system"] == SYSTEM_PROMPT
        for label in CANONICAL_INDUSTRIES:
            assert label in SYSTEM_PROMPT

    def test_markdown_fenced_reply(self, fake_llm):
        llm = fake_llm(reply='```json\n{"industry": ["Fintech"]}\n```')

        filters = FilterCanonicalizer(llm=llm).canonicalize("banks")

        assert filters.industry == ["Financial Services"]

    def test_raw_llm_industry_terms_are_mapped(self, fake_llm):
        llm = fake_llm(reply='{"industry": ["AI", "Cybersecurity", "Underwater Basket Weaving"]}')

        filters = FilterCanonicalizer(llm=llm).canonicalize("companies")

        assert filters.industry == ["Software Development"]

    def test_unmappable_industry_is_dropped(self, fake_llm):
        llm = fake_llm(reply='{"industry": ["Underwater Basket Weaving"]}')

        filters = FilterCanonicalizer(llm=llm).canonicalize("companies")

        assert filters.industry is None
        assert "industry" not in filters.to_payload()

    def test_unmappable_llm_industry_keeps_keyword_industry(self, fake_llm):
        llm = fake_llm(reply='{"industry": ["Biotechnology"]}')

        filters = FilterCanonicalizer(llm=llm).canonicalize("AI biotech startups")

        assert filters.industry == ["Software Development"]

    def test_numeric_year_from_llm(self, fake_llm):
        llm = fake_llm(reply='{"foundedAfter": 2019}')
        assert FilterCanonicalizer(llm=llm).canonicalize("x").founded_after == "2019"

    def test_unknown_keys_are_ignored(self, fake_llm):
        llm = fake_llm(reply='{"industry": ["Fintech"], "mood": "optimistic"}')

        payload = FilterCanonicalizer(llm=llm).canonicalize("x").to_payload()

        assert set(payload) <= {
            "industry", "categories", "regions", "countries", "headcountRange", "foundedAfter",
            "foundedBefore", "fundingStages", "hcGrowth6mPctMin", "limit", "page",
        }
        assert "mood" not in payload

    def test_bucket_labels_from_llm(self, fake_llm):
        llm = fake_llm(reply='{"headcountRange": ["51-200"]}')
        assert FilterCanonicalizer(llm=llm).canonicalize("x").headcount_range == ["51-200"]

    def test_quoted_headcount_from_llm_stays_numeric(self, fake_llm):
        llm = fake_llm(reply='{"headcountRange": ["50", "200"]}')

        filters = FilterCanonicalizer(llm=llm).canonicalize("companies with 50-200 employees")
        conditions = build_screening_payload(filters).filters.conditions

        assert filters.headcount_range == [50, 200]
        assert [(c.column, c.type, c.value) for c in conditions] == [
            ("headcount", "=>", 50),
            ("headcount", "=<", 200),
        ]

    def test_unknown_llm_buckets_keep_keyword_range(self, fake_llm):
        llm = fake_llm(reply='{"headcountRange": ["mid-size", "51-200"]}')
        assert FilterCanonicalizer(llm=llm).canonicalize("x").headcount_range == ["51-200"]

        llm = fake_llm(reply='{"headcountRange": ["mid-size"]}')
        filters = FilterCanonicalizer(llm=llm).canonicalize("companies with 50-200 employees")
        assert filters.headcount_range == [50, 200]

    @pytest.mark.parametrize("reply", [
        "not json at all",
        "[1, 2, 3]",
        '{"headcountRange": "lots"}',
        '{"limit": "many"}',
        "",
        None,
    ])
    def test_bad_llm_reply_falls_back(self, fake_llm, reply):
        llm = fake_llm(reply=reply)

        filters = FilterCanonicalizer(llm=llm).canonicalize(self.PROMPT)

        assert filters.to_payload() == fallback_parse(self.PROMPT).to_payload()

    def test_llm_transport_error_falls_back(self, fake_llm):
        llm = fake_llm(error=ConnectionError("boom"))

        filters = FilterCanonicalizer(llm=llm).canonicalize(self.PROMPT)

        assert filters.to_payload() == fallback_parse(self.PROMPT).to_payload()
