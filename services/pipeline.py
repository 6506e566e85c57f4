"""
Search pipeline - prompt → canonical filters → Crustdata calls → joined result

Flow for one /api/run request (no retries, every provider call at most once):
1. Canonicalize prompt (never fails)
2. Build screen / company-search / person-search payloads
3. Screener → domains + names (failure is non-fatal)
4. Company Search fallback, only when the screener yielded no domains
5. Enrichment, only when some domains were found
6. People Search, always; joined to whatever companies were enriched
7. Render all four cURL commands
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from models.filters import CanonicalFilters, CompanySearchByFilters, PersonLite, ScreeningRequest
from models.responses import ParseCurls, ParseResponse, RunCurls, RunResponse
from services.canonicalizer import FilterCanonicalizer
from services.crustdata_client import CrustdataClient
from services.curl_builder import (
    DEFAULT_BASE_URL,
    NO_DOMAINS_MESSAGE,
    build_company_search_curl,
    build_enrich_curl,
    build_person_search_curl,
    build_screen_curl,
)
from services.payload_builder import (
    build_company_search_payload,
    build_person_search_payload,
    build_screening_payload,
)

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    SCREEN_PENDING = "screen_pending"
    SCREEN_DONE = "screen_done"
    SEARCH_PENDING = "search_pending"
    SEARCH_SKIPPED = "search_skipped"
    ENRICH_PENDING = "enrich_pending"
    ENRICH_SKIPPED = "enrich_skipped"
    PEOPLE_SEARCH_PENDING = "people_search_pending"
    DONE = "done"


class StepOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PipelineResult:
    """Everything gathered during one run, including which steps ran"""
    canonical: CanonicalFilters
    screen_payload: ScreeningRequest
    company_search_payload: CompanySearchByFilters
    person_search_payload: CompanySearchByFilters
    curls: Dict[str, str] = field(default_factory=dict)
    screen_res: Optional[Any] = None
    search_res: Optional[Any] = None
    domains: List[str] = field(default_factory=list)
    company_names: List[str] = field(default_factory=list)
    companies_enriched: List[Dict[str, Any]] = field(default_factory=list)
    people_matched: Dict[str, List[PersonLite]] = field(default_factory=dict)
    trace: List[PipelineState] = field(default_factory=list)
    outcomes: Dict[str, StepOutcome] = field(default_factory=dict)

    def to_response(self) -> RunResponse:
        return RunResponse(
            canonical=self.canonical,
            curls=RunCurls(**self.curls),
            screen_res=self.screen_res,
            companies_enriched=self.companies_enriched,
            people_matched=self.people_matched,
        )


def _preview(data: Any, limit: int = 2000) -> str:
    try:
        text = json.dumps(data, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(data)
    return text[:limit]


def _log_step_failure(step: str, error: Exception, **context) -> None:
    """Log a provider failure with status, body and URL when available"""
    response = getattr(error, "response", None)
    request = getattr(error, "request", None)
    details = {
        "status": getattr(response, "status_code", None),
        "reason": getattr(response, "reason", None),
        "body": response.text[:1000] if response is not None and hasattr(response, "text") else None,
        "url": getattr(request, "url", None),
        "method": getattr(request, "method", None),
        "message": str(error),
    }
    details.update({key: _preview(value, 1000) for key, value in context.items()})
    logger.error(f"❌ {step} FAILED: {details}")


def parse_prompt(canonicalizer: FilterCanonicalizer, prompt: str, base_url: str = DEFAULT_BASE_URL) -> ParseResponse:
    """Canonicalize a prompt and render the screen / search payloads and cURLs"""
    logger.info(f"🔍 PARSE REQUEST RECEIVED: '{prompt}'")

    canonical = canonicalizer.canonicalize(prompt)
    logger.info(f"✅ NATURAL LANGUAGE PARSED: {canonical.to_payload()}")

    screen_payload = build_screening_payload(canonical)
    company_search_payload = build_company_search_payload(canonical)
    logger.debug(f"Screening payload: {_preview(screen_payload.model_dump())}")
    logger.debug(f"Company search payload: {_preview(company_search_payload.model_dump())}")

    curls = ParseCurls(
        screen=build_screen_curl(screen_payload, base_url),
        search=build_company_search_curl(company_search_payload, base_url),
    )
    logger.info(f"🌐 Generated SCREENER cURL:\n{curls.screen}")
    logger.info(f"🌐 Generated COMPANY SEARCH cURL:\n{curls.search}")

    return ParseResponse(
        canonical=canonical,
        screen_payload=screen_payload,
        company_search_payload=company_search_payload,
        curls=curls,
    )


class SearchPipeline:
    """Runs the full screen → search → enrich → people flow for one prompt"""

    def __init__(self, canonicalizer: FilterCanonicalizer, client: CrustdataClient, base_url: str = DEFAULT_BASE_URL):
        self.canonicalizer = canonicalizer
        self.client = client
        self.base_url = base_url
        self._transitions: Dict[PipelineState, Callable[[PipelineResult], PipelineState]] = {
            PipelineState.SCREEN_PENDING: self._screen,
            PipelineState.SCREEN_DONE: self._after_screen,
            PipelineState.SEARCH_PENDING: self._search,
            PipelineState.SEARCH_SKIPPED: self._after_search,
            PipelineState.ENRICH_PENDING: self._enrich,
            PipelineState.ENRICH_SKIPPED: self._after_enrich,
            PipelineState.PEOPLE_SEARCH_PENDING: self._people_search,
        }

    def run(self, prompt: str) -> PipelineResult:
        logger.info("=" * 60)
        logger.info(f"🚀 RUN REQUEST RECEIVED: '{prompt}'")
        logger.info("=" * 60)

        canonical = self.canonicalizer.canonicalize(prompt)
        logger.info(f"✅ NATURAL LANGUAGE PARSED: {canonical.to_payload()}")

        result = PipelineResult(
            canonical=canonical,
            screen_payload=build_screening_payload(canonical),
            company_search_payload=build_company_search_payload(canonical),
            person_search_payload=build_person_search_payload(canonical),
        )
        logger.info("✅ Built screening, company search and person search payloads")

        state = PipelineState.SCREEN_PENDING
        while state is not PipelineState.DONE:
            result.trace.append(state)
            state = self._transitions[state](result)
        result.trace.append(PipelineState.DONE)

        result.curls = self._render_curls(result)

        logger.info(
            f"✅ RUN REQUEST COMPLETED - steps: {', '.join(f'{k}={v.value}' for k, v in result.outcomes.items())}, "
            f"companies enriched: {len(result.companies_enriched)}, "
            f"companies with people: {len(result.people_matched)}"
        )
        return result

    # ── States ───────────────────────────────────────────────────────────────

    def _screen(self, result: PipelineResult) -> PipelineState:
        logger.info("STEP 1: Calling screener API...")
        logger.debug(f"Screener payload: {_preview(result.screen_payload.model_dump())}")
        try:
            result.screen_res = self.client.screen_companies(result.screen_payload)
            result.domains = self.client.extract_domains_from_screen_response(result.screen_res)
            result.company_names = self.client.extract_company_names_from_screen_response(result.screen_res)
            result.outcomes["screen"] = StepOutcome.OK
            logger.info(
                f"✅ STEP 1 Complete: {len(result.domains)} domains, {len(result.company_names)} company names "
                f"(sample: {result.domains[:5]})"
            )
        except Exception as e:
            result.outcomes["screen"] = StepOutcome.FAILED
            _log_step_failure("SCREENER API", e, payload=result.screen_payload.model_dump())
        return PipelineState.SCREEN_DONE

    def _after_screen(self, result: PipelineResult) -> PipelineState:
        if result.domains:
            logger.info("STEP 2: SKIPPED (domains found from screener)")
            result.outcomes["search"] = StepOutcome.SKIPPED
            return PipelineState.SEARCH_SKIPPED
        return PipelineState.SEARCH_PENDING

    def _search(self, result: PipelineResult) -> PipelineState:
        logger.info("STEP 2: Calling company search API (fallback)...")
        try:
            result.search_res = self.client.search_companies(result.company_search_payload)
            result.domains = self.client.extract_domains_from_search_response(result.search_res)
            result.outcomes["search"] = StepOutcome.OK
            logger.info(f"✅ STEP 2 Complete: {len(result.domains)} domains (sample: {result.domains[:5]})")
        except Exception as e:
            result.outcomes["search"] = StepOutcome.FAILED
            _log_step_failure("COMPANY SEARCH API", e, payload=result.company_search_payload.model_dump())
        return self._after_search(result)

    def _after_search(self, result: PipelineResult) -> PipelineState:
        if result.domains:
            return PipelineState.ENRICH_PENDING
        logger.info("STEP 3: SKIPPED (no domains to enrich)")
        result.outcomes["enrich"] = StepOutcome.SKIPPED
        return PipelineState.ENRICH_SKIPPED

    def _enrich(self, result: PipelineResult) -> PipelineState:
        logger.info(f"STEP 3: Calling enrichment API for {len(result.domains)} domains...")
        try:
            result.companies_enriched = self.client.enrich_companies(result.domains)
            result.outcomes["enrich"] = StepOutcome.OK
            first = result.companies_enriched[0] if result.companies_enriched else None
            sample = first.get("company_name") if isinstance(first, dict) else "N/A"
            logger.info(f"✅ STEP 3 Complete: {len(result.companies_enriched)} companies enriched (first: {sample})")
        except Exception as e:
            result.companies_enriched = []
            result.outcomes["enrich"] = StepOutcome.FAILED
            _log_step_failure("COMPANY ENRICHMENT API", e, domains=result.domains)
        return self._after_enrich(result)

    def _after_enrich(self, result: PipelineResult) -> PipelineState:
        return PipelineState.PEOPLE_SEARCH_PENDING

    def _people_search(self, result: PipelineResult) -> PipelineState:
        logger.info("STEP 4: Calling people search API...")
        try:
            people_res = self.client.search_people(result.person_search_payload)
            result.people_matched = self.client.join_people_to_companies(people_res, result.companies_enriched)
            result.outcomes["people"] = StepOutcome.OK
            total = sum(len(people) for people in result.people_matched.values())
            logger.info(f"✅ STEP 4 Complete: {total} people matched across {len(result.people_matched)} companies")
        except Exception as e:
            result.people_matched = {}
            result.outcomes["people"] = StepOutcome.FAILED
            _log_step_failure("PEOPLE SEARCH API", e, payload=result.person_search_payload.model_dump())
        return PipelineState.DONE

    # ── Output ───────────────────────────────────────────────────────────────

    def _render_curls(self, result: PipelineResult) -> Dict[str, str]:
        curls = {
            "screen": build_screen_curl(result.screen_payload, self.base_url),
            "search": build_company_search_curl(result.company_search_payload, self.base_url),
            "enrich": build_enrich_curl(result.domains, self.base_url) if result.domains else NO_DOMAINS_MESSAGE,
            "people": build_person_search_curl(result.person_search_payload, self.base_url),
        }
        for name, curl in curls.items():
            logger.debug(f"🌐 Generated {name} cURL:\n{curl}")
        return curls
