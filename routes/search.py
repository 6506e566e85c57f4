"""
Search routes - natural language → Crustdata filters and pipeline runs
=======================================================================
POST /api/parse  → canonical filters, screen/search payloads and cURLs
POST /api/run    → full screen → search → enrich → people pipeline
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from config import settings
from models import ParseResponse, PromptRequest, RunResponse
from services.canonicalizer import FilterCanonicalizer
from services.crustdata_client import CrustdataClient
from services.mistral_analyzer import MistralAnalyzer
from services.pipeline import SearchPipeline, parse_prompt

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["search"])


# ─── Dependencies ────────────────────────────────────────────────────────────

def get_canonicalizer() -> FilterCanonicalizer:
    """Canonicalizer for one request; LLM-backed only when a Mistral key is set"""
    llm = None
    if settings.mistral_api_key:
        llm = MistralAnalyzer(
            api_key=settings.mistral_api_key,
            model=settings.mistral_model,
            max_tokens=settings.llm_max_tokens,
        )
    return FilterCanonicalizer(llm=llm)


def get_crustdata_client() -> Optional[CrustdataClient]:
    if not settings.crustdata_api_key:
        return None
    return CrustdataClient(
        api_key=settings.crustdata_api_key,
        base_url=settings.crustdata_base_url,
        timeout=settings.crustdata_timeout_seconds,
    )


# ─── Endpoints ───────────────────────────────────────────────────────────────

@router.post("/parse", response_model=ParseResponse)
def parse(request: PromptRequest, canonicalizer: FilterCanonicalizer = Depends(get_canonicalizer)):
    """Canonicalize the prompt and render the screener / company search calls"""
    try:
        return parse_prompt(canonicalizer, request.prompt, settings.crustdata_base_url)
    except Exception as e:
        logger.error(f"❌ PARSE REQUEST FAILED: {e}", exc_info=True)
        raise HTTPException(status_code=400, detail="Failed to parse prompt")


@router.post("/run", response_model=RunResponse)
def run(
    request: PromptRequest,
    canonicalizer: FilterCanonicalizer = Depends(get_canonicalizer),
    client: Optional[CrustdataClient] = Depends(get_crustdata_client),
):
    """Run the whole pipeline; provider failures yield partial results, not errors"""
    if client is None:
        logger.error("❌ CRUSTDATA_API_KEY not configured")
        raise HTTPException(status_code=500, detail="CRUSTDATA_API_KEY not configured")

    try:
        pipeline = SearchPipeline(canonicalizer, client, settings.crustdata_base_url)
        return pipeline.run(request.prompt).to_response()
    except Exception as e:
        logger.error(f"❌ RUN REQUEST FAILED: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to execute search pipeline")
