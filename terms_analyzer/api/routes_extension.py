from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from terms_analyzer.analysis.config import load_config
from terms_analyzer.api.errors import problem_response
from terms_analyzer.extension.models import (
    ExtensionAnalysisRequest,
    ExtensionAnalysisResponse,
)
from terms_analyzer.extension.service import analyze_extraction
from terms_analyzer.ratelimit.limiter import RateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/extension", tags=["extension"])


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter()


@router.post("/analyze", response_model=ExtensionAnalysisResponse, status_code=200)
def analyze_extension_endpoint(
    payload: ExtensionAnalysisRequest,
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> ExtensionAnalysisResponse | JSONResponse:
    """Analyze every document and inline snippet the extension found on a site."""
    if not limiter.check_and_consume(payload.domain):
        logger.warning("Rate limit exceeded for %s", payload.domain)
        return problem_response(
            request,
            status=429,
            title="Too Many Requests",
            detail="Rate limit exceeded. Please try again later.",
            kind="rate-limit",
        )

    logger.info(
        "Extension analysis for %s: %d documents",
        payload.domain,
        len(payload.prioritized_documents),
    )
    return analyze_extraction(payload, config=load_config())
