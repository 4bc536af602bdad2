from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from terms_analyzer.analysis.client import get_api_key, get_model
from terms_analyzer.analysis.config import load_config
from terms_analyzer.analysis.models import AnalysisData
from terms_analyzer.analysis.pipeline import ProcessingMethod, analyze_document

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyze"])

_DEFAULT_LIMITS = load_config().pipeline


class AnalyzeRequest(BaseModel):
    content: str = Field(
        min_length=_DEFAULT_LIMITS.min_content_length,
        max_length=_DEFAULT_LIMITS.max_content_length,
    )
    source: Optional[str] = None
    type: Optional[str] = None


class AnalyzeMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    source: str
    type: str
    timestamp: datetime
    content_length: int
    word_count: int
    processing_method: ProcessingMethod
    chunk_count: int
    model: Optional[str] = None
    fallback_reasons: list[str] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: AnalysisData
    metadata: AnalyzeMetadata


@router.post("/analyze", response_model=AnalyzeResponse, status_code=200)
def analyze_endpoint(request: AnalyzeRequest) -> AnalyzeResponse:
    """Analyze a document's text. Degrades to rule-based analysis, never fails."""
    source = request.source or "Unknown"
    logger.info(
        "Analyzing %s content from %s (%d characters)",
        request.type or "text",
        source,
        len(request.content),
    )
    result = analyze_document(request.content, config=load_config())

    return AnalyzeResponse(
        analysis=result.analysis,
        metadata=AnalyzeMetadata(
            source=source,
            type=request.type or "text",
            timestamp=datetime.now(timezone.utc),
            content_length=result.content_length,
            word_count=result.word_count,
            processing_method=result.processing_method,
            chunk_count=result.chunk_count,
            model=(
                None
                if result.processing_method == ProcessingMethod.FALLBACK
                else get_model()
            ),
            fallback_reasons=result.fallback_reasons,
        ),
    )


@router.get("/analyze")
async def analyze_info() -> dict:
    return {
        "message": "Terms Analyzer API is running",
        "modelConfigured": get_api_key() is not None,
        "endpoints": {
            "analyze": "POST /analyze",
            "extension": "POST /extension/analyze",
            "cache": "GET|POST|DELETE /extension/cache",
        },
    }
