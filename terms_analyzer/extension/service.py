from __future__ import annotations

import logging
from typing import Callable, Optional

from pydantic.alias_generators import to_camel

from terms_analyzer.analysis.config import AnalyzerConfig
from terms_analyzer.analysis.merge import merge_analyses
from terms_analyzer.analysis.models import CATEGORY_KEYS, RiskLevel
from terms_analyzer.analysis.pipeline import Analyzer, analyze_document
from terms_analyzer.extension.models import (
    ExtensionAnalysisRequest,
    ExtensionAnalysisResponse,
    ExtensionSummary,
    InlineContent,
    SourceAnalysis,
)

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 3
MIN_SOURCE_LENGTH = 100


def combine_inline_content(inline: InlineContent) -> str:
    """Join inline snippets into one labelled text, banners first."""
    parts = (
        [f"COOKIE BANNER: {t}" for t in inline.cookie_banners]
        + [f"PRIVACY NOTICE: {t}" for t in inline.privacy_notices]
        + [f"TERMS SNIPPET: {t}" for t in inline.terms_snippets]
    )
    return "\n\n".join(parts)


def _collect_sources(
    request: ExtensionAnalysisRequest, max_length: int
) -> list[tuple[str, str, str]]:
    """(label, source_type, text) for every analyzable source, in priority order."""
    sources = []
    for doc in request.prioritized_documents[:MAX_DOCUMENTS]:
        text = doc.text.strip()
        if len(text) <= MIN_SOURCE_LENGTH:
            logger.info("Skipping %s: extracted text too short", doc.url)
            continue
        sources.append((doc.url, "document", text[:max_length]))

    inline_text = combine_inline_content(request.inline_content)
    if len(inline_text) > MIN_SOURCE_LENGTH:
        sources.append(("inline content", "inline", inline_text[:max_length]))
    return sources


def _message(document_count: int, inline_count: int) -> str:
    message = f"Analyzed {document_count} document(s)"
    if inline_count:
        message += f" and {inline_count} inline content section(s)"
    return message + " from this website."


def analyze_extraction(
    request: ExtensionAnalysisRequest,
    *,
    client: Optional[Analyzer] = None,
    config: Optional[AnalyzerConfig] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> ExtensionAnalysisResponse:
    """Analyze every extracted source for a site and merge them into one result."""
    config = config or AnalyzerConfig()
    sources = _collect_sources(request, config.pipeline.max_content_length)

    if not sources:
        nothing_found = (
            not request.prioritized_documents and request.inline_content.is_empty()
        )
        return ExtensionAnalysisResponse(
            domain=request.domain,
            risk_level="unknown",
            score=0,
            message=(
                "No terms, privacy policies, or cookie policies found on this website."
                if nothing_found
                else "Could not analyze the found documents."
            ),
            summary=ExtensionSummary(
                total_documents=0, has_inline_content=False, analysis_depth=0
            ),
        )

    pipeline_kwargs = {"client": client, "config": config}
    if sleep is not None:
        pipeline_kwargs["sleep"] = sleep

    analyzed: list[SourceAnalysis] = []
    for label, source_type, text in sources:
        result = analyze_document(text, **pipeline_kwargs)
        logger.info(
            "Analysis complete for %s: %s risk (%d/100)",
            label,
            result.analysis.risk_level,
            result.analysis.score,
        )
        analyzed.append(
            SourceAnalysis(
                label=label,
                source_type=source_type,
                content_length=len(text),
                processing_method=result.processing_method.value,
                analysis=result.analysis,
            )
        )

    merged = merge_analyses(
        [s.analysis for s in analyzed], "\n\n".join(text for _, _, text in sources)
    )

    category_risks: dict[str, list[RiskLevel]] = {
        to_camel(key): [getattr(s.analysis.categories, key).risk_level for s in analyzed]
        for key in CATEGORY_KEYS
    }
    document_count = sum(1 for s in analyzed if s.source_type == "document")
    inline_count = len(analyzed) - document_count

    return ExtensionAnalysisResponse(
        domain=request.domain,
        risk_level=merged.risk_level,
        score=merged.score,
        message=_message(document_count, inline_count),
        analysis=merged,
        sources=analyzed,
        summary=ExtensionSummary(
            total_documents=document_count,
            has_inline_content=inline_count > 0,
            analysis_depth=len(analyzed),
            category_risks=category_risks,
        ),
    )
