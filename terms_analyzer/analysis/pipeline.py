from __future__ import annotations

import logging
import time
from enum import StrEnum
from typing import Annotated, Callable, Literal, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field

from terms_analyzer.analysis.chunker import chunk_document
from terms_analyzer.analysis.client import ModelClient, get_api_key
from terms_analyzer.analysis.config import AnalyzerConfig
from terms_analyzer.analysis.errors import ModelError
from terms_analyzer.analysis.merge import merge_analyses
from terms_analyzer.analysis.models import AnalysisData
from terms_analyzer.analysis.rules import count_words, score_content

logger = logging.getLogger(__name__)

REASON_API_KEY_MISSING = "API key missing"
REASON_AI_CALL_ERROR = "AI call error"


class Analyzer(Protocol):
    def analyze_one(
        self,
        text: str,
        chunk_number: Optional[int] = None,
        total_chunks: Optional[int] = None,
    ) -> AnalysisData: ...


class ProcessingMethod(StrEnum):
    SINGLE = "single"
    CHUNKED = "chunked"
    FALLBACK = "fallback"


class ModelSucceeded(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["model"] = "model"
    chunk_number: int
    analysis: AnalysisData


class FallbackApplied(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["fallback"] = "fallback"
    chunk_number: int
    reason: str
    analysis: AnalysisData


Outcome = Annotated[Union[ModelSucceeded, FallbackApplied], Field(discriminator="kind")]


class PipelineResult(BaseModel):
    """Final analysis plus provenance for one request."""

    model_config = ConfigDict(frozen=True)

    analysis: AnalysisData
    processing_method: ProcessingMethod
    outcomes: list[Outcome]
    chunk_count: int
    content_length: int
    word_count: int

    @property
    def fallback_reasons(self) -> list[str]:
        return [o.reason for o in self.outcomes if isinstance(o, FallbackApplied)]


def _run_one(
    client: Analyzer,
    text: str,
    chunk_number: int,
    total_chunks: Optional[int],
    failure_reason: str,
    config: AnalyzerConfig,
) -> Outcome:
    """Try the model for one unit of work; degrade to the rule-based scorer.

    ``total_chunks`` is None for a whole document sent in a single call.
    """
    try:
        if total_chunks is None:
            analysis = client.analyze_one(text)
        else:
            analysis = client.analyze_one(text, chunk_number, total_chunks)
        return ModelSucceeded(chunk_number=chunk_number, analysis=analysis)
    except ModelError as exc:
        logger.warning("Model analysis failed (%s): %s", failure_reason, exc)
        return FallbackApplied(
            chunk_number=chunk_number,
            reason=failure_reason,
            analysis=score_content(text, failure_reason, config.scoring),
        )


def _result(
    content: str,
    analysis: AnalysisData,
    method: ProcessingMethod,
    outcomes: list[Outcome],
) -> PipelineResult:
    if all(isinstance(o, FallbackApplied) for o in outcomes):
        method = ProcessingMethod.FALLBACK
    return PipelineResult(
        analysis=analysis,
        processing_method=method,
        outcomes=outcomes,
        chunk_count=len(outcomes),
        content_length=len(content),
        word_count=count_words(content),
    )


def analyze_document(
    content: str,
    *,
    client: Optional[Analyzer] = None,
    config: Optional[AnalyzerConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Analyze one document end to end. Always returns an analysis.

    Short documents go to the model in one call; longer ones are chunked and
    sent one chunk at a time with a delay between calls. Any model failure is
    replaced by the rule-based result for that document or chunk. When no
    client is injected, credentials are checked once before any call and
    their absence skips the model entirely.
    """
    config = config or AnalyzerConfig()
    pipeline = config.pipeline

    if client is None:
        if not get_api_key():
            logger.warning("ANTHROPIC_API_KEY not set; using rule-based analysis only")
            outcome = FallbackApplied(
                chunk_number=1,
                reason=REASON_API_KEY_MISSING,
                analysis=score_content(content, REASON_API_KEY_MISSING, config.scoring),
            )
            return _result(content, outcome.analysis, ProcessingMethod.FALLBACK, [outcome])
        client = ModelClient.from_env(pipeline)

    if len(content) <= pipeline.single_shot_threshold:
        outcome = _run_one(client, content, 1, None, REASON_AI_CALL_ERROR, config)
        return _result(content, outcome.analysis, ProcessingMethod.SINGLE, [outcome])

    chunks = chunk_document(content, pipeline.chunk_size, pipeline.chunk_overlap)
    logger.info("Content is %d characters, processing %d chunks", len(content), len(chunks))

    outcomes: list[Outcome] = []
    for index, chunk in enumerate(chunks, start=1):
        if index > 1:
            sleep(pipeline.chunk_delay_seconds)
        outcomes.append(
            _run_one(client, chunk, index, len(chunks), f"chunk {index} AI error", config)
        )

    analysis = merge_analyses([o.analysis for o in outcomes], content)
    return _result(content, analysis, ProcessingMethod.CHUNKED, outcomes)
