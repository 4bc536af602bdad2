"""Shape loosely-typed model output into a valid AnalysisData.

Every field has an explicit default-filling rule, so any JSON object yields a
structurally valid result. Only input that is not an object at all fails.
"""

from __future__ import annotations

import math
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from terms_analyzer.analysis.errors import AnalysisValidationError
from terms_analyzer.analysis.models import (
    CATEGORY_KEYS,
    MAX_CONCERNS,
    MAX_FINDINGS,
    MAX_HIGHLIGHTS,
    MAX_RECOMMENDATIONS,
    AnalysisData,
    Categories,
    CategoryAnalysis,
    KeyMetrics,
    RiskLevel,
    clamp_score,
    dedupe_and_cap,
    risk_level_for_score,
)

DEFAULT_SCORE = 50
DEFAULT_READABILITY = 60
DEFAULT_SUMMARY = "Analysis completed using AI-powered assessment."
DEFAULT_LENGTH_ANALYSIS = "Standard length document"
DEFAULT_RECOMMENDATIONS = [
    "Review the full document carefully",
    "Consider consulting legal advice for high-risk terms",
    "Keep a copy of the terms for your records",
]

# used when a level is given without a usable score
LEVEL_SCORES = {RiskLevel.LOW: 15, RiskLevel.MEDIUM: 45, RiskLevel.HIGH: 80}

_NULL_STRINGS = {"", "null", "none", "n/a", "unknown"}


class ValidationOk(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ok"] = "ok"
    analysis: AnalysisData


class ValidationFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    error: str


ValidationResult = Union[ValidationOk, ValidationFailed]


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _get(raw: dict[str, Any], snake: str) -> Any:
    """Read a field by its camelCase key, falling back to snake_case."""
    camel = to_camel(snake)
    if camel in raw:
        return raw[camel]
    return raw.get(snake)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return None if math.isnan(number) or math.isinf(number) else number
    if isinstance(value, str):
        try:
            return _number(float(value.strip().rstrip("%")))
        except ValueError:
            return None
    return None


def _level(value: Any) -> Optional[RiskLevel]:
    if isinstance(value, str):
        try:
            return RiskLevel(value.strip().lower())
        except ValueError:
            return None
    return None


def _score(raw: dict[str, Any]) -> int:
    number = _number(_get(raw, "score"))
    if number is not None:
        return clamp_score(number)
    level = _level(_get(raw, "risk_level"))
    if level is not None:
        return LEVEL_SCORES[level]
    return DEFAULT_SCORE


def _strings(value: Any, limit: int) -> list[str]:
    if not isinstance(value, list):
        return []
    items = [item.strip() for item in value if isinstance(item, str)]
    return dedupe_and_cap((item for item in items if item), limit)


def _optional_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return None if text.lower() in _NULL_STRINGS else text


def _category(key: str, value: Any) -> CategoryAnalysis:
    if not isinstance(value, dict):
        return CategoryAnalysis.neutral(key)
    return CategoryAnalysis.build(
        key, _score(value), _strings(value.get("findings"), MAX_FINDINGS)
    )


def _categories(value: Any) -> Categories:
    raw = value if isinstance(value, dict) else {}
    return Categories(**{key: _category(key, _get(raw, key)) for key in CATEGORY_KEYS})


def _key_metrics(value: Any) -> KeyMetrics:
    raw = value if isinstance(value, dict) else {}
    readability = _number(_get(raw, "readability_score"))
    length = _optional_text(_get(raw, "length_analysis"))
    return KeyMetrics(
        readability_score=clamp_score(
            DEFAULT_READABILITY if readability is None else readability
        ),
        length_analysis=length or DEFAULT_LENGTH_ANALYSIS,
        last_updated=_optional_text(_get(raw, "last_updated")),
        jurisdiction=_optional_text(_get(raw, "jurisdiction")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def coerce_analysis(raw: Any) -> AnalysisData:
    """Build an AnalysisData from parsed model output, filling every gap."""
    if not isinstance(raw, dict):
        raise AnalysisValidationError(
            f"Expected a JSON object, got {type(raw).__name__}"
        )

    score = _score(raw)
    recommendations = _get(raw, "recommendations")
    summary = _optional_text(_get(raw, "summary"))

    return AnalysisData(
        risk_level=risk_level_for_score(score),
        score=score,
        concerns=_strings(_get(raw, "concerns"), MAX_CONCERNS),
        highlights=_strings(_get(raw, "highlights"), MAX_HIGHLIGHTS),
        summary=summary or DEFAULT_SUMMARY,
        categories=_categories(_get(raw, "categories")),
        recommendations=(
            _strings(recommendations, MAX_RECOMMENDATIONS)
            if isinstance(recommendations, list)
            else list(DEFAULT_RECOMMENDATIONS)
        ),
        key_metrics=_key_metrics(_get(raw, "key_metrics")),
    )


def validate_analysis(raw: Any) -> ValidationResult:
    try:
        return ValidationOk(analysis=coerce_analysis(raw))
    except AnalysisValidationError as exc:
        return ValidationFailed(error=str(exc))
