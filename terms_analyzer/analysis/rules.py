from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from terms_analyzer.analysis.config import PhraseRule, ScoringConfig
from terms_analyzer.analysis.models import (
    CATEGORY_KEYS,
    CATEGORY_LABELS,
    MAX_CONCERNS,
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

logger = logging.getLogger(__name__)

DEFAULT_SCORING = ScoringConfig()

LAST_UPDATED_PATTERNS = [
    re.compile(r"last updated:?\s*([^.\n]+)", re.IGNORECASE),
    re.compile(r"effective date:?\s*([^.\n]+)", re.IGNORECASE),
    re.compile(r"updated on:?\s*([^.\n]+)", re.IGNORECASE),
]

JURISDICTION_PATTERNS = [
    re.compile(r"governed by.*laws of ([^,.\n]+)", re.IGNORECASE),
    re.compile(r"jurisdiction of ([^,.\n]+)", re.IGNORECASE),
    re.compile(r"courts of ([^,.\n]+)", re.IGNORECASE),
]


@dataclass
class _Bucket:
    risk: int = 0
    positive: int = 0
    findings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Text metrics
# ---------------------------------------------------------------------------


def count_words(content: str) -> int:
    return len(content.split())


def readability_score(content: str) -> int:
    """Score 0-100 from average words per sentence (longer sentences score lower)."""
    sentences = len(re.split(r"[.!?]+", content)) - 1
    avg_words = count_words(content) / max(sentences, 1)
    return clamp_score(100 - (avg_words - 15) * 2)


def length_analysis(word_count: int) -> str:
    if word_count < 500:
        return "Very Short - May lack important details"
    if word_count < 1500:
        return "Short - Covers basic terms"
    if word_count < 3000:
        return "Medium - Comprehensive coverage"
    if word_count < 5000:
        return "Long - Detailed terms"
    return "Very Long - Extensive legal document"


def _first_match(patterns: list[re.Pattern[str]], content: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(content)
        if match:
            value = match.group(1).strip()
            if value:
                return value
    return None


def extract_last_updated(content: str) -> Optional[str]:
    return _first_match(LAST_UPDATED_PATTERNS, content)


def extract_jurisdiction(content: str) -> Optional[str]:
    return _first_match(JURISDICTION_PATTERNS, content)


# ---------------------------------------------------------------------------
# Phrase matching
# ---------------------------------------------------------------------------


@lru_cache(maxsize=512)
def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Case-insensitive pattern allowing any whitespace run between words."""
    words = phrase.split()
    body = r"\s+".join(re.escape(w) for w in words)
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def _matched(rules: list[PhraseRule], content: str) -> list[PhraseRule]:
    return [rule for rule in rules if phrase_pattern(rule.phrase).search(content)]


# ---------------------------------------------------------------------------
# Summary and recommendations
# ---------------------------------------------------------------------------


def _high_risk_labels(categories: Categories) -> list[str]:
    return [
        CATEGORY_LABELS[key]
        for key, cat in categories.items()
        if cat.risk_level == RiskLevel.HIGH
    ]


def build_summary(
    risk_level: RiskLevel,
    concern_count: int,
    highlight_count: int,
    categories: Categories,
) -> str:
    high = _high_risk_labels(categories)

    if risk_level == RiskLevel.LOW:
        text = (
            f"This document appears user-friendly with {concern_count} concerns "
            f"identified across {len(CATEGORY_KEYS)} categories. "
        )
        if highlight_count:
            text += f"It includes {highlight_count} positive user protections. "
        return text + "The terms seem balanced and reasonable for most users."

    if risk_level == RiskLevel.MEDIUM:
        text = f"This document presents moderate risks with {concern_count} concerns identified. "
        if high:
            text += f"Pay special attention to {', '.join(high)} sections. "
        if highlight_count:
            text += f"It does include {highlight_count} positive aspects. "
        return text + "Review carefully and consider the trade-offs."

    text = f"This document presents significant risks with {concern_count} major concerns. "
    if high:
        text += f"Critical issues found in {', '.join(high)} areas. "
    if highlight_count:
        text += "Despite some positive aspects, it "
    else:
        text += "It lacks adequate user protections and "
    return text + "heavily favors the service provider. Proceed with extreme caution."


def build_recommendations(
    risk_level: RiskLevel,
    categories: Categories,
    concern_count: int,
    highlight_count: int,
) -> list[str]:
    recs: list[str] = []

    if risk_level == RiskLevel.HIGH:
        recs.append("Consider seeking legal advice before accepting these terms")
        recs.append("Look for alternative services with more user-friendly terms")

    if categories.data_privacy.risk_level == RiskLevel.HIGH:
        recs.append("Review the privacy policy carefully and consider data protection implications")
        recs.append("Check if you can opt-out of data sharing practices")
    if categories.liability.risk_level == RiskLevel.HIGH:
        recs.append("Consider additional insurance or protection for potential liabilities")
    if categories.termination.risk_level == RiskLevel.HIGH:
        recs.append("Backup your data regularly in case of sudden account termination")
    if categories.dispute_resolution.risk_level == RiskLevel.HIGH:
        recs.append("Understand your legal options are limited by arbitration clauses")

    if concern_count > 3:
        recs.append("Pay special attention to the identified risk areas")

    if not recs:
        recs.append("The terms appear reasonable, but always read the full document")
        if highlight_count:
            recs.append("Note the positive user protections included")
        recs.append("Keep a copy of the terms for your records")

    return dedupe_and_cap(recs, MAX_RECOMMENDATIONS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_content(
    content: str,
    reason: Optional[str] = None,
    config: Optional[ScoringConfig] = None,
) -> AnalysisData:
    """Rule-based analysis of ``content``. Pure, deterministic, never raises.

    ``reason`` records why the rule-based path was taken; it is logged and
    does not influence the result.
    """
    if reason:
        logger.warning("Using rule-based analysis: %s", reason)
    cfg = config or DEFAULT_SCORING

    buckets = {key: _Bucket() for key in CATEGORY_KEYS}
    concerns: list[str] = []
    highlights: list[str] = []
    total_risk = 0
    total_positive = 0

    for rule in _matched(cfg.risk_phrases, content):
        total_risk += rule.weight
        buckets[rule.category].risk += rule.weight
        buckets[rule.category].findings.append(rule.description)
        concerns.append(rule.description)

    for rule in _matched(cfg.positive_phrases, content):
        total_positive += rule.weight
        buckets[rule.category].positive += rule.weight
        buckets[rule.category].findings.append(rule.description)
        highlights.append(rule.description)

    category_scores = {}
    for key, bucket in buckets.items():
        net = max(0.0, bucket.risk - bucket.positive / cfg.category_positive_divisor)
        category_scores[key] = CategoryAnalysis.build(
            key, min(100.0, net * cfg.category_multiplier), bucket.findings
        )
    categories = Categories(**category_scores)

    score = clamp_score(
        min(total_risk, cfg.risk_cap) - total_positive / cfg.positive_divisor
    )
    risk_level = risk_level_for_score(score)

    concerns = dedupe_and_cap(concerns, MAX_CONCERNS)
    highlights = dedupe_and_cap(highlights, MAX_HIGHLIGHTS)

    return AnalysisData(
        risk_level=risk_level,
        score=score,
        concerns=concerns,
        highlights=highlights,
        summary=build_summary(risk_level, len(concerns), len(highlights), categories),
        categories=categories,
        recommendations=build_recommendations(
            risk_level, categories, len(concerns), len(highlights)
        ),
        key_metrics=KeyMetrics(
            readability_score=readability_score(content),
            length_analysis=length_analysis(count_words(content)),
            last_updated=extract_last_updated(content),
            jurisdiction=extract_jurisdiction(content),
        ),
    )
