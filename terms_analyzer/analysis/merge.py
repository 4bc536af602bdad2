from __future__ import annotations

from typing import Optional, Sequence

from terms_analyzer.analysis.models import (
    CATEGORY_KEYS,
    LOW_RISK_CEILING,
    MAX_CONCERNS,
    MAX_FINDINGS,
    MAX_HIGHLIGHTS,
    MAX_RECOMMENDATIONS,
    MEDIUM_RISK_CEILING,
    SEVERITY,
    AnalysisData,
    Categories,
    CategoryAnalysis,
    KeyMetrics,
    RiskLevel,
    clamp_score,
    dedupe_and_cap,
)
from terms_analyzer.analysis.rules import count_words, length_analysis

DEFAULT_MERGED_RECOMMENDATIONS = [
    "Review the complete document carefully",
    "Pay attention to sections with higher risk scores",
    "Consider the cumulative impact of all terms",
    "Keep a copy of the terms for your records",
]

# lowest score that still reads as the given level
LEVEL_FLOORS = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: LOW_RISK_CEILING + 1,
    RiskLevel.HIGH: MEDIUM_RISK_CEILING + 1,
}

CLOSING_REMARKS = {
    RiskLevel.HIGH: "Exercise significant caution before accepting these terms.",
    RiskLevel.MEDIUM: "Review carefully and consider the trade-offs.",
    RiskLevel.LOW: "Terms appear reasonable for most users.",
}


def most_severe(levels: Sequence[RiskLevel]) -> RiskLevel:
    """High if any level is high, else medium if any is medium, else low."""
    return max(levels, key=lambda level: SEVERITY[level], default=RiskLevel.LOW)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _merge_category(key: str, analyses: Sequence[AnalysisData]) -> CategoryAnalysis:
    present = [
        cat
        for cat in (getattr(a.categories, key, None) for a in analyses)
        if cat is not None
    ]
    if not present:
        return CategoryAnalysis.neutral(key)
    return CategoryAnalysis.build(
        key,
        _mean([cat.score for cat in present]),
        dedupe_and_cap((f for cat in present for f in cat.findings), MAX_FINDINGS),
    )


def _first_present(values: Sequence[Optional[str]]) -> Optional[str]:
    return next((v for v in values if v), None)


def _merged_summary(
    sections: int,
    characters: int,
    level: RiskLevel,
    concern_count: int,
    highlight_count: int,
) -> str:
    text = (
        f"This comprehensive document analysis processed {sections} sections totaling "
        f"{characters} characters. Overall risk level is {level} with {concern_count} "
        f"key concerns identified across multiple sections. "
    )
    if highlight_count:
        text += f"The document includes {highlight_count} positive user protections. "
    return text + CLOSING_REMARKS[level]


def merge_analyses(
    analyses: Sequence[AnalysisData], original_content: str
) -> AnalysisData:
    """Combine chunk-level (or per-source) analyses into one AnalysisData.

    The overall level is the most severe input level, so one high-risk
    section is never averaged away. The mean score is lifted to the floor of
    that level when needed so score and level stay consistent.
    ``original_content`` is the unchunked text (or all sources joined) and
    drives the length metric.
    """
    if not analyses:
        raise ValueError("merge_analyses requires at least one analysis")

    level = most_severe([a.risk_level for a in analyses])
    score = max(clamp_score(_mean([a.score for a in analyses])), LEVEL_FLOORS[level])

    concerns = dedupe_and_cap((c for a in analyses for c in a.concerns), MAX_CONCERNS)
    highlights = dedupe_and_cap(
        (h for a in analyses for h in a.highlights), MAX_HIGHLIGHTS
    )
    recommendations = dedupe_and_cap(
        (r for a in analyses for r in a.recommendations), MAX_RECOMMENDATIONS
    )
    if not recommendations:
        recommendations = list(DEFAULT_MERGED_RECOMMENDATIONS)

    categories = Categories(
        **{key: _merge_category(key, analyses) for key in CATEGORY_KEYS}
    )

    return AnalysisData(
        risk_level=level,
        score=score,
        concerns=concerns,
        highlights=highlights,
        summary=_merged_summary(
            len(analyses), len(original_content), level, len(concerns), len(highlights)
        ),
        categories=categories,
        recommendations=recommendations,
        key_metrics=KeyMetrics(
            readability_score=clamp_score(
                _mean([a.key_metrics.readability_score for a in analyses])
            ),
            length_analysis=length_analysis(count_words(original_content)),
            last_updated=_first_present([a.key_metrics.last_updated for a in analyses]),
            jurisdiction=_first_present([a.key_metrics.jurisdiction for a in analyses]),
        ),
    )
