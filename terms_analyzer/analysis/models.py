from __future__ import annotations

from enum import StrEnum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_CONCERNS = 8
MAX_HIGHLIGHTS = 5
MAX_FINDINGS = 3
MAX_RECOMMENDATIONS = 5

LOW_RISK_CEILING = 30
MEDIUM_RISK_CEILING = 60


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SEVERITY = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}

CATEGORY_KEYS = (
    "data_privacy",
    "user_rights",
    "liability",
    "termination",
    "content_ownership",
    "dispute_resolution",
)

CATEGORY_EXPLANATIONS: dict[str, str] = {
    "data_privacy": "Analyzes how your personal information is collected, used, and protected",
    "user_rights": "Examines your rights as a user, including refunds, account control, and legal recourse",
    "liability": "Reviews who is responsible for damages and what protections exist",
    "termination": "Covers how and when your account can be terminated",
    "content_ownership": "Determines who owns the content you create or upload",
    "dispute_resolution": "Outlines how conflicts between you and the service are resolved",
}

CATEGORY_LABELS: dict[str, str] = {
    "data_privacy": "data privacy",
    "user_rights": "user rights",
    "liability": "liability",
    "termination": "termination",
    "content_ownership": "content ownership",
    "dispute_resolution": "dispute resolution",
}


def clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def risk_level_for_score(score: float) -> RiskLevel:
    """Map a 0-100 score onto the fixed low/medium/high thresholds."""
    if score <= LOW_RISK_CEILING:
        return RiskLevel.LOW
    if score <= MEDIUM_RISK_CEILING:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def dedupe_and_cap(items: Iterable[str], limit: int) -> list[str]:
    """Drop repeats (first occurrence wins) and keep at most ``limit`` items."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
        if len(result) >= limit:
            break
    return result


def _check_unique(values: list[str], name: str) -> list[str]:
    if len(set(values)) != len(values):
        raise ValueError(f"{name} must not contain duplicates")
    return values


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class CategoryAnalysis(_Frozen):
    """Score, level and findings for one of the six fixed categories."""

    score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    findings: list[str] = Field(default_factory=list, max_length=MAX_FINDINGS)
    explanation: str = ""

    @field_validator("findings")
    @classmethod
    def findings_unique(cls, v: list[str]) -> list[str]:
        return _check_unique(v, "findings")

    @model_validator(mode="after")
    def level_matches_score(self) -> CategoryAnalysis:
        if self.risk_level != risk_level_for_score(self.score):
            raise ValueError(
                f"risk level {self.risk_level} inconsistent with score {self.score}"
            )
        return self

    @classmethod
    def build(cls, key: str, score: float, findings: Iterable[str] = ()) -> CategoryAnalysis:
        final = clamp_score(score)
        return cls(
            score=final,
            risk_level=risk_level_for_score(final),
            findings=dedupe_and_cap(findings, MAX_FINDINGS),
            explanation=CATEGORY_EXPLANATIONS[key],
        )

    @classmethod
    def neutral(cls, key: str) -> CategoryAnalysis:
        return cls.build(key, 50)


class Categories(_Frozen):
    data_privacy: CategoryAnalysis
    user_rights: CategoryAnalysis
    liability: CategoryAnalysis
    termination: CategoryAnalysis
    content_ownership: CategoryAnalysis
    dispute_resolution: CategoryAnalysis

    @model_validator(mode="after")
    def explanations_from_table(self) -> Categories:
        for key in CATEGORY_KEYS:
            if getattr(self, key).explanation != CATEGORY_EXPLANATIONS[key]:
                raise ValueError(f"{key} explanation must come from the lookup table")
        return self

    def items(self) -> list[tuple[str, CategoryAnalysis]]:
        return [(key, getattr(self, key)) for key in CATEGORY_KEYS]


class KeyMetrics(_Frozen):
    readability_score: int = Field(ge=0, le=100)
    length_analysis: str
    last_updated: Optional[str] = None
    jurisdiction: Optional[str] = None


class AnalysisData(_Frozen):
    """Structured risk assessment of one document (or a merge of several)."""

    risk_level: RiskLevel
    score: int = Field(ge=0, le=100)
    concerns: list[str] = Field(default_factory=list, max_length=MAX_CONCERNS)
    highlights: list[str] = Field(default_factory=list, max_length=MAX_HIGHLIGHTS)
    summary: str
    categories: Categories
    recommendations: list[str] = Field(
        default_factory=list, max_length=MAX_RECOMMENDATIONS
    )
    key_metrics: KeyMetrics

    @field_validator("concerns", "highlights", "recommendations")
    @classmethod
    def lists_unique(cls, v: list[str]) -> list[str]:
        return _check_unique(v, "list field")

    @model_validator(mode="after")
    def level_matches_score(self) -> AnalysisData:
        if self.risk_level != risk_level_for_score(self.score):
            raise ValueError(
                f"risk level {self.risk_level} inconsistent with score {self.score}"
            )
        return self
