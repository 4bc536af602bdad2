from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from terms_analyzer.analysis.models import AnalysisData, RiskLevel


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ExtractedDocument(_CamelModel):
    """A legal document found on a page, with its text already extracted."""

    url: str
    category: str = "legal"
    confidence: float = Field(default=0, ge=0, le=100)
    text: str = ""


class InlineContent(_CamelModel):
    cookie_banners: list[str] = Field(default_factory=list)
    privacy_notices: list[str] = Field(default_factory=list)
    terms_snippets: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.cookie_banners or self.privacy_notices or self.terms_snippets)


class ExtensionAnalysisRequest(_CamelModel):
    """Extraction payload sent by the browser extension for one site."""

    domain: str = Field(min_length=1)
    prioritized_documents: list[ExtractedDocument] = Field(default_factory=list)
    inline_content: InlineContent = Field(default_factory=InlineContent)
    user_agent: Optional[str] = None

    @field_validator("domain")
    @classmethod
    def domain_not_blank(cls, v: str) -> str:
        if v.strip() == "":
            raise ValueError("domain must not be blank")
        return v.strip().lower()


class SourceAnalysis(_CamelModel):
    """One analyzed source (a document or the combined inline content)."""

    label: str
    source_type: Literal["document", "inline"]
    content_length: int
    processing_method: str
    analysis: AnalysisData


class ExtensionSummary(_CamelModel):
    total_documents: int
    has_inline_content: bool
    analysis_depth: int
    category_risks: dict[str, list[RiskLevel]] = Field(default_factory=dict)


class ExtensionAnalysisResponse(_CamelModel):
    domain: str
    risk_level: Union[RiskLevel, Literal["unknown"]]
    score: int
    message: str
    analysis: Optional[AnalysisData] = None
    sources: list[SourceAnalysis] = Field(default_factory=list)
    summary: ExtensionSummary
