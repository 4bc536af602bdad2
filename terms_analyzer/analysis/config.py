from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from terms_analyzer.analysis.models import CATEGORY_KEYS


class PhraseRule(BaseModel):
    """A weighted phrase scanned for by the rule-based scorer."""

    phrase: str
    weight: int = Field(gt=0)
    category: str
    description: str

    @model_validator(mode="after")
    def category_known(self) -> PhraseRule:
        if self.category not in CATEGORY_KEYS:
            raise ValueError(f"unknown category: {self.category}")
        return self


def _rule(phrase: str, weight: int, category: str, description: str) -> PhraseRule:
    return PhraseRule(phrase=phrase, weight=weight, category=category, description=description)


DEFAULT_RISK_PHRASES: list[PhraseRule] = [
    # data privacy
    _rule("sell personal data", 25, "data_privacy", "Personal data may be sold to third parties without explicit consent"),
    _rule("sold to third parties", 25, "data_privacy", "Personal data may be sold to third parties without explicit consent"),
    _rule("collect all your personal data", 20, "data_privacy", "Collects all of your personal data without meaningful limits"),
    _rule("share data with partners", 18, "data_privacy", "Data sharing with business partners may compromise privacy"),
    _rule("track across websites", 20, "data_privacy", "Cross-site tracking may violate privacy expectations"),
    _rule("no data deletion", 22, "data_privacy", "Users cannot request deletion of their personal data"),
    _rule("indefinite data retention", 19, "data_privacy", "Personal data may be retained indefinitely"),
    _rule("retain data indefinitely", 19, "data_privacy", "Personal data may be retained indefinitely"),
    # user rights
    _rule("no refund", 15, "user_rights", "No refund policy may leave users without recourse"),
    _rule("cannot transfer account", 12, "user_rights", "Account portability restrictions limit user freedom"),
    _rule("no data export", 16, "user_rights", "Users cannot export their data from the platform"),
    _rule("waive class action", 20, "user_rights", "Class action waivers limit collective legal recourse"),
    _rule("waive all rights to class action", 20, "user_rights", "Class action waivers limit collective legal recourse"),
    # liability
    _rule("unlimited liability", 35, "liability", "Unlimited liability clauses expose users to significant financial risk"),
    _rule("indemnify the company", 18, "liability", "Users must compensate company for legal costs and damages"),
    _rule("indemnify company", 18, "liability", "Users must compensate company for legal costs and damages"),
    _rule("no warranty", 12, "liability", "Service provided without warranties or guarantees"),
    _rule("disclaim all warranties", 12, "liability", "Service provided without warranties or guarantees"),
    _rule("exclude consequential damages", 15, "liability", "Company excludes liability for indirect damages"),
    # termination
    _rule("terminate without cause", 18, "termination", "Account can be terminated without specific reason"),
    _rule("immediate termination", 16, "termination", "Account termination without advance notice"),
    _rule("terminate your account immediately", 16, "termination", "Account termination without advance notice"),
    _rule("without notice", 14, "termination", "Actions may be taken without notifying you"),
    _rule("forfeit paid fees", 20, "termination", "Users may lose money paid for services upon termination"),
    _rule("forfeit all paid fees", 20, "termination", "Users may lose money paid for services upon termination"),
    # content ownership
    _rule("transfer content rights", 22, "content_ownership", "Users transfer ownership rights of their content"),
    _rule("transfer perpetual rights", 22, "content_ownership", "Users transfer ownership rights of their content"),
    _rule("perpetual license", 18, "content_ownership", "Company gains permanent rights to user content"),
    _rule("modify user content", 16, "content_ownership", "Company can alter user-generated content"),
    # dispute resolution
    _rule("mandatory arbitration", 17, "dispute_resolution", "Disputes must be resolved through arbitration, not courts"),
    _rule("company-chosen arbitration", 17, "dispute_resolution", "Disputes must be resolved through arbitration, not courts"),
    _rule("company chooses arbitrator", 20, "dispute_resolution", "Company selects the arbitrator, creating potential bias"),
    _rule("company selects the arbitrator", 20, "dispute_resolution", "Company selects the arbitrator, creating potential bias"),
    _rule("waive jury trial", 15, "dispute_resolution", "Users give up right to jury trial"),
]

DEFAULT_POSITIVE_PHRASES: list[PhraseRule] = [
    # data privacy
    _rule("gdpr compliant", 15, "data_privacy", "Complies with GDPR data protection standards"),
    _rule("comply with gdpr", 15, "data_privacy", "Complies with GDPR data protection standards"),
    _rule("data encryption", 12, "data_privacy", "Uses encryption to protect user data"),
    _rule("end-to-end encryption", 12, "data_privacy", "Uses encryption to protect user data"),
    _rule("right to deletion", 18, "data_privacy", "Users can request deletion of personal data"),
    _rule("right to data deletion", 18, "data_privacy", "Users can request deletion of personal data"),
    _rule("data portability", 16, "data_privacy", "Users can export their data"),
    _rule("minimal data collection", 14, "data_privacy", "Collects only necessary personal information"),
    _rule("minimal data necessary", 14, "data_privacy", "Collects only necessary personal information"),
    # user rights
    _rule("money back guarantee", 20, "user_rights", "Offers refunds or money-back guarantees"),
    _rule("account portability", 15, "user_rights", "Users can transfer their accounts"),
    _rule("transparent pricing", 10, "user_rights", "Clear and transparent pricing structure"),
    # liability
    _rule("limited liability cap", 12, "liability", "Liability is capped at reasonable amounts"),
    _rule("service level agreement", 14, "liability", "Provides service level commitments"),
    # termination
    _rule("advance notice", 16, "termination", "Provides advance notice before termination"),
    _rule("grace period", 14, "termination", "Offers grace period for account issues"),
    # content ownership
    _rule("retain content ownership", 18, "content_ownership", "Users retain ownership of their content"),
    _rule("retain full ownership", 18, "content_ownership", "Users retain ownership of their content"),
    _rule("revocable license", 15, "content_ownership", "License to user content can be revoked"),
    # dispute resolution
    _rule("neutral arbitration", 12, "dispute_resolution", "Uses neutral arbitration services"),
    _rule("court jurisdiction option", 16, "dispute_resolution", "Allows court proceedings as alternative"),
]


class ScoringConfig(BaseModel):
    """Phrase tables and score shaping for the rule-based scorer."""

    risk_phrases: list[PhraseRule] = Field(
        default_factory=lambda: list(DEFAULT_RISK_PHRASES)
    )
    positive_phrases: list[PhraseRule] = Field(
        default_factory=lambda: list(DEFAULT_POSITIVE_PHRASES)
    )
    risk_cap: int = 90
    positive_divisor: float = Field(default=3, gt=0)
    category_positive_divisor: float = Field(default=2, gt=0)
    category_multiplier: float = Field(default=2, gt=0)


class PipelineConfig(BaseModel):
    """Chunking, throttling and model-call settings."""

    single_shot_threshold: int = Field(default=8000, gt=0)
    chunk_size: int = Field(default=8000, gt=0)
    chunk_overlap: int = Field(default=500, ge=0)
    chunk_delay_seconds: float = Field(default=1.0, ge=0)
    request_timeout_seconds: float = Field(default=30, gt=0)
    temperature: float = Field(default=0.2, ge=0, le=1)
    single_max_tokens: int = Field(default=4000, gt=0)
    chunk_max_tokens: int = Field(default=2000, gt=0)
    min_content_length: int = 50
    max_content_length: int = 100_000

    @model_validator(mode="after")
    def overlap_fits_window(self) -> PipelineConfig:
        if self.chunk_overlap * 2 >= self.chunk_size:
            raise ValueError("chunk_overlap must be less than half of chunk_size")
        return self


class AnalyzerConfig(BaseModel):
    """Top-level config loaded from analyzer.json."""

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


def _default_path() -> Path:
    env = os.environ.get("TERMS_ANALYZER_CONFIG")
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent.parent / "config" / "analyzer.json"


def load_config(path: Optional[str | Path] = None) -> AnalyzerConfig:
    """Load analyzer config from a JSON file. Falls back to built-in defaults."""
    path = _default_path() if path is None else Path(path)

    if not path.exists():
        return AnalyzerConfig()

    with open(path) as f:
        raw = json.load(f)
    return AnalyzerConfig(**raw)
