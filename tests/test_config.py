"""Unit tests for analyzer config loading."""

import json

import pytest
from pydantic import ValidationError

from terms_analyzer.analysis.config import (
    DEFAULT_POSITIVE_PHRASES,
    DEFAULT_RISK_PHRASES,
    AnalyzerConfig,
    PhraseRule,
    PipelineConfig,
    load_config,
)


class TestPipelineConfigDefaults:
    def test_default_values(self):
        p = PipelineConfig()
        assert p.single_shot_threshold == 8000
        assert p.chunk_size == 8000
        assert p.chunk_overlap == 500
        assert p.chunk_delay_seconds == 1.0
        assert p.request_timeout_seconds == 30
        assert p.temperature == 0.2

    def test_overlap_must_fit_half_window(self):
        with pytest.raises(ValidationError):
            PipelineConfig(chunk_size=1000, chunk_overlap=500)


class TestPhraseRule:
    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            PhraseRule(phrase="x", weight=5, category="taxes", description="d")

    def test_non_positive_weight_rejected(self):
        with pytest.raises(ValidationError):
            PhraseRule(phrase="x", weight=0, category="liability", description="d")

    def test_default_tables_cover_every_category(self):
        risk = {r.category for r in DEFAULT_RISK_PHRASES}
        positive = {r.category for r in DEFAULT_POSITIVE_PHRASES}
        assert len(risk) == 6
        assert len(positive) == 6


class TestLoadConfig:
    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.json")
        assert config == AnalyzerConfig()

    def test_partial_file_overrides(self, tmp_path):
        path = tmp_path / "analyzer.json"
        path.write_text(json.dumps({"pipeline": {"chunk_delay_seconds": 0}}))
        config = load_config(path)
        assert config.pipeline.chunk_delay_seconds == 0
        assert config.pipeline.chunk_size == 8000
        assert len(config.scoring.risk_phrases) == len(DEFAULT_RISK_PHRASES)

    def test_custom_phrase_table(self, tmp_path):
        path = tmp_path / "analyzer.json"
        path.write_text(json.dumps({
            "scoring": {
                "risk_phrases": [
                    {"phrase": "binding arbitration", "weight": 40,
                     "category": "dispute_resolution", "description": "Arbitration"}
                ],
                "positive_phrases": [],
            }
        }))
        config = load_config(path)
        assert [r.phrase for r in config.scoring.risk_phrases] == ["binding arbitration"]
        assert config.scoring.positive_phrases == []

    def test_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"pipeline": {"single_shot_threshold": 1234}}))
        monkeypatch.setenv("TERMS_ANALYZER_CONFIG", str(path))
        assert load_config().pipeline.single_shot_threshold == 1234
