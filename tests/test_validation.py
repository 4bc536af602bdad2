"""Unit tests for shaping model output into AnalysisData."""

import pytest

from terms_analyzer.analysis.errors import AnalysisValidationError
from terms_analyzer.analysis.models import CATEGORY_EXPLANATIONS, RiskLevel
from terms_analyzer.analysis.validation import (
    DEFAULT_LENGTH_ANALYSIS,
    DEFAULT_READABILITY,
    DEFAULT_RECOMMENDATIONS,
    DEFAULT_SUMMARY,
    ValidationFailed,
    ValidationOk,
    coerce_analysis,
    validate_analysis,
)

FULL_PAYLOAD = {
    "riskLevel": "high",
    "score": 78,
    "concerns": ["Data is sold", "Unlimited liability"],
    "highlights": ["GDPR compliant"],
    "summary": "A risky document.",
    "categories": {
        "dataPrivacy": {"score": 85, "riskLevel": "high", "findings": ["Sells data"]},
        "userRights": {"score": 40, "riskLevel": "medium", "findings": []},
        "liability": {"score": 90, "riskLevel": "high", "findings": ["Unlimited"]},
        "termination": {"score": 20, "riskLevel": "low", "findings": []},
        "contentOwnership": {"score": 50, "riskLevel": "medium", "findings": []},
        "disputeResolution": {"score": 65, "riskLevel": "high", "findings": ["Arbitration"]},
    },
    "recommendations": ["Seek legal advice"],
    "keyMetrics": {
        "readabilityScore": 35,
        "lengthAnalysis": "Long document",
        "lastUpdated": "January 2024",
        "jurisdiction": "Delaware",
    },
}


# ---------------------------------------------------------------------------
# Complete payloads
# ---------------------------------------------------------------------------


class TestCompletePayload:
    def test_fields_carried_over(self):
        analysis = coerce_analysis(FULL_PAYLOAD)
        assert analysis.score == 78
        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.concerns == ["Data is sold", "Unlimited liability"]
        assert analysis.categories.data_privacy.findings == ["Sells data"]
        assert analysis.key_metrics.jurisdiction == "Delaware"
        assert analysis.key_metrics.readability_score == 35

    def test_snake_case_keys_accepted(self):
        analysis = coerce_analysis({
            "score": 20,
            "categories": {"data_privacy": {"score": 70}},
            "key_metrics": {"readability_score": 80},
        })
        assert analysis.categories.data_privacy.score == 70
        assert analysis.key_metrics.readability_score == 80

    def test_explanations_come_from_table(self):
        payload = dict(FULL_PAYLOAD)
        payload["categories"] = {
            "liability": {"score": 10, "explanation": "Model wrote this"}
        }
        analysis = coerce_analysis(payload)
        assert analysis.categories.liability.explanation == CATEGORY_EXPLANATIONS["liability"]


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_empty_object(self):
        analysis = coerce_analysis({})
        assert analysis.score == 50
        assert analysis.risk_level == RiskLevel.MEDIUM
        assert analysis.concerns == []
        assert analysis.summary == DEFAULT_SUMMARY
        assert analysis.recommendations == DEFAULT_RECOMMENDATIONS
        assert analysis.key_metrics.readability_score == DEFAULT_READABILITY
        assert analysis.key_metrics.length_analysis == DEFAULT_LENGTH_ANALYSIS
        for _, cat in analysis.categories.items():
            assert cat.score == 50
            assert cat.risk_level == RiskLevel.MEDIUM
            assert cat.findings == []

    def test_missing_category_filled_neutral(self):
        payload = dict(FULL_PAYLOAD)
        payload["categories"] = {"liability": {"score": 90}}
        analysis = coerce_analysis(payload)
        assert analysis.categories.liability.score == 90
        assert analysis.categories.termination.score == 50

    @pytest.mark.parametrize(
        "level,score", [("low", 15), ("medium", 45), ("HIGH", 80)]
    )
    def test_score_from_level_when_missing(self, level, score):
        analysis = coerce_analysis({"riskLevel": level})
        assert analysis.score == score

    def test_null_like_strings_become_none(self):
        analysis = coerce_analysis(
            {"keyMetrics": {"lastUpdated": "null", "jurisdiction": "Not specified"}}
        )
        assert analysis.key_metrics.last_updated is None
        assert analysis.key_metrics.jurisdiction == "Not specified"

    def test_explicit_empty_recommendations_kept(self):
        assert coerce_analysis({"recommendations": []}).recommendations == []


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


class TestCoercion:
    def test_level_rederived_from_score(self):
        analysis = coerce_analysis({"score": 10, "riskLevel": "high"})
        assert analysis.risk_level == RiskLevel.LOW

    def test_score_clamped(self):
        assert coerce_analysis({"score": 150}).score == 100
        assert coerce_analysis({"score": -5}).score == 0

    def test_numeric_string_score(self):
        analysis = coerce_analysis({"score": "72%"})
        assert analysis.score == 72
        assert analysis.risk_level == RiskLevel.HIGH

    @pytest.mark.parametrize("bad", [True, "lots", None, [1], float("nan")])
    def test_unusable_score_defaults(self, bad):
        assert coerce_analysis({"score": bad}).score == 50

    def test_score_too_large_for_float_defaults(self):
        huge = int("1" + "0" * 400)
        assert coerce_analysis({"score": huge}).score == 50
        assert coerce_analysis({"score": huge, "riskLevel": "high"}).score == 80

    def test_huge_category_score_neutral(self):
        analysis = coerce_analysis({"categories": {"liability": {"score": 10**400}}})
        assert analysis.categories.liability.score == 50

    def test_lists_deduped_and_capped(self):
        concerns = [f"c{i}" for i in range(12)] + ["c0"]
        analysis = coerce_analysis({
            "concerns": concerns,
            "highlights": ["h", "h", 3, "", "  x  "],
            "categories": {"termination": {"score": 40, "findings": ["a", "b", "a", "c", "d"]}},
        })
        assert analysis.concerns == [f"c{i}" for i in range(8)]
        assert analysis.highlights == ["h", "x"]
        assert analysis.categories.termination.findings == ["a", "b", "c"]

    def test_non_list_concerns_dropped(self):
        assert coerce_analysis({"concerns": "one big string"}).concerns == []

    def test_non_dict_category_neutral(self):
        analysis = coerce_analysis({"categories": {"liability": "high"}})
        assert analysis.categories.liability.score == 50


# ---------------------------------------------------------------------------
# Tagged result
# ---------------------------------------------------------------------------


class TestValidateAnalysis:
    def test_ok(self):
        result = validate_analysis(FULL_PAYLOAD)
        assert isinstance(result, ValidationOk)
        assert result.kind == "ok"
        assert result.analysis.score == 78

    @pytest.mark.parametrize("raw", [None, [1, 2], "text", 42])
    def test_failed_for_non_objects(self, raw):
        result = validate_analysis(raw)
        assert isinstance(result, ValidationFailed)
        assert result.kind == "failed"
        assert "Expected a JSON object" in result.error

    def test_coerce_raises_for_non_objects(self):
        with pytest.raises(AnalysisValidationError):
            coerce_analysis([])
