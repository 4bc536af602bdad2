"""Unit tests for the rule-based scorer."""

import logging

import pytest

from terms_analyzer.analysis.config import PhraseRule, ScoringConfig
from terms_analyzer.analysis.models import RiskLevel
from terms_analyzer.analysis.rules import (
    count_words,
    extract_jurisdiction,
    extract_last_updated,
    length_analysis,
    readability_score,
    score_content,
)

HIGH_RISK = (
    "We collect all your personal data and it may be sold to third parties. "
    "You accept unlimited liability and must indemnify the company for any claims. "
    "You waive all rights to class action. "
    "We may terminate your account immediately without notice."
)

LOW_RISK = (
    "We collect minimal data necessary to run the service and comply with GDPR. "
    "Every plan has a 60-day money back guarantee. "
    "You retain full ownership of everything you upload."
)

NEUTRAL = "These terms describe how to use the website. Please read them."


# ---------------------------------------------------------------------------
# Overall scoring
# ---------------------------------------------------------------------------


class TestHighRiskDocument:
    def test_overall_high(self):
        result = score_content(HIGH_RISK)
        assert result.risk_level == RiskLevel.HIGH
        assert result.score > 60

    def test_risk_total_is_capped(self):
        # matched weights sum well above the cap, no positives
        assert score_content(HIGH_RISK).score == 90

    def test_concerns_listed(self):
        result = score_content(HIGH_RISK)
        assert result.concerns
        assert "Unlimited liability clauses expose users to significant financial risk" in result.concerns

    def test_categories_flagged_high(self):
        cats = score_content(HIGH_RISK).categories
        assert cats.data_privacy.risk_level == RiskLevel.HIGH
        assert cats.liability.risk_level == RiskLevel.HIGH
        assert cats.termination.risk_level == RiskLevel.MEDIUM

    def test_high_risk_recommendations(self):
        recs = score_content(HIGH_RISK).recommendations
        assert recs[0] == "Consider seeking legal advice before accepting these terms"
        assert len(recs) <= 5

    def test_summary_mentions_critical_areas(self):
        summary = score_content(HIGH_RISK).summary
        assert "significant risks" in summary
        assert "data privacy" in summary


class TestLowRiskDocument:
    def test_overall_low(self):
        result = score_content(LOW_RISK)
        assert result.risk_level == RiskLevel.LOW
        assert result.score <= 30

    def test_highlights_listed(self):
        result = score_content(LOW_RISK)
        assert "Complies with GDPR data protection standards" in result.highlights
        assert "Offers refunds or money-back guarantees" in result.highlights
        assert result.concerns == []

    def test_positive_findings_attached_to_category(self):
        cats = score_content(LOW_RISK).categories
        assert cats.content_ownership.score == 0
        assert "Users retain ownership of their content" in cats.content_ownership.findings

    def test_default_recommendations(self):
        recs = score_content(LOW_RISK).recommendations
        assert "Note the positive user protections included" in recs


class TestNeutralDocument:
    def test_no_matches_scores_zero(self):
        result = score_content(NEUTRAL)
        assert result.score == 0
        assert result.concerns == []
        assert result.highlights == []

    def test_empty_content(self):
        result = score_content("")
        assert result.score == 0
        assert result.key_metrics.length_analysis.startswith("Very Short")


# ---------------------------------------------------------------------------
# Matching behaviour
# ---------------------------------------------------------------------------


class TestPhraseMatching:
    def test_case_insensitive(self):
        result = score_content("YOU ACCEPT UNLIMITED LIABILITY.")
        assert result.categories.liability.score > 0

    def test_whitespace_runs_between_words(self):
        result = score_content("You accept unlimited\n    liability.")
        assert result.categories.liability.score > 0

    def test_whole_words_only(self):
        result = score_content("The unlimited liabilityish clause.")
        assert result.categories.liability.score == 0

    def test_repeated_phrase_counted_once(self):
        once = score_content("unlimited liability")
        twice = score_content("unlimited liability. unlimited liability.")
        assert once.score == twice.score
        assert once.concerns == twice.concerns

    def test_category_score_offsets_positives(self):
        cfg = ScoringConfig(
            risk_phrases=[PhraseRule(phrase="risky", weight=30, category="liability", description="r")],
            positive_phrases=[PhraseRule(phrase="safe", weight=20, category="liability", description="s")],
        )
        result = score_content("risky and safe", config=cfg)
        # (30 - 20/2) * 2
        assert result.categories.liability.score == 40
        # 30 - 20/3
        assert result.score == 23

    def test_deterministic(self):
        assert score_content(HIGH_RISK) == score_content(HIGH_RISK)

    def test_reason_logged_not_used(self, caplog):
        with caplog.at_level(logging.WARNING, logger="terms_analyzer.analysis.rules"):
            with_reason = score_content(HIGH_RISK, reason="API key missing")
        assert with_reason == score_content(HIGH_RISK)
        assert "API key missing" in caplog.text


# ---------------------------------------------------------------------------
# Key metrics
# ---------------------------------------------------------------------------


class TestKeyMetrics:
    def test_count_words(self):
        assert count_words("  one two\nthree\tfour ") == 4

    def test_short_sentences_read_well(self):
        assert readability_score("One two three.") == 100

    def test_long_sentences_read_poorly(self):
        sentence = " ".join(["word"] * 45) + "."
        assert readability_score(sentence) == 40

    @pytest.mark.parametrize(
        "words,prefix",
        [
            (10, "Very Short"),
            (500, "Short"),
            (1500, "Medium"),
            (3000, "Long"),
            (5000, "Very Long"),
        ],
    )
    def test_length_buckets(self, words, prefix):
        assert length_analysis(words).startswith(prefix)

    def test_last_updated(self):
        assert extract_last_updated("Last Updated: January 15, 2024\nTerms") == "January 15, 2024"

    def test_effective_date(self):
        assert extract_last_updated("Effective date March 1 2023. Terms") == "March 1 2023"

    def test_last_updated_missing(self):
        assert extract_last_updated(NEUTRAL) is None

    def test_jurisdiction(self):
        text = "These terms are governed by the laws of California, United States."
        assert extract_jurisdiction(text) == "California"

    def test_jurisdiction_courts(self):
        assert extract_jurisdiction("Disputes go to the courts of England.") == "England"

    def test_metrics_in_result(self):
        text = "Last updated: May 2024\n" + HIGH_RISK
        metrics = score_content(text).key_metrics
        assert metrics.last_updated == "May 2024"
        assert metrics.jurisdiction is None
        assert 0 <= metrics.readability_score <= 100
