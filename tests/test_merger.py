"""Tests for sample-weighted profile merging."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from notestyle.style.analyzer import analyze
from notestyle.style.merger import blend_weights, merge
from notestyle.style.profile import (
    StyleAnalysis,
    StyleMetrics,
    StyleProfile,
    StyleTags,
    TrainingStats,
    default_profile,
)
from tests.conftest import FIXED_NOW

LATER = FIXED_NOW + timedelta(hours=1)


def _analysis(n: int, confidence: int = 0, tokens: int = 0, **metrics) -> StyleAnalysis:
    return StyleAnalysis(
        training=TrainingStats(
            confidence=confidence,
            samples_analyzed=n,
            total_tokens=tokens,
            last_trained_at=LATER,
        ),
        metrics=StyleMetrics(**metrics),
        style_tags=StyleTags(tone="casual", structure="bullets", verbosity="short"),
    )


def _profile(n: int, confidence: int = 0, tokens: int = 0, **metrics) -> StyleProfile:
    profile = default_profile(FIXED_NOW)
    profile.training = TrainingStats(
        confidence=confidence,
        samples_analyzed=n,
        total_tokens=tokens,
        last_trained_at=FIXED_NOW,
    )
    profile.metrics = StyleMetrics(**metrics)
    return profile


def test_blend_weights() -> None:
    """Test weights for normal and empty sample counts."""
    assert blend_weights(9, 1) == (0.9, 0.1)
    assert blend_weights(0, 4) == (0.0, 1.0)
    assert blend_weights(0, 0) == (0.0, 1.0)


def test_merge_into_nothing_copies_analysis() -> None:
    """Test that merging into no profile takes the analysis metrics exactly."""
    analysis = analyze(["Hello there. A second sentence!", "- one\n- two"], now=LATER)
    merged = merge(None, analysis, now=LATER)

    assert merged.metrics == analysis.metrics
    assert merged.style_tags == analysis.style_tags
    assert merged.training.samples_analyzed == 2
    assert merged.training.total_tokens == analysis.training.total_tokens
    assert merged.training.confidence == analysis.training.confidence
    assert merged.training.last_trained_at == LATER
    assert merged.created_at == LATER
    assert merged.updated_at == LATER


def test_merge_with_no_samples_anywhere() -> None:
    """Test that zero samples on both sides lets the new analysis decide."""
    analysis = analyze([], now=LATER)
    merged = merge(default_profile(FIXED_NOW), analysis, now=LATER)
    assert merged.metrics == analysis.metrics
    assert merged.training.samples_analyzed == 0


def test_merge_counters_are_summed() -> None:
    """Test that sample and token counters add up."""
    profile = _profile(4, confidence=40, tokens=400)
    analysis = _analysis(3, confidence=10, tokens=120)

    merged = merge(profile, analysis, now=LATER)

    assert merged.training.samples_analyzed == 7
    assert merged.training.total_tokens == 520


def test_merge_weights_by_sample_count() -> None:
    """Test that nine old samples and one new one blend at 90/10."""
    profile = _profile(9, confidence=50, avg_words_per_sentence=10.0, formality_score=40.0)
    analysis = _analysis(1, confidence=100, avg_words_per_sentence=20.0, formality_score=90.0)

    merged = merge(profile, analysis, now=LATER)

    assert merged.metrics.avg_words_per_sentence == pytest.approx(11.0)
    assert merged.metrics.formality_score == pytest.approx(45.0)
    assert merged.training.confidence == 55


def test_repeated_merges_weight_by_count() -> None:
    """Test that a second identical merge counts its samples, not its turn."""
    first = _analysis(1, avg_words_per_sentence=10.0)
    second = _analysis(3, avg_words_per_sentence=30.0)

    merged = merge(merge(None, first, now=LATER), second, now=LATER)

    assert merged.metrics.avg_words_per_sentence == pytest.approx(25.0)
    assert merged.training.samples_analyzed == 4


def test_confidence_rounds_half_up() -> None:
    """Test that blended confidence rounds halves up."""
    merged = merge(_profile(1, confidence=10), _analysis(1, confidence=21), now=LATER)
    assert merged.training.confidence == 16


def test_scores_stay_in_range_under_uneven_weights() -> None:
    """Test that blended scores never leave 0-100."""
    profile = _profile(1, formality_score=100.0, brevity_score=100.0)
    analysis = _analysis(2, formality_score=100.0, brevity_score=100.0)

    merged = merge(profile, analysis, now=LATER)

    assert 0 <= merged.metrics.formality_score <= 100
    assert merged.metrics.formality_score == pytest.approx(100.0)


def test_tags_come_from_new_analysis() -> None:
    """Test that tags are taken from the newest analysis."""
    profile = _profile(10)
    profile.style_tags = StyleTags(tone="formal", structure="paragraphs", verbosity="long")

    merged = merge(profile, _analysis(1), now=LATER)

    assert merged.style_tags == StyleTags(tone="casual", structure="bullets", verbosity="short")


def test_last_trained_falls_back_to_previous() -> None:
    """Test that a missing timestamp keeps the previous one."""
    analysis = _analysis(1)
    analysis.training.last_trained_at = None

    merged = merge(_profile(2), analysis, now=LATER)

    assert merged.training.last_trained_at == FIXED_NOW


def test_last_trained_falls_back_to_now() -> None:
    """Test that a missing timestamp with no history uses now."""
    analysis = _analysis(1)
    analysis.training.last_trained_at = None

    merged = merge(None, analysis, now=LATER)

    assert merged.training.last_trained_at == LATER


def test_passthrough_fields_survive() -> None:
    """Test that overrides and settings pass through merging."""
    profile = _profile(2)
    profile.user_overrides.tone = "formal"
    profile.user_overrides.preferred_phrases = ["in short"]
    profile.settings.privacy_mode = True

    merged = merge(profile, _analysis(1), now=LATER)

    assert merged.user_overrides == profile.user_overrides
    assert merged.settings == profile.settings
    assert merged.schema_version == profile.schema_version
    assert merged.created_at == FIXED_NOW
    assert merged.updated_at == LATER


def test_merge_does_not_mutate_inputs() -> None:
    """Test that merging leaves both inputs untouched."""
    profile = _profile(5, confidence=30, tokens=100, avg_words_per_sentence=9.0)
    analysis = _analysis(5, confidence=70, tokens=500, avg_words_per_sentence=19.0)
    profile_before = profile.model_copy(deep=True)
    analysis_before = analysis.model_copy(deep=True)

    merged = merge(profile, analysis, now=LATER)
    merged.user_overrides.avoided_phrases.append("synergy")

    assert profile == profile_before
    assert analysis == analysis_before


def test_merged_profile_round_trips_through_json() -> None:
    """Test that a merged profile survives a JSON round trip."""
    merged = merge(
        merge(None, analyze(["First batch of words. Quite plain."], now=FIXED_NOW)),
        analyze(["Second batch!! \U0001f389", "- listed\n- items"], now=LATER),
        now=LATER,
    )

    assert StyleProfile.model_validate_json(merged.to_json()) == merged

    as_dict = merged.to_json_dict()
    assert json.loads(json.dumps(as_dict)) == as_dict
    assert StyleProfile.model_validate(json.loads(json.dumps(as_dict))) == merged
