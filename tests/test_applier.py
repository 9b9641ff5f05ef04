"""Tests for rendering a profile into style instructions."""

from __future__ import annotations

from notestyle.style.applier import StyleApplier, synthesize
from notestyle.style.profile import StyleTags, default_profile
from tests.conftest import FIXED_NOW

DEFAULT_PROMPT = (
    "You are writing in the user's personal style.\n"
    "Tone: neutral.\n"
    "Structure: mixed.\n"
    "Verbosity: medium.\n"
    "Avg words per sentence: 14.\n"
    "Formality score: 50/100.\n"
    "Brevity score: 50/100."
)


def test_default_profile_prompt() -> None:
    """Test the exact rendering of a fresh profile."""
    assert synthesize(default_profile(FIXED_NOW)) == DEFAULT_PROMPT


def test_prompt_is_deterministic() -> None:
    """Test that equal profiles render identical prompts."""
    profile = default_profile(FIXED_NOW)
    profile.user_overrides.preferred_phrases = ["honestly", "in short"]
    assert synthesize(profile) == synthesize(profile.model_copy(deep=True))


def test_tone_override_changes_only_tone_line() -> None:
    """Test that pinning the tone changes only the tone line."""
    profile = default_profile(FIXED_NOW)
    before = synthesize(profile).split("\n")

    profile.user_overrides.tone = "casual"
    after = synthesize(profile).split("\n")

    changed = [i for i, (a, b) in enumerate(zip(before, after)) if a != b]
    assert changed == [1]
    assert after[1] == "Tone: casual."
    assert len(before) == len(after)


def test_overrides_win_over_derived_tags() -> None:
    """Test that an override replaces only its own derived tag."""
    profile = default_profile(FIXED_NOW)
    profile.style_tags = StyleTags(tone="formal", structure="paragraphs", verbosity="long")
    profile.user_overrides.structure = "bullets"

    lines = synthesize(profile).split("\n")

    assert lines[1] == "Tone: formal."
    assert lines[2] == "Structure: bullets."
    assert lines[3] == "Verbosity: long."


def test_metrics_are_rounded_half_up() -> None:
    """Test that rendered metrics round halves up."""
    profile = default_profile(FIXED_NOW)
    profile.metrics.avg_words_per_sentence = 12.5
    profile.metrics.formality_score = 71.49
    profile.metrics.brevity_score = 33.5

    lines = synthesize(profile).split("\n")

    assert lines[4] == "Avg words per sentence: 13."
    assert lines[5] == "Formality score: 71/100."
    assert lines[6] == "Brevity score: 34/100."


def test_zero_scores_fall_back() -> None:
    """Test that a zero metric renders its fallback, as stored prompts always have."""
    profile = default_profile(FIXED_NOW)
    profile.metrics.formality_score = 0
    assert "Formality score: 50/100." in synthesize(profile)


def test_phrase_lines_capped_at_eight() -> None:
    """Test that phrase lines list at most eight phrases."""
    profile = default_profile(FIXED_NOW)
    profile.user_overrides.preferred_phrases = [f"p{i}" for i in range(10)]
    profile.user_overrides.avoided_phrases = ["synergy"]

    lines = synthesize(profile).split("\n")

    assert lines[7] == "Prefer phrases: p0, p1, p2, p3, p4, p5, p6, p7."
    assert lines[8] == "Avoid phrases: synergy."
    assert len(lines) == 9
    assert not synthesize(profile).endswith("\n")


def test_empty_phrase_lists_add_no_lines() -> None:
    """Test that empty phrase lists add no prompt lines."""
    assert len(synthesize(default_profile(FIXED_NOW)).split("\n")) == 7


def test_style_applier_default_temperature() -> None:
    """Test temperature suggestion for default profile."""
    assert StyleApplier().suggest_temperature(default_profile(FIXED_NOW)) == 0.7


def test_style_applier_formal_temperature() -> None:
    """Test temperature suggestion for formal style."""
    profile = default_profile(FIXED_NOW)
    profile.style_tags.tone = "formal"
    assert StyleApplier().suggest_temperature(profile) == 0.5


def test_style_applier_override_temperature() -> None:
    """Test that a pinned tone decides the temperature."""
    profile = default_profile(FIXED_NOW)
    profile.style_tags.tone = "formal"
    profile.user_overrides.tone = "casual"
    assert StyleApplier().suggest_temperature(profile) == 0.8


def test_build_style_instruction_is_synthesize() -> None:
    """Test that StyleApplier renders the same block as synthesize."""
    profile = default_profile(FIXED_NOW)
    assert StyleApplier().build_style_instruction(profile) == DEFAULT_PROMPT
