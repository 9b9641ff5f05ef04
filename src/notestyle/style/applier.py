"""Apply a learned style profile to text-generation requests."""

from __future__ import annotations

from notestyle.style.analyzer import round_half_up
from notestyle.style.profile import StyleProfile

PREAMBLE = "You are writing in the user's personal style."
MAX_PHRASES = 8


def synthesize(profile: StyleProfile) -> str:
    """Render the profile as an instruction block for a generation call.

    Overrides win over derived tags. Phrase lines appear only when the
    user has listed phrases, at most eight each.
    """
    overrides = profile.user_overrides
    tags = profile.style_tags
    metrics = profile.metrics

    tone = overrides.tone or tags.tone or "neutral"
    structure = overrides.structure or tags.structure or "mixed"
    verbosity = overrides.verbosity or tags.verbosity or "medium"

    lines = [
        PREAMBLE,
        f"Tone: {tone}.",
        f"Structure: {structure}.",
        f"Verbosity: {verbosity}.",
        f"Avg words per sentence: {round_half_up(metrics.avg_words_per_sentence or 14)}.",
        f"Formality score: {round_half_up(metrics.formality_score or 50)}/100.",
        f"Brevity score: {round_half_up(metrics.brevity_score or 50)}/100.",
    ]
    if overrides.preferred_phrases:
        lines.append(f"Prefer phrases: {', '.join(overrides.preferred_phrases[:MAX_PHRASES])}.")
    if overrides.avoided_phrases:
        lines.append(f"Avoid phrases: {', '.join(overrides.avoided_phrases[:MAX_PHRASES])}.")
    return "\n".join(lines)


class StyleApplier:
    """Takes a StyleProfile and derives generation parameters."""

    def build_style_instruction(self, profile: StyleProfile) -> str:
        """Build a style instruction block for injection into system prompts."""
        return synthesize(profile)

    def suggest_temperature(self, profile: StyleProfile) -> float:
        """Suggest a generation temperature based on the effective tone.

        Formal writing gets a lower temperature, casual writing a higher one.
        """
        tone = profile.user_overrides.tone or profile.style_tags.tone
        if tone == "formal":
            return 0.5
        if tone == "casual":
            return 0.8
        return 0.7
