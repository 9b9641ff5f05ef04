"""Fold a fresh analysis into a stored profile by sample-weighted averaging."""

from __future__ import annotations

from datetime import datetime

from notestyle.style.analyzer import clamp, round_half_up
from notestyle.style.profile import (
    StyleAnalysis,
    StyleMetrics,
    StyleProfile,
    TrainingStats,
    default_profile,
    utcnow,
)


_SCORES = ("formality_score", "brevity_score")


def blend_weights(prev_n: int, new_n: int) -> tuple[float, float]:
    """Return (w_prev, w_new). With no samples on either side the new one wins."""
    total = prev_n + new_n
    if total == 0:
        return 0.0, 1.0
    return prev_n / total, new_n / total


def merge(
    existing: StyleProfile | None,
    analysis: StyleAnalysis,
    *,
    now: datetime | None = None,
) -> StyleProfile:
    """Return a new profile combining ``existing`` with ``analysis``.

    Metrics and confidence are blended in proportion to the samples each
    side was built from. Sample and token counters are summed. Tags are
    taken from the analysis. Overrides, settings, schema version and
    creation time pass through. Neither input is modified.
    """
    now = now or utcnow()
    base = existing if existing is not None else default_profile(now)

    prev_n = base.training.samples_analyzed
    new_n = analysis.training.samples_analyzed
    w_prev, w_new = blend_weights(prev_n, new_n)

    prev_metrics = base.metrics.model_dump()
    new_metrics = analysis.metrics.model_dump()
    blended = {
        name: max(0.0, prev_metrics[name] * w_prev + new_metrics[name] * w_new)
        for name in StyleMetrics.model_fields
    }
    # Weights can sum to a hair over 1.0
    for name in _SCORES:
        blended[name] = clamp(blended[name], 0, 100)
    metrics = StyleMetrics(**blended)

    confidence = round_half_up(
        base.training.confidence * w_prev + analysis.training.confidence * w_new
    )
    training = TrainingStats(
        confidence=clamp(confidence, 0, 100),
        samples_analyzed=prev_n + new_n,
        total_tokens=base.training.total_tokens + analysis.training.total_tokens,
        last_trained_at=(
            analysis.training.last_trained_at or base.training.last_trained_at or now
        ),
    )

    return base.model_copy(
        update={
            "updated_at": now,
            "training": training,
            "metrics": metrics,
            "style_tags": analysis.style_tags.model_copy(),
        },
        deep=True,
    )
