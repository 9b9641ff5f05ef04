"""Extract style features from raw writing samples.

The sentence and line rules here are deliberately simple heuristics.
Every derived score depends on them, so they are kept exactly as they are:
sentences end at whitespace that follows ``.``, ``!`` or ``?`` (which
over-splits on abbreviations), and a bullet line is optional indentation,
then ``-``, ``*``, ``•`` or ``<digits>.``, then whitespace.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

from notestyle.style.profile import (
    StyleAnalysis,
    StyleMetrics,
    StyleTags,
    TrainingStats,
    utcnow,
)

# Fallbacks used when a batch has nothing to measure
DEFAULT_WORDS_PER_SENTENCE = 14.0
DEFAULT_WORDS_PER_SAMPLE = 80.0

# Tokens needed for a batch to reach full confidence
FULL_CONFIDENCE_TOKENS = 900

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_PUNCTUATION = re.compile(r"[.,;:!?]")
_BULLET_LINE = re.compile(r"^\s*([-*\u2022]|[0-9]+\.)\s+")
_HAS_LATIN_UPPER = re.compile(r"[A-Z]")

# Dingbats, the private use area and U+1F000..U+1FBFF. Misses ZWJ sequences
# and most emoji outside those blocks.
_EMOJI = re.compile(r"[\u2700-\u27bf\ue000-\uf8ff\U0001f000-\U0001fbff]")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching the stored profiles."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def tokenize(text: str) -> list[str]:
    return text.split()


def split_sentences(text: str) -> list[str]:
    text = text.strip()
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def _mean(values: list[int], fallback: float) -> float:
    return sum(values) / len(values) if values else fallback


def _ratio(count: int, total: int) -> float:
    return count / total if total else 0.0


def _is_shouting(token: str) -> bool:
    return len(token) >= 3 and token == token.upper() and bool(_HAS_LATIN_UPPER.search(token))


def formality_score(
    punctuation_rate: float,
    emoji_rate: float,
    exclamation_rate: float,
    capitalization_rate: float,
) -> float:
    raw = (
        50
        + (punctuation_rate * 120 - emoji_rate * 200 - exclamation_rate * 80)
        + capitalization_rate * -60
    )
    return clamp(raw, 0, 100)


def brevity_score(avg_words_per_sentence: float, avg_words_per_sample: float) -> float:
    return clamp(70 - avg_words_per_sentence * 2 - avg_words_per_sample * 0.15, 0, 100)


def classify(metrics: StyleMetrics) -> StyleTags:
    """Derive categorical tags from the continuous metrics."""
    if metrics.formality_score >= 65:
        tone = "formal"
    elif metrics.formality_score <= 40:
        tone = "casual"
    else:
        tone = "neutral"

    if metrics.bullet_rate >= 0.25:
        structure = "bullets"
    elif metrics.bullet_rate <= 0.05:
        structure = "paragraphs"
    else:
        structure = "mixed"

    if metrics.avg_words_per_sample >= 180:
        verbosity = "long"
    elif metrics.avg_words_per_sample <= 70:
        verbosity = "short"
    else:
        verbosity = "medium"

    return StyleTags(tone=tone, structure=structure, verbosity=verbosity)


def analyze(samples: Iterable[str] | str, *, now: datetime | None = None) -> StyleAnalysis:
    """Compute style features for a batch of text samples.

    Blank samples are ignored. An empty batch is valid and yields the
    documented fallbacks (14 words per sentence, 80 per sample, zero rates,
    zero confidence). Never raises for string input.
    """
    if isinstance(samples, str):
        samples = [samples]
    clean = [s.strip() for s in samples if s and s.strip()]

    total_tokens = 0
    sample_word_counts: list[int] = []
    sentence_word_counts: list[int] = []
    total_sentences = 0
    punctuation_count = 0
    emoji_count = 0
    question_count = 0
    exclamation_count = 0
    caps_count = 0
    total_lines = 0
    bullet_lines = 0

    for sample in clean:
        tokens = tokenize(sample)
        total_tokens += len(tokens)
        sample_word_counts.append(len(tokens))

        sentences = split_sentences(sample)
        total_sentences += len(sentences)
        for sentence in sentences:
            words = len(tokenize(sentence))
            if words:
                sentence_word_counts.append(words)
            question_count += sentence.count("?")
            exclamation_count += sentence.count("!")

        punctuation_count += len(_PUNCTUATION.findall(sample))
        emoji_count += len(_EMOJI.findall(sample))
        caps_count += sum(1 for token in tokens if _is_shouting(token))

        lines = sample.split("\n")
        total_lines += len(lines)
        bullet_lines += sum(1 for line in lines if _BULLET_LINE.match(line))

    avg_words_per_sentence = _mean(sentence_word_counts, DEFAULT_WORDS_PER_SENTENCE)
    avg_words_per_sample = _mean(sample_word_counts, DEFAULT_WORDS_PER_SAMPLE)
    punctuation_rate = _ratio(punctuation_count, total_tokens)
    emoji_rate = _ratio(emoji_count, total_tokens)
    capitalization_rate = _ratio(caps_count, total_tokens)
    question_rate = _ratio(question_count, total_sentences)
    exclamation_rate = _ratio(exclamation_count, total_sentences)
    bullet_rate = _ratio(bullet_lines, total_lines)

    metrics = StyleMetrics(
        avg_words_per_sentence=avg_words_per_sentence,
        avg_words_per_sample=avg_words_per_sample,
        punctuation_rate=punctuation_rate,
        emoji_rate=emoji_rate,
        question_rate=question_rate,
        exclamation_rate=exclamation_rate,
        capitalization_rate=capitalization_rate,
        bullet_rate=bullet_rate,
        formality_score=formality_score(
            punctuation_rate, emoji_rate, exclamation_rate, capitalization_rate
        ),
        brevity_score=brevity_score(avg_words_per_sentence, avg_words_per_sample),
    )

    confidence = clamp(round_half_up(total_tokens / FULL_CONFIDENCE_TOKENS * 100), 0, 100)

    return StyleAnalysis(
        training=TrainingStats(
            confidence=confidence,
            samples_analyzed=len(clean),
            total_tokens=total_tokens,
            last_trained_at=now or utcnow(),
        ),
        metrics=metrics,
        style_tags=classify(metrics),
    )
