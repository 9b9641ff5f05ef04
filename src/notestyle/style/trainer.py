"""Training service: owns the load, analyze, merge, save cycle."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from notestyle.config import Settings
from notestyle.exceptions import (
    InsufficientNotesError,
    NoSamplesError,
    TrainingDisabledError,
)
from notestyle.storage.samples import SampleLibrary
from notestyle.storage.store import ProfileStore, open_store
from notestyle.style.analyzer import analyze
from notestyle.style.applier import synthesize
from notestyle.style.merger import merge
from notestyle.style.profile import (
    EXPORT_VERSION,
    ProfileBundle,
    ProfileSettings,
    SampleSource,
    StyleAnalysis,
    StyleProfile,
    UserOverrides,
    WritingSample,
    default_profile,
    parse_bundle,
    utcnow,
)

logger = logging.getLogger(__name__)

READY_CONFIDENCE = 20
MIN_NOTES = 3
MAX_NOTES = 20


@dataclass
class TrainingResult:
    profile: StyleProfile
    analysis: StyleAnalysis
    samples_processed: int


@dataclass
class AddSampleResult:
    sample: WritingSample
    stored: bool
    training: Optional[TrainingResult] = None


@dataclass
class TrainingStatus:
    is_ready: bool
    confidence: int
    samples_count: int
    tokens_count: int
    last_trained_at: Optional[datetime]


class StyleTrainer:
    """Keeps one user's profile and sample library in step.

    The profile is only ever updated through ``merge``; overrides and
    settings are the exceptions, and they never touch metrics or counters.
    """

    def __init__(
        self,
        store: ProfileStore,
        library: SampleLibrary,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.library = library
        self._clock = clock

    def profile(self) -> StyleProfile:
        """The stored profile, or a fresh default if none was saved yet."""
        return self.store.load() or default_profile(self._clock())

    def train(self, texts: Iterable[str]) -> TrainingResult:
        """Analyze ``texts`` and fold the result into the stored profile."""
        texts = [t for t in texts if t and t.strip()]
        if not texts:
            raise NoSamplesError("No samples provided")

        now = self._clock()
        analysis = analyze(texts, now=now)
        profile = merge(self.store.load(), analysis, now=now)
        self.store.save(profile)
        logger.info(
            "Trained on %d samples (%d tokens); confidence now %d",
            analysis.training.samples_analyzed,
            analysis.training.total_tokens,
            profile.training.confidence,
        )
        return TrainingResult(profile=profile, analysis=analysis, samples_processed=len(texts))

    def add_sample(
        self,
        text: str,
        source: SampleSource = "manual",
        auto_train: bool | None = None,
    ) -> AddSampleResult:
        """Add a sample to the library and, by default, train on it.

        With privacy mode on the text is trained on but never stored.
        """
        settings = self.profile().settings
        if settings.privacy_mode:
            sample = self.library.make_sample(text, source)
            stored = False
        else:
            sample = self.library.add(text, source)
            stored = True

        if auto_train is None:
            auto_train = settings.auto_train
        training = self.train([sample.text]) if auto_train else None
        return AddSampleResult(sample=sample, stored=stored, training=training)

    def run_full_training(self) -> TrainingResult:
        """Train on every sample currently in the library."""
        texts = self.library.texts()
        if not texts:
            raise NoSamplesError("No samples to train on")
        return self.train(texts)

    def train_from_notes(self, notes: Iterable[str]) -> TrainingResult:
        """Train on the user's notes, most recent first."""
        if not self.profile().settings.include_notes_on_train:
            raise TrainingDisabledError("Training on notes is turned off in profile settings")
        bodies = [n for n in notes if n and n.strip()][:MAX_NOTES]
        if len(bodies) < MIN_NOTES:
            raise InsufficientNotesError(MIN_NOTES, len(bodies))
        return self.train(bodies)

    def update_overrides(self, **changes: Any) -> StyleProfile:
        """Apply a partial update to the user's manual overrides."""
        profile = self.profile()
        current = profile.user_overrides.model_dump()
        current.update(changes)
        updated = profile.model_copy(
            update={
                "user_overrides": UserOverrides.model_validate(current),
                "updated_at": self._clock(),
            }
        )
        self.store.save(updated)
        return updated

    def update_settings(self, **changes: Any) -> StyleProfile:
        """Apply a partial update to the profile's behavioral flags."""
        profile = self.profile()
        current = profile.settings.model_dump()
        current.update(changes)
        updated = profile.model_copy(
            update={
                "settings": ProfileSettings.model_validate(current),
                "updated_at": self._clock(),
            }
        )
        self.store.save(updated)
        return updated

    def delete_sample(self, sample_id: str) -> bool:
        """Remove a sample from the library. Profile counters stay as they are."""
        return self.library.delete(sample_id)

    def reset(self) -> StyleProfile:
        """Forget everything: stored profile and samples."""
        self.store.delete()
        removed = self.library.clear()
        logger.info("Profile reset; %d samples removed", removed)
        return default_profile(self._clock())

    def export_bundle(self) -> dict[str, Any]:
        """The profile and samples as a JSON-ready dict."""
        bundle = ProfileBundle(
            profile=self.profile(),
            samples=self.library.samples(),
            exported_at=self._clock(),
            version=EXPORT_VERSION,
        )
        return bundle.to_json_dict()

    def import_bundle(self, data: Mapping[str, Any] | str | bytes) -> StyleProfile:
        """Replace profile and samples with validated external data.

        Raises InvalidProfileError before anything is written if the data
        does not validate.
        """
        profile, samples = parse_bundle(data)
        previous = self.library.samples()
        self.library.replace(samples)
        try:
            self.store.save(profile)
        except Exception:
            self.library.replace(previous)
            raise
        logger.info("Imported profile with %d samples", len(samples))
        return profile

    def training_status(self) -> TrainingStatus:
        training = self.profile().training
        return TrainingStatus(
            is_ready=training.confidence >= READY_CONFIDENCE,
            confidence=training.confidence,
            samples_count=training.samples_analyzed,
            tokens_count=training.total_tokens,
            last_trained_at=training.last_trained_at,
        )

    def style_prompt(self) -> str:
        return synthesize(self.profile())


def open_trainer(settings: Settings) -> StyleTrainer:
    """Wire a trainer to the stores named in ``settings``."""
    library = SampleLibrary(
        settings.db_path,
        settings.user_id,
        max_samples=settings.max_samples,
        min_chars=settings.min_sample_chars,
    )
    return StyleTrainer(open_store(settings), library)
