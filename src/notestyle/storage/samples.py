"""Rolling library of writing samples, newest kept, oldest dropped."""

from __future__ import annotations

import logging
import uuid
from datetime import timezone
from pathlib import Path

from sqlmodel import col, select

from notestyle.exceptions import SampleTooShortError
from notestyle.storage.database import get_session
from notestyle.storage.models import SampleRecord
from notestyle.style.profile import SampleSource, WritingSample, utcnow

logger = logging.getLogger(__name__)


def _to_sample(record: SampleRecord) -> WritingSample:
    added_at = record.added_at
    if added_at.tzinfo is None:
        # SQLite drops the offset; everything is written in UTC
        added_at = added_at.replace(tzinfo=timezone.utc)
    return WritingSample(
        id=record.sample_id,
        text=record.text,
        source=record.source,
        added_at=added_at,
        word_count=record.word_count,
    )


class SampleLibrary:
    """Per-user sample list backed by SQLite."""

    def __init__(
        self,
        db_path: Path,
        user_id: str = "default",
        *,
        max_samples: int = 50,
        min_chars: int = 20,
    ) -> None:
        self.db_path = db_path
        self.user_id = user_id
        self.max_samples = max_samples
        self.min_chars = min_chars

    def make_sample(self, text: str, source: SampleSource = "manual") -> WritingSample:
        """Validate ``text`` and build a sample without storing it."""
        text = (text or "").strip()
        if len(text) < self.min_chars:
            raise SampleTooShortError(self.min_chars)
        return WritingSample(
            id=f"sample_{uuid.uuid4().hex[:12]}",
            text=text,
            source=source,
            added_at=utcnow(),
            word_count=len(text.split()),
        )

    def add(self, text: str, source: SampleSource = "manual") -> WritingSample:
        """Store a new sample and trim the library to ``max_samples``."""
        sample = self.make_sample(text, source)
        with get_session(self.db_path) as session:
            session.add(self._to_record(sample))
            session.commit()
            self._trim(session)
        logger.info("Added %s sample %s (%d words)", source, sample.id, sample.word_count)
        return sample

    def samples(self) -> list[WritingSample]:
        """All samples, oldest first."""
        with get_session(self.db_path) as session:
            records = session.exec(
                select(SampleRecord)
                .where(SampleRecord.user_id == self.user_id)
                .order_by(col(SampleRecord.id))
            ).all()
            return [_to_sample(r) for r in records]

    def texts(self) -> list[str]:
        return [s.text for s in self.samples()]

    def get(self, sample_id: str) -> WritingSample | None:
        with get_session(self.db_path) as session:
            record = self._find(session, sample_id)
            return _to_sample(record) if record else None

    def delete(self, sample_id: str) -> bool:
        """Remove one sample. Returns False if it was not in the library."""
        with get_session(self.db_path) as session:
            record = self._find(session, sample_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
        return True

    def clear(self) -> int:
        """Remove every sample for this user, returning how many went."""
        with get_session(self.db_path) as session:
            records = session.exec(
                select(SampleRecord).where(SampleRecord.user_id == self.user_id)
            ).all()
            for record in records:
                session.delete(record)
            session.commit()
            return len(records)

    def replace(self, samples: list[WritingSample]) -> None:
        """Swap the whole library for ``samples`` in one transaction."""
        with get_session(self.db_path) as session:
            for record in session.exec(
                select(SampleRecord).where(SampleRecord.user_id == self.user_id)
            ).all():
                session.delete(record)
            for sample in samples[-self.max_samples:]:
                session.add(self._to_record(sample))
            session.commit()

    def __len__(self) -> int:
        return len(self.samples())

    def _to_record(self, sample: WritingSample) -> SampleRecord:
        return SampleRecord(
            sample_id=sample.id,
            user_id=self.user_id,
            text=sample.text,
            source=sample.source,
            added_at=sample.added_at.astimezone(timezone.utc),
            word_count=sample.word_count,
        )

    def _find(self, session, sample_id: str) -> SampleRecord | None:
        return session.exec(
            select(SampleRecord)
            .where(SampleRecord.user_id == self.user_id)
            .where(SampleRecord.sample_id == sample_id)
        ).first()

    def _trim(self, session) -> None:
        records = session.exec(
            select(SampleRecord)
            .where(SampleRecord.user_id == self.user_id)
            .order_by(col(SampleRecord.id).desc())
        ).all()
        stale = records[self.max_samples:]
        for record in stale:
            session.delete(record)
        if stale:
            session.commit()
            logger.debug("Dropped %d old samples for %s", len(stale), self.user_id)
