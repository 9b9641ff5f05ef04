"""SQLModel database models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SampleRecord(SQLModel, table=True):
    """A writing sample kept in a user's rolling sample library."""

    id: int | None = Field(default=None, primary_key=True)
    sample_id: str = Field(index=True)
    user_id: str = Field(index=True)
    text: str
    source: str = "manual"  # manual | note
    added_at: datetime = Field(default_factory=_utcnow)
    word_count: int = 0


class ProfileRecord(SQLModel, table=True):
    """One user's style profile, stored as its JSON export form."""

    user_id: str = Field(primary_key=True)
    profile_json: str
    updated_at: datetime = Field(default_factory=_utcnow)
