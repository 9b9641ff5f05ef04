"""Profile stores: where a user's StyleProfile lives between runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from notestyle.config import Settings
from notestyle.storage.database import get_session
from notestyle.storage.models import ProfileRecord
from notestyle.style.profile import StyleProfile, parse_profile, utcnow

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Load/save access to one user's profile."""

    def load(self) -> StyleProfile | None: ...

    def save(self, profile: StyleProfile) -> None: ...

    def delete(self) -> None: ...


class JsonProfileStore:
    """Keeps the profile as ``style_<user_id>.json`` in a directory."""

    def __init__(self, directory: Path, user_id: str = "default") -> None:
        self.directory = directory
        self.user_id = user_id

    @property
    def path(self) -> Path:
        return self.directory / f"style_{self.user_id}.json"

    def load(self) -> StyleProfile | None:
        """Return the stored profile, or None when nothing has been saved.

        Raises InvalidProfileError if the file exists but is malformed.
        """
        if not self.path.exists():
            return None
        logger.debug("Loading profile from %s", self.path)
        return parse_profile(self.path.read_text(encoding="utf-8"))

    def save(self, profile: StyleProfile) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path.write_text(profile.to_json(indent=2), encoding="utf-8")
        logger.debug("Saved profile to %s", self.path)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class DatabaseProfileStore:
    """Keeps the profile as a JSON column in one row per user."""

    def __init__(self, db_path: Path, user_id: str = "default") -> None:
        self.db_path = db_path
        self.user_id = user_id

    def load(self) -> StyleProfile | None:
        with get_session(self.db_path) as session:
            record = session.get(ProfileRecord, self.user_id)
            if record is None:
                return None
            payload = record.profile_json
        return parse_profile(payload)

    def save(self, profile: StyleProfile) -> None:
        with get_session(self.db_path) as session:
            record = session.get(ProfileRecord, self.user_id)
            if record is None:
                record = ProfileRecord(user_id=self.user_id, profile_json=profile.to_json())
            else:
                record.profile_json = profile.to_json()
                record.updated_at = utcnow()
            session.add(record)
            session.commit()
        logger.debug("Saved profile for %s to %s", self.user_id, self.db_path)

    def delete(self) -> None:
        with get_session(self.db_path) as session:
            record = session.get(ProfileRecord, self.user_id)
            if record is not None:
                session.delete(record)
                session.commit()


def open_store(settings: Settings) -> ProfileStore:
    """Build the profile store selected by ``settings.profile_backend``."""
    if settings.profile_backend == "database":
        return DatabaseProfileStore(settings.db_path, settings.user_id)
    return JsonProfileStore(settings.profiles_dir, settings.user_id)
