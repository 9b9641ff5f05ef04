"""Exceptions raised by notestyle."""

from __future__ import annotations


class NotestyleError(Exception):
    """Base class for all notestyle errors."""


class InvalidProfileError(NotestyleError):
    """Profile data failed validation and cannot be used."""

    def __init__(self, message: str = "invalid profile data", errors: list[str] | None = None):
        self.errors = errors or []
        detail = f"{message}: {'; '.join(self.errors)}" if self.errors else message
        super().__init__(detail)


class SampleTooShortError(NotestyleError):
    """A writing sample is below the minimum length."""

    def __init__(self, min_chars: int):
        self.min_chars = min_chars
        super().__init__(f"Text too short (minimum {min_chars} characters)")


class NoSamplesError(NotestyleError):
    """Training was requested without any usable text."""


class InsufficientNotesError(NotestyleError):
    """Too few notes to build a profile from."""

    def __init__(self, required: int, found: int):
        self.required = required
        self.found = found
        super().__init__(
            f"Need at least {required} notes to build a writing profile "
            f"(got {found}). Keep writing!"
        )


class TrainingDisabledError(NotestyleError):
    """The profile settings forbid this kind of training."""


class PromptTooShortError(NotestyleError):
    """A generation prompt is below the minimum length."""
