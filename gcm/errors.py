"""
Custom exception types used across gcm.

The CLI and the interaction loop rely on these classes to tell user-facing
failures (nothing staged, editor crashed, commit rejected) apart from
unexpected bugs.
"""

from __future__ import annotations


class GcmError(Exception):
    """Base class for all gcm specific errors."""


class InputError(GcmError):
    """Raised when there is nothing to generate a message for."""


class DiffReadError(GcmError, OSError):
    """Raised when the staged diff cannot be read from git."""


class ProcessError(GcmError):
    """Raised when a generation engine cannot be started or its stream breaks."""


class GenerationExhausted(GcmError):
    """Raised when every final-message attempt came back empty."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"No commit message generated after {attempts} attempts")
        self.attempts = attempts


class CommitError(GcmError):
    """Raised when ``git commit`` exits with a non-zero status."""


class EditorError(GcmError):
    """Raised when the editor cannot be launched or exits with an error."""


class InvalidChoice(GcmError):
    """Raised for an unknown or currently unavailable option letter."""

    def __init__(self, choice: str) -> None:
        super().__init__(f"Invalid option: {choice!r}")
        self.choice = choice
