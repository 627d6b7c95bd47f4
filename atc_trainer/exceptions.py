from __future__ import annotations


class TrainerError(Exception):
    """Base class for all trainer exceptions."""


# -----------------------------
# Catalog errors
# -----------------------------

class CatalogError(TrainerError):
    """Raised when the phrase catalog is missing, malformed, or lookups fail."""


# -----------------------------
# Orchestration guards
# -----------------------------

class SessionError(TrainerError):
    """Raised when a training step is requested in the wrong state."""


class NoActiveSessionError(SessionError):
    """Raised when scoring is attempted with no phrase in play."""


class StepAlreadyScoredError(SessionError):
    """Raised when the current session step has already been graded."""


class EmptyReadbackError(TrainerError):
    """Raised when a readback is blank; the grader is not called."""
