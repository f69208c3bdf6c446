"""Custom exception hierarchy for mcapp.

All exceptions that cross layer boundaries must inherit from
:class:`McappError`.  Raw third-party exceptions (e.g. from requests)
must NEVER propagate beyond the infrastructure layer; they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
McappError
├── NotFoundError
├── AmbiguousError
├── InvalidVersionError
├── InstallTimeoutError
├── RemoteFailureError
├── TransportError
├── ConfigError
├── InvalidAnswerError
└── MissingDependencyError
"""

from __future__ import annotations


class McappError(Exception):
    """Base exception for all mcapp errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Resource resolution ---------------------------------------------------

class NotFoundError(McappError):
    """Raised when no remote resource matches a name or ID."""


class AmbiguousError(McappError):
    """Raised when several remote resources share the queried name."""


# --- Templates -------------------------------------------------------------

class InvalidVersionError(McappError):
    """Raised when a template version is absent or cannot be parsed."""


# --- Installation ----------------------------------------------------------

class InstallTimeoutError(McappError):
    """Raised when the app is not installed before the deadline."""


class RemoteFailureError(McappError):
    """Raised when the app transitions to an error state remotely."""


# --- Transport / configuration ---------------------------------------------

class TransportError(McappError):
    """Raised when a call to the control plane fails."""


class ConfigError(McappError):
    """Raised when the client configuration is missing or malformed."""


# --- Answers ---------------------------------------------------------------

class InvalidAnswerError(McappError):
    """Raised when user-supplied answers are malformed or incomplete."""


# --- Environment / tooling -------------------------------------------------

class MissingDependencyError(McappError):
    """Raised when an optional UI dependency is not installed."""
