"""Exception types shared across the scheduling agent."""

from __future__ import annotations


class SchedulingAgentError(Exception):
    """Base class for every error raised by this package."""


class RemoteCallError(SchedulingAgentError):
    """Raised when a scheduling backend call fails.

    Covers both non-success responses (``status_code`` is set) and transport
    failures such as timeouts or refused connections (``status_code`` is
    ``None``).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        operation: str | None = None,
    ):
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)


class StateConsistencyError(SchedulingAgentError):
    """A flow handler was handed a state that does not belong to its flow.

    Never reachable through a valid sequence of turns; the engine answers it
    with a full conversation reset.
    """


class BackendValidationError(SchedulingAgentError):
    """The mock backend rejected a request (maps to HTTP 400)."""
