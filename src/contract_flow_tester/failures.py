"""Failure taxonomy shared by the test-case engine."""

from __future__ import annotations


class FlowTimeoutError(TimeoutError):
    """Raised when an awaited reply or store state did not arrive in time."""


class ReplyTimeoutError(FlowTimeoutError):
    """Raised when no reply was received on the reply destination."""


class VerificationTimeoutError(FlowTimeoutError):
    """Raised when a polled check never held before its timeout."""


class MalformedDocumentError(Exception):
    """Raised when a rendered template is not valid structured data."""


class UnresolvedPlaceholderError(MalformedDocumentError):
    """Raised in strict mode when a template references unknown payload keys."""

    def __init__(self, source: str, missing_keys: tuple[str, ...]) -> None:
        self.source = source
        self.missing_keys = missing_keys
        super().__init__(
            f"Unresolved placeholders in {source}: {', '.join(missing_keys)}"
        )


class TransportError(Exception):
    """Raised when a channel or store adapter fails."""


class ChannelTransportError(TransportError):
    """Raised when publishing or consuming on the message channel fails."""


class StoreTransportError(TransportError):
    """Raised when a store adapter cannot execute a query."""


class AssertionFailure(AssertionError):
    """Raised when actual data does not match the expectation."""


class GroupVerificationTimeoutError(VerificationTimeoutError):
    """Raised when one store verification group did not converge."""

    def __init__(self, group_name: str, message: str) -> None:
        self.group_name = group_name
        super().__init__(message)
