"""Failure taxonomy for calls against the news summarization service."""

from typing import Optional


class RemoteUnavailable(Exception):
    """Base class: the remote service could not produce a usable answer."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(f"{operation}: {message}" if message else operation)


class RemoteTimeout(RemoteUnavailable):
    """Raised when a call did not complete within the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        self.timeout = timeout
        super().__init__(operation, f"timed out after {timeout:g}s")


class TransportFailure(RemoteUnavailable):
    """Raised on network, DNS or connection-abort failures."""


class RemoteError(RemoteUnavailable):
    """Raised when the service answered with a non-2xx status or `success: false`."""

    def __init__(self, operation: str, status: Optional[int], message: str = ""):
        self.status = status
        detail = f"HTTP {status}" if status is not None else "request failed"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(operation, detail)


class MalformedResponse(RemoteUnavailable):
    """Raised when the payload is not JSON or does not match the expected shape."""
