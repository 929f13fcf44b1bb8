"""Errors raised by host adapters.

Every failure an adapter operation can hit maps to one subclass of
HostError, so the orchestration layer can tell a network outage from a
rejected request from a malformed payload without parsing messages.

An unsupported capability is not an exception; see
prgate_core.hosts.base.Unsupported.
"""

from __future__ import annotations


class HostError(Exception):
    """Base class for all adapter failures.

    ``request`` is the "METHOD URL" string of the call that failed, or an
    empty string when the failure is not tied to a single request.
    """

    def __init__(self, message: str, request: str = ""):
        super().__init__(message)
        self.request = request


class TransportError(HostError):
    """The request could not be built or the network round trip failed."""


class ProtocolError(HostError):
    """The host answered with a status code outside the success set."""

    def __init__(self, request: str, status_code: int, body: str):
        super().__init__(
            f"making request {request!r} unexpected status code: {status_code}, body: {body}",
            request=request,
        )
        self.status_code = status_code
        self.body = body


class DecodeError(HostError):
    """The response body is not valid JSON."""

    def __init__(self, request: str, body: str):
        super().__init__(f"could not parse response {body!r} from {request!r}", request=request)
        self.body = body


class ValidationError(HostError):
    """The response decoded but is missing fields the adapter relies on."""

    def __init__(self, request: str, body: str, detail: str = ""):
        message = f"API response {body!r} from {request!r} was missing fields"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, request=request)
        self.body = body


class IdentityError(HostError):
    """The identity of the calling credential could not be resolved."""
