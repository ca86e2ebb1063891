"""Failure taxonomy for Hue Bridge requests.

Read operations turn these into soft responses (see BridgeClient); write
operations raise them so the caller never assumes the bridge changed state
when it did not.
"""


class BridgeError(Exception):
    """Base class for every failure talking to the bridge."""


class TransportFailure(BridgeError):
    """Network, DNS, TLS or timeout failure; the request may not have arrived."""


class ProtocolFailure(BridgeError):
    """Response body was not JSON or not a ``{data, errors}`` envelope."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ApiFailure(BridgeError):
    """Well-formed envelope with a non-empty error list.

    The bridge's own descriptions are kept verbatim in ``errors``.
    """

    def __init__(self, errors: list):
        self.errors = list(errors)
        super().__init__(', '.join(e.description or 'Unknown error' for e in self.errors))


class EmptyResult(BridgeError):
    """Zero items where exactly one was expected."""
