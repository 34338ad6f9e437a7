"""
Error types raised by the command framework.

Four kinds reach callers: construction errors raised before anything is
sent, transport errors, backend-reported :class:`RPCError` values, and
decode errors for replies that do not have the expected shape.
"""

from __future__ import annotations


class ClientError(Exception):
    """Base exception for wallet client problems."""


class RegistryError(ClientError):
    """Raised when the command registry is misconfigured at startup."""


class DuplicateMethodError(RegistryError):
    def __init__(self, method: str):
        super().__init__(f"method {method!r} is already registered")
        self.method = method


class RegistryFrozenError(RegistryError):
    pass


class CommandError(ClientError):
    """Raised when a command cannot be turned into a request."""


class InvalidIDError(CommandError):
    def __init__(self, request_id: object):
        super().__init__(f"the id of type {type(request_id).__name__!r} is invalid")
        self.request_id = request_id


class UnregisteredCommandError(CommandError):
    def __init__(self, command: object):
        super().__init__(f"{type(command).__name__!r} is not registered")
        self.command = command


class MarshalError(CommandError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"failed to marshal field {field!r}: {reason}")
        self.field = field
        self.reason = reason


class TransportError(ClientError):
    """Raised for connection-level failures."""


class HTTPStatusError(TransportError):
    def __init__(self, status: int, body: str):
        super().__init__(f"RPC HTTP error {status}: {body}")
        self.status = status
        self.body = body


class RateLimitError(HTTPStatusError):
    """Raised when the RPC server rejects the request due to rate limiting."""


class RPCError(ClientError):
    """Raised when the backend reports an error for a request."""

    def __init__(self, code: int, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RPCError):
            return NotImplemented
        return (self.code, self.message) == (other.code, other.message)

    __hash__ = Exception.__hash__


class DecodeError(ClientError):
    """Raised when a reply cannot be decoded into the expected value."""

    def __init__(self, message: str, raw: bytes, field: str | None = None):
        super().__init__(message)
        self.raw = raw
        self.field = field


class InvalidResponseError(DecodeError):
    def __init__(self, raw: bytes):
        super().__init__(f"Invalid response: {raw.decode('utf-8', 'replace')}", raw)


class MalformedTransactionError(DecodeError):
    pass


class CapabilityNotSupportedError(ClientError):
    """Raised for operations the wallet backend family does not offer."""
