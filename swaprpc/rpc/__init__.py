"""
JSON-RPC command framework exports.
"""

from .client import Client
from .commands import ProtocolRevision, build_registry
from .errors import (
    CapabilityNotSupportedError,
    ClientError,
    CommandError,
    DecodeError,
    RPCError,
    TransportError,
)
from .future import Future, ResultFuture
from .registry import CommandRegistry
from .transport import HTTPTransport, Transport

__all__ = [
    "CapabilityNotSupportedError",
    "Client",
    "ClientError",
    "CommandError",
    "CommandRegistry",
    "DecodeError",
    "Future",
    "HTTPTransport",
    "ProtocolRevision",
    "RPCError",
    "ResultFuture",
    "Transport",
    "TransportError",
    "build_registry",
]
