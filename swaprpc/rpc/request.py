"""
JSON-RPC 1.0 request construction.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .commands import Command, Param
from .errors import InvalidIDError, MarshalError
from .registry import CommandRegistry

JSONRPC_VERSION = "1.0"


def is_valid_id_type(request_id: Any) -> bool:
    """Ids are restricted to numbers, strings and null."""

    if request_id is None:
        return True
    if isinstance(request_id, bool):
        return False
    return isinstance(request_id, (int, float, str))


@dataclass(frozen=True, slots=True)
class Request:
    method: str
    params: list[Any] | dict[str, Any]
    id: Any
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": self.jsonrpc, "method": self.method, "params": self.params, "id": self.id}

    def encode(self) -> bytes:
        try:
            return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False).encode("utf-8")
        except ValueError as exc:
            raise MarshalError("id", str(exc)) from exc


def _check_param(param: Param) -> Any:
    try:
        json.dumps(param.value, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise MarshalError(param.name, str(exc)) from exc
    return param.value


def new_request_positional(request_id: Any, method: str, params: list[Param]) -> Request:
    if not is_valid_id_type(request_id):
        raise InvalidIDError(request_id)
    return Request(method=method, params=[_check_param(param) for param in params], id=request_id)


def new_request_named(request_id: Any, method: str, params: list[Param]) -> Request:
    if not is_valid_id_type(request_id):
        raise InvalidIDError(request_id)
    return Request(method=method, params={param.name: _check_param(param) for param in params}, id=request_id)


def positional_params(command: Command) -> list[Param]:
    """Parameters up to, but excluding, the first unset optional one.

    Wallets read a shortened array as "remaining parameters omitted", so
    nothing after that point is sent even when it is set.
    """

    params: list[Param] = []
    for param in command.params():
        if param.optional and param.value is None:
            break
        params.append(param)
    return params


def named_params(command: Command) -> list[Param]:
    return [param for param in command.params() if not (param.optional and param.value is None)]


def build_request(registry: CommandRegistry, request_id: Any, command: Command) -> Request:
    if not is_valid_id_type(request_id):
        raise InvalidIDError(request_id)
    method, named = registry.lookup(command)
    if named:
        return new_request_named(request_id, method, named_params(command))
    return new_request_positional(request_id, method, positional_params(command))


def marshal_command(registry: CommandRegistry, request_id: Any, command: Command) -> bytes:
    """Marshal ``command`` into request bytes suitable for the transport."""

    return build_request(registry, request_id, command).encode()
