"""
Transports that carry marshalled requests to a wallet daemon.
"""

from __future__ import annotations

import base64
import http.client
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .errors import ClientError, HTTPStatusError, RateLimitError, RPCError, TransportError
from .future import Future

if TYPE_CHECKING:
    from ..config import ClientConfig

log = logging.getLogger(__name__)


class Transport:
    """Sends request bytes and returns a future resolved with the reply.

    Implementations must resolve every returned future exactly once: with
    the raw ``result`` bytes, an :class:`RPCError`, or a
    :class:`TransportError`.
    """

    def send(self, request: bytes) -> Future:
        raise NotImplementedError

    def close(self) -> None:
        pass


def parse_response(body: bytes) -> bytes:
    """Strip a JSON-RPC response envelope down to the raw result bytes.

    Fractional numbers are carried as :class:`~decimal.Decimal` and written
    back with their original digits, so amounts reach the decoders unrounded.
    """

    try:
        data = json.loads(body.decode("utf-8"), parse_float=Decimal)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError(f"Malformed RPC response: {exc}") from exc
    if not isinstance(data, dict):
        raise TransportError("Malformed RPC response: expected an object")
    error = data.get("error")
    if error:
        raise _rpc_error(error)
    return _encode_result(data.get("result")).encode("utf-8")


def _encode_result(value: Any) -> str:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return "{" + ",".join(f"{json.dumps(key)}:{_encode_result(item)}" for key, item in value.items()) + "}"
    if isinstance(value, list):
        return "[" + ",".join(_encode_result(item) for item in value) + "]"
    return json.dumps(value)


def _rpc_error(error: Any) -> RPCError:
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return RPCError(code if isinstance(code, int) else -1, str(message) if message is not None else "")
    return RPCError(-1, str(error))


def _error_from_body(body: bytes) -> RPCError | None:
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if isinstance(data, dict) and data.get("error"):
        return _rpc_error(data["error"])
    return None


class HTTPTransport(Transport):
    """HTTP POST transport with basic authentication.

    Each request runs on a worker thread so that :meth:`send` never blocks.
    """

    def __init__(self, config: ClientConfig):
        self.host = config.host
        self.port = config.port
        self.path = config.path
        self.timeout = config.timeout
        self.use_tls = config.use_tls
        auth_token = base64.b64encode(f"{config.username}:{config.password}".encode("utf-8")).decode("ascii")
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Basic {auth_token}",
        }
        self._executor = ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="swaprpc-http")

    def send(self, request: bytes) -> Future:
        future = Future()
        try:
            self._executor.submit(self._post, request, future)
        except RuntimeError:
            future.fail(TransportError("transport is closed"))
        return future

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _post(self, request: bytes, future: Future) -> None:
        try:
            result = self._round_trip(request)
        except ClientError as exc:
            future.fail(exc)
        except (OSError, http.client.HTTPException) as exc:
            log.warning("RPC request to %s:%s failed: %s", self.host, self.port, exc)
            future.fail(TransportError(f"RPC connection failed: {exc}"))
        except Exception as exc:  # the future must be resolved on every path
            log.exception("Unexpected transport failure")
            future.fail(TransportError(f"Unexpected transport failure: {exc}"))
        else:
            future.resolve(result)

    def _connect(self) -> http.client.HTTPConnection:
        if self.use_tls:
            return http.client.HTTPSConnection(self.host, self.port, timeout=self.timeout)
        return http.client.HTTPConnection(self.host, self.port, timeout=self.timeout)

    def _round_trip(self, request: bytes) -> bytes:
        conn = self._connect()
        try:
            conn.request("POST", self.path, body=request, headers=self._headers)
            response = conn.getresponse()
            body = response.read()
        finally:
            conn.close()
        if response.status != 200:
            # bitcoind reports RPC errors with a 500 and a JSON envelope
            error = _error_from_body(body)
            if error is not None:
                raise error
            text = body.decode("utf-8", "replace")
            log.warning("RPC HTTP error %s from %s:%s", response.status, self.host, self.port)
            if response.status == 429:
                raise RateLimitError(response.status, text)
            raise HTTPStatusError(response.status, text)
        return parse_response(body)
