"""
One-shot result handles for in-flight requests.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class FutureAlreadyResolvedError(RuntimeError):
    """Raised when a transport tries to resolve a future twice."""


class Future:
    """Single-slot handoff between the transport and the caller.

    The transport resolves it exactly once with either the raw result bytes
    or an exception.  :meth:`receive` blocks until then and afterwards keeps
    returning (or raising) the same outcome.
    """

    __slots__ = ("_event", "_lock", "_payload", "_error", "_resolved")

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._payload: bytes | None = None
        self._error: BaseException | None = None
        self._resolved = False

    @classmethod
    def completed(cls, payload: bytes) -> Future:
        future = cls()
        future.resolve(payload)
        return future

    @classmethod
    def failed(cls, error: BaseException) -> Future:
        future = cls()
        future.fail(error)
        return future

    def resolve(self, payload: bytes) -> None:
        if not isinstance(payload, bytes):
            raise TypeError(f"future payload must be bytes, not {type(payload).__name__}")
        self._settle(payload, None)

    def fail(self, error: BaseException) -> None:
        self._settle(None, error)

    def _settle(self, payload: bytes | None, error: BaseException | None) -> None:
        with self._lock:
            if self._resolved:
                raise FutureAlreadyResolvedError("future already resolved")
            self._payload = payload
            self._error = error
            self._resolved = True
        self._event.set()

    def done(self) -> bool:
        return self._event.is_set()

    def receive(self, timeout: float | None = None) -> bytes:
        if not self._event.wait(timeout):
            raise TimeoutError("timed out waiting for RPC response")
        if self._error is not None:
            raise self._error
        return self._payload  # type: ignore[return-value]

    def exception(self, timeout: float | None = None) -> BaseException | None:
        if not self._event.wait(timeout):
            raise TimeoutError("timed out waiting for RPC response")
        return self._error


class ResultFuture(Generic[T]):
    """A :class:`Future` paired with the decoder for its command's reply."""

    __slots__ = ("future", "_decoder")

    def __init__(self, future: Future, decoder: Callable[[bytes], T]):
        self.future = future
        self._decoder = decoder

    def done(self) -> bool:
        return self.future.done()

    def receive(self, timeout: float | None = None) -> T:
        raw = self.future.receive(timeout)
        return self._decoder(raw)
