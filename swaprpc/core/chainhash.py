"""
Fixed-length transaction hashes.
"""

from __future__ import annotations

HASH_SIZE = 32
MAX_HASH_STRING_SIZE = HASH_SIZE * 2


class HashError(ValueError):
    pass


class Hash:
    """A 32 byte double-SHA256 digest in internal (little-endian) byte order.

    The string form is the byte-reversed hex used by wallets and explorers.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if len(raw) != HASH_SIZE:
            raise HashError(f"Invalid hash length {len(raw)}, want {HASH_SIZE}")
        self._raw = bytes(raw)

    @classmethod
    def from_str(cls, value: str) -> Hash:
        """Parse the reversed hex form.  Short strings are zero padded on the left."""

        if len(value) > MAX_HASH_STRING_SIZE:
            raise HashError(f"Hash string too long: {len(value)} > {MAX_HASH_STRING_SIZE}")
        if len(value) % 2:
            value = "0" + value
        try:
            decoded = bytes.fromhex(value)
        except ValueError as exc:
            raise HashError(f"Invalid hash string {value!r}") from exc
        reversed_bytes = decoded[::-1]
        return cls(reversed_bytes + b"\x00" * (HASH_SIZE - len(reversed_bytes)))

    def to_bytes(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return self._raw[::-1].hex()

    def __repr__(self) -> str:
        return f"Hash({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hash):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)
