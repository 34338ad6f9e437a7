"""
Address decoding for the encodings a wallet backend can hand back.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import crypto
from .bech32 import Bech32Error, decode_segwit, encode_segwit
from .params import NETWORKS, NetworkParams


class AddressError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Address:
    """Base for decoded addresses; ``payload`` is the hash committed to."""

    payload: bytes
    params: NetworkParams

    def encode(self) -> str:
        raise NotImplementedError

    def script_pubkey(self) -> bytes:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.encode()


class AddressPubKeyHash(Address):
    __slots__ = ()

    def encode(self) -> str:
        return crypto.base58check_encode(bytes([self.params.pubkey_hash_addr_id]) + self.payload)

    def script_pubkey(self) -> bytes:
        return b"\x76\xa9\x14" + self.payload + b"\x88\xac"


class AddressScriptHash(Address):
    __slots__ = ()

    def encode(self) -> str:
        return crypto.base58check_encode(bytes([self.params.script_hash_addr_id]) + self.payload)

    def script_pubkey(self) -> bytes:
        return b"\xa9\x14" + self.payload + b"\x87"


class AddressWitnessPubKeyHash(Address):
    __slots__ = ()

    def encode(self) -> str:
        return encode_segwit(self.params.bech32_hrp, 0, self.payload)

    def script_pubkey(self) -> bytes:
        return b"\x00\x14" + self.payload


class AddressWitnessScriptHash(Address):
    __slots__ = ()

    def encode(self) -> str:
        return encode_segwit(self.params.bech32_hrp, 0, self.payload)

    def script_pubkey(self) -> bytes:
        return b"\x00\x20" + self.payload


def address_from_pubkey(pubkey: bytes, params: NetworkParams) -> AddressPubKeyHash:
    return AddressPubKeyHash(crypto.hash160(pubkey), params)


def decode_address(value: str, params: NetworkParams | None = None) -> Address:
    """Decode ``value``, requiring it to belong to ``params`` when given.

    With ``params`` left out every known network is tried.
    """

    candidates = [params] if params is not None else list(NETWORKS.values())
    for candidate in candidates:
        if value.lower().startswith(candidate.bech32_hrp + "1"):
            return _decode_segwit_address(value, candidate)
    try:
        payload = crypto.base58check_decode(value)
    except crypto.CryptoError as exc:
        raise AddressError(f"Invalid address {value!r}: {exc}") from exc
    if len(payload) != 21:
        raise AddressError(f"Unsupported address payload length for {value!r}")
    version, digest = payload[0], payload[1:]
    for candidate in candidates:
        if version == candidate.pubkey_hash_addr_id:
            return AddressPubKeyHash(digest, candidate)
        if version == candidate.script_hash_addr_id:
            return AddressScriptHash(digest, candidate)
    expected = params.name if params is not None else "any known network"
    raise AddressError(f"Address {value!r} is not valid for {expected}")


def _decode_segwit_address(value: str, params: NetworkParams) -> Address:
    try:
        _version, program = decode_segwit(params.bech32_hrp, value)
    except Bech32Error as exc:
        raise AddressError(f"Invalid segwit address {value!r}: {exc}") from exc
    if len(program) == 20:
        return AddressWitnessPubKeyHash(program, params)
    return AddressWitnessScriptHash(program, params)
