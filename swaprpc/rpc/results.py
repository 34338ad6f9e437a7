"""
Decoders for wallet replies.

Every decoder takes the raw ``result`` bytes of one reply and returns a
freshly built domain value, or raises a :class:`~swaprpc.rpc.errors.DecodeError`
that carries the raw payload.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..core.address import Address, AddressError, decode_address
from ..core.amount import Amount, AmountError
from ..core.chainhash import Hash, HashError
from ..core.keys import WIF, WIFError, decode_wif
from ..core.params import NetworkParams
from ..core.tx import OutPoint, Transaction, TxSerializationError
from .errors import DecodeError, InvalidResponseError, MalformedTransactionError

LEGACY_KEY_PREFIX = "p2pkh:"


@dataclass(frozen=True, slots=True)
class UnspentOutput:
    address: Address
    value: Amount
    outpoint: OutPoint
    height: int


def _load(raw: bytes) -> Any:
    try:
        return json.loads(raw, parse_float=Decimal)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Reply is not valid JSON: {exc}", raw) from exc


def _load_string(raw: bytes, field: str) -> str:
    value = _load(raw)
    if not isinstance(value, str):
        raise DecodeError(f"Expected a JSON string for {field}, got {type(value).__name__}", raw, field)
    return value


def decode_address_result(raw: bytes, params: NetworkParams | None = None) -> Address:
    value = _load_string(raw, "address")
    try:
        return decode_address(value, params)
    except AddressError as exc:
        raise DecodeError(str(exc), raw, "address") from exc


def decode_private_key_result(raw: bytes) -> WIF:
    value = _load(raw)
    # A list-form request is answered with a list of keys.
    if isinstance(value, list) and len(value) == 1:
        value = value[0]
    if not isinstance(value, str):
        raise DecodeError("Expected a WIF string for private key", raw, "private_key")
    if value.startswith(LEGACY_KEY_PREFIX):
        value = value[len(LEGACY_KEY_PREFIX) :]
    try:
        return decode_wif(value)
    except WIFError as exc:
        raise DecodeError(str(exc), raw, "private_key") from exc


def decode_fee_rate_result(raw: bytes) -> Amount:
    value = _load(raw)
    if isinstance(value, bool) or not isinstance(value, (int, Decimal)):
        raise DecodeError("Expected a JSON number for fee rate", raw, "feerate")
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise DecodeError(f"Fee rate {value} is not a whole number of satoshis", raw, "feerate")
        value = int(value)
    return Amount(value)


def decode_funded_transaction(raw: bytes) -> tuple[Transaction, bool]:
    """Decode a payto reply into ``(transaction, complete)``."""

    value = _load(raw)
    if not isinstance(value, dict):
        raise DecodeError("Expected a JSON object for funded transaction", raw)
    complete = value.get("complete", False)
    if not isinstance(complete, bool):
        raise DecodeError("complete must be a boolean", raw, "complete")
    tx_hex = value.get("hex")
    if not isinstance(tx_hex, str):
        raise MalformedTransactionError("Malformed transaction hex: missing hex string", raw, "hex")
    try:
        tx = Transaction.parse(bytes.fromhex(tx_hex))
    except (ValueError, TxSerializationError) as exc:
        raise MalformedTransactionError(f"Malformed transaction hex: {exc}", raw, "hex") from exc
    return tx, complete


def _require(entry: dict[str, Any], key: str, kind: type | tuple[type, ...], raw: bytes, index: int) -> Any:
    value = entry.get(key)
    if (isinstance(value, bool) and kind is not bool) or not isinstance(value, kind):
        raise DecodeError(f"Unspent output {index}: {key} has unexpected type", raw, key)
    return value


def _decode_unspent_entry(entry: Any, raw: bytes, index: int, params: NetworkParams | None) -> UnspentOutput:
    if not isinstance(entry, dict):
        raise DecodeError(f"Unspent output {index} is not an object", raw)
    address_text = _require(entry, "address", str, raw, index)
    value_text = _require(entry, "value", str, raw, index)
    prevout_n = _require(entry, "prevout_n", int, raw, index)
    prevout_hash = _require(entry, "prevout_hash", str, raw, index)
    height = _require(entry, "height", int, raw, index)
    if "coinbase" in entry:
        _require(entry, "coinbase", bool, raw, index)
    try:
        address = decode_address(address_text, params)
    except AddressError as exc:
        raise DecodeError(f"Unspent output {index}: {exc}", raw, "address") from exc
    try:
        value = Amount.from_coins(value_text)
    except AmountError as exc:
        raise DecodeError(f"Unspent output {index}: {exc}", raw, "value") from exc
    if value < 0:
        raise DecodeError(f"Unspent output {index}: negative value", raw, "value")
    if not (0 <= prevout_n <= 0xFFFFFFFF):
        raise DecodeError(f"Unspent output {index}: prevout_n out of range", raw, "prevout_n")
    try:
        tx_hash = Hash.from_str(prevout_hash)
    except HashError as exc:
        raise DecodeError(f"Unspent output {index}: {exc}", raw, "prevout_hash") from exc
    return UnspentOutput(address=address, value=value, outpoint=OutPoint(tx_hash, prevout_n), height=height)


def decode_unspent_outputs(raw: bytes, params: NetworkParams | None = None) -> list[UnspentOutput]:
    value = _load(raw)
    if not isinstance(value, list):
        raise DecodeError("Expected a JSON array of unspent outputs", raw)
    return [_decode_unspent_entry(entry, raw, index, params) for index, entry in enumerate(value)]


def decode_broadcast_result(raw: bytes) -> Hash:
    value = _load(raw)
    if not isinstance(value, list) or len(value) < 2:
        raise InvalidResponseError(raw)
    txid = value[1]
    if not isinstance(txid, str):
        raise InvalidResponseError(raw)
    try:
        return Hash.from_str(txid)
    except HashError as exc:
        raise DecodeError(str(exc), raw, "txid") from exc
