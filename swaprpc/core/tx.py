"""
Transaction primitives and the canonical wire codec.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from . import crypto
from .amount import MAX_MONEY
from .chainhash import Hash

MAX_TX_SIZE = 4_000_000
WITNESS_MARKER = 0x00
WITNESS_FLAG = 0x01


class TxSerializationError(Exception):
    pass


def encode_varint(value: int) -> bytes:
    if value < 0xfd:
        return value.to_bytes(1, "little")
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    if offset >= len(data):
        raise TxSerializationError("Varint decoded past end")
    prefix = data[offset]
    offset += 1
    if prefix < 0xfd:
        return prefix, offset
    if prefix == 0xfd:
        if offset + 2 > len(data):
            raise TxSerializationError("Varint truncated")
        value = int.from_bytes(data[offset : offset + 2], "little")
        return value, offset + 2
    if prefix == 0xfe:
        if offset + 4 > len(data):
            raise TxSerializationError("Varint truncated")
        value = int.from_bytes(data[offset : offset + 4], "little")
        return value, offset + 4
    if offset + 8 > len(data):
        raise TxSerializationError("Varint truncated")
    value = int.from_bytes(data[offset : offset + 8], "little")
    return value, offset + 8


def _read_bytes(data: bytes, offset: int, what: str) -> tuple[bytes, int]:
    length, offset = decode_varint(data, offset)
    if offset + length > len(data):
        raise TxSerializationError(f"Truncated {what}")
    return data[offset : offset + length], offset + length


@dataclass(frozen=True, slots=True)
class OutPoint:
    hash: Hash
    index: int

    def __str__(self) -> str:
        return f"{self.hash}:{self.index}"


@dataclass(slots=True)
class TxInput:
    prev_txid: str
    prev_vout: int
    script_sig: bytes
    sequence: int = 0xFFFFFFFF
    witness: list[bytes] = field(default_factory=list)

    @property
    def outpoint(self) -> OutPoint:
        return OutPoint(Hash.from_str(self.prev_txid), self.prev_vout)

    def serialize(self) -> bytes:
        prev = bytes.fromhex(self.prev_txid)
        if len(prev) != 32:
            raise TxSerializationError("prev_txid must be 32 bytes")
        encoded = prev[::-1]  # little-endian as per Bitcoin
        encoded += self.prev_vout.to_bytes(4, "little")
        encoded += encode_varint(len(self.script_sig))
        encoded += self.script_sig
        encoded += self.sequence.to_bytes(4, "little")
        return encoded

    def serialize_witness(self) -> bytes:
        encoded = encode_varint(len(self.witness))
        for item in self.witness:
            encoded += encode_varint(len(item)) + item
        return encoded


@dataclass(slots=True)
class TxOutput:
    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        if not (0 <= self.value <= MAX_MONEY):
            raise TxSerializationError("Invalid output value")
        encoded = self.value.to_bytes(8, "little")
        encoded += encode_varint(len(self.script_pubkey))
        encoded += self.script_pubkey
        return encoded


@dataclass(slots=True)
class Transaction:
    version: int
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    lock_time: int = 0

    def has_witness(self) -> bool:
        return any(txin.witness for txin in self.inputs)

    def serialize(self, *, include_witness: bool = True) -> bytes:
        witness = include_witness and self.has_witness()
        encoded = self.version.to_bytes(4, "little", signed=True)
        if witness:
            encoded += bytes([WITNESS_MARKER, WITNESS_FLAG])
        encoded += encode_varint(len(self.inputs))
        for txin in self.inputs:
            encoded += txin.serialize()
        encoded += encode_varint(len(self.outputs))
        for txout in self.outputs:
            encoded += txout.serialize()
        if witness:
            for txin in self.inputs:
                encoded += txin.serialize_witness()
        encoded += self.lock_time.to_bytes(4, "little")
        return encoded

    def txid(self) -> str:
        return str(self.tx_hash())

    def tx_hash(self) -> Hash:
        return Hash(crypto.sha256d(self.serialize(include_witness=False)))

    @classmethod
    def parse_from(cls, raw: bytes, offset: int = 0) -> tuple[Transaction, int]:
        if offset + 10 > len(raw):
            raise TxSerializationError("Transaction too small")
        version = int.from_bytes(raw[offset : offset + 4], "little", signed=True)
        offset += 4
        witness = False
        if raw[offset] == WITNESS_MARKER and offset + 1 < len(raw) and raw[offset + 1] == WITNESS_FLAG:
            witness = True
            offset += 2
        in_count, offset = decode_varint(raw, offset)
        inputs: list[TxInput] = []
        for _ in range(in_count):
            if offset + 36 > len(raw):
                raise TxSerializationError("Truncated input")
            prev_txid = raw[offset : offset + 32][::-1].hex()
            offset += 32
            prev_vout = int.from_bytes(raw[offset : offset + 4], "little")
            offset += 4
            script_sig, offset = _read_bytes(raw, offset, "input script")
            if offset + 4 > len(raw):
                raise TxSerializationError("Truncated input sequence")
            sequence = int.from_bytes(raw[offset : offset + 4], "little")
            offset += 4
            inputs.append(TxInput(prev_txid=prev_txid, prev_vout=prev_vout, script_sig=script_sig, sequence=sequence))
        out_count, offset = decode_varint(raw, offset)
        outputs: list[TxOutput] = []
        for _ in range(out_count):
            if offset + 8 > len(raw):
                raise TxSerializationError("Truncated output value")
            value = int.from_bytes(raw[offset : offset + 8], "little")
            offset += 8
            script_pubkey, offset = _read_bytes(raw, offset, "output script")
            outputs.append(TxOutput(value=value, script_pubkey=script_pubkey))
        if witness:
            for txin in inputs:
                item_count, offset = decode_varint(raw, offset)
                for _ in range(item_count):
                    item, offset = _read_bytes(raw, offset, "witness item")
                    txin.witness.append(item)
            if not any(txin.witness for txin in inputs):
                raise TxSerializationError("Witness flag set without witness data")
        if offset + 4 > len(raw):
            raise TxSerializationError("Missing locktime")
        lock_time = int.from_bytes(raw[offset : offset + 4], "little")
        offset += 4
        tx = cls(version=version, inputs=inputs, outputs=outputs, lock_time=lock_time)
        tx.validate_basic()
        return tx, offset

    @classmethod
    def parse(cls, raw: bytes) -> Transaction:
        tx, offset = cls.parse_from(raw, 0)
        if offset != len(raw):
            raise TxSerializationError("Trailing data in transaction")
        return tx

    @classmethod
    def from_hex(cls, value: str) -> Transaction:
        return cls.parse(bytes.fromhex(value))

    def to_hex(self) -> str:
        return self.serialize().hex()

    def validate_basic(self) -> None:
        if not self.inputs:
            raise TxSerializationError("Transaction must have inputs")
        if not self.outputs:
            raise TxSerializationError("Transaction must have outputs")
        if len(self.serialize()) > MAX_TX_SIZE:
            raise TxSerializationError("Transaction exceeds max size")
        if any(out.value < 0 or out.value > MAX_MONEY for out in self.outputs):
            raise TxSerializationError("Output value out of range")
        total = sum(out.value for out in self.outputs)
        if total > MAX_MONEY:
            raise TxSerializationError("Total output exceeds money supply")
