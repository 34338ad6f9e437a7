"""
Bech32 (BIP173) encoding for native segwit v0 addresses.
"""

from __future__ import annotations

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


class Bech32Error(Exception):
    pass


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(ch) >> 5 for ch in hrp] + [0] + [ord(ch) & 31 for ch in hrp]


def _convert_bits(data: list[int] | bytes, from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error("Invalid data value")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise Bech32Error("Invalid padding")
    return out


def bech32_encode(hrp: str, data: list[int]) -> str:
    values = _hrp_expand(hrp) + data
    polymod = _polymod(values + [0] * 6) ^ 1
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(CHARSET[d] for d in data + checksum)


def bech32_decode(value: str) -> tuple[str, list[int]]:
    if value.lower() != value and value.upper() != value:
        raise Bech32Error("Mixed case bech32 string")
    value = value.lower()
    pos = value.rfind("1")
    if pos < 1 or pos + 7 > len(value) or len(value) > 90:
        raise Bech32Error("Invalid bech32 separator position")
    hrp = value[:pos]
    if any(ord(ch) < 33 or ord(ch) > 126 for ch in hrp):
        raise Bech32Error("Invalid human-readable part")
    try:
        data = [CHARSET.index(ch) for ch in value[pos + 1 :]]
    except ValueError as exc:
        raise Bech32Error("Invalid bech32 character") from exc
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise Bech32Error("Invalid bech32 checksum")
    return hrp, data[:-6]


def decode_segwit(hrp: str, address: str) -> tuple[int, bytes]:
    """Return ``(witness_version, program)`` for a segwit address under ``hrp``."""

    found_hrp, data = bech32_decode(address)
    if found_hrp != hrp:
        raise Bech32Error(f"Unexpected human-readable part {found_hrp!r}")
    if not data:
        raise Bech32Error("Empty witness data")
    version = data[0]
    if version != 0:
        raise Bech32Error(f"Unsupported witness version {version}")
    program = bytes(_convert_bits(data[1:], 5, 8, False))
    if len(program) not in (20, 32):
        raise Bech32Error("Invalid witness program length")
    return version, program


def encode_segwit(hrp: str, version: int, program: bytes) -> str:
    return bech32_encode(hrp, [version] + _convert_bits(program, 8, 5, True))
