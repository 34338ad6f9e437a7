"""
Hashing, base58 and secp256k1 helpers for wallet key material.
"""

from __future__ import annotations

import hashlib

__all__ = [
    "sha256",
    "sha256d",
    "hash160",
    "base58check_encode",
    "base58check_decode",
    "generate_pubkey",
    "CryptoError",
]


class CryptoError(Exception):
    pass


SECP_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
SECP_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP_A = 0
SECP_B = 7
G_X = 55066263022277343669578718895168534326250603453777594175500187360389116729240
G_Y = 32670510020758816978083085130507043184471273380659243275938904335757337482424
G = (G_X, G_Y)


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    return sha256(sha256(data))


def ripemd160(data: bytes) -> bytes:
    try:
        return hashlib.new("ripemd160", data).digest()
    except ValueError:
        # OpenSSL 3.0+ requires legacy provider for RIPEMD160
        import subprocess

        result = subprocess.run(
            ["openssl", "dgst", "-ripemd160", "-binary"],
            input=data,
            capture_output=True,
            check=True,
        )
        return result.stdout


def hash160(data: bytes) -> bytes:
    return ripemd160(sha256(data))


ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def base58check_encode(payload: bytes) -> str:
    checksum = sha256d(payload)[:4]
    return base58_encode(payload + checksum)


def base58check_decode(value: str) -> bytes:
    data = base58_decode(value)
    if len(data) < 5:
        raise CryptoError("Base58 payload too short")
    payload, checksum = data[:-4], data[-4:]
    if sha256d(payload)[:4] != checksum:
        raise CryptoError("Invalid base58 checksum")
    return payload


def base58_encode(data: bytes) -> str:
    num = int.from_bytes(data, "big")
    encoded = bytearray()
    while num:
        num, rem = divmod(num, 58)
        encoded.insert(0, ALPHABET[rem])
    for byte in data:
        if byte == 0:
            encoded.insert(0, ALPHABET[0])
        else:
            break
    return encoded.decode("ascii")


def base58_decode(value: str) -> bytes:
    if not value:
        raise CryptoError("Empty base58 string")
    num = 0
    try:
        raw = value.encode("ascii")
    except UnicodeEncodeError as exc:
        raise CryptoError("Invalid base58 character") from exc
    for ch in raw:
        num *= 58
        idx = ALPHABET.find(bytes([ch]))
        if idx == -1:
            raise CryptoError("Invalid base58 character")
        num += idx
    data = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    pad = 0
    for ch in value:
        if ch == "1":
            pad += 1
        else:
            break
    return b"\x00" * pad + data


def inverse_mod(k: int) -> int:
    if k == 0:
        raise CryptoError("Division by zero")
    return pow(k, SECP_P - 2, SECP_P)


def is_on_curve(point: tuple[int, int]) -> bool:
    x, y = point
    return (y * y - (x * x * x + SECP_A * x + SECP_B)) % SECP_P == 0


def point_add(p: tuple[int, int] | None, q: tuple[int, int] | None) -> tuple[int, int] | None:
    if p is None:
        return q
    if q is None:
        return p
    if p[0] == q[0] and p[1] != q[1]:
        return None
    if p == q:
        m = (3 * p[0] * p[0] + SECP_A) * inverse_mod(2 * p[1]) % SECP_P
    else:
        m = (q[1] - p[1]) * inverse_mod((q[0] - p[0]) % SECP_P) % SECP_P
    x_r = (m * m - p[0] - q[0]) % SECP_P
    y_r = (m * (p[0] - x_r) - p[1]) % SECP_P
    return x_r, y_r


def scalar_mul(k: int, point: tuple[int, int] = G) -> tuple[int, int] | None:
    if k % SECP_N == 0 or point is None:
        return None
    result = None
    addend = point
    while k:
        if k & 1:
            result = point_add(result, addend)
        addend = point_add(addend, addend)
        k >>= 1
    return result


def generate_pubkey(privkey: int, compressed: bool = True) -> bytes:
    if not (1 <= privkey < SECP_N):
        raise CryptoError("Invalid private key range")
    point = scalar_mul(privkey)
    if point is None or not is_on_curve(point):
        raise CryptoError("Point not on curve")
    x, y = point
    if not compressed:
        return b"\x04" + x.to_bytes(32, "big") + y.to_bytes(32, "big")
    prefix = b"\x02" if y % 2 == 0 else b"\x03"
    return prefix + x.to_bytes(32, "big")
