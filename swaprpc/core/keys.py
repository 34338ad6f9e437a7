"""
Wallet import format (WIF) private keys.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import crypto
from .address import AddressPubKeyHash, address_from_pubkey
from .params import NetworkParams

COMPRESS_MAGIC = 0x01


class WIFError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class WIF:
    private_key: int
    compress_pubkey: bool
    net_id: int

    def is_for_network(self, params: NetworkParams) -> bool:
        return self.net_id == params.private_key_id

    def public_key(self) -> bytes:
        return crypto.generate_pubkey(self.private_key, self.compress_pubkey)

    def address(self, params: NetworkParams) -> AddressPubKeyHash:
        return address_from_pubkey(self.public_key(), params)

    def encode(self) -> str:
        payload = bytes([self.net_id]) + self.private_key.to_bytes(32, "big")
        if self.compress_pubkey:
            payload += bytes([COMPRESS_MAGIC])
        return crypto.base58check_encode(payload)

    def __repr__(self) -> str:
        return f"WIF(net_id=0x{self.net_id:02x}, compress_pubkey={self.compress_pubkey})"


def decode_wif(value: str) -> WIF:
    try:
        payload = crypto.base58check_decode(value)
    except crypto.CryptoError as exc:
        raise WIFError(f"Malformed private key: {exc}") from exc
    if len(payload) == 34:
        if payload[-1] != COMPRESS_MAGIC:
            raise WIFError("Malformed private key: bad compression flag")
        compress = True
    elif len(payload) == 33:
        compress = False
    else:
        raise WIFError("Malformed private key: unexpected payload length")
    private_key = int.from_bytes(payload[1:33], "big")
    if not (1 <= private_key < crypto.SECP_N):
        raise WIFError("Malformed private key: outside curve order")
    return WIF(private_key=private_key, compress_pubkey=compress, net_id=payload[0])
