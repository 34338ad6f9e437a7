"""
Chain parameters used to validate addresses and keys returned by a wallet.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NetworkParams:
    name: str
    pubkey_hash_addr_id: int
    script_hash_addr_id: int
    private_key_id: int
    bech32_hrp: str


MAINNET = NetworkParams(
    name="mainnet",
    pubkey_hash_addr_id=0x00,
    script_hash_addr_id=0x05,
    private_key_id=0x80,
    bech32_hrp="bc",
)

TESTNET = NetworkParams(
    name="testnet",
    pubkey_hash_addr_id=0x6F,
    script_hash_addr_id=0xC4,
    private_key_id=0xEF,
    bech32_hrp="tb",
)

REGTEST = NetworkParams(
    name="regtest",
    pubkey_hash_addr_id=0x6F,
    script_hash_addr_id=0xC4,
    private_key_id=0xEF,
    bech32_hrp="bcrt",
)

NETWORKS: dict[str, NetworkParams] = {params.name: params for params in (MAINNET, TESTNET, REGTEST)}


def network_by_name(name: str) -> NetworkParams:
    try:
        return NETWORKS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown network {name!r}") from None
