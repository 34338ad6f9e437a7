"""
Domain values decoded from wallet responses.
"""

from . import address, amount, chainhash, crypto, keys, params, tx

__all__ = [
    "address",
    "amount",
    "chainhash",
    "crypto",
    "keys",
    "params",
    "tx",
]
