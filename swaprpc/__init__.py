"""
Typed JSON-RPC client for the wallets used by the atomic swap tool.
"""

__version__ = "0.1.0"
