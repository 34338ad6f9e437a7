"""
Command types understood by Electrum-style wallet daemons.

Each command is an immutable value whose :meth:`Command.params` table lists
its parameters in wire order together with their optionality.  Optional
parameters are left unset with ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

from ..core.address import Address
from ..core.amount import Amount
from ..core.tx import Transaction
from .registry import CommandRegistry


class ProtocolRevision(str, Enum):
    """Wallet protocol revisions with incompatible parameter layouts."""

    CURRENT = "current"
    LEGACY = "legacy"


class Param(NamedTuple):
    name: str
    value: Any
    optional: bool = False


class Command:
    """Base for registered commands."""

    __slots__ = ()

    def params(self) -> tuple[Param, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class GetUnusedAddressCmd(Command):
    pass


@dataclass(frozen=True, slots=True)
class GetPrivateKeysCmd(Command):
    addresses: tuple[str, ...]

    @classmethod
    def for_addresses(cls, *addresses: str) -> GetPrivateKeysCmd:
        return cls(addresses=tuple(addresses))

    def params(self) -> tuple[Param, ...]:
        return (Param("addresses", list(self.addresses)),)


@dataclass(frozen=True, slots=True)
class LegacyGetPrivateKeysCmd(Command):
    """Older servers take a single comma separated address string."""

    address: str

    @classmethod
    def for_addresses(cls, *addresses: str) -> LegacyGetPrivateKeysCmd:
        return cls(address=",".join(addresses))

    def params(self) -> tuple[Param, ...]:
        return (Param("address", self.address),)


@dataclass(frozen=True, slots=True)
class GetFeeRateCmd(Command):
    pass


@dataclass(frozen=True, slots=True)
class PayToCmd(Command):
    destination: str
    amount: Amount
    unsigned: bool

    @classmethod
    def create(cls, destination: Address, amount: Amount, unsigned: bool) -> PayToCmd:
        return cls(destination=destination.encode(), amount=Amount(amount), unsigned=unsigned)

    def params(self) -> tuple[Param, ...]:
        # payto takes a coin denominated JSON number; the float is only formed
        # here, from an exact satoshi count.
        return (
            Param("destination", self.destination),
            Param("amount", float(self.amount.to_coins())),
            Param("unsigned", self.unsigned),
        )


@dataclass(frozen=True, slots=True)
class ListUnspentCmd(Command):
    pass


@dataclass(frozen=True, slots=True)
class BroadcastCmd(Command):
    serialized_transaction: str

    @classmethod
    def for_transaction(cls, tx: Transaction) -> BroadcastCmd:
        return cls(serialized_transaction=tx.serialize().hex())

    def params(self) -> tuple[Param, ...]:
        return (Param("tx", self.serialized_transaction),)


def register_wallet_commands(registry: CommandRegistry, revision: ProtocolRevision = ProtocolRevision.CURRENT) -> None:
    registry.register("getunusedaddress", GetUnusedAddressCmd)
    if revision is ProtocolRevision.LEGACY:
        registry.register("getprivatekeys", LegacyGetPrivateKeysCmd)
    else:
        registry.register("getprivatekeys", GetPrivateKeysCmd)
    registry.register("getfeerate", GetFeeRateCmd)
    registry.register("payto", PayToCmd, named=True)
    registry.register("listunspent", ListUnspentCmd)
    registry.register("broadcast", BroadcastCmd)


def build_registry(revision: ProtocolRevision = ProtocolRevision.CURRENT) -> CommandRegistry:
    registry = CommandRegistry()
    register_wallet_commands(registry, revision)
    return registry.freeze()
