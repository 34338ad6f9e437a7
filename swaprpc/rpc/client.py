"""
Typed client for Electrum-style wallet daemons.

Every operation comes in two forms: ``<name>_async`` dispatches the command
and returns a :class:`ResultFuture` straight away, and ``<name>`` blocks on
that future and returns the decoded value.
"""

from __future__ import annotations

import itertools
import logging
import threading
from functools import partial
from typing import TYPE_CHECKING, Callable, TypeVar

from ..core.address import Address
from ..core.amount import Amount
from ..core.chainhash import Hash
from ..core.keys import WIF
from ..core.params import MAINNET, NetworkParams
from ..core.tx import Transaction
from . import results
from .commands import (
    BroadcastCmd,
    Command,
    GetFeeRateCmd,
    GetPrivateKeysCmd,
    GetUnusedAddressCmd,
    LegacyGetPrivateKeysCmd,
    ListUnspentCmd,
    PayToCmd,
    ProtocolRevision,
    build_registry,
)
from .errors import CapabilityNotSupportedError
from .future import Future, ResultFuture
from .registry import CommandRegistry
from .request import marshal_command
from .results import UnspentOutput
from .transport import HTTPTransport, Transport

if TYPE_CHECKING:
    from ..config import ClientConfig

log = logging.getLogger(__name__)

T = TypeVar("T")


class Client:
    def __init__(
        self,
        transport: Transport,
        *,
        registry: CommandRegistry | None = None,
        params: NetworkParams = MAINNET,
        revision: ProtocolRevision = ProtocolRevision.CURRENT,
    ):
        self.transport = transport
        self.revision = revision
        self.registry = registry if registry is not None else build_registry(revision)
        self.params = params
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ClientConfig) -> Client:
        config.validate()
        return cls(HTTPTransport(config), params=config.network_params, revision=config.revision)

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        self.transport.close()

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def send_command(self, command: Command) -> Future:
        """Marshal ``command`` and hand it to the transport without waiting."""

        request_id = self.next_id()
        payload = marshal_command(self.registry, request_id, command)
        log.debug("Dispatching %s id=%s", type(command).__name__, request_id)
        return self.transport.send(payload)

    def _dispatch(self, command: Command, decoder: Callable[[bytes], T]) -> ResultFuture[T]:
        return ResultFuture(self.send_command(command), decoder)

    def get_unused_address_async(self) -> ResultFuture[Address]:
        return self._dispatch(GetUnusedAddressCmd(), partial(results.decode_address_result, params=self.params))

    def get_unused_address(self) -> Address:
        """Return the first unused address of the wallet."""

        return self.get_unused_address_async().receive()

    def dump_priv_key_async(self, address: Address) -> ResultFuture[WIF]:
        # The registry decides which getprivatekeys wire shape is spoken.
        if self.registry.handles(LegacyGetPrivateKeysCmd):
            command: Command = LegacyGetPrivateKeysCmd.for_addresses(address.encode())
        else:
            command = GetPrivateKeysCmd.for_addresses(address.encode())
        return self._dispatch(command, results.decode_private_key_result)

    def dump_priv_key(self, address: Address) -> WIF:
        """Export the private key behind ``address``."""

        return self.dump_priv_key_async(address).receive()

    def get_fee_rate_async(self) -> ResultFuture[Amount]:
        return self._dispatch(GetFeeRateCmd(), results.decode_fee_rate_result)

    def get_fee_rate(self) -> Amount:
        """Current fee rate in satoshis per kilobyte."""

        return self.get_fee_rate_async().receive()

    def pay_to_async(
        self, destination: Address, amount: Amount, unsigned: bool
    ) -> ResultFuture[tuple[Transaction, bool]]:
        command = PayToCmd.create(destination, amount, unsigned)
        return self._dispatch(command, results.decode_funded_transaction)

    def pay_to(self, destination: Address, amount: Amount, unsigned: bool) -> tuple[Transaction, bool]:
        """Have the wallet fund a payment; returns the transaction and whether it is fully signed."""

        return self.pay_to_async(destination, amount, unsigned).receive()

    def list_unspent_async(self) -> ResultFuture[list[UnspentOutput]]:
        return self._dispatch(ListUnspentCmd(), partial(results.decode_unspent_outputs, params=self.params))

    def list_unspent(self) -> list[UnspentOutput]:
        return self.list_unspent_async().receive()

    def broadcast_async(self, tx: Transaction) -> ResultFuture[Hash]:
        return self._dispatch(BroadcastCmd.for_transaction(tx), results.decode_broadcast_result)

    def broadcast(self, tx: Transaction) -> Hash:
        """Relay ``tx`` to the network and return its hash."""

        return self.broadcast_async(tx).receive()

    # Bitcoin Core compatible names used by swap code.

    def send_raw_transaction(self, tx: Transaction, allow_high_fees: bool = False) -> Hash:
        """Alias for :meth:`broadcast`; ``allow_high_fees`` is ignored."""

        return self.broadcast(tx)

    def sign_raw_transaction(self, tx: Transaction) -> tuple[Transaction, bool]:
        raise CapabilityNotSupportedError("SignRawTransaction is not implemented")
