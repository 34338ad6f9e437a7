import json
import threading
import unittest

from swaprpc.core import crypto
from swaprpc.core.address import address_from_pubkey
from swaprpc.core.amount import Amount
from swaprpc.core.chainhash import Hash
from swaprpc.core.keys import WIF
from swaprpc.core.params import MAINNET, TESTNET
from swaprpc.core.tx import Transaction, TxInput, TxOutput
from swaprpc.rpc.client import Client
from swaprpc.rpc.commands import GetFeeRateCmd, ProtocolRevision, build_registry
from swaprpc.rpc.errors import (
    CapabilityNotSupportedError,
    DecodeError,
    InvalidResponseError,
    RPCError,
    TransportError,
    UnregisteredCommandError,
)
from swaprpc.rpc.future import Future
from swaprpc.rpc.registry import CommandRegistry
from swaprpc.rpc.transport import Transport

TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"


class StubTransport(Transport):
    """Records requests and resolves futures from canned replies keyed by method."""

    def __init__(self, replies: dict[str, object] | None = None, *, defer: bool = False):
        self.replies = replies or {}
        self.defer = defer
        self.requests: list[dict] = []
        self.pending: list[tuple[dict, Future]] = []
        self.closed = False
        self._lock = threading.Lock()

    def send(self, request: bytes) -> Future:
        decoded = json.loads(request)
        future = Future()
        with self._lock:
            self.requests.append(decoded)
            if self.defer:
                self.pending.append((decoded, future))
                return future
        self._settle(decoded, future)
        return future

    def flush(self) -> None:
        for decoded, future in self.pending:
            self._settle(decoded, future)
        self.pending.clear()

    def _settle(self, decoded: dict, future: Future) -> None:
        reply = self.replies.get(decoded["method"])
        if isinstance(reply, BaseException):
            future.fail(reply)
        elif isinstance(reply, bytes):
            future.resolve(reply)
        else:
            future.resolve(json.dumps(reply).encode("utf-8"))

    def close(self) -> None:
        self.closed = True


def _address(seed: int, params=MAINNET):
    return address_from_pubkey(crypto.generate_pubkey(seed), params)


def _funded_tx() -> Transaction:
    return Transaction(
        version=2,
        inputs=[TxInput(prev_txid=TXID, prev_vout=3, script_sig=b"")],
        outputs=[TxOutput(value=1_000_000, script_pubkey=_address(5).script_pubkey())],
    )


class ClientTests(unittest.TestCase):
    def test_get_unused_address(self) -> None:
        address = _address(11)
        transport = StubTransport({"getunusedaddress": address.encode()})
        client = Client(transport)
        self.assertEqual(client.get_unused_address(), address)
        self.assertEqual(
            transport.requests,
            [{"jsonrpc": "1.0", "method": "getunusedaddress", "params": [], "id": 1}],
        )

    def test_address_checked_against_client_network(self) -> None:
        transport = StubTransport({"getunusedaddress": _address(11, TESTNET).encode()})
        with self.assertRaises(DecodeError):
            Client(transport).get_unused_address()
        self.assertEqual(Client(transport, params=TESTNET).get_unused_address(), _address(11, TESTNET))

    def test_dump_priv_key_current_and_legacy(self) -> None:
        wif = WIF(private_key=4242, compress_pubkey=True, net_id=MAINNET.private_key_id)
        address = _address(4242)

        current = StubTransport({"getprivatekeys": [wif.encode()]})
        self.assertEqual(Client(current).dump_priv_key(address), wif)
        self.assertEqual(current.requests[0]["params"], [[address.encode()]])

        legacy = StubTransport({"getprivatekeys": "p2pkh:" + wif.encode()})
        client = Client(legacy, revision=ProtocolRevision.LEGACY)
        self.assertEqual(client.dump_priv_key(address), wif)
        self.assertEqual(legacy.requests[0]["params"], [address.encode()])

    def test_dump_priv_key_follows_injected_registry(self) -> None:
        wif = WIF(private_key=4242, compress_pubkey=True, net_id=MAINNET.private_key_id)
        address = _address(4242)
        transport = StubTransport({"getprivatekeys": "p2pkh:" + wif.encode()})
        client = Client(transport, registry=build_registry(ProtocolRevision.LEGACY))
        self.assertEqual(client.dump_priv_key(address), wif)
        self.assertEqual(transport.requests[0]["params"], [address.encode()])

    def test_get_fee_rate(self) -> None:
        client = Client(StubTransport({"getfeerate": 20_000}))
        self.assertEqual(client.get_fee_rate(), Amount(20_000))

    def test_pay_to(self) -> None:
        tx = _funded_tx()
        transport = StubTransport({"payto": {"complete": False, "final": False, "hex": tx.to_hex()}})
        destination = _address(5)
        funded, complete = Client(transport).pay_to(destination, Amount.from_coins("0.01"), True)
        self.assertEqual(funded, tx)
        self.assertFalse(complete)
        self.assertEqual(
            transport.requests[0]["params"],
            {"destination": destination.encode(), "amount": 0.01, "unsigned": True},
        )

    def test_list_unspent(self) -> None:
        entry = {
            "address": _address(6).encode(),
            "value": "0.5",
            "prevout_n": 1,
            "prevout_hash": TXID,
            "height": 700_000,
            "coinbase": False,
        }
        client = Client(StubTransport({"listunspent": [entry]}))
        (utxo,) = client.list_unspent()
        self.assertEqual(utxo.value, Amount(50_000_000))
        self.assertEqual(str(utxo.outpoint), f"{TXID}:1")

    def test_broadcast_and_send_raw_transaction(self) -> None:
        tx = _funded_tx()
        transport = StubTransport({"broadcast": [True, tx.txid()]})
        client = Client(transport)
        self.assertEqual(client.broadcast(tx), tx.tx_hash())
        self.assertEqual(client.send_raw_transaction(tx, allow_high_fees=True), Hash.from_str(tx.txid()))
        self.assertEqual(transport.requests[0]["params"], [tx.to_hex()])
        self.assertEqual([request["id"] for request in transport.requests], [1, 2])

    def test_broadcast_short_reply(self) -> None:
        client = Client(StubTransport({"broadcast": ["queued"]}))
        with self.assertRaises(InvalidResponseError):
            client.broadcast(_funded_tx())

    def test_sign_raw_transaction_is_not_dispatched(self) -> None:
        transport = StubTransport()
        with self.assertRaises(CapabilityNotSupportedError) as ctx:
            Client(transport).sign_raw_transaction(_funded_tx())
        self.assertEqual(str(ctx.exception), "SignRawTransaction is not implemented")
        self.assertEqual(transport.requests, [])

    def test_rpc_and_transport_errors_pass_through(self) -> None:
        rpc_error = RPCError(-4, "Insufficient funds")
        client = Client(StubTransport({"payto": rpc_error, "getfeerate": TransportError("connection reset")}))
        with self.assertRaises(RPCError) as ctx:
            client.pay_to(_address(1), Amount(1), False)
        self.assertIs(ctx.exception, rpc_error)
        with self.assertRaises(TransportError):
            client.get_fee_rate()

    def test_construction_errors_are_synchronous(self) -> None:
        transport = StubTransport()
        client = Client(transport, registry=CommandRegistry().freeze())
        with self.assertRaises(UnregisteredCommandError):
            client.send_command(GetFeeRateCmd())
        self.assertEqual(transport.requests, [])

    def test_async_dispatch_does_not_block(self) -> None:
        transport = StubTransport({"getfeerate": 1000, "listunspent": []}, defer=True)
        client = Client(transport)
        fee = client.get_fee_rate_async()
        utxos = client.list_unspent_async()
        self.assertFalse(fee.done())
        self.assertEqual(len(transport.requests), 2)
        transport.flush()
        self.assertEqual(utxos.receive(), [])
        self.assertEqual(fee.receive(), Amount(1000))

    def test_concurrent_ids_are_unique(self) -> None:
        transport = StubTransport({"getfeerate": 1})
        client = Client(transport)
        threads = [threading.Thread(target=client.get_fee_rate) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)
        ids = [request["id"] for request in transport.requests]
        self.assertEqual(sorted(ids), list(range(1, 17)))

    def test_context_manager_closes_transport(self) -> None:
        transport = StubTransport()
        with Client(transport):
            pass
        self.assertTrue(transport.closed)


if __name__ == "__main__":
    unittest.main()
