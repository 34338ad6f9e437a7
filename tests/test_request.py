import json
import unittest
from dataclasses import dataclass

from swaprpc.core.amount import Amount
from swaprpc.rpc.commands import (
    BroadcastCmd,
    Command,
    GetFeeRateCmd,
    GetPrivateKeysCmd,
    LegacyGetPrivateKeysCmd,
    Param,
    PayToCmd,
    ProtocolRevision,
    build_registry,
)
from swaprpc.rpc.errors import InvalidIDError, MarshalError, UnregisteredCommandError
from swaprpc.rpc.registry import CommandRegistry
from swaprpc.rpc.request import build_request, is_valid_id_type, marshal_command, new_request_positional


@dataclass(frozen=True, slots=True)
class OptionalTailCmd(Command):
    first: str
    second: int | None = None
    third: bool | None = None

    def params(self) -> tuple[Param, ...]:
        return (
            Param("first", self.first),
            Param("second", self.second, optional=True),
            Param("third", self.third, optional=True),
        )


@dataclass(frozen=True, slots=True)
class NamedTailCmd(OptionalTailCmd):
    pass


@dataclass(frozen=True, slots=True)
class RawBytesCmd(Command):
    blob: bytes

    def params(self) -> tuple[Param, ...]:
        return (Param("blob", self.blob),)


def _registry() -> CommandRegistry:
    registry = CommandRegistry()
    registry.register("optionaltail", OptionalTailCmd)
    registry.register("optionalnamed", NamedTailCmd, named=True)
    registry.register("rawbytes", RawBytesCmd)
    return registry.freeze()


class RequestTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = _registry()

    def test_valid_id_types(self) -> None:
        for request_id in (0, -1, 2**64 + 5, -(2**70), 1.5, "abc", "", None):
            self.assertTrue(is_valid_id_type(request_id), request_id)
            request = build_request(self.registry, request_id, OptionalTailCmd("a"))
            self.assertEqual(request.id, request_id)

    def test_invalid_id_types(self) -> None:
        for request_id in (True, [1], {"id": 1}, b"raw", (1,), object()):
            self.assertFalse(is_valid_id_type(request_id), request_id)
            with self.assertRaises(InvalidIDError):
                marshal_command(self.registry, request_id, OptionalTailCmd("a"))
        with self.assertRaises(InvalidIDError):
            new_request_positional([], "method", [])

    def test_envelope_shape(self) -> None:
        raw = marshal_command(self.registry, 7, OptionalTailCmd("a", 2, True))
        self.assertEqual(
            json.loads(raw),
            {"jsonrpc": "1.0", "method": "optionaltail", "params": ["a", 2, True], "id": 7},
        )

    def test_positional_stops_at_first_unset_optional(self) -> None:
        raw = marshal_command(self.registry, 1, OptionalTailCmd("a", None, True))
        self.assertEqual(json.loads(raw)["params"], ["a"])
        raw = marshal_command(self.registry, 1, OptionalTailCmd("a", 5))
        self.assertEqual(json.loads(raw)["params"], ["a", 5])

    def test_named_params_skip_unset_optionals(self) -> None:
        raw = marshal_command(self.registry, 2, NamedTailCmd("a", None, True))
        self.assertEqual(json.loads(raw)["params"], {"first": "a", "third": True})

    def test_payto_uses_named_params(self) -> None:
        registry = CommandRegistry()
        registry.register("payto", PayToCmd, named=True)
        cmd = PayToCmd(destination="1BoatSLRHtKNngkdXEeobR76b53LETtpyT", amount=Amount(1_000_000), unsigned=True)
        params = json.loads(marshal_command(registry, 3, cmd))["params"]
        self.assertEqual(
            params,
            {"destination": "1BoatSLRHtKNngkdXEeobR76b53LETtpyT", "amount": 0.01, "unsigned": True},
        )

    def test_unregistered_command(self) -> None:
        with self.assertRaises(UnregisteredCommandError):
            marshal_command(self.registry, 1, GetFeeRateCmd())

    def test_marshal_error_names_field(self) -> None:
        with self.assertRaises(MarshalError) as ctx:
            marshal_command(self.registry, 1, RawBytesCmd(b"\x00"))
        self.assertEqual(ctx.exception.field, "blob")

    def test_nan_id_is_rejected_at_marshal_time(self) -> None:
        with self.assertRaises(MarshalError):
            marshal_command(self.registry, float("nan"), OptionalTailCmd("a"))

    def test_private_key_export_parameter_shapes(self) -> None:
        current = build_registry()
        raw = marshal_command(current, 1, GetPrivateKeysCmd.for_addresses("addr1", "addr2"))
        self.assertEqual(json.loads(raw)["params"], [["addr1", "addr2"]])
        legacy = build_registry(ProtocolRevision.LEGACY)
        raw = marshal_command(legacy, 1, LegacyGetPrivateKeysCmd.for_addresses("addr1", "addr2"))
        self.assertEqual(json.loads(raw)["params"], ["addr1,addr2"])

    def test_broadcast_sends_hex(self) -> None:
        raw = marshal_command(build_registry(), "swap", BroadcastCmd("0100"))
        self.assertEqual(json.loads(raw), {"jsonrpc": "1.0", "method": "broadcast", "params": ["0100"], "id": "swap"})


if __name__ == "__main__":
    unittest.main()
