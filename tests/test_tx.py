import unittest

from swaprpc.core.chainhash import Hash, HashError
from swaprpc.core.tx import OutPoint, Transaction, TxInput, TxOutput, TxSerializationError, decode_varint, encode_varint

PREV = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"


def _tx(witness: list[bytes] | None = None) -> Transaction:
    txin = TxInput(prev_txid=PREV, prev_vout=0, script_sig=b"\x51", sequence=0xFFFFFFFE)
    if witness:
        txin.witness = list(witness)
    return Transaction(
        version=1,
        inputs=[txin],
        outputs=[TxOutput(value=5_000, script_pubkey=b"\x00\x14" + b"\xab" * 20)],
        lock_time=650_000,
    )


class TransactionCodecTests(unittest.TestCase):
    def test_varint_boundaries(self) -> None:
        for value in (0, 0xFC, 0xFD, 0xFFFF, 0x10000, 0xFFFFFFFF, 0x100000000):
            encoded = encode_varint(value)
            self.assertEqual(decode_varint(encoded), (value, len(encoded)))

    def test_legacy_round_trip(self) -> None:
        raw = _tx().serialize()
        self.assertEqual(raw[4], 1)
        self.assertEqual(Transaction.parse(raw).serialize(), raw)

    def test_witness_round_trip(self) -> None:
        tx = _tx([b"\x30" * 71, b"\x02" * 33])
        raw = tx.serialize()
        self.assertEqual(raw[4:6], b"\x00\x01")
        parsed = Transaction.parse(raw)
        self.assertEqual(parsed.inputs[0].witness, [b"\x30" * 71, b"\x02" * 33])
        self.assertEqual(parsed.serialize(), raw)
        self.assertEqual(Transaction.from_hex(tx.to_hex()), tx)

    def test_txid_ignores_witness(self) -> None:
        self.assertEqual(_tx().txid(), _tx([b"\x01"]).txid())
        self.assertEqual(str(_tx().tx_hash()), _tx().txid())

    def test_truncated_input_rejected(self) -> None:
        raw = _tx().serialize()
        for cut in (12, 40, len(raw) - 2):
            with self.assertRaises(TxSerializationError):
                Transaction.parse(raw[:cut])

    def test_outpoint(self) -> None:
        outpoint = _tx().inputs[0].outpoint
        self.assertEqual(outpoint, OutPoint(Hash.from_str(PREV), 0))
        self.assertEqual(str(outpoint), f"{PREV}:0")


class HashTests(unittest.TestCase):
    def test_string_form_is_byte_reversed(self) -> None:
        value = Hash.from_str(PREV)
        self.assertEqual(value.to_bytes(), bytes.fromhex(PREV)[::-1])
        self.assertEqual(str(value), PREV)

    def test_short_strings_are_padded(self) -> None:
        self.assertEqual(str(Hash.from_str("abc")), "0" * 61 + "abc")

    def test_invalid(self) -> None:
        for value in ("g" * 64, "0" * 66):
            with self.assertRaises(HashError):
                Hash.from_str(value)
        with self.assertRaises(HashError):
            Hash(b"\x00" * 31)


if __name__ == "__main__":
    unittest.main()
