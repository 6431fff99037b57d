import struct
import unittest

from airdrop_program.errors import DeserializationFailed
from airdrop_program.instruction import (
    INITIALIZE_AIRDROP_ARGS_LEN,
    InitializeAirdrop,
    InitializeAirdropArgs,
    InitializeAirdropUser,
    MintOne,
    deserialize_instruction_data,
    fixed_bytes,
)

from builders import init_args


class DeserializeInstructionTests(unittest.TestCase):
    def test_initialize_airdrop_wire_format(self) -> None:
        prefix = fixed_bytes(b"https://x.io/", 32)
        data = (
            bytes([0])
            + struct.pack("<Q", 1_000_000)
            + prefix
            + fixed_bytes("TOKEN", 8)
            + struct.pack("<Q", 50_000)
        )
        self.assertEqual(INITIALIZE_AIRDROP_ARGS_LEN, 56)

        ix = deserialize_instruction_data(data)

        self.assertIsInstance(ix, InitializeAirdrop)
        self.assertEqual(ix.args.airdrop_amount, 1_000_000)
        self.assertEqual(ix.args.metadata_prefix, prefix)
        self.assertEqual(ix.args.symbol, b"TOKEN\x00\x00\x00")
        self.assertEqual(ix.args.price, 50_000)
        self.assertEqual(ix.pack(), data)

    def test_unit_variants(self) -> None:
        self.assertIsInstance(deserialize_instruction_data(b"\x01"), InitializeAirdropUser)
        self.assertIsInstance(deserialize_instruction_data(b"\x02"), MintOne)
        self.assertEqual(MintOne().pack(), b"\x02")

    def test_rejects_malformed_payloads(self) -> None:
        good = InitializeAirdrop(init_args()).pack()
        for data in (b"", b"\x03", b"\xff", good[:-1], good + b"\x00", b"\x01\x00", b"\x02\x00"):
            with self.subTest(data=data):
                with self.assertRaises(DeserializationFailed):
                    deserialize_instruction_data(data)

    def test_to_json_trims_padding(self) -> None:
        ix = InitializeAirdrop(init_args(symbol="TOKEN", prefix=b"ipfs://abc/"))
        self.assertEqual(ix.to_json()["symbol"], "TOKEN")
        self.assertEqual(ix.to_json()["metadata_prefix"], "ipfs://abc/")


class InitializeAirdropArgsTests(unittest.TestCase):
    def test_rejects_out_of_range_values(self) -> None:
        with self.assertRaises(ValueError):
            init_args(amount=-1)
        with self.assertRaises(ValueError):
            init_args(price=2**64)

    def test_rejects_wrong_blob_sizes(self) -> None:
        with self.assertRaises(ValueError):
            InitializeAirdropArgs(1, b"\x00" * 31, b"\x00" * 8, 1)
        with self.assertRaises(ValueError):
            InitializeAirdropArgs(1, b"\x00" * 32, b"\x00" * 9, 1)

    def test_fixed_bytes_rejects_overlong(self) -> None:
        with self.assertRaises(ValueError):
            fixed_bytes("TOOLONGSYM", 8)


if __name__ == "__main__":
    unittest.main()
