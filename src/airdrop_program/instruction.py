from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from borsh_construct import CStruct, U8, U64

from .errors import DeserializationFailed
from .project_constants import METADATA_PREFIX_LEN, SYMBOL_LEN

U64_MAX = 2**64 - 1

TAG_INITIALIZE_AIRDROP = 0
TAG_INITIALIZE_AIRDROP_USER = 1
TAG_MINT_ONE = 2

InitializeAirdropLayout = CStruct(
    "airdrop_amount" / U64,
    "metadata_prefix" / U8[METADATA_PREFIX_LEN],
    "symbol" / U8[SYMBOL_LEN],
    "price" / U64,
)
INITIALIZE_AIRDROP_ARGS_LEN = InitializeAirdropLayout.sizeof()


def fixed_bytes(value: Union[str, bytes], size: int) -> bytes:
    """Right-pads `value` with zeros to `size` bytes."""
    raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    if len(raw) > size:
        raise ValueError(f"value is {len(raw)} bytes, at most {size} allowed")
    return raw.ljust(size, b"\x00")


@dataclass(frozen=True)
class InitializeAirdropArgs:
    airdrop_amount: int
    metadata_prefix: bytes
    symbol: bytes
    price: int

    def __post_init__(self) -> None:
        for name in ("airdrop_amount", "price"):
            value = getattr(self, name)
            if not 0 <= value <= U64_MAX:
                raise ValueError(f"{name} must be within u64 range")
        if len(self.metadata_prefix) != METADATA_PREFIX_LEN:
            raise ValueError(f"metadata_prefix must be {METADATA_PREFIX_LEN} bytes")
        if len(self.symbol) != SYMBOL_LEN:
            raise ValueError(f"symbol must be {SYMBOL_LEN} bytes")


@dataclass(frozen=True)
class InitializeAirdrop:
    args: InitializeAirdropArgs
    tag: int = field(default=TAG_INITIALIZE_AIRDROP, init=False)

    def pack(self) -> bytes:
        body = InitializeAirdropLayout.build(
            {
                "airdrop_amount": self.args.airdrop_amount,
                "metadata_prefix": list(self.args.metadata_prefix),
                "symbol": list(self.args.symbol),
                "price": self.args.price,
            }
        )
        return bytes([self.tag]) + body

    def to_json(self) -> Dict[str, Any]:
        return {
            "instruction": "InitializeAirdrop",
            "airdrop_amount": self.args.airdrop_amount,
            "metadata_prefix": self.args.metadata_prefix.rstrip(b"\x00").decode("utf-8", "replace"),
            "symbol": self.args.symbol.rstrip(b"\x00").decode("utf-8", "replace"),
            "price": self.args.price,
        }


@dataclass(frozen=True)
class InitializeAirdropUser:
    tag: int = field(default=TAG_INITIALIZE_AIRDROP_USER, init=False)

    def pack(self) -> bytes:
        return bytes([self.tag])

    def to_json(self) -> Dict[str, Any]:
        return {"instruction": "InitializeAirdropUser"}


@dataclass(frozen=True)
class MintOne:
    tag: int = field(default=TAG_MINT_ONE, init=False)

    def pack(self) -> bytes:
        return bytes([self.tag])

    def to_json(self) -> Dict[str, Any]:
        return {"instruction": "MintOne"}


AirdropInstruction = Union[InitializeAirdrop, InitializeAirdropUser, MintOne]


def deserialize_instruction_data(data: bytes) -> AirdropInstruction:
    """
    Decodes `tag || borsh(args)`. Any leftover or missing byte is an error,
    so a payload maps to at most one instruction.
    """
    if not data:
        raise DeserializationFailed("instruction data is empty")

    tag, body = data[0], bytes(data[1:])

    if tag == TAG_INITIALIZE_AIRDROP:
        if len(body) != INITIALIZE_AIRDROP_ARGS_LEN:
            raise DeserializationFailed(
                f"InitializeAirdrop expects {INITIALIZE_AIRDROP_ARGS_LEN} bytes of args, got {len(body)}"
            )
        parsed = InitializeAirdropLayout.parse(body)
        return InitializeAirdrop(
            InitializeAirdropArgs(
                airdrop_amount=int(parsed.airdrop_amount),
                metadata_prefix=bytes(parsed.metadata_prefix),
                symbol=bytes(parsed.symbol),
                price=int(parsed.price),
            )
        )

    if tag in (TAG_INITIALIZE_AIRDROP_USER, TAG_MINT_ONE):
        if body:
            raise DeserializationFailed(f"instruction {tag} takes no args, got {len(body)} bytes")
        return InitializeAirdropUser() if tag == TAG_INITIALIZE_AIRDROP_USER else MintOne()

    raise DeserializationFailed(f"unknown instruction tag {tag}")
