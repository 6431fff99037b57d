"""
Persisted records owned by the program.

Both records are fixed-size borsh structs stored at offset 0 of their
account. Extra trailing account space is ignored on read and preserved on
write.
"""

from __future__ import annotations

from dataclasses import dataclass

from borsh_construct import Bool, CStruct, U8, U64
from solders.pubkey import Pubkey

from .accounts import AccountInfo
from .errors import InvalidAccountData
from .project_constants import METADATA_PREFIX_LEN, SYMBOL_LEN

PUBKEY = U8[32]

AirdropConfigLayout = CStruct(
    "is_initialized" / Bool,
    "authority" / PUBKEY,
    "mint_authority" / PUBKEY,
    "revenue_wallet" / PUBKEY,
    "airdrop_amount" / U64,
    "minted" / U64,
    "metadata_prefix" / U8[METADATA_PREFIX_LEN],
    "symbol" / U8[SYMBOL_LEN],
    "price" / U64,
    "mint_authority_bump" / U8,
)
AIRDROP_CONFIG_LEN = AirdropConfigLayout.sizeof()

AirdropUserDataLayout = CStruct(
    "is_initialized" / Bool,
    "user" / PUBKEY,
    "airdrop" / PUBKEY,
    "bump" / U8,
    "claimed" / Bool,
)
AIRDROP_USER_DATA_LEN = AirdropUserDataLayout.sizeof()


def _pubkey(raw) -> Pubkey:
    return Pubkey(bytes(raw))


def _write_record(acc: AccountInfo, raw: bytes) -> None:
    if len(acc.data) < len(raw):
        raise InvalidAccountData(
            f"{acc.key} holds {len(acc.data)} bytes, record needs {len(raw)}"
        )
    acc.data[: len(raw)] = raw


def _read_record(acc: AccountInfo, size: int) -> bytes:
    if len(acc.data) < size:
        raise InvalidAccountData(f"{acc.key} holds {len(acc.data)} bytes, record needs {size}")
    return bytes(acc.data[:size])


@dataclass
class AirdropConfig:
    is_initialized: bool
    authority: Pubkey
    mint_authority: Pubkey
    revenue_wallet: Pubkey
    airdrop_amount: int
    minted: int
    metadata_prefix: bytes
    symbol: bytes
    price: int
    mint_authority_bump: int

    @property
    def remaining(self) -> int:
        return max(self.airdrop_amount - self.minted, 0)

    def pack(self) -> bytes:
        return AirdropConfigLayout.build(
            {
                "is_initialized": self.is_initialized,
                "authority": list(bytes(self.authority)),
                "mint_authority": list(bytes(self.mint_authority)),
                "revenue_wallet": list(bytes(self.revenue_wallet)),
                "airdrop_amount": self.airdrop_amount,
                "minted": self.minted,
                "metadata_prefix": list(self.metadata_prefix),
                "symbol": list(self.symbol),
                "price": self.price,
                "mint_authority_bump": self.mint_authority_bump,
            }
        )

    @classmethod
    def unpack(cls, raw: bytes) -> "AirdropConfig":
        parsed = AirdropConfigLayout.parse(raw)
        return cls(
            is_initialized=bool(parsed.is_initialized),
            authority=_pubkey(parsed.authority),
            mint_authority=_pubkey(parsed.mint_authority),
            revenue_wallet=_pubkey(parsed.revenue_wallet),
            airdrop_amount=int(parsed.airdrop_amount),
            minted=int(parsed.minted),
            metadata_prefix=bytes(parsed.metadata_prefix),
            symbol=bytes(parsed.symbol),
            price=int(parsed.price),
            mint_authority_bump=int(parsed.mint_authority_bump),
        )

    @classmethod
    def unpack_from_account(cls, acc: AccountInfo) -> "AirdropConfig":
        return cls.unpack(_read_record(acc, AIRDROP_CONFIG_LEN))

    def pack_into_account(self, acc: AccountInfo) -> None:
        _write_record(acc, self.pack())


@dataclass
class AirdropUserData:
    is_initialized: bool
    user: Pubkey
    airdrop: Pubkey
    bump: int
    claimed: bool = False

    def pack(self) -> bytes:
        return AirdropUserDataLayout.build(
            {
                "is_initialized": self.is_initialized,
                "user": list(bytes(self.user)),
                "airdrop": list(bytes(self.airdrop)),
                "bump": self.bump,
                "claimed": self.claimed,
            }
        )

    @classmethod
    def unpack(cls, raw: bytes) -> "AirdropUserData":
        parsed = AirdropUserDataLayout.parse(raw)
        return cls(
            is_initialized=bool(parsed.is_initialized),
            user=_pubkey(parsed.user),
            airdrop=_pubkey(parsed.airdrop),
            bump=int(parsed.bump),
            claimed=bool(parsed.claimed),
        )

    @classmethod
    def unpack_from_account(cls, acc: AccountInfo) -> "AirdropUserData":
        return cls.unpack(_read_record(acc, AIRDROP_USER_DATA_LEN))

    def pack_into_account(self, acc: AccountInfo) -> None:
        _write_record(acc, self.pack())
