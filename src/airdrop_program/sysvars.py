from __future__ import annotations

import math
from dataclasses import dataclass

from borsh_construct import CStruct, F64, I64, U8, U64

from .accounts import AccountInfo
from .errors import InvalidAccountData, InvalidArgument
from .project_constants import (
    ACCOUNT_STORAGE_OVERHEAD,
    CLOCK_SYSVAR_ID,
    DEFAULT_BURN_PERCENT,
    DEFAULT_EXEMPTION_THRESHOLD,
    DEFAULT_LAMPORTS_PER_BYTE_YEAR,
    RENT_SYSVAR_ID,
)

RentLayout = CStruct(
    "lamports_per_byte_year" / U64,
    "exemption_threshold" / F64,
    "burn_percent" / U8,
)
RENT_LEN = RentLayout.sizeof()

ClockLayout = CStruct(
    "slot" / U64,
    "epoch_start_timestamp" / I64,
    "epoch" / U64,
    "leader_schedule_epoch" / U64,
    "unix_timestamp" / I64,
)
CLOCK_LEN = ClockLayout.sizeof()


@dataclass(frozen=True)
class Rent:
    lamports_per_byte_year: int = DEFAULT_LAMPORTS_PER_BYTE_YEAR
    exemption_threshold: float = DEFAULT_EXEMPTION_THRESHOLD
    burn_percent: int = DEFAULT_BURN_PERCENT

    def minimum_balance(self, data_len: int) -> int:
        """Lamports an account of `data_len` bytes needs to be rent exempt."""
        bytes_ = ACCOUNT_STORAGE_OVERHEAD + data_len
        return int(bytes_ * self.lamports_per_byte_year * self.exemption_threshold)

    def is_exempt(self, lamports: int, data_len: int) -> bool:
        return lamports >= self.minimum_balance(data_len)

    def pack(self) -> bytes:
        return RentLayout.build(
            {
                "lamports_per_byte_year": self.lamports_per_byte_year,
                "exemption_threshold": self.exemption_threshold,
                "burn_percent": self.burn_percent,
            }
        )

    @classmethod
    def from_account_info(cls, acc: AccountInfo) -> "Rent":
        if acc.key != RENT_SYSVAR_ID:
            raise InvalidArgument(f"{acc.key} is not the rent sysvar")
        if len(acc.data) < RENT_LEN:
            raise InvalidArgument("rent sysvar data is truncated")
        parsed = RentLayout.parse(bytes(acc.data[:RENT_LEN]))
        if not math.isfinite(parsed.exemption_threshold) or parsed.exemption_threshold < 0:
            raise InvalidAccountData(f"rent sysvar holds exemption threshold {parsed.exemption_threshold}")
        return cls(
            lamports_per_byte_year=int(parsed.lamports_per_byte_year),
            exemption_threshold=float(parsed.exemption_threshold),
            burn_percent=int(parsed.burn_percent),
        )


@dataclass(frozen=True)
class Clock:
    slot: int = 0
    epoch_start_timestamp: int = 0
    epoch: int = 0
    leader_schedule_epoch: int = 0
    unix_timestamp: int = 0

    def pack(self) -> bytes:
        return ClockLayout.build(
            {
                "slot": self.slot,
                "epoch_start_timestamp": self.epoch_start_timestamp,
                "epoch": self.epoch,
                "leader_schedule_epoch": self.leader_schedule_epoch,
                "unix_timestamp": self.unix_timestamp,
            }
        )

    @classmethod
    def from_account_info(cls, acc: AccountInfo) -> "Clock":
        if acc.key != CLOCK_SYSVAR_ID:
            raise InvalidArgument(f"{acc.key} is not the clock sysvar")
        if len(acc.data) < CLOCK_LEN:
            raise InvalidArgument("clock sysvar data is truncated")
        parsed = ClockLayout.parse(bytes(acc.data[:CLOCK_LEN]))
        return cls(
            slot=int(parsed.slot),
            epoch_start_timestamp=int(parsed.epoch_start_timestamp),
            epoch=int(parsed.epoch),
            leader_schedule_epoch=int(parsed.leader_schedule_epoch),
            unix_timestamp=int(parsed.unix_timestamp),
        )
