from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from solders.pubkey import Pubkey

from .errors import ResourceExhausted
from .project_constants import SYSTEM_PROGRAM_ID


@dataclass
class AccountInfo:
    """
    View over one caller-supplied account for the duration of an instruction.
    Signer/writable flags come from the caller and are never trusted across
    invocations.
    """

    key: Pubkey
    is_signer: bool = False
    is_writable: bool = False
    lamports: int = 0
    data: bytearray = field(default_factory=bytearray)
    owner: Pubkey = SYSTEM_PROGRAM_ID
    executable: bool = False

    def __post_init__(self) -> None:
        if self.lamports < 0:
            raise ValueError("lamports cannot be negative")
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

    def copy(self) -> "AccountInfo":
        return AccountInfo(
            key=self.key,
            is_signer=self.is_signer,
            is_writable=self.is_writable,
            lamports=self.lamports,
            data=bytearray(self.data),
            owner=self.owner,
            executable=self.executable,
        )

    def data_is_empty(self) -> bool:
        return len(self.data) == 0


def next_account_info(accounts: Iterator[AccountInfo]) -> AccountInfo:
    acc = next(accounts, None)
    if acc is None:
        raise ResourceExhausted("not enough account keys supplied to instruction")
    return acc
