"""
Reusable account predicates.

Every check is pure: it inspects a handle and either returns or raises the
error that names the violated invariant. Handlers decide the order.
"""

from __future__ import annotations

from typing import Type

from solders.pubkey import Pubkey

from .accounts import AccountInfo
from .errors import (
    AlreadyInitialized,
    IllegalOwner,
    PdaCheckFailed,
    ProgramError,
    SignerRequired,
    WriteableRequired,
)


def assert_signer(acc: AccountInfo) -> None:
    if not acc.is_signer:
        raise SignerRequired(f"{acc.key} must sign the transaction")


def assert_writeable(acc: AccountInfo) -> None:
    if not acc.is_writable:
        raise WriteableRequired(f"{acc.key} must be writeable")


def assert_owned_by(acc: AccountInfo, expected_owner: Pubkey) -> None:
    if acc.owner != expected_owner:
        raise IllegalOwner(f"{acc.key} is owned by {acc.owner}, expected {expected_owner}")


def assert_derived(acc: AccountInfo, expected_address: Pubkey) -> None:
    if acc.key != expected_address:
        raise PdaCheckFailed(f"{acc.key} is not the derived address {expected_address}")


def assert_uninitialized(acc: AccountInfo) -> None:
    # An account holding any lamports already exists on chain.
    if acc.lamports > 0:
        raise AlreadyInitialized(f"{acc.key} already holds {acc.lamports} lamports")


def assert_key(acc: AccountInfo, expected: Pubkey, error: Type[ProgramError]) -> None:
    if acc.key != expected:
        raise error(f"expected {expected}, got {acc.key}")
