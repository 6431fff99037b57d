"""
Cross-program invocations issued by the program.

Token minting and metadata creation belong to other programs. The processor
hands fully-formed calls to an `Invoker`; the hosting environment decides
how to execute them.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

from borsh_construct import Bool, CStruct, Option, String, U8, U16
from solders.pubkey import Pubkey

from .project_constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

log = logging.getLogger(__name__)

SPL_TOKEN_MINT_TO = 7
CREATE_METADATA_ACCOUNT_V3 = 33

# The optional structs are always encoded as None here, so the inner layout
# is never exercised.
CreateMetadataAccountV3Layout = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / U16,
    "creators" / Option(U8),
    "collection" / Option(U8),
    "uses" / Option(U8),
    "is_mutable" / Bool,
    "collection_details" / Option(U8),
)


@dataclass(frozen=True)
class Meta:
    pubkey: Pubkey
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True)
class CpiCall:
    program_id: Pubkey
    accounts: List[Meta]
    data: bytes
    signer_seeds: List[List[bytes]] = field(default_factory=list)
    label: str = ""


class Invoker(Protocol):
    def invoke_signed(self, call: CpiCall) -> None:
        ...


class RecordingInvoker:
    """Collects calls in order for the environment to replay."""

    def __init__(self) -> None:
        self.calls: List[CpiCall] = []

    def invoke_signed(self, call: CpiCall) -> None:
        log.debug("Invoke %s (%s)", call.label or "cpi", call.program_id)
        self.calls.append(call)


def create_associated_token_account(
    payer: Pubkey, token_account: Pubkey, owner: Pubkey, mint: Pubkey
) -> CpiCall:
    return CpiCall(
        program_id=ASSOCIATED_TOKEN_PROGRAM_ID,
        accounts=[
            Meta(payer, True, True),
            Meta(token_account, False, True),
            Meta(owner, False, False),
            Meta(mint, False, False),
            Meta(SYSTEM_PROGRAM_ID, False, False),
            Meta(TOKEN_PROGRAM_ID, False, False),
        ],
        data=b"",
        label="create_associated_token_account",
    )


def mint_to(
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    amount: int,
    signer_seeds: Sequence[bytes],
) -> CpiCall:
    return CpiCall(
        program_id=TOKEN_PROGRAM_ID,
        accounts=[
            Meta(mint, False, True),
            Meta(destination, False, True),
            Meta(authority, True, False),
        ],
        data=struct.pack("<BQ", SPL_TOKEN_MINT_TO, amount),
        signer_seeds=[list(signer_seeds)],
        label="mint_to",
    )


def create_metadata_account_v3(
    metadata: Pubkey,
    mint: Pubkey,
    mint_authority: Pubkey,
    payer: Pubkey,
    update_authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    signer_seeds: Sequence[bytes],
) -> CpiCall:
    body = CreateMetadataAccountV3Layout.build(
        {
            "name": name,
            "symbol": symbol,
            "uri": uri,
            "seller_fee_basis_points": 0,
            "creators": None,
            "collection": None,
            "uses": None,
            "is_mutable": True,
            "collection_details": None,
        }
    )
    return CpiCall(
        program_id=TOKEN_METADATA_PROGRAM_ID,
        accounts=[
            Meta(metadata, False, True),
            Meta(mint, False, False),
            Meta(mint_authority, True, False),
            Meta(payer, True, True),
            Meta(update_authority, False, False),
            Meta(SYSTEM_PROGRAM_ID, False, False),
        ],
        data=bytes([CREATE_METADATA_ACCOUNT_V3]) + body,
        signer_seeds=[list(signer_seeds)],
        label="create_metadata_account_v3",
    )
