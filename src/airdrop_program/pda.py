from __future__ import annotations

from typing import Tuple

from solders.pubkey import Pubkey

from .project_constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    METADATA_SEED,
    MINT_AUTHORITY_SEED,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    USER_DATA_SEED,
)


def mint_authority_seeds(config: Pubkey) -> list[bytes]:
    return [MINT_AUTHORITY_SEED, bytes(config)]


def user_data_seeds(config: Pubkey, user: Pubkey) -> list[bytes]:
    return [USER_DATA_SEED, bytes(config), bytes(user)]


def find_mint_authority(config: Pubkey, program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Address that signs MintTo for the campaign described by `config`."""
    return Pubkey.find_program_address(mint_authority_seeds(config), program_id)


def find_airdrop_user_data(
    config: Pubkey, user: Pubkey, program_id: Pubkey
) -> Tuple[Pubkey, int]:
    """Address of `user`'s claim record within the campaign `config`."""
    return Pubkey.find_program_address(user_data_seeds(config, user), program_id)


def find_associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )[0]


def find_metadata_address(mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )[0]
