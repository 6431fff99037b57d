"""
Instruction dispatch and account validation.

Each handler pulls its fixed, ordered account list first (short lists fail
before any check), validates every account, and only then calls into
`logic`. The first failing check aborts the instruction.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from solders.pubkey import Pubkey

from . import logic
from .accounts import AccountInfo, next_account_info
from .checks import (
    assert_derived,
    assert_key,
    assert_owned_by,
    assert_signer,
    assert_uninitialized,
    assert_writeable,
)
from .cpi import Invoker, RecordingInvoker
from .errors import (
    AirdropExhausted,
    AlreadyClaimed,
    ConfigMismatch,
    IncorrectProgramId,
    InsufficientFunds,
    InvalidAccountData,
    PdaCheckFailed,
    Uninitialized,
)
from .instruction import (
    InitializeAirdrop,
    InitializeAirdropArgs,
    InitializeAirdropUser,
    MintOne,
    deserialize_instruction_data,
)
from .pda import (
    find_airdrop_user_data,
    find_associated_token_address,
    find_metadata_address,
    find_mint_authority,
)
from .project_constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from .state import AirdropConfig, AirdropUserData
from .sysvars import Clock, Rent

log = logging.getLogger(__name__)


def process_instruction(
    program_id: Pubkey,
    accounts: Sequence[AccountInfo],
    instruction_data: bytes,
    invoker: Optional[Invoker] = None,
) -> None:
    instruction = deserialize_instruction_data(instruction_data)
    log.info("Instruction: %s", type(instruction).__name__)

    if isinstance(instruction, InitializeAirdrop):
        process_initialize_airdrop(program_id, accounts, instruction.args)
    elif isinstance(instruction, InitializeAirdropUser):
        process_initialize_airdrop_user(program_id, accounts)
    elif isinstance(instruction, MintOne):
        process_mint_one(program_id, accounts, invoker or RecordingInvoker())


def process_initialize_airdrop(
    program_id: Pubkey,
    accounts: Sequence[AccountInfo],
    args: InitializeAirdropArgs,
) -> None:
    iter_ = iter(accounts)
    airdrop_account = next_account_info(iter_)
    airdrop_authority = next_account_info(iter_)
    mint_authority = next_account_info(iter_)
    revenues_account = next_account_info(iter_)
    rent_account = next_account_info(iter_)
    fee_payer = next_account_info(iter_)

    # Airdrop account checks
    log.debug("Assert airdrop config writeable")
    assert_writeable(airdrop_account)
    log.debug("Assert airdrop config owned by program")
    assert_owned_by(airdrop_account, program_id)

    # The authority and revenue accounts are stored as given, unchecked.

    # Mint authority checks
    mint_authority_pda, mint_authority_bump = find_mint_authority(airdrop_account.key, program_id)
    log.debug("Assert mint authority is PDA")
    assert_derived(mint_authority, mint_authority_pda)

    # Fee payer checks
    log.debug("Assert fee payer is signer")
    assert_signer(fee_payer)

    log.debug("Get rent info from account")
    rent = Rent.from_account_info(rent_account)

    logic.process_initialize_airdrop_logic(
        airdrop_account,
        airdrop_authority,
        mint_authority,
        revenues_account,
        fee_payer,
        args,
        rent,
        mint_authority_bump,
    )
    log.info("Airdrop %s initialized", airdrop_account.key)


def process_initialize_airdrop_user(
    program_id: Pubkey, accounts: Sequence[AccountInfo]
) -> None:
    iter_ = iter(accounts)
    user_data_account = next_account_info(iter_)
    user = next_account_info(iter_)
    airdrop = next_account_info(iter_)
    rent_account = next_account_info(iter_)
    fee_payer = next_account_info(iter_)

    # User data account checks
    log.debug("Assert user data is properly derived")
    user_data_pda, user_data_bump = find_airdrop_user_data(airdrop.key, user.key, program_id)
    assert_derived(user_data_account, user_data_pda)

    log.debug("Assert user data is not initialized")
    assert_uninitialized(user_data_account)

    log.debug("Assert user data account is writeable")
    assert_writeable(user_data_account)

    # Not enforced: the user may be any account, not only a system-owned wallet.

    # Airdrop config checks
    log.debug("Assert that airdrop config is owned by program")
    assert_owned_by(airdrop, program_id)
    log.debug("Assert that airdrop config is writeable")
    assert_writeable(airdrop)

    log.debug("Assert airdrop config is initialized")
    config = AirdropConfig.unpack_from_account(airdrop)
    if not config.is_initialized:
        raise Uninitialized(f"airdrop config {airdrop.key} is not initialized")

    # Fee payer checks
    log.debug("Assert that fee payer is signer")
    assert_signer(fee_payer)

    log.debug("Get rent")
    rent = Rent.from_account_info(rent_account)

    logic.process_initialize_airdrop_user_account_logic(
        user_data_account,
        user,
        airdrop,
        fee_payer,
        rent,
        program_id,
        user_data_bump,
    )
    log.info("User data %s created for %s", user_data_account.key, user.key)


def process_mint_one(
    program_id: Pubkey, accounts: Sequence[AccountInfo], invoker: Invoker
) -> None:
    iter_ = iter(accounts)
    airdrop_config = next_account_info(iter_)
    user_data_account = next_account_info(iter_)
    mint_account = next_account_info(iter_)
    user = next_account_info(iter_)
    user_token_account = next_account_info(iter_)
    token_metadata_account = next_account_info(iter_)
    mint_authority = next_account_info(iter_)
    system_program = next_account_info(iter_)
    clock_var = next_account_info(iter_)
    rent_var = next_account_info(iter_)
    token_program = next_account_info(iter_)
    associated_token_program = next_account_info(iter_)
    token_metadata_program = next_account_info(iter_)
    payer = next_account_info(iter_)
    airdrop_authority = next_account_info(iter_)
    revenue_wallet = next_account_info(iter_)

    # Airdrop config checks
    log.debug("Assert airdrop config writeable")
    assert_writeable(airdrop_config)
    log.debug("Assert airdrop config owned by program")
    assert_owned_by(airdrop_config, program_id)
    log.debug("Assert airdrop config is initialized")
    config = AirdropConfig.unpack_from_account(airdrop_config)
    if not config.is_initialized:
        raise Uninitialized(f"airdrop config {airdrop_config.key} is not initialized")

    # User data checks
    log.debug("Assert user data is properly derived")
    user_data_pda, _ = find_airdrop_user_data(airdrop_config.key, user.key, program_id)
    assert_derived(user_data_account, user_data_pda)
    log.debug("Assert user data owned by program")
    assert_owned_by(user_data_account, program_id)
    log.debug("Assert user data writeable")
    assert_writeable(user_data_account)
    log.debug("Assert user data is initialized")
    user_data = AirdropUserData.unpack_from_account(user_data_account)
    if not user_data.is_initialized:
        raise Uninitialized(f"user data {user_data_account.key} is not initialized")
    if user_data.airdrop != airdrop_config.key or user_data.user != user.key:
        raise InvalidAccountData(f"user data {user_data_account.key} belongs to another airdrop or user")
    log.debug("Assert user has not claimed")
    if user_data.claimed:
        raise AlreadyClaimed(f"{user.key} already claimed from {airdrop_config.key}")

    # Mint authority checks
    log.debug("Assert mint authority is PDA")
    mint_authority_pda, _ = find_mint_authority(airdrop_config.key, program_id)
    assert_derived(mint_authority, mint_authority_pda)
    if config.mint_authority != mint_authority.key:
        raise PdaCheckFailed(f"config stores mint authority {config.mint_authority}")

    # Token accounts
    log.debug("Assert mint, token account and metadata writeable")
    assert_writeable(mint_account)
    assert_writeable(user_token_account)
    assert_writeable(token_metadata_account)
    log.debug("Assert token account is the user's associated token account")
    assert_derived(user_token_account, find_associated_token_address(user.key, mint_account.key))
    log.debug("Assert metadata account is derived from mint")
    assert_derived(token_metadata_account, find_metadata_address(mint_account.key))

    # Sysvars and programs
    log.debug("Get clock")
    clock = Clock.from_account_info(clock_var)
    log.debug("Assert rent sysvar")
    # Validates the sysvar id only; ATA creation reads rent on its own.
    Rent.from_account_info(rent_var)
    log.debug("Assert program accounts")
    assert_key(system_program, SYSTEM_PROGRAM_ID, IncorrectProgramId)
    assert_key(token_program, TOKEN_PROGRAM_ID, IncorrectProgramId)
    assert_key(associated_token_program, ASSOCIATED_TOKEN_PROGRAM_ID, IncorrectProgramId)
    assert_key(token_metadata_program, TOKEN_METADATA_PROGRAM_ID, IncorrectProgramId)

    # Fee payer checks
    log.debug("Assert fee payer is signer")
    assert_signer(payer)
    log.debug("Assert fee payer writeable")
    assert_writeable(payer)

    # Authority and revenue must match what the config recorded
    log.debug("Assert authority and revenue wallet match config")
    assert_key(airdrop_authority, config.authority, ConfigMismatch)
    assert_key(revenue_wallet, config.revenue_wallet, ConfigMismatch)
    if config.price:
        assert_writeable(revenue_wallet)

    log.debug("Assert airdrop supply left")
    if config.remaining <= 0:
        raise AirdropExhausted(f"all {config.airdrop_amount} tokens of {airdrop_config.key} are minted")
    if payer.lamports < config.price:
        raise InsufficientFunds(f"price is {config.price} lamports, payer holds {payer.lamports}")

    number = logic.process_mint_one_logic(
        airdrop_config,
        config,
        user_data_account,
        user_data,
        mint_account,
        user,
        user_token_account,
        token_metadata_account,
        mint_authority,
        payer,
        revenue_wallet,
        invoker,
    )
    log.info("Minted #%d of %s to %s at slot %d", number, airdrop_config.key, user.key, clock.slot)
