"""
State mutation run by the processor once an instruction's accounts are
validated. Nothing here re-checks signer/owner/derivation invariants; the
functions only enforce what the mutation itself needs (space, funds,
initialization state).
"""

from __future__ import annotations

import logging

from solders.pubkey import Pubkey

from . import cpi
from .accounts import AccountInfo
from .errors import AlreadyInitialized, InsufficientFunds, InvalidAccountData
from .instruction import InitializeAirdropArgs
from .pda import mint_authority_seeds
from .project_constants import MINT_ONE_AMOUNT
from .state import AIRDROP_CONFIG_LEN, AIRDROP_USER_DATA_LEN, AirdropConfig, AirdropUserData
from .sysvars import Rent

log = logging.getLogger(__name__)


def transfer_lamports(source: AccountInfo, destination: AccountInfo, amount: int) -> None:
    if amount <= 0:
        return
    if source.lamports < amount:
        raise InsufficientFunds(
            f"{source.key} holds {source.lamports} lamports, {amount} required"
        )
    source.lamports -= amount
    destination.lamports += amount


def fund_rent_exemption(
    account: AccountInfo, fee_payer: AccountInfo, rent: Rent, data_len: int
) -> int:
    """Tops `account` up to the rent-exempt minimum; returns lamports moved."""
    shortfall = rent.minimum_balance(data_len) - account.lamports
    if shortfall <= 0:
        return 0
    transfer_lamports(fee_payer, account, shortfall)
    return shortfall


def process_initialize_airdrop_logic(
    airdrop_account: AccountInfo,
    airdrop_authority: AccountInfo,
    mint_authority: AccountInfo,
    revenues_account: AccountInfo,
    fee_payer: AccountInfo,
    args: InitializeAirdropArgs,
    rent: Rent,
    mint_authority_bump: int,
) -> AirdropConfig:
    if len(airdrop_account.data) < AIRDROP_CONFIG_LEN:
        raise InvalidAccountData(
            f"airdrop config needs {AIRDROP_CONFIG_LEN} bytes, account has {len(airdrop_account.data)}"
        )

    existing = AirdropConfig.unpack_from_account(airdrop_account)
    if existing.is_initialized:
        raise AlreadyInitialized(f"airdrop config {airdrop_account.key} is already initialized")

    funded = fund_rent_exemption(airdrop_account, fee_payer, rent, len(airdrop_account.data))
    if funded:
        log.debug("Funded airdrop config with %d lamports", funded)

    config = AirdropConfig(
        is_initialized=True,
        authority=airdrop_authority.key,
        mint_authority=mint_authority.key,
        revenue_wallet=revenues_account.key,
        airdrop_amount=args.airdrop_amount,
        minted=0,
        metadata_prefix=args.metadata_prefix,
        symbol=args.symbol,
        price=args.price,
        mint_authority_bump=mint_authority_bump,
    )
    config.pack_into_account(airdrop_account)
    return config


def process_initialize_airdrop_user_account_logic(
    user_data_account: AccountInfo,
    user: AccountInfo,
    airdrop: AccountInfo,
    fee_payer: AccountInfo,
    rent: Rent,
    program_id: Pubkey,
    user_data_account_bump: int,
) -> AirdropUserData:
    # create_account: fund, allocate, assign
    transfer_lamports(fee_payer, user_data_account, rent.minimum_balance(AIRDROP_USER_DATA_LEN))
    user_data_account.data = bytearray(AIRDROP_USER_DATA_LEN)
    user_data_account.owner = program_id

    user_data = AirdropUserData(
        is_initialized=True,
        user=user.key,
        airdrop=airdrop.key,
        bump=user_data_account_bump,
    )
    user_data.pack_into_account(user_data_account)
    return user_data


def _trimmed(raw: bytes) -> str:
    return raw.rstrip(b"\x00").decode("utf-8", "replace")


def token_name(config: AirdropConfig, number: int) -> str:
    return f"{_trimmed(config.symbol)} #{number}"


def token_uri(config: AirdropConfig, number: int) -> str:
    return f"{_trimmed(config.metadata_prefix)}{number}.json"


def process_mint_one_logic(
    airdrop_config: AccountInfo,
    config: AirdropConfig,
    user_data_account: AccountInfo,
    user_data: AirdropUserData,
    mint_account: AccountInfo,
    user: AccountInfo,
    user_token_account: AccountInfo,
    token_metadata_account: AccountInfo,
    mint_authority: AccountInfo,
    payer: AccountInfo,
    revenue_wallet: AccountInfo,
    invoker: cpi.Invoker,
) -> int:
    """Mints the next token of the campaign to `user`; returns its number."""
    number = config.minted + 1
    signer_seeds = mint_authority_seeds(airdrop_config.key) + [bytes([config.mint_authority_bump])]

    transfer_lamports(payer, revenue_wallet, config.price)

    if user_token_account.lamports == 0:
        invoker.invoke_signed(
            cpi.create_associated_token_account(
                payer.key, user_token_account.key, user.key, mint_account.key
            )
        )
    invoker.invoke_signed(
        cpi.mint_to(
            mint_account.key,
            user_token_account.key,
            mint_authority.key,
            MINT_ONE_AMOUNT,
            signer_seeds,
        )
    )
    invoker.invoke_signed(
        cpi.create_metadata_account_v3(
            token_metadata_account.key,
            mint_account.key,
            mint_authority.key,
            payer.key,
            mint_authority.key,
            token_name(config, number),
            _trimmed(config.symbol),
            token_uri(config, number),
            signer_seeds,
        )
    )

    user_data.claimed = True
    user_data.pack_into_account(user_data_account)
    config.minted = number
    config.pack_into_account(airdrop_config)
    return number
