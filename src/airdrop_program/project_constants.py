"""
Program-wide immutable parameters for the airdrop program.

Seeds define where clients find program accounts.
Changing them changes every derived address and MUST be coordinated with
deployed clients.
"""

from solders.pubkey import Pubkey

# Well-known programs
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string(
    "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
)

# Sysvars
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
CLOCK_SYSVAR_ID = Pubkey.from_string("SysvarC1ock11111111111111111111111111111111")

# Derivation seeds
MINT_AUTHORITY_SEED = b"mint_authority"
USER_DATA_SEED = b"user_data"
METADATA_SEED = b"metadata"

# Fixed-size payload fields
METADATA_PREFIX_LEN = 32
SYMBOL_LEN = 8

# Rent defaults (mainnet values)
DEFAULT_LAMPORTS_PER_BYTE_YEAR = 3480
DEFAULT_EXEMPTION_THRESHOLD = 2.0
DEFAULT_BURN_PERCENT = 50
ACCOUNT_STORAGE_OVERHEAD = 128

# Each Mint-One claim mints a single token
MINT_ONE_AMOUNT = 1
