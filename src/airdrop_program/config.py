from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv
from solders.pubkey import Pubkey

DEFAULT_RPC_URL = "https://api.devnet.solana.com"


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    program_id: Pubkey

    @staticmethod
    def from_env(
        rpc_url_override: str | None = None,
        program_id_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip() or DEFAULT_RPC_URL

        raw_program_id = program_id_override or os.getenv("AIRDROP_PROGRAM_ID", "").strip()
        if not raw_program_id:
            raise RuntimeError(
                "Missing AIRDROP_PROGRAM_ID. Put it in .env, export it or pass --program-id."
            )
        try:
            program_id = Pubkey.from_string(raw_program_id)
        except Exception as e:  # noqa: BLE001
            raise RuntimeError(f"AIRDROP_PROGRAM_ID is not a valid pubkey: {e}") from e

        return Settings(rpc_url=rpc_url, program_id=program_id)
