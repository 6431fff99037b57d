from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Tuple

import base58
from solders.pubkey import Pubkey

from .accounts import AccountInfo
from .config import Settings
from .instruction import (
    InitializeAirdrop,
    InitializeAirdropArgs,
    InitializeAirdropUser,
    MintOne,
    deserialize_instruction_data,
    fixed_bytes,
)
from .pda import find_airdrop_user_data, find_mint_authority
from .project_constants import METADATA_PREFIX_LEN, SYMBOL_LEN
from .rpc import RpcClient
from .runtime import ExecutionResult, execute


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def parse_instruction_data(text: str) -> bytes:
    """Hex when prefixed with 0x, base58 otherwise (as in JSON transactions)."""
    text = text.strip()
    if text.lower().startswith("0x"):
        return bytes.fromhex(text[2:])
    return base58.b58decode(text)


def parse_account_spec(spec: str) -> Tuple[Pubkey, bool, bool]:
    """KEY[:s][:w] or KEY:sw -> (key, is_signer, is_writable)."""
    key, _, flags = spec.partition(":")
    flags = flags.replace(":", "").lower()
    unknown = set(flags) - {"s", "w"}
    if unknown:
        raise ValueError(f"Unknown account flags {''.join(sorted(unknown))!r} in {spec!r}")
    return Pubkey.from_string(key), "s" in flags, "w" in flags


def cmd_derive(args: argparse.Namespace) -> int:
    settings = Settings.from_env(program_id_override=args.program_id)
    config = Pubkey.from_string(args.config)

    out: Dict[str, Any] = {"program_id": str(settings.program_id), "config": str(config)}
    mint_authority, mint_bump = find_mint_authority(config, settings.program_id)
    out["mint_authority"] = {"address": str(mint_authority), "bump": mint_bump}
    if args.user:
        user = Pubkey.from_string(args.user)
        user_data, user_bump = find_airdrop_user_data(config, user, settings.program_id)
        out["user_data"] = {"user": str(user), "address": str(user_data), "bump": user_bump}

    print(json.dumps(out, indent=2))
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    instruction = deserialize_instruction_data(parse_instruction_data(args.data))
    print(json.dumps(instruction.to_json(), indent=2))
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    if args.instruction == "init-airdrop":
        for name in ("amount", "price"):
            if getattr(args, name) is None:
                raise SystemExit(f"--{name} is required for init-airdrop")
        instruction = InitializeAirdrop(
            InitializeAirdropArgs(
                airdrop_amount=args.amount,
                metadata_prefix=fixed_bytes(args.prefix, METADATA_PREFIX_LEN),
                symbol=fixed_bytes(args.symbol, SYMBOL_LEN),
                price=args.price,
            )
        )
    elif args.instruction == "init-user":
        instruction = InitializeAirdropUser()
    else:
        instruction = MintOne()
    print(base58.b58encode(instruction.pack()).decode("ascii"))
    return 0


def _result_to_json(result: ExecutionResult, accounts: List[AccountInfo]) -> Dict[str, Any]:
    return {
        "ok": result.ok,
        "error": None
        if result.ok
        else {"kind": result.error.kind, "code": result.error.code, "message": result.error.message},
        "logs": result.logs,
        "cpi_calls": [
            {
                "label": c.label,
                "program_id": str(c.program_id),
                "accounts": [
                    {"pubkey": str(m.pubkey), "signer": m.is_signer, "writable": m.is_writable}
                    for m in c.accounts
                ],
                "data": base58.b58encode(c.data).decode("ascii"),
            }
            for c in result.cpi_calls
        ],
        "accounts": [
            {"pubkey": str(a.key), "lamports": a.lamports, "owner": str(a.owner), "data_len": len(a.data)}
            for a in accounts
        ],
    }


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = Settings.from_env(
        rpc_url_override=args.rpc_url, program_id_override=args.program_id
    )
    log = logging.getLogger("simulate")

    data = parse_instruction_data(args.data)
    specs = [parse_account_spec(s) for s in args.account]

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        accounts = rpc.get_multiple_accounts([key for key, _, _ in specs])
    finally:
        rpc.close()
    log.info("Accounts fetched  : %d", len(accounts))

    for acc, (_, is_signer, is_writable) in zip(accounts, specs):
        acc.is_signer = is_signer
        acc.is_writable = is_writable

    result = execute(settings.program_id, accounts, data)
    print(json.dumps(_result_to_json(result, accounts), indent=2))
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="airdrop-program",
        description="Inspect and locally execute airdrop program instructions.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--program-id", default=None, help="Override program id (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    d = sub.add_parser("derive", help="Print the program-derived addresses of a campaign.")
    d.add_argument("--config", required=True, help="Airdrop config address.")
    d.add_argument("--user", default=None, help="User wallet to derive the user record for.")
    d.set_defaults(func=cmd_derive)

    dec = sub.add_parser("decode", help="Decode instruction data.")
    dec.add_argument("--data", required=True, help="Instruction data (base58, or hex with 0x).")
    dec.set_defaults(func=cmd_decode)

    enc = sub.add_parser("encode", help="Encode instruction data as base58.")
    enc.add_argument("instruction", choices=["init-airdrop", "init-user", "mint-one"])
    enc.add_argument("--amount", type=int, default=None, help="Total airdrop amount.")
    enc.add_argument("--price", type=int, default=None, help="Unit price in lamports.")
    enc.add_argument("--symbol", default="", help=f"Token symbol (<= {SYMBOL_LEN} bytes).")
    enc.add_argument("--prefix", default="", help=f"Metadata URI prefix (<= {METADATA_PREFIX_LEN} bytes).")
    enc.set_defaults(func=cmd_encode)

    s = sub.add_parser("simulate", help="Fetch accounts and execute an instruction locally.")
    s.add_argument("--data", required=True, help="Instruction data (base58, or hex with 0x).")
    s.add_argument(
        "--account",
        action="append",
        default=[],
        help="Account in instruction order as KEY[:s][:w] (s=signer, w=writable). Repeatable.",
    )
    s.set_defaults(func=cmd_simulate)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    try:
        rc = args.func(args)
    except (ValueError, RuntimeError) as e:
        logging.getLogger("airdrop-program").error("%s", e)
        rc = 2
    raise SystemExit(rc)
