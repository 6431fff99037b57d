"""
Local model of the environment an instruction runs in.

`execute` gives the program working copies of the caller's accounts,
captures its log lines, applies the runtime's post-conditions and commits
the copies back only when everything succeeded.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from solders.pubkey import Pubkey

from .accounts import AccountInfo
from .cpi import CpiCall, RecordingInvoker
from .errors import ProgramError, ReadonlyDataModified, UnbalancedInstruction
from .processor import process_instruction
from .project_constants import SYSTEM_PROGRAM_ID

log = logging.getLogger(__name__)

PROGRAM_LOGGER = "airdrop_program"

# Log capture reconfigures the shared program logger; one instruction at a time.
_CAPTURE_LOCK = threading.Lock()


@dataclass
class ExecutionResult:
    error: Optional[ProgramError] = None
    logs: List[str] = field(default_factory=list)
    cpi_calls: List[CpiCall] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class _ListHandler(logging.Handler):
    def __init__(self, lines: List[str]) -> None:
        super().__init__(level=logging.DEBUG)
        self.lines = lines

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(f"Program log: {record.getMessage()}")


def _merge_duplicates(accounts: Sequence[AccountInfo]) -> Dict[Pubkey, AccountInfo]:
    """
    One snapshot per key. Signer and writable privileges are the union over
    every position the key appears at.
    """
    merged: Dict[Pubkey, AccountInfo] = {}
    for acc in accounts:
        first = merged.get(acc.key)
        if first is None:
            merged[acc.key] = acc.copy()
            continue
        first.is_signer = first.is_signer or acc.is_signer
        first.is_writable = first.is_writable or acc.is_writable
    return merged


def _verify_post_conditions(
    program_id: Pubkey, before: Dict[Pubkey, AccountInfo], after: Dict[Pubkey, AccountInfo]
) -> None:
    for key, pre in before.items():
        post = after[key]
        changed = pre.lamports != post.lamports or pre.data != post.data or pre.owner != post.owner
        if changed and not pre.is_writable:
            raise ReadonlyDataModified(f"instruction modified read-only account {key}")
        if pre.data != post.data and pre.owner != program_id:
            # A fresh system account may be allocated and assigned in the same instruction.
            if not (pre.owner == SYSTEM_PROGRAM_ID and not pre.data and post.owner == program_id):
                raise ReadonlyDataModified(f"instruction modified data of foreign account {key}")
    if sum(pre.lamports for pre in before.values()) != sum(post.lamports for post in after.values()):
        raise UnbalancedInstruction("sum of account balances before and after instruction do not match")


def execute(
    program_id: Pubkey,
    accounts: Sequence[AccountInfo],
    instruction_data: bytes,
    invoker: Optional[RecordingInvoker] = None,
) -> ExecutionResult:
    """
    Runs one instruction all-or-nothing. On failure `accounts` are left
    exactly as they were; on success they carry the new state.

    Only `ProgramError` lands in `ExecutionResult.error`; anything else is a
    bug and propagates, still without committing. Calls are serialized
    because the program logger is captured for the duration of each one.
    """
    invoker = invoker or RecordingInvoker()
    # The same account may appear twice; every position shares one copy.
    before = _merge_duplicates(accounts)
    copies = {key: acc.copy() for key, acc in before.items()}
    working = [copies[acc.key] for acc in accounts]

    result = ExecutionResult()
    handler = _ListHandler(result.logs)
    program_log = logging.getLogger(PROGRAM_LOGGER)
    with _CAPTURE_LOCK:
        previous = (program_log.level, program_log.propagate)
        # Program logs go to the result, not to the host's handlers.
        program_log.addHandler(handler)
        program_log.setLevel(logging.DEBUG)
        program_log.propagate = False
        try:
            process_instruction(program_id, working, instruction_data, invoker)
            _verify_post_conditions(program_id, before, copies)
        except ProgramError as exc:
            result.error = exc
        finally:
            program_log.removeHandler(handler)
            program_log.setLevel(previous[0])
            program_log.propagate = previous[1]

    if result.error is not None:
        result.logs.append(f"Program {program_id} failed: {result.error}")
        log.info("Instruction failed: %s", result.error)
        return result

    for acc, new in zip(accounts, working):
        acc.lamports = new.lamports
        acc.data = bytearray(new.data)
        acc.owner = new.owner
    result.cpi_calls = list(invoker.calls)
    result.logs.append(f"Program {program_id} success")
    return result
