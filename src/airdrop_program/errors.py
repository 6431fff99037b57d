from __future__ import annotations

from typing import Optional


class ProgramError(RuntimeError):
    """Base for every error an instruction can fail with.

    `kind` is the stable name a client matches on; the message says which
    check failed.
    """

    kind = "ProgramError"
    code: Optional[int] = None

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.kind
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.kind} (custom program error: 0x{self.code:x}): {self.message}"
        return f"{self.kind}: {self.message}"


class AirdropError(ProgramError):
    """Program-specific errors, reported with a custom error code."""

    kind = "AirdropError"


class SignerRequired(AirdropError):
    kind = "SignerRequired"
    code = 0


class WriteableRequired(AirdropError):
    kind = "WriteableRequired"
    code = 1


class PdaCheckFailed(AirdropError):
    kind = "PdaCheckFailed"
    code = 2


class Uninitialized(AirdropError):
    kind = "Uninitialized"
    code = 3


class AlreadyClaimed(AirdropError):
    kind = "AlreadyClaimed"
    code = 4


class AirdropExhausted(AirdropError):
    kind = "AirdropExhausted"
    code = 5


class ConfigMismatch(AirdropError):
    kind = "ConfigMismatch"
    code = 6


class IllegalOwner(ProgramError):
    kind = "IllegalOwner"


class AlreadyInitialized(ProgramError):
    kind = "AlreadyInitialized"


class DeserializationFailed(ProgramError):
    kind = "DeserializationFailed"


class ResourceExhausted(ProgramError):
    kind = "ResourceExhausted"


class InsufficientFunds(ProgramError):
    kind = "InsufficientFunds"


class InvalidArgument(ProgramError):
    kind = "InvalidArgument"


class InvalidAccountData(ProgramError):
    kind = "InvalidAccountData"


class IncorrectProgramId(ProgramError):
    kind = "IncorrectProgramId"


class ReadonlyDataModified(ProgramError):
    kind = "ReadonlyDataModified"


class UnbalancedInstruction(ProgramError):
    kind = "UnbalancedInstruction"
