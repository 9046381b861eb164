"""Error types for the Music Store toolkit."""

import re
from enum import IntEnum
from typing import Any, Optional


# Anchor numbers #[error_code] variants from 6000 upwards
ANCHOR_ERROR_OFFSET = 6000


class ProgramErrorCode(IntEnum):
    """Custom error codes returned by the music store program."""

    MUSIC_NOT_FOUND = ANCHOR_ERROR_OFFSET
    ALREADY_PURCHASED = ANCHOR_ERROR_OFFSET + 1
    INVALID_ROYALTIES = ANCHOR_ERROR_OFFSET + 2
    INVALID_ROYALTY_ACCOUNTS = ANCHOR_ERROR_OFFSET + 3
    INVALID_ROYALTY_ACCOUNT = ANCHOR_ERROR_OFFSET + 4
    ACCOUNT_NOT_WRITABLE = ANCHOR_ERROR_OFFSET + 5
    INSUFFICIENT_TOKEN_BALANCE = ANCHOR_ERROR_OFFSET + 6
    INSUFFICIENT_FUNDS = ANCHOR_ERROR_OFFSET + 7

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ProgramErrorCode.MUSIC_NOT_FOUND: "Music not found.",
    ProgramErrorCode.ALREADY_PURCHASED: "User has already purchased this music.",
    ProgramErrorCode.INVALID_ROYALTIES: "Invalid royalties, total must be 100.",
    ProgramErrorCode.INVALID_ROYALTY_ACCOUNTS: "Invalid royalty accounts.",
    ProgramErrorCode.INVALID_ROYALTY_ACCOUNT: "Invalid royalty account address.",
    ProgramErrorCode.ACCOUNT_NOT_WRITABLE: "Royalty account is not writable.",
    ProgramErrorCode.INSUFFICIENT_TOKEN_BALANCE: "Insufficient PLAY token balance",
    ProgramErrorCode.INSUFFICIENT_FUNDS: "Insufficient funds, need 0.1 SOL",
}

_CUSTOM_RE = re.compile(r"Custom\((\d+)\)")


class MusicStoreError(Exception):
    """Base class for toolkit errors."""


class AccountDecodeError(MusicStoreError):
    """Raised when on-chain account data does not match the expected layout."""


class TransactionError(MusicStoreError):
    """Raised when a transaction is rejected on-chain.

    Attributes:
        err: The raw transaction error reported by the RPC node.
        code: The program error code, if the rejection was a known custom error.
    """

    def __init__(self, err: Any, signature: Optional[str] = None):
        self.err = err
        self.signature = signature
        self.code = program_error_code(err)
        if self.code is not None:
            detail = f"{self.code.name} ({int(self.code)}): {self.code.message}"
        else:
            detail = str(err)
        super().__init__(f"Transaction error: {detail}")


def program_error_code(err: Any) -> Optional[ProgramErrorCode]:
    """Extract a ProgramErrorCode from a transaction error, if there is one.

    Accepts solders ``TransactionErrorInstructionError`` values (whose inner
    ``err`` carries a ``code``), bare integers, or anything whose string form
    contains ``Custom(<n>)``.
    """
    if err is None:
        return None
    if isinstance(err, int):
        code = err
    else:
        inner = getattr(err, "err", None)
        code = getattr(inner, "code", None)
        if code is None:
            match = _CUSTOM_RE.search(str(err))
            if not match:
                return None
            code = int(match.group(1))
    try:
        return ProgramErrorCode(code)
    except ValueError:
        return None
