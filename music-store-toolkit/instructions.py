"""Instruction builders for the music store program.

Uses solders only (no Anchor Python SDK needed). Arguments are Borsh-encoded
by hand with struct, the same way the other toolkit clients do it.
"""

import hashlib
import struct
from typing import Iterable, Optional, Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID


# Anchor discriminators: sha256("global:<instruction_name>")[:8]
def _discriminator(name: str) -> bytes:
    """Compute Anchor instruction discriminator."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


DISC_UPLOAD_MUSIC = _discriminator("upload_music")
DISC_BUY_MUSIC = _discriminator("buy_music")
DISC_BUY_MUSIC_WITH_TOKEN = _discriminator("buy_music_with_token")
DISC_BUY_PLAY_TOKENS = _discriminator("buy_play_tokens")


def encode_u64(value: int) -> bytes:
    return struct.pack("<Q", value)


def encode_string(value: str) -> bytes:
    """Borsh string: u32 length prefix + utf-8 bytes."""
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def upload_music_ix(
    program_id: Pubkey,
    signer: Pubkey,
    music: Pubkey,
    music_id: int,
    name: str,
    price: int,
    owner: Pubkey,
    bump: int,
) -> Instruction:
    """Build upload_music(music_id, name, price, owner, bump)."""
    data = (
        DISC_UPLOAD_MUSIC
        + encode_u64(music_id)
        + encode_string(name)
        + encode_u64(price)
        + bytes(owner)
        + struct.pack("<B", bump)
    )
    # Order of the UploadMusic accounts struct: music, signer, system_program
    accounts = [
        AccountMeta(pubkey=music, is_signer=False, is_writable=True),
        AccountMeta(pubkey=signer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def royalty_accounts(royalties: Iterable[Pubkey]) -> list[AccountMeta]:
    """Trailing writable accounts that receive the royalty split, in order."""
    return [AccountMeta(pubkey=pk, is_signer=False, is_writable=True) for pk in royalties]


def buy_music_ix(
    program_id: Pubkey,
    music: Pubkey,
    buyer: Pubkey,
    payer: Pubkey,
    music_id: int,
    royalties: Sequence[Pubkey] = (),
) -> Instruction:
    """Build buy_music(music_id) paid in lamports."""
    data = DISC_BUY_MUSIC + encode_u64(music_id)
    accounts = [
        AccountMeta(pubkey=music, is_signer=False, is_writable=True),
        AccountMeta(pubkey=buyer, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    accounts.extend(royalty_accounts(royalties))
    return Instruction(program_id, data, accounts)


def buy_music_with_token_ix(
    program_id: Pubkey,
    music: Pubkey,
    buyer: Pubkey,
    payer: Pubkey,
    payer_token_account: Pubkey,
    beneficiary_token_account: Pubkey,
    music_id: int,
    token_program: Optional[Pubkey] = None,
) -> Instruction:
    """Build buy_music_with_token(music_id) paid from a token account."""
    data = DISC_BUY_MUSIC_WITH_TOKEN + encode_u64(music_id)
    accounts = [
        AccountMeta(pubkey=music, is_signer=False, is_writable=True),
        AccountMeta(pubkey=buyer, is_signer=False, is_writable=True),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=payer_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=beneficiary_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=token_program or TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def buy_play_tokens_ix(
    program_id: Pubkey,
    payer: Pubkey,
    vault: Pubkey,
    mint: Pubkey,
    buyer_token_account: Pubkey,
    mint_authority: Pubkey,
) -> Instruction:
    """Build buy_play_tokens(): 0.1 SOL to the vault, PLAY minted to the buyer."""
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=vault, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=buyer_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint_authority, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, DISC_BUY_PLAY_TOKENS, accounts)
