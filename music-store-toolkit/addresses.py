"""Program-derived addresses used by the music store program.

Seeds must match the program's own derivation byte for byte:

    music       [b"music", music_id (u64, big-endian)]
    buyer       [b"buyer", owner pubkey bytes]
    mint-auth   [b"mint-auth"]
"""

from typing import Union

from solders.pubkey import Pubkey

MUSIC_SEED = "music"
BUYER_SEED = "buyer"
MINT_AUTHORITY_SEED = "mint-auth"

U64_MAX = 2**64 - 1


def _as_pubkey(value: Union[str, Pubkey]) -> Pubkey:
    return value if isinstance(value, Pubkey) else Pubkey.from_string(value)


def music_id_seed(music_id: int) -> bytes:
    """Encode a listing id as the 8-byte big-endian seed.

    Raises:
        ValueError: If music_id does not fit in a u64.
    """
    if isinstance(music_id, bool) or not isinstance(music_id, int):
        raise ValueError(f"music_id must be an integer, got {music_id!r}")
    if not 0 <= music_id <= U64_MAX:
        raise ValueError(f"music_id out of u64 range: {music_id}")
    return music_id.to_bytes(8, "big")


def derive_address(
    seed: str,
    key_material: bytes,
    program_id: Union[str, Pubkey],
) -> tuple[Pubkey, int]:
    """Derive a PDA from a seed string plus key material.

    Returns:
        (pda_pubkey, bump)
    """
    seeds = [seed.encode("utf-8")]
    if key_material:
        seeds.append(bytes(key_material))
    return Pubkey.find_program_address(seeds, _as_pubkey(program_id))


def find_music_address(music_id: int, program_id: Union[str, Pubkey]) -> tuple[Pubkey, int]:
    """Derive the listing PDA for a music id."""
    return derive_address(MUSIC_SEED, music_id_seed(music_id), program_id)


def find_buyer_address(owner: Union[str, Pubkey], program_id: Union[str, Pubkey]) -> tuple[Pubkey, int]:
    """Derive the buyer record PDA for a wallet."""
    return derive_address(BUYER_SEED, bytes(_as_pubkey(owner)), program_id)


def find_mint_authority_address(program_id: Union[str, Pubkey]) -> tuple[Pubkey, int]:
    """Derive the PDA that holds the PLAY mint authority."""
    return derive_address(MINT_AUTHORITY_SEED, b"", program_id)
