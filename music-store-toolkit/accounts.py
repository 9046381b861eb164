"""Decoders for music store program accounts."""

import hashlib
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from solders.pubkey import Pubkey

from errors import AccountDecodeError


def account_discriminator(name: str) -> bytes:
    """Anchor account discriminator: sha256("account:<Name>")[:8]."""
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


MUSIC_DISC = account_discriminator("Music")
BUYER_DISC = account_discriminator("Buyer")


class _Reader:
    """Sequential Borsh reader over account data."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    def remaining(self) -> int:
        return len(self.data) - self.offset

    def take(self, size: int) -> bytes:
        if self.offset + size > len(self.data):
            raise AccountDecodeError(
                f"Account data too short: need {size} bytes at offset {self.offset}, have {self.remaining()}"
            )
        chunk = self.data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    def pubkey(self) -> Pubkey:
        return Pubkey.from_bytes(self.take(32))

    def string(self) -> str:
        length = self.u32()
        return self.take(length).decode("utf-8", errors="replace")


def _check_disc(data: bytes, expected: bytes, name: str) -> None:
    if len(data) < 8 or data[:8] != expected:
        raise AccountDecodeError(f"Not a {name} account (discriminator mismatch)")


@dataclass(frozen=True)
class MusicAccount:
    """A music listing as stored on-chain."""

    id: int
    name: str
    price: int
    owner: Pubkey
    royalties: Tuple[Tuple[Pubkey, int], ...] = field(default_factory=tuple)

    @classmethod
    def decode(cls, data: bytes) -> "MusicAccount":
        data = bytes(data)
        _check_disc(data, MUSIC_DISC, "Music")
        r = _Reader(data, 8)
        music_id = r.u64()
        name = r.string()
        price = r.u64()
        owner = r.pubkey()

        # Royalty split only exists on program versions that store it
        royalties: list[tuple[Pubkey, int]] = []
        if r.remaining() >= 4:
            count = r.u32()
            # A zero count is what unused trailing space decodes to
            if count and count * 33 > r.remaining():
                raise AccountDecodeError(
                    f"Royalty vector declares {count} entries, only {r.remaining()} bytes left"
                )
            for _ in range(count):
                royalties.append((r.pubkey(), r.u8()))
        return cls(music_id, name, price, owner, tuple(royalties))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "owner": str(self.owner),
            "royalties": [{"address": str(pk), "percent": pct} for pk, pct in self.royalties],
        }


@dataclass(frozen=True)
class BuyerAccount:
    """Purchase record for one wallet."""

    purchased_music_ids: Tuple[int, ...]

    @classmethod
    def decode(cls, data: bytes) -> "BuyerAccount":
        data = bytes(data)
        _check_disc(data, BUYER_DISC, "Buyer")
        r = _Reader(data, 8)
        count = r.u32()
        return cls(tuple(r.u64() for _ in range(count)))

    def has_purchased(self, music_id: int) -> bool:
        return music_id in self.purchased_music_ids
