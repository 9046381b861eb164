"""Tests for account decoding."""

import struct

import pytest
from solders.keypair import Keypair

from accounts import BUYER_DISC, MUSIC_DISC, BuyerAccount, MusicAccount
from errors import AccountDecodeError


def _music_bytes(owner, royalties=None, padding=0):
    raw = (
        MUSIC_DISC
        + struct.pack("<Q", 4)
        + struct.pack("<I", 11) + b"Sample Song"
        + struct.pack("<Q", 1_000_000)
        + bytes(owner)
    )
    if royalties is not None:
        raw += struct.pack("<I", len(royalties))
        for pk, pct in royalties:
            raw += bytes(pk) + bytes([pct])
    return raw + bytes(padding)


def test_decode_music_without_royalties():
    owner = Keypair().pubkey()
    music = MusicAccount.decode(_music_bytes(owner))
    assert (music.id, music.name, music.price, music.owner) == (4, "Sample Song", 1_000_000, owner)
    assert music.royalties == ()


def test_decode_music_with_royalties():
    owner, a, b = Keypair().pubkey(), Keypair().pubkey(), Keypair().pubkey()
    music = MusicAccount.decode(_music_bytes(owner, [(a, 70), (b, 30)], padding=16))
    assert music.royalties == ((a, 70), (b, 30))
    assert music.to_dict()["royalties"][1] == {"address": str(b), "percent": 30}


def test_decode_music_zero_padded_space():
    owner = Keypair().pubkey()
    assert MusicAccount.decode(_music_bytes(owner, padding=40)).royalties == ()


def test_decode_music_rejects_wrong_discriminator():
    data = BUYER_DISC + _music_bytes(Keypair().pubkey())[8:]
    with pytest.raises(AccountDecodeError):
        MusicAccount.decode(data)


def test_decode_music_rejects_truncated_data():
    with pytest.raises(AccountDecodeError):
        MusicAccount.decode(_music_bytes(Keypair().pubkey())[:30])


def test_decode_music_rejects_short_royalty_vector():
    data = _music_bytes(Keypair().pubkey()) + struct.pack("<I", 2) + bytes(40)
    with pytest.raises(AccountDecodeError):
        MusicAccount.decode(data)


def test_decode_buyer():
    data = BUYER_DISC + struct.pack("<I", 2) + struct.pack("<QQ", 4, 11) + bytes(64)
    buyer = BuyerAccount.decode(data)
    assert buyer.purchased_music_ids == (4, 11)
    assert buyer.has_purchased(11)
    assert not buyer.has_purchased(5)
