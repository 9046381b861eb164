"""Tests for program-derived address helpers."""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from addresses import (
    derive_address,
    find_buyer_address,
    find_mint_authority_address,
    find_music_address,
    music_id_seed,
)
from conftest import PROGRAM_ID


def test_music_id_seed_is_big_endian():
    assert music_id_seed(4) == b"\x00\x00\x00\x00\x00\x00\x00\x04"
    assert music_id_seed(0x0102) == bytes(6) + b"\x01\x02"
    assert len(music_id_seed(2**64 - 1)) == 8


@pytest.mark.parametrize("bad", [-1, 2**64, "4", 4.0, True])
def test_music_id_seed_rejects_non_u64(bad):
    with pytest.raises(ValueError):
        music_id_seed(bad)


def test_music_address_is_deterministic():
    first = find_music_address(4, PROGRAM_ID)
    second = find_music_address(4, str(PROGRAM_ID))
    assert first == second
    assert 0 <= first[1] <= 255


def test_music_address_matches_program_derivation():
    expected = Pubkey.find_program_address([b"music", (4).to_bytes(8, "big")], PROGRAM_ID)
    assert find_music_address(4, PROGRAM_ID) == expected


def test_distinct_ids_give_distinct_addresses():
    addresses = {find_music_address(i, PROGRAM_ID)[0] for i in range(1, 21)}
    assert len(addresses) == 20


def test_buyer_address_uses_owner_bytes():
    owner = Keypair().pubkey()
    expected = Pubkey.find_program_address([b"buyer", bytes(owner)], PROGRAM_ID)
    assert find_buyer_address(owner, PROGRAM_ID) == expected
    assert find_buyer_address(str(owner), PROGRAM_ID) == expected


def test_buyer_and_music_seeds_do_not_collide():
    owner = Keypair().pubkey()
    assert find_buyer_address(owner, PROGRAM_ID)[0] != find_music_address(4, PROGRAM_ID)[0]


def test_mint_authority_has_single_seed():
    expected = Pubkey.find_program_address([b"mint-auth"], PROGRAM_ID)
    assert find_mint_authority_address(PROGRAM_ID) == expected
    assert derive_address("mint-auth", b"", PROGRAM_ID) == expected
