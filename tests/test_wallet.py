"""Tests for keypair loading and network resolution."""

import json

import pytest
from solders.keypair import Keypair

from wallet import SolanaWallet, load_keypair, resolve_rpc_url


def test_resolve_rpc_url():
    assert resolve_rpc_url("devnet") == "https://api.devnet.solana.com"
    assert resolve_rpc_url("mainnet-beta") == "https://api.mainnet-beta.solana.com"
    assert resolve_rpc_url("http://127.0.0.1:8899") == "http://127.0.0.1:8899"


def test_load_keypair_roundtrip(tmp_path):
    kp = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(kp))))
    assert load_keypair(str(path)).pubkey() == kp.pubkey()


def test_load_keypair_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_keypair(str(tmp_path / "nope.json"))


@pytest.mark.parametrize("content", ["not json", "[1, 2, 3]", "{\"a\": 1}"])
def test_load_keypair_invalid(tmp_path, content):
    path = tmp_path / "id.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_keypair(str(path))


@pytest.mark.asyncio
async def test_wallet_balance_and_close(rpc):
    rpc.balance = 2_000_000_000
    wallet = SolanaWallet(keypair=Keypair(), network="testnet", client=rpc)
    assert wallet.rpc_url == "https://api.testnet.solana.com"
    assert await wallet.get_balance() == 2.0
    await wallet.close()
    assert rpc.closed
