"""Tests for the command line interface."""

import json

import pytest
from solders.keypair import Keypair

import cli
from addresses import find_buyer_address, find_music_address
from conftest import PROGRAM_ID, FakeRpcClient, sent_instruction
from instructions import DISC_BUY_MUSIC, DISC_UPLOAD_MUSIC
from settings import Settings
from toolkit import MusicStoreToolkit
from wallet import SolanaWallet


@pytest.fixture
def fake_toolkit(monkeypatch):
    rpc = FakeRpcClient()
    wallet = SolanaWallet(keypair=Keypair(), client=rpc)
    tk = MusicStoreToolkit(settings=Settings(confirm_attempts=2), wallet=wallet)
    tk.store.confirm_interval = 0
    monkeypatch.setattr(cli, "create_toolkit", lambda **kwargs: tk)
    return tk, rpc


def test_address_music(capsys):
    cli.main(["--program-id", str(PROGRAM_ID), "address", "music", "4"])
    pda, bump = find_music_address(4, PROGRAM_ID)
    out = capsys.readouterr().out
    assert f"music PDA: {pda}" in out
    assert f"bump: {bump}" in out


def test_address_buyer_from_keypair_file(tmp_path, capsys):
    kp = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(bytes(kp))))
    cli.main(["--keypair", str(path), "--program-id", str(PROGRAM_ID), "address", "buyer"])
    pda, _ = find_buyer_address(kp.pubkey(), PROGRAM_ID)
    assert f"buyer PDA: {pda}" in capsys.readouterr().out


def test_errors_exit_with_status_1(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--keypair", str(tmp_path / "missing.json"), "address", "buyer"])
    assert exc.value.code == 1
    assert "Error: Keypair file not found" in capsys.readouterr().err


def test_invalid_pubkey_is_rejected_by_parser():
    with pytest.raises(SystemExit):
        cli.main(["buy", "--id", "4", "--royalty", "not-a-key"])


def test_run_token_mode_needs_mint_and_beneficiary(fake_toolkit, capsys):
    _, rpc = fake_toolkit
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", "--id", "4", "--name", "S", "--price", "1", "--mode", "token"])
    assert exc.value.code == 2
    assert "--mint and --beneficiary are required" in capsys.readouterr().err
    assert rpc.attempts == []


def test_run_flow(fake_toolkit, capsys):
    tk, rpc = fake_toolkit
    cli.main(["run", "--id", "4", "--name", "Sample Song", "--price", "1000000"])

    assert "uploaded=True purchased=True" in capsys.readouterr().out
    assert sent_instruction(rpc.sent[0])[2][:8] == DISC_UPLOAD_MUSIC
    assert sent_instruction(rpc.sent[1])[2][:8] == DISC_BUY_MUSIC
    assert rpc.closed


def test_failed_purchase_keeps_exit_status(fake_toolkit):
    tk, rpc = fake_toolkit
    rpc.status_err = "InstructionError(0, Custom(6001))"
    cli.main(["buy", "--id", "4"])
    assert len(rpc.sent) == 1


def test_show_missing_listing(fake_toolkit, capsys):
    cli.main(["show", "--id", "9"])
    assert "Listing 9 not found." in capsys.readouterr().out


def test_status(fake_toolkit, capsys):
    tk, _ = fake_toolkit
    cli.main(["status", "--id", "4"])
    assert f"{tk.pubkey} purchased 4: no" in capsys.readouterr().out


def test_balance(fake_toolkit, capsys):
    tk, rpc = fake_toolkit
    rpc.balance = 1_500_000_000
    cli.main(["balance"])
    assert "SOL Balance: 1.500000000" in capsys.readouterr().out
