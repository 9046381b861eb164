"""Shared fixtures: an in-memory stand-in for the async RPC client."""

from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from settings import DEFAULT_PROGRAM_ID
from store_client import MusicStoreClient
from wallet import SolanaWallet

PROGRAM_ID = Pubkey.from_string(DEFAULT_PROGRAM_ID)


class FakeRpcClient:
    """Records sent transactions and serves canned account data."""

    def __init__(self):
        self.sent = []
        self.attempts = []
        self.blockhash_calls = 0
        self.send_errors = []
        self.status_err = None
        self.confirmed = True
        self.accounts = {}
        self.program_accounts = []
        self.program_account_filters = None
        self.balance = 0
        self.closed = False

    async def get_latest_blockhash(self):
        self.blockhash_calls += 1
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.new_unique()))

    async def send_transaction(self, tx, opts=None):
        self.attempts.append(tx.signatures[0])
        if self.send_errors:
            raise self.send_errors.pop(0)
        self.sent.append(tx)
        return SimpleNamespace(value=Signature.default())

    async def get_signature_statuses(self, sigs):
        if not self.confirmed:
            return SimpleNamespace(value=[None])
        return SimpleNamespace(value=[SimpleNamespace(err=self.status_err)])

    async def get_account_info(self, pubkey):
        data = self.accounts.get(pubkey)
        return SimpleNamespace(value=None if data is None else SimpleNamespace(data=data))

    async def get_program_accounts(self, program_id, encoding=None, filters=None):
        self.program_account_filters = filters
        return SimpleNamespace(value=[
            SimpleNamespace(pubkey=pk, account=SimpleNamespace(data=data))
            for pk, data in self.program_accounts
        ])

    async def get_balance(self, pubkey):
        return SimpleNamespace(value=self.balance)

    async def close(self):
        self.closed = True


def sent_instruction(tx, index=0):
    """Unpack a compiled instruction into (program_id, account keys, data)."""
    msg = tx.message
    ix = msg.instructions[index]
    keys = msg.account_keys
    return keys[ix.program_id_index], [keys[i] for i in bytes(ix.accounts)], bytes(ix.data)


@pytest.fixture
def rpc():
    return FakeRpcClient()


@pytest.fixture
def wallet(rpc):
    return SolanaWallet(keypair=Keypair(), client=rpc)


@pytest.fixture
def store(wallet):
    return MusicStoreClient(PROGRAM_ID, wallet, confirm_attempts=3, confirm_interval=0)
