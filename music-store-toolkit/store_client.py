"""
Music Store Client: Python interface for the on-chain music store program.

Program ID (devnet): 83eMBGtHrS4oR6VjptrJdwVjidDjoAdokVxCi6dZQeZP

Provides: upload_music, buy_music, buy_music_with_token, buy_play_tokens,
fetch_music, fetch_buyer, has_purchased, list_music

Write operations follow one contract: derive the PDAs, send a single
transaction, log the outcome, and return a bool. Rejections and transport
failures are logged and reported as False. Invalid arguments raise
ValueError before anything is sent.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import backoff
import base58
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException
from solana.rpc.types import MemcmpOpts, TxOpts
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from spl.token.instructions import get_associated_token_address

from accounts import MUSIC_DISC, BuyerAccount, MusicAccount
from addresses import (
    U64_MAX,
    find_buyer_address,
    find_mint_authority_address,
    find_music_address,
    music_id_seed,
)
from errors import AccountDecodeError, MusicStoreError, TransactionError
from instructions import (
    buy_music_ix,
    buy_music_with_token_ix,
    buy_play_tokens_ix,
    upload_music_ix,
)
from models import Listing, TokenPayment
from wallet import SolanaWallet

logger = logging.getLogger(__name__)

# Failures reported as False by the write operations
REMOTE_ERRORS = (MusicStoreError, RPCException, SolanaRpcException)

# Only transport failures are worth another attempt
TRANSIENT_ERRORS = (SolanaRpcException,)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with full jitter for transport failures.

    The default of one try means no retry.
    """

    max_tries: int = 1
    max_time: Optional[float] = None
    factor: float = 1.0

    def wrap(self, func):
        return backoff.on_exception(
            backoff.expo,
            TRANSIENT_ERRORS,
            max_tries=self.max_tries,
            max_time=self.max_time,
            jitter=backoff.full_jitter,
            factor=self.factor,
        )(func)


def validate_listing(listing: Listing) -> None:
    """Raise ValueError if a listing cannot be encoded for upload."""
    music_id_seed(listing.music_id)
    if not isinstance(listing.name, str):
        raise ValueError(f"name must be a string, got {listing.name!r}")
    if isinstance(listing.price, bool) or not isinstance(listing.price, int):
        raise ValueError(f"price must be an integer, got {listing.price!r}")
    if not 0 <= listing.price <= U64_MAX:
        raise ValueError(f"price out of u64 range: {listing.price}")


class MusicStoreClient:
    """Client for the music store program."""

    def __init__(
        self,
        program_id: Union[str, Pubkey],
        wallet: SolanaWallet,
        retry: Optional[RetryPolicy] = None,
        confirm_attempts: int = 30,
        confirm_interval: float = 1.0,
    ):
        """
        Initialize the client.

        Args:
            program_id: Deployed program public key.
            wallet: Wallet providing the signer keypair and RPC client.
            retry: Retry policy for transport failures. Defaults to a single attempt.
            confirm_attempts: How many times to poll for confirmation.
            confirm_interval: Seconds between confirmation polls.
        """
        self.program_id = program_id if isinstance(program_id, Pubkey) else Pubkey.from_string(program_id)
        self.wallet = wallet
        self.client = wallet.client
        self.keypair = wallet.keypair
        self.payer = wallet.pubkey
        self.retry = retry or RetryPolicy()
        self.confirm_attempts = confirm_attempts
        self.confirm_interval = confirm_interval
        self._latest_blockhash = self.retry.wrap(self._latest_blockhash_once)
        self._send_signed = self.retry.wrap(self._send_signed_once)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def _latest_blockhash_once(self):
        blockhash_resp = await self.client.get_latest_blockhash()
        return blockhash_resp.value.blockhash

    async def _send_signed_once(self, tx: Transaction):
        """Send an already signed transaction. Returns the signature."""
        resp = await self.client.send_transaction(
            tx, opts=TxOpts(skip_preflight=True, preflight_commitment="confirmed")
        )
        sig = resp.value
        if sig is None:
            raise MusicStoreError(f"Transaction failed: {resp}")
        return sig

    async def _send_tx(self, ixs: List[Instruction]) -> str:
        """Build, sign, send and poll for confirmation. Returns signature string.

        Signed once; retries resend the same signed transaction.
        """
        blockhash = await self._latest_blockhash()
        msg = Message.new_with_blockhash(ixs, self.payer, blockhash)
        tx = Transaction.new_unsigned(msg)
        tx.sign([self.keypair], blockhash)
        sig = await self._send_signed(tx)
        for _ in range(self.confirm_attempts):
            status = await self.client.get_signature_statuses([sig])
            if status.value and status.value[0] is not None:
                if status.value[0].err:
                    raise TransactionError(status.value[0].err, signature=str(sig))
                return str(sig)
            await asyncio.sleep(self.confirm_interval)
        logger.warning("Transaction %s not confirmed after %d checks", sig, self.confirm_attempts)
        return str(sig)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def upload_music(self, listing: Listing) -> bool:
        """Register a listing on-chain.

        Raises:
            ValueError: If the listing cannot be encoded.
        """
        validate_listing(listing)
        music_pda, bump = find_music_address(listing.music_id, self.program_id)
        ix = upload_music_ix(
            self.program_id,
            signer=self.payer,
            music=music_pda,
            music_id=listing.music_id,
            name=listing.name,
            price=listing.price,
            owner=listing.owner or self.payer,
            bump=bump,
        )
        try:
            sig = await self._send_tx([ix])
        except REMOTE_ERRORS as e:
            logger.error("Error uploading music: %s", e)
            return False
        logger.info("Music uploaded successfully.")
        logger.debug("upload_music id=%d pda=%s tx=%s", listing.music_id, music_pda, sig)
        return True

    async def buy_music(self, music_id: int, royalties: Sequence[Pubkey] = ()) -> bool:
        """Purchase a listing, paying in lamports.

        Args:
            music_id: Listing id.
            royalties: Royalty recipients in the order stored on the listing.
        """
        music_pda, _ = find_music_address(music_id, self.program_id)
        buyer_pda, _ = find_buyer_address(self.payer, self.program_id)
        ix = buy_music_ix(
            self.program_id,
            music=music_pda,
            buyer=buyer_pda,
            payer=self.payer,
            music_id=music_id,
            royalties=royalties,
        )
        return await self._purchase(ix, music_id)

    async def buy_music_with_token(self, music_id: int, payment: TokenPayment) -> bool:
        """Purchase a listing, paying from a token account."""
        music_pda, _ = find_music_address(music_id, self.program_id)
        buyer_pda, _ = find_buyer_address(self.payer, self.program_id)
        payer_ata = payment.payer_token_account or get_associated_token_address(self.payer, payment.mint)
        beneficiary_ata = payment.beneficiary_token_account or get_associated_token_address(
            payment.beneficiary, payment.mint
        )
        ix = buy_music_with_token_ix(
            self.program_id,
            music=music_pda,
            buyer=buyer_pda,
            payer=self.payer,
            payer_token_account=payer_ata,
            beneficiary_token_account=beneficiary_ata,
            music_id=music_id,
        )
        return await self._purchase(ix, music_id)

    async def _purchase(self, ix: Instruction, music_id: int) -> bool:
        try:
            sig = await self._send_tx([ix])
        except REMOTE_ERRORS as e:
            logger.error("Error purchasing music: %s", e)
            return False
        logger.info("Music purchased successfully.")
        logger.debug("buy_music id=%d tx=%s", music_id, sig)
        return True

    async def buy_play_tokens(
        self,
        vault: Pubkey,
        mint: Pubkey,
        buyer_token_account: Optional[Pubkey] = None,
    ) -> bool:
        """Pay 0.1 SOL into the vault and receive PLAY tokens."""
        mint_authority, _ = find_mint_authority_address(self.program_id)
        ix = buy_play_tokens_ix(
            self.program_id,
            payer=self.payer,
            vault=vault,
            mint=mint,
            buyer_token_account=buyer_token_account or get_associated_token_address(self.payer, mint),
            mint_authority=mint_authority,
        )
        try:
            await self._send_tx([ix])
        except REMOTE_ERRORS as e:
            logger.error("Error buying PLAY tokens: %s", e)
            return False
        logger.info("PLAY tokens purchased successfully.")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def fetch_music(self, music_id: int) -> Optional[MusicAccount]:
        """Fetch and decode a listing. Returns None if it does not exist."""
        music_pda, _ = find_music_address(music_id, self.program_id)
        resp = await self.client.get_account_info(music_pda)
        if resp.value is None:
            return None
        return MusicAccount.decode(resp.value.data)

    async def fetch_buyer(self, owner: Optional[Pubkey] = None) -> Optional[BuyerAccount]:
        """Fetch and decode the buyer record of a wallet (default: own wallet)."""
        buyer_pda, _ = find_buyer_address(owner or self.payer, self.program_id)
        resp = await self.client.get_account_info(buyer_pda)
        if resp.value is None:
            return None
        return BuyerAccount.decode(resp.value.data)

    async def has_purchased(self, music_id: int, owner: Optional[Pubkey] = None) -> bool:
        buyer = await self.fetch_buyer(owner)
        return buyer is not None and buyer.has_purchased(music_id)

    async def list_music(self) -> List[Dict[str, Any]]:
        """Fetch all listings using getProgramAccounts."""
        # Filter by Music account discriminator
        resp = await self.client.get_program_accounts(
            self.program_id,
            encoding="base64",
            filters=[MemcmpOpts(offset=0, bytes=base58.b58encode(MUSIC_DISC).decode())],
        )

        listings = []
        for keyed in resp.value or []:
            try:
                music = MusicAccount.decode(keyed.account.data)
            except AccountDecodeError as e:
                logger.debug("Skipping %s: %s", keyed.pubkey, e)
                continue
            entry = music.to_dict()
            entry["address"] = str(keyed.pubkey)
            listings.append(entry)
        return listings
