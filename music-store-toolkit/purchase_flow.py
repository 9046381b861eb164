"""Upload-then-buy orchestration on top of MusicStoreClient.

Two sequencing policies are supported:

    CHAINED      the upload result is handed to a completion callback and the
                 purchase only runs when the upload succeeded. Errors raised
                 before a remote call are caught and reported as False.
    INDEPENDENT  upload and purchase run one after the other regardless of
                 each other's outcome. Errors raised before a remote call
                 propagate to the caller.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple, Union

from solders.pubkey import Pubkey

from models import Listing, PaymentMode, TokenPayment
from store_client import MusicStoreClient

logger = logging.getLogger(__name__)

UploadCallback = Callable[[bool], Union[None, Awaitable[None]]]


class Sequencing(str, Enum):
    CHAINED = "chained"
    INDEPENDENT = "independent"


@dataclass(frozen=True)
class FlowConfig:
    """What to upload, how to pay, and how to sequence the two steps.

    Attributes:
        listing: Listing to upload; its music_id is also the one purchased.
        sequencing: CHAINED or INDEPENDENT.
        payment_mode: NATIVE (lamports) or TOKEN.
        token_payment: Required when payment_mode is TOKEN.
        royalties: Royalty recipients passed to a native purchase.
        upload: Run the upload step.
        purchase: Run the purchase step.
    """

    listing: Listing
    sequencing: Sequencing = Sequencing.CHAINED
    payment_mode: PaymentMode = PaymentMode.NATIVE
    token_payment: Optional[TokenPayment] = None
    royalties: Tuple[Pubkey, ...] = field(default_factory=tuple)
    upload: bool = True
    purchase: bool = True

    def __post_init__(self):
        if self.payment_mode == PaymentMode.TOKEN and self.token_payment is None:
            raise ValueError("token_payment is required for token-mediated purchases")
        if self.token_payment is not None and (
            self.token_payment.mint is None or self.token_payment.beneficiary is None
        ):
            raise ValueError("token_payment needs both a mint and a beneficiary")


@dataclass
class FlowResult:
    """Outcome of each step: True, False, or None if the step did not run."""

    uploaded: Optional[bool] = None
    purchased: Optional[bool] = None

    @property
    def ok(self) -> bool:
        return self.uploaded is not False and self.purchased is not False


class PurchaseFlow:
    """Runs the derive, upload, buy sequence for one listing."""

    def __init__(self, client: MusicStoreClient, config: FlowConfig):
        self.client = client
        self.config = config

    async def upload_with_callback(self, callback: UploadCallback) -> None:
        """Upload the listing and hand the result to callback.

        Nothing raised by the upload escapes; it is logged and reported as False.
        """
        try:
            uploaded = await self.client.upload_music(self.config.listing)
        except Exception as e:
            logger.error("Error initializing upload: %s", e)
            uploaded = False
        outcome = callback(uploaded)
        if inspect.isawaitable(outcome):
            await outcome

    async def purchase(self) -> bool:
        """Run the configured purchase variant."""
        music_id = self.config.listing.music_id
        if self.config.payment_mode == PaymentMode.TOKEN:
            return await self.client.buy_music_with_token(music_id, self.config.token_payment)
        return await self.client.buy_music(music_id, royalties=self.config.royalties)

    async def _guarded_purchase(self) -> bool:
        try:
            return await self.purchase()
        except Exception as e:
            logger.error("Error purchasing music: %s", e)
            return False

    async def run(self) -> FlowResult:
        if self.config.sequencing == Sequencing.CHAINED:
            return await self._run_chained()
        return await self._run_independent()

    async def _run_chained(self) -> FlowResult:
        result = FlowResult()

        if not self.config.upload:
            if self.config.purchase:
                result.purchased = await self._guarded_purchase()
            return result

        async def on_uploaded(uploaded: bool) -> None:
            result.uploaded = uploaded
            if not self.config.purchase:
                return
            if uploaded:
                logger.info("Proceeding to purchase music...")
                result.purchased = await self._guarded_purchase()
            else:
                logger.info("Skipping purchase because upload failed.")

        await self.upload_with_callback(on_uploaded)
        return result

    async def _run_independent(self) -> FlowResult:
        result = FlowResult()
        if self.config.upload:
            result.uploaded = await self.client.upload_music(self.config.listing)
        if self.config.purchase:
            result.purchased = await self.purchase()
        return result
