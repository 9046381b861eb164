"""Plain data types shared by the client and the purchase flow."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class Listing:
    """A music listing to upload.

    Attributes:
        music_id: Listing id (u64).
        name: Display name.
        price: Price in the smallest currency unit (lamports or raw token amount).
        owner: Beneficiary of sales. Defaults to the uploading wallet.
    """

    music_id: int
    name: str
    price: int
    owner: Optional[Pubkey] = None


class PaymentMode(str, Enum):
    NATIVE = "native"
    TOKEN = "token"


@dataclass(frozen=True)
class TokenPayment:
    """Accounts for a token-mediated purchase.

    Token accounts left as None resolve to the associated token accounts of
    the payer and the beneficiary for ``mint``.
    """

    mint: Pubkey
    beneficiary: Pubkey
    payer_token_account: Optional[Pubkey] = None
    beneficiary_token_account: Optional[Pubkey] = None
