"""Music Store toolkit: unified entry point."""

from typing import Optional

from models import Listing
from purchase_flow import FlowConfig, PurchaseFlow
from settings import Settings, load_settings
from store_client import MusicStoreClient, RetryPolicy
from wallet import SolanaWallet


class MusicStoreToolkit:
    """Facade combining wallet, program client and purchase flows."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        wallet: Optional[SolanaWallet] = None,
    ):
        """
        Initialize all toolkit components with a shared wallet.

        Args:
            settings: Toolkit settings. Loaded from the environment if None.
            wallet: Pre-built wallet. Created from settings if None.
        """
        self.settings = settings or load_settings()
        self.wallet = wallet or SolanaWallet(
            keypair_path=self.settings.keypair_path,
            network=self.settings.network,
        )
        self.store = MusicStoreClient(
            self.settings.program_id,
            self.wallet,
            retry=RetryPolicy(max_tries=self.settings.max_retries),
            confirm_attempts=self.settings.confirm_attempts,
        )

    @property
    def pubkey(self) -> str:
        """Return wallet public key as string."""
        return str(self.wallet.pubkey)

    def flow(self, listing: Listing, **options) -> PurchaseFlow:
        """Build a PurchaseFlow for listing; options are FlowConfig fields."""
        return PurchaseFlow(self.store, FlowConfig(listing=listing, **options))

    async def close(self) -> None:
        await self.wallet.close()

    async def __aenter__(self) -> "MusicStoreToolkit":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def create_toolkit(
    keypair_path: Optional[str] = None,
    network: Optional[str] = None,
    program_id: Optional[str] = None,
    max_retries: Optional[int] = None,
) -> MusicStoreToolkit:
    """
    Factory function to create a MusicStoreToolkit.

    Arguments left as None fall back to the environment settings.

    Returns:
        MusicStoreToolkit: Initialized toolkit with wallet and store client.
    """
    base = load_settings()
    settings = Settings(
        program_id=program_id or base.program_id,
        network=network or base.network,
        keypair_path=keypair_path or base.keypair_path,
        max_retries=max_retries or base.max_retries,
        confirm_attempts=base.confirm_attempts,
    )
    return MusicStoreToolkit(settings=settings)
