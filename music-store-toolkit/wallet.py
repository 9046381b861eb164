import json
from pathlib import Path
from typing import Optional

from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

RPC_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}


def resolve_rpc_url(network: str) -> str:
    """Map a cluster name to its public RPC URL; anything else is used as a URL."""
    return RPC_URLS.get(network, network)


def load_keypair(keypair_path: str) -> Keypair:
    """
    Load a Solana CLI keypair file (JSON array of 64 bytes).

    Raises:
        FileNotFoundError: If the keypair file does not exist.
        ValueError: If the keypair file contains invalid data.
    """
    expanded_path = Path(keypair_path).expanduser()

    if not expanded_path.exists():
        raise FileNotFoundError(f"Keypair file not found: {expanded_path}")

    try:
        with open(expanded_path, 'r') as f:
            secret_key = json.load(f)
        return Keypair.from_bytes(bytes(secret_key))
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        raise ValueError(f"Invalid keypair file format: {e}")


class SolanaWallet:
    """A Solana wallet wrapper for keypair management and the async RPC client."""

    def __init__(
        self,
        keypair_path: str = "~/.config/solana/id.json",
        network: str = "devnet",
        keypair: Optional[Keypair] = None,
        client: Optional[AsyncClient] = None,
    ):
        """
        Initialize the wallet by loading a keypair and setting up the RPC client.

        Args:
            keypair_path: Path to the JSON keypair file. Ignored when keypair is given.
            network: 'devnet', 'testnet', 'mainnet-beta', or an RPC URL.
            keypair: Pre-loaded keypair.
            client: Pre-built RPC client.

        Raises:
            FileNotFoundError: If the keypair file does not exist.
            ValueError: If the keypair file contains invalid data.
        """
        self.keypair = keypair if keypair is not None else load_keypair(keypair_path)
        self.network = network
        self.rpc_url = resolve_rpc_url(network)
        self.client = client if client is not None else AsyncClient(self.rpc_url)
        self.pubkey = self.keypair.pubkey()

    async def get_balance(self) -> float:
        """
        Get the SOL balance of the wallet.

        Returns:
            float: The balance in SOL (9 decimal places).
        """
        response = await self.client.get_balance(self.pubkey)

        if response.value is None:
            raise RuntimeError("Failed to retrieve balance from RPC")

        return float(response.value) / 1e9

    async def close(self) -> None:
        await self.client.close()
