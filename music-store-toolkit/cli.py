#!/usr/bin/env python3
"""Music Store toolkit CLI."""

import argparse
import asyncio
import json
import logging
import sys

from solders.pubkey import Pubkey

from addresses import find_buyer_address, find_music_address
from models import Listing, PaymentMode, TokenPayment
from purchase_flow import Sequencing
from settings import load_settings
from toolkit import create_toolkit
from wallet import load_keypair


def _pubkey(value: str) -> Pubkey:
    """argparse type for base58 public keys."""
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid public key: {value}")


def _token_payment(args) -> TokenPayment:
    return TokenPayment(
        mint=args.mint,
        beneficiary=args.beneficiary,
        payer_token_account=args.payer_token_account,
        beneficiary_token_account=args.beneficiary_token_account,
    )


def cmd_address(args):
    """Print a program-derived address and its bump."""
    if args.kind == "music":
        if args.key is None:
            raise ValueError("music address needs a listing id")
        pda, bump = find_music_address(int(args.key), args.program_id)
    else:
        owner = args.key or str(load_keypair(args.keypair).pubkey())
        pda, bump = find_buyer_address(owner, args.program_id)
    print(f"{args.kind} PDA: {pda}")
    print(f"bump: {bump}")


async def cmd_balance(tk, args):
    """Show SOL balance."""
    bal = await tk.wallet.get_balance()
    print(f"Wallet: {tk.pubkey}")
    print(f"Network: {tk.wallet.network}")
    print(f"SOL Balance: {bal:.9f}")


async def cmd_upload(tk, args):
    """Upload a listing."""
    await tk.store.upload_music(Listing(args.id, args.name, args.price, owner=args.owner))


async def cmd_buy(tk, args):
    """Buy a listing with SOL."""
    await tk.store.buy_music(args.id, royalties=args.royalty)


async def cmd_buy_token(tk, args):
    """Buy a listing with tokens."""
    await tk.store.buy_music_with_token(args.id, _token_payment(args))


async def cmd_run(tk, args):
    """Upload then buy a listing."""
    mode = PaymentMode(args.mode)
    flow = tk.flow(
        Listing(args.id, args.name, args.price, owner=args.owner),
        sequencing=Sequencing.INDEPENDENT if args.independent else Sequencing.CHAINED,
        payment_mode=mode,
        token_payment=_token_payment(args) if mode == PaymentMode.TOKEN else None,
        royalties=tuple(args.royalty),
        upload=not args.skip_upload,
        purchase=not args.skip_purchase,
    )
    result = await flow.run()
    print(f"uploaded={result.uploaded} purchased={result.purchased}")


async def cmd_show(tk, args):
    """Show one listing."""
    music = await tk.store.fetch_music(args.id)
    if music is None:
        print(f"Listing {args.id} not found.")
        return
    print(json.dumps(music.to_dict(), indent=2))


async def cmd_listings(tk, args):
    """Show all listings."""
    listings = await tk.store.list_music()
    if not listings:
        print("No listings found.")
        return
    print(f"{'ID':>8} {'Name':<32} {'Price':>15} {'Owner':<44}")
    print("-" * 102)
    for m in listings:
        print(f"{m['id']:>8} {m['name'][:32]:<32} {m['price']:>15} {m['owner']:<44}")


async def cmd_status(tk, args):
    """Show whether a wallet has purchased a listing."""
    owner = args.owner or tk.wallet.pubkey
    purchased = await tk.store.has_purchased(args.id, owner)
    print(f"{owner} purchased {args.id}: {'yes' if purchased else 'no'}")


async def cmd_buy_play(tk, args):
    """Buy PLAY tokens for 0.1 SOL."""
    await tk.store.buy_play_tokens(args.vault, args.mint, args.token_account)


ASYNC_COMMANDS = {
    "balance": cmd_balance,
    "upload": cmd_upload,
    "buy": cmd_buy,
    "buy-token": cmd_buy_token,
    "run": cmd_run,
    "show": cmd_show,
    "listings": cmd_listings,
    "status": cmd_status,
    "buy-play": cmd_buy_play,
}


def _add_token_args(p, required: bool):
    p.add_argument("--mint", type=_pubkey, required=required, help="Payment token mint")
    p.add_argument("--beneficiary", type=_pubkey, required=required, help="Wallet receiving the payment")
    p.add_argument("--payer-token-account", type=_pubkey, help="Source token account (default: own ATA)")
    p.add_argument("--beneficiary-token-account", type=_pubkey, help="Destination token account (default: beneficiary ATA)")


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Music Store toolkit")
    parser.add_argument("--keypair", default=settings.keypair_path, help="Path to keypair file")
    parser.add_argument("--network", default=settings.network, help="Solana network or RPC URL")
    parser.add_argument("--program-id", default=settings.program_id, help="Music store program id")
    parser.add_argument("--retries", type=int, default=settings.max_retries, help="Max tries per transaction")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    # address
    p = sub.add_parser("address", help="Derive a program address")
    p.add_argument("kind", choices=["music", "buyer"])
    p.add_argument("key", nargs="?", help="Listing id (music) or owner pubkey (buyer, default: own wallet)")

    # balance
    sub.add_parser("balance", help="Show SOL balance")

    # upload
    p = sub.add_parser("upload", help="Upload a listing")
    p.add_argument("--id", type=int, required=True, help="Listing id")
    p.add_argument("--name", required=True, help="Listing name")
    p.add_argument("--price", type=int, required=True, help="Price in smallest unit")
    p.add_argument("--owner", type=_pubkey, help="Beneficiary (default: own wallet)")

    # buy
    p = sub.add_parser("buy", help="Buy a listing with SOL")
    p.add_argument("--id", type=int, required=True, help="Listing id")
    p.add_argument("--royalty", type=_pubkey, action="append", default=[], help="Royalty recipient, in listing order")

    # buy-token
    p = sub.add_parser("buy-token", help="Buy a listing with tokens")
    p.add_argument("--id", type=int, required=True, help="Listing id")
    _add_token_args(p, required=True)

    # run
    p = sub.add_parser("run", help="Upload a listing, then buy it")
    p.add_argument("--id", type=int, required=True, help="Listing id")
    p.add_argument("--name", required=True, help="Listing name")
    p.add_argument("--price", type=int, required=True, help="Price in smallest unit")
    p.add_argument("--owner", type=_pubkey, help="Beneficiary (default: own wallet)")
    p.add_argument("--mode", choices=[m.value for m in PaymentMode], default="native", help="Payment mode")
    p.add_argument("--royalty", type=_pubkey, action="append", default=[], help="Royalty recipient (native mode)")
    p.add_argument("--independent", action="store_true", help="Buy even if the upload fails")
    p.add_argument("--skip-upload", action="store_true", help="Purchase only")
    p.add_argument("--skip-purchase", action="store_true", help="Upload only")
    _add_token_args(p, required=False)

    # show
    p = sub.add_parser("show", help="Show a listing")
    p.add_argument("--id", type=int, required=True, help="Listing id")

    # listings
    sub.add_parser("listings", help="Show all listings")

    # status
    p = sub.add_parser("status", help="Check a purchase record")
    p.add_argument("--id", type=int, required=True, help="Listing id")
    p.add_argument("--owner", type=_pubkey, help="Buyer wallet (default: own wallet)")

    # buy-play
    p = sub.add_parser("buy-play", help="Buy PLAY tokens for 0.1 SOL")
    p.add_argument("--vault", type=_pubkey, required=True, help="Vault receiving SOL")
    p.add_argument("--mint", type=_pubkey, required=True, help="PLAY mint")
    p.add_argument("--token-account", type=_pubkey, help="Destination token account (default: own ATA)")

    return parser


async def _dispatch(args):
    tk = create_toolkit(
        keypair_path=args.keypair,
        network=args.network,
        program_id=args.program_id,
        max_retries=args.retries,
    )
    async with tk:
        await ASYNC_COMMANDS[args.command](tk, args)


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "run" and args.mode == "token" and not (args.mint and args.beneficiary):
        parser.error("--mint and --beneficiary are required with --mode token")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )
    try:
        if args.command == "address":
            cmd_address(args)
        else:
            asyncio.run(_dispatch(args))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
