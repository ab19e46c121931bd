#!/usr/bin/env python3
"""Example CLI that builds a farm stake/unstake/claim transaction and prints it."""

import argparse
import logging
import sys

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from atrixfarm import Client, FarmError, parse_action
from atrixfarm.config import RPC_URLS
from atrixfarm.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Build a farm action transaction")
    parser.add_argument("farm", help="Farm account address")
    parser.add_argument("authority", help="Wallet that owns the stake")
    parser.add_argument(
        "--action",
        default="stake",
        choices=["stake", "unstake", "claim"],
        help="Action to build",
    )
    parser.add_argument("--amount", type=int, help="Amount in base units (stake/unstake)")
    parser.add_argument("--payer", help="Fee payer (defaults to authority)")
    parser.add_argument(
        "--env",
        default="mainnet-beta",
        choices=sorted(RPC_URLS),
        help="Environment to connect to",
    )
    parser.add_argument("--verbose", action="store_true", help="Log resolution steps")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    authority = Pubkey.from_string(args.authority)
    payer = Pubkey.from_string(args.payer) if args.payer else authority
    client = Client.from_env(args.env)

    try:
        action = parse_action(args.action, args.amount)
        built = client.build_action(
            Pubkey.from_string(args.farm), authority, payer, action
        )
    except FarmError as e:
        print(f"Error building {args.action}: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"=== {args.action} on {args.farm} ({args.env}) ===")
    for i, ix in enumerate(built.instructions):
        print(f"{i:>2}  program={ix.program_id}  accounts={len(ix.accounts)}  data={bytes(ix.data).hex()}")
    print()
    print("Required signers:")
    for signer in built.signers:
        print(f"  {signer}")
    if built.ephemeral_signers:
        print("Generated keypairs (sign with these too):")
        for kp in built.ephemeral_signers:
            print(f"  {kp.pubkey()}")


if __name__ == "__main__":
    main()
