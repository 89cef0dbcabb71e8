#!/usr/bin/env python3
"""
Check the relayer account on the destination ledger.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from relayer.config import RelayerConfig
from relayer.node.interface import LedgerConnectionError
from relayer.node.lcd import LCDAdapter
from relayer.tx.signer import SignerError, TransactionSigner


async def check_account(lcd_url: str = None):
    """Show account number and sequence of the configured relayer wallet."""

    config = RelayerConfig()
    if lcd_url:
        config = config.model_copy(update={"lcd_url": lcd_url})

    signer = TransactionSigner(config)
    try:
        signer.load_from_config()
    except SignerError as e:
        print(f"❌ Error: {e}")
        print("   Set RELAYER_MNEMONIC in the environment or .env file")
        return None

    print(f"\n📬 Relayer Address: {signer.address}")
    print(f"   Chain: {config.chain_id} via {config.lcd_url}")

    node = LCDAdapter(config, signer)
    await node.connect()

    try:
        account = await node.account_info(signer.address)
    except LedgerConnectionError as e:
        print(f"\n❌ Account lookup failed: {e}")
        print("   A new wallet has no on-chain account until it is funded")
        return None
    finally:
        await node.disconnect()

    print(f"\n🔢 Account:")
    print(f"   Number:   {account.account_number}")
    print(f"   Sequence: {account.sequence}")

    if config.donation_address:
        print(f"\n🎁 Donation address: {config.donation_address}")
    else:
        print(f"\n⚠️  No donation address configured; builds will be refused")

    return {
        "address": account.address,
        "account_number": account.account_number,
        "sequence": account.sequence,
    }


def main():
    parser = argparse.ArgumentParser(description="Check relayer account")
    parser.add_argument(
        "--lcd-url", "-l",
        default=None,
        help="LCD endpoint (default: RELAYER_LCD_URL)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    args = parser.parse_args()
    result = asyncio.run(check_account(args.lcd_url))
    if result is None:
        sys.exit(1)
    if args.json:
        print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
