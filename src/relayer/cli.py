"""
Command-line interface for the Terra Relayer.

Provides one-shot commands for building, relaying and inspecting relay
transactions.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog

from relayer import __version__
from relayer.config import RelayerConfig
from relayer.core.deposit import DepositRecord
from relayer.core.relayer import Relayer
from relayer.core.transaction import SignedTransaction
from relayer.fees.oracle import GasPriceOracle
from relayer.node.interface import TxLookupStatus


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="terra-relayer",
        description="Relay cross-chain deposits to a Terra ledger",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from RELAYER_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("sequence", help="Show the relayer address and next sequence")
    subparsers.add_parser("gas-price", help="Show the gas price that would be used")

    build_parser = subparsers.add_parser("build", help="Build a relay transaction")
    build_parser.add_argument(
        "--records",
        required=True,
        help="JSON file with a list of deposit records",
    )
    build_parser.add_argument(
        "--sequence",
        type=int,
        help="Account sequence (default: query the ledger)",
    )
    build_parser.add_argument(
        "--broadcast",
        action="store_true",
        help="Submit the transaction after building it",
    )

    relay_parser = subparsers.add_parser("relay", help="Submit a previously built transaction")
    relay_parser.add_argument(
        "--tx",
        required=True,
        help="JSON file written by the build command",
    )

    tx_parser = subparsers.add_parser("tx", help="Look up a transaction by hash")
    tx_parser.add_argument("tx_hash", help="Transaction hash")

    return parser


def load_records(path: str) -> list:
    """Read deposit records from a JSON file."""
    data = json.loads(Path(path).read_text())
    return [DepositRecord.from_dict(item) for item in data]


async def show_sequence(config: RelayerConfig) -> None:
    async with Relayer(config) as relayer:
        sequence = await relayer.load_sequence()
        print(json.dumps({"address": relayer.signer.address, "sequence": sequence}))


async def show_gas_price(config: RelayerConfig) -> None:
    oracle = GasPriceOracle(config)
    try:
        gas_price = await oracle.fetch_gas_price()
    finally:
        await oracle.close()
    print(json.dumps({
        "gas_price": gas_price or config.gas_price,
        "source": "oracle" if gas_price else "default",
    }))


async def build_transaction(config: RelayerConfig, args: argparse.Namespace) -> int:
    """Build (and optionally broadcast) a relay transaction."""
    records = load_records(args.records)

    async with Relayer(config) as relayer:
        sequence = args.sequence
        if sequence is None:
            sequence = await relayer.load_sequence()

        tx = await relayer.build(records, sequence)
        if tx is None:
            print(json.dumps({"tx": None, "reason": "no eligible deposits"}))
            return 0

        if args.broadcast:
            await relayer.relay(tx)

        print(json.dumps(tx.to_dict()))
    return 0


async def relay_transaction(config: RelayerConfig, args: argparse.Namespace) -> int:
    tx = SignedTransaction.from_dict(json.loads(Path(args.tx).read_text()))

    async with Relayer(config) as relayer:
        result = await relayer.relay(tx)

    print(json.dumps({"txHash": tx.tx_hash, "code": result.code}))
    return 0


async def lookup_transaction(config: RelayerConfig, args: argparse.Namespace) -> int:
    async with Relayer(config) as relayer:
        lookup = await relayer.lookup_transaction(args.tx_hash)

    output = {"txHash": args.tx_hash, "status": lookup.status.value}
    if lookup.info:
        output.update(
            height=lookup.info.height,
            code=lookup.info.code,
            raw_log=lookup.info.raw_log,
            timestamp=lookup.info.timestamp,
        )
    if lookup.error:
        output["error"] = lookup.error
    print(json.dumps(output))

    return 1 if lookup.status == TxLookupStatus.UNAVAILABLE else 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = RelayerConfig()
    setup_logging(args.log_level or config.log_level, args.log_json or config.log_json)

    if args.command == "sequence":
        asyncio.run(show_sequence(config))
    elif args.command == "gas-price":
        asyncio.run(show_gas_price(config))
    elif args.command == "build":
        sys.exit(asyncio.run(build_transaction(config, args)))
    elif args.command == "relay":
        sys.exit(asyncio.run(relay_transaction(config, args)))
    elif args.command == "tx":
        sys.exit(asyncio.run(lookup_transaction(config, args)))


if __name__ == "__main__":
    main()
