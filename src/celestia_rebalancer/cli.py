#!/usr/bin/env python3
"""Command line interface for the Celestia rebalancer.

Three subcommands make up the rebalancing workflow:

    parse     extract routes sent to the multisig over a height range
    generate  turn a routes file into an unsigned multisig transaction
    verify    check an unsigned transaction against its routes file

Each step reads the previous step's JSON artifact, so signers can re-run
`verify` independently before signing.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence

from dotenv import load_dotenv

from .config import RebalancerConfig
from .domains import domain_label
from .errors import RebalancerError
from .message_generator import MessageGenerator
from .models import Severity
from .route_extractor import RouteExtractor
from .utils.artifacts import build_unsigned_tx, write_json
from .utils.cosmos_client import CosmosTxClient
from .verifier import RouteVerifier, format_result
from .whitelist import Whitelist

# Get logger for this module
logger = logging.getLogger(__name__)

METADATA_HELP = """Routing metadata is JSON, carried in a MsgRemoteTransfer's
custom_hook_metadata or in the memo of a bank send to the multisig:
{
  "destination_domain": 1380012617,
  "recipient": "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
  "token_id": "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
  "amount": "10000"
}

Optional whitelist config (-c):
{
  "whitelist": {
    "domains": {
      "2340": ["0x742d35cc6634c0532925a3b844bc9e7595f0beb0"],
      "1": ["0x1234567890123456789012345678901234567890"]
    }
  }
}
"""

ENV_HELP = """Environment Variables:
  COSMOS_REST_URL  - Cosmos SDK REST endpoint (default: http://localhost:1317)
  REQUEST_TIMEOUT  - HTTP request timeout in seconds (default: 30)
  RETRY_COUNT      - Retries per failed query (default: 3)
  TX_PAGE_LIMIT    - Transactions per page (default: 100)
  DENOM            - Denomination recorded on routes (default: utia)
  GAS_LIMIT        - Gas limit for generated transactions (default: 200000)
  LOG_LEVEL        - Logging level (can be overridden with --log-level)
"""


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="celestia-rebalancer",
        description="Manage Hyperlane multisig rebalancing on Celestia",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=ENV_HELP,
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser(
        "parse",
        help="Extract routing information from transfers to the multisig",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=METADATA_HELP,
    )
    parse_cmd.add_argument("--multisig-address", required=True, help="Multisig address to filter transactions")
    parse_cmd.add_argument("--from-height", type=int, required=True, help="Starting block height")
    parse_cmd.add_argument("--to-height", type=int, required=True, help="Ending block height (inclusive)")
    parse_cmd.add_argument(
        "--rest-url", "--rpc-url",
        dest="rest_url",
        default=None,
        help="Cosmos SDK REST endpoint (default: COSMOS_REST_URL)"
    )
    parse_cmd.add_argument("-o", "--output", default="routes.json", help="Output file for routes, '-' for stdout")
    parse_cmd.add_argument("-c", "--config", default=None, help="Optional whitelist config file")

    generate_cmd = subparsers.add_parser("generate", help="Generate an unsigned multisig transaction from routes")
    generate_cmd.add_argument("--multisig-address", required=True, help="Multisig address (sender)")
    generate_cmd.add_argument("--routes", default="routes.json", help="Input routes file")
    generate_cmd.add_argument(
        "-o", "--output", default="unsigned-tx.json", help="Output file for the unsigned transaction, '-' for stdout"
    )
    generate_cmd.add_argument("--memo", default="", help="Memo for the generated transaction")
    generate_cmd.add_argument("--gas-limit", type=int, default=None, help="Gas limit (default: GAS_LIMIT)")

    verify_cmd = subparsers.add_parser("verify", help="Verify a transaction against the intended routes")
    verify_cmd.add_argument("--routes", default="routes.json", help="Routes file to verify against")
    verify_cmd.add_argument("--transaction", default="unsigned-tx.json", help="Transaction file to verify")

    return parser


def _emit(data: dict, output: str, label: str) -> None:
    if output == "-":
        print(json.dumps(data, indent=2))
    else:
        write_json(output, data)
        logger.info(f"{label} saved to {output}")


async def run_parse(args: argparse.Namespace, config: RebalancerConfig) -> int:
    whitelist = Whitelist.load(args.config) if args.config else None

    client = CosmosTxClient(
        rest_url=config.rest_url,
        request_timeout=config.request_timeout,
        page_limit=config.page_limit,
        retry_count=config.retry_count,
    )
    logger.info(f"Parsing transactions from height {args.from_height} to {args.to_height}...")
    transactions = await client.get_transactions(args.from_height, args.to_height)

    extractor = RouteExtractor(args.multisig_address, whitelist=whitelist, denom=config.denom)
    result = extractor.extract(transactions)

    for diagnostic in result.diagnostics:
        if diagnostic.severity is Severity.WARNING:
            logger.warning(diagnostic.message)
        else:
            logger.info(diagnostic.message)

    route_set = result.route_set
    logger.info(f"Found {len(route_set)} routes with total amount: {route_set.total_amount}")
    for route in route_set.routes:
        logger.info(
            f"  {route.source_tx_id} -> domain {domain_label(route.route_info.destination_domain)}, "
            f"recipient {route.route_info.recipient}, amount {route.effective_amount}"
        )
    logger.debug(f"Extraction stats: {result.stats.to_dict()}")

    _emit(route_set.to_dict(), args.output, "Routes")
    return 0


def run_generate(args: argparse.Namespace, config: RebalancerConfig) -> int:
    generator = MessageGenerator(args.multisig_address)
    logger.info(f"Generating transactions from {args.routes}...")
    messages = generator.generate_from_file(args.routes)

    tx = build_unsigned_tx(
        [message.to_dict() for message in messages],
        memo=args.memo,
        gas_limit=config.gas_limit,
    )
    _emit(tx, args.output, "Unsigned transaction")

    logger.info("Next steps:")
    logger.info("  1. Review the generated messages")
    logger.info("  2. Run 'celestia-rebalancer verify' to validate")
    logger.info("  3. Sign the multisig transaction with celestia-appd or Keplr")
    return 0


def run_verify(args: argparse.Namespace) -> int:
    verifier = RouteVerifier()
    logger.info("Verifying transaction against routes...")
    result = verifier.verify_from_files(args.routes, args.transaction)
    print(format_result(result))
    return 0 if result.valid else 1


async def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run one subcommand.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        match args.command:
            case "parse":
                config = RebalancerConfig.from_env(rest_url=args.rest_url)
                config.log_config()
                return await run_parse(args, config)
            case "generate":
                config = RebalancerConfig.from_env(gas_limit=args.gas_limit)
                return run_generate(args, config)
            case "verify":
                return run_verify(args)
            case _:
                logger.error(f"Unknown command: {args.command}")
                return 2

    except RebalancerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your flags and environment variables (see --help)")
        return 1

    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")
        return 0

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        return 1


def main(argv: Sequence[str] | None = None) -> None:
    """Console script entry point."""
    load_dotenv()
    sys.exit(asyncio.run(run(argv)))


if __name__ == "__main__":
    main()
