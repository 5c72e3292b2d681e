"""Command-line interface for the wallet token scanner."""
from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any

from .config import load_config
from .errors import RequestValidationError
from .logging_setup import configure_logging
from .networks import NetworkId
from .services import Analyzer
from .validation import parse_address_input, validate_addresses


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="walletscan",
        description="Check which tokens a batch of wallets holds and what they are worth",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    networks = [n.value for n in NetworkId]
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyse wallets against target tokens")
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--wallets", nargs="+", help="Wallet addresses (space or comma separated)")
    source.add_argument("--wallets-file", type=Path, help="File with one or more wallet addresses")
    analyze.add_argument("--tokens", nargs="+", required=True, help="Token contract addresses")
    analyze.add_argument("--network", choices=networks, default=None, help="Network id")

    validate = sub.add_parser("validate", help="Validate and normalise addresses")
    validate.add_argument("addresses", nargs="+", help="Addresses to check")

    token_info = sub.add_parser("token-info", help="Show metadata and price for a token")
    token_info.add_argument("address", help="Token contract address")
    token_info.add_argument("--network", choices=networks, default=None, help="Network id")
    token_info.add_argument("--no-price", action="store_true", help="Skip price lookup")

    sub.add_parser("networks", help="List supported networks")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _print_validation_error(error: RequestValidationError) -> int:
    payload: dict[str, Any] = {"error": error.message, "errors": error.errors}
    if error.invalid_wallets:
        payload["invalidWallets"] = error.invalid_wallets
    if error.invalid_tokens:
        payload["invalidTokens"] = error.invalid_tokens
    print(json.dumps(payload, indent=2), file=sys.stderr)
    return 2


def _read_wallets(args: argparse.Namespace) -> list[str]:
    if args.wallets_file is not None:
        return parse_address_input(args.wallets_file.read_text())
    return parse_address_input(" ".join(args.wallets))


async def _analyze(analyzer: Analyzer, args: argparse.Namespace) -> None:
    wallets = _read_wallets(args)
    tokens = parse_address_input(" ".join(args.tokens))

    # Ctrl-C stops querying further wallets but still reports the partial batch.
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        pass

    try:
        result = await analyzer.analyze(wallets, tokens, args.network, cancel_event)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
    _print_json(result.to_dict())


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit status."""
    configure_logging(args.log_level)

    if args.command == "validate":
        _print_json(validate_addresses(args.addresses).to_dict())
        return 0

    config = load_config(args.config)
    analyzer = Analyzer(config)

    try:
        if args.command == "analyze":
            await _analyze(analyzer, args)
        elif args.command == "token-info":
            _print_json(
                await analyzer.token_info(args.address, args.network, not args.no_price)
            )
        elif args.command == "networks":
            _print_json(analyzer.networks())
        else:
            build_parser().print_help()
            return 1
    except RequestValidationError as e:
        return _print_validation_error(e)
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
