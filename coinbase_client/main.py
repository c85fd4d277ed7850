"""Command line entry point for querying the Coinbase API."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .api_client import CoinbaseAPI
from .config import APIConfig, load_config
from .errors import CoinbaseError
from .models import ResponseEnvelope

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def summarize_response(response: ResponseEnvelope[Any]) -> str:
    return json.dumps(_plain(response), ensure_ascii=False, indent=2)


def run_command(api: CoinbaseAPI, args: argparse.Namespace) -> ResponseEnvelope[Any]:
    command = args.command
    if command == "time":
        return api.time()
    if command == "currencies":
        return api.currencies()
    if command == "rates":
        return api.rates(args.currency)
    if command in {"spot", "buy", "sell"}:
        fetch = {"spot": api.spot_price, "buy": api.buy_price, "sell": api.sell_price}[command]
        return fetch(args.base, args.quote)
    if command == "user":
        return api.current_user()
    if command == "accounts":
        return api.list_accounts()
    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query the Coinbase v2 REST API")
    parser.add_argument("--config", type=Path, help="Path to a JSON, YAML or TOML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("time", help="Show the API server time")
    commands.add_parser("currencies", help="List known currencies")
    rates = commands.add_parser("rates", help="Show exchange rates")
    rates.add_argument("currency", nargs="?", default=None)
    for name in ("spot", "buy", "sell"):
        price = commands.add_parser(name, help=f"Show the {name} price of a currency pair")
        price.add_argument("base")
        price.add_argument("quote")
    commands.add_parser("user", help="Show the authenticated user")
    commands.add_parser("accounts", help="List the authenticated user's accounts")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    config = load_config(args.config) if args.config else APIConfig.from_env()
    api = CoinbaseAPI.from_config(config)
    try:
        response = run_command(api, args)
    except CoinbaseError as exc:
        logger.error("Request failed: %s", exc)
        return 1
    print(summarize_response(response))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
