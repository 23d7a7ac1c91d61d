# src/parcel_status/cli.py
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from .config.env import EnvError, get_app_env
from .config.logging_config import get_logger
from .pipelines.lookup import OrderLookupError
from .pipelines.report import render_text
from .pipelines.tracking_service import TrackingService
from .utils.dates import parse_instant


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="parcel-status",
        description="Look up an order and explain where its parcels are.",
    )
    p.add_argument("order_no", help="Order number to look up.")
    p.add_argument(
        "--zip",
        dest="zip_code",
        default=None,
        help="ZIP code of the delivery address; unlocks recipient details and package contents.",
    )
    source = p.add_mutually_exclusive_group()
    source.add_argument(
        "--data-file",
        type=Path,
        default=None,
        help="JSON file with an array of order records to answer from.",
    )
    source.add_argument(
        "--base-url",
        default=None,
        help="Base URL of an orders endpoint serving GET /orders/<order_no>.",
    )
    p.add_argument(
        "--known-orders",
        type=Path,
        default=None,
        help="JSON array of previously fetched orders to merge with the lookup result.",
    )
    p.add_argument(
        "--now",
        default=None,
        help="ISO-8601 instant to evaluate against instead of the current time.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Emit the report as JSON instead of text.",
    )
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains).",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: LOG_LEVEL or WARNING",
    )
    p.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file (rotating).",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Require PARCEL_API_BASE_URL or PARCEL_DATA_FILE to be configured; otherwise exit 2.",
    )
    return p


def _build_client(args, env_cfg, logger):
    # Lazy imports to keep startup light
    from .api.client import OrdersApiClient, ReplayClient
    from .api.transport import RequestsTransport

    base_url = args.base_url
    data_file = args.data_file
    if base_url is None and data_file is None:
        base_url = env_cfg.API_BASE_URL
        if base_url is None and env_cfg.DATA_FILE:
            data_file = Path(env_cfg.DATA_FILE)

    if base_url:
        logger.info("Orders endpoint: %s", base_url)
        transport = RequestsTransport(timeout=env_cfg.HTTP_TIMEOUT)
        return OrdersApiClient(base_url, transport=transport)

    if data_file is not None:
        logger.info("Data file: %s", data_file)
    else:
        logger.info("Using bundled sample shipments")
    return ReplayClient(data_file)


def _load_known_orders(path: Path):
    from .api.normalize import normalize_orders

    return normalize_orders(json.loads(path.read_text(encoding="utf-8")))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # quiet by default so the report is the only console output
    logger = get_logger(
        "parcel_status",
        level=args.log_level or os.getenv("LOG_LEVEL") or "WARNING",
        console=not args.no_console,
        log_file=args.log_file,
    )
    logger.debug("Logger initialized.")

    try:
        env_cfg = get_app_env(strict=args.strict_env)
    except EnvError as e:
        logger.error("Environment error: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    now = None
    if args.now:
        now = parse_instant(args.now)
        if now is None:
            print(f"error: invalid --now: {args.now} (expected ISO-8601)", file=sys.stderr)
            return 2

    try:
        client = _build_client(args, env_cfg, logger)
        known = _load_known_orders(args.known_orders) if args.known_orders else ()
    except FileNotFoundError as e:
        print(f"error: file not found: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: cannot read file: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"error: unreadable JSON: {e}", file=sys.stderr)
        return 2

    service = TrackingService(logger, client=client, reference_now=now)
    try:
        report = service.lookup(args.order_no, args.zip_code, known_orders=known)
    except OrderLookupError as e:
        logger.info("Lookup failed (%s): %s", e.status_code, e)
        print(f"Lookup failed: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Failed to look up order: %s", e)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        sys.stdout.write(render_text(report))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
