"""
``scalemesh`` command line entry point.

Examples::

    scalemesh reconcile down --config scalemesh.yaml --dry-run
    scalemesh show
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from dataclasses import replace
from typing import List, Optional

from scalemesh.core.config import ScalerConfig, load_scaler_config
from scalemesh.core.controllers.factory import build_scheduler
from scalemesh.core.entities.types import ReconcileOutcome
from scalemesh.core.errors import (
    ConfigError,
    PoolNotFoundError,
    TransientControlPlaneError,
)
from scalemesh.core.utils import configure_runtime_logging, demote_library_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_POOL_NOT_FOUND = 3
EXIT_TRANSIENT = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scalemesh", description="Scheduled node-group capacity controller")
    parser.add_argument("--config", help="Path to scalemesh.yaml (defaults to $SCALEMESH_CONFIG or ./scalemesh.yaml)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    reconcile = sub.add_parser("reconcile", help="Apply the profile of a schedule once")
    reconcile.add_argument("schedule", help="Schedule name or alias, e.g. up / down / scale_down")
    reconcile.add_argument("--dry-run", action="store_true", help="Read pool state but never update it")
    reconcile.add_argument("--timeout", type=float, help="Per-call timeout in seconds")

    sub.add_parser("show", help="Print configured profiles and schedules")
    return parser


def _show(config: ScalerConfig) -> int:
    payload = {
        "pool": config.pool,
        "backend": config.backend,
        "cluster": config.cluster,
        "region": config.region,
        "call_timeout": config.call_timeout,
        "dry_run": config.dry_run,
        "profiles": {name: profile.to_dict() for name, profile in sorted(config.profiles.items())},
        "schedules": {
            name: {"cron": spec.cron, "description": spec.description}
            for name, spec in sorted(config.schedules.items())
        },
    }
    print(json.dumps(payload, indent=2))
    return EXIT_OK


def _reconcile(config: ScalerConfig, args: argparse.Namespace) -> int:
    if args.timeout is not None:
        if not math.isfinite(args.timeout) or args.timeout <= 0:
            raise ConfigError(f"--timeout must be finite and positive, got {args.timeout}")
        config = replace(config, call_timeout=args.timeout)
    scheduler = build_scheduler(config, dry_run=True if args.dry_run else None)
    try:
        result = scheduler.run_schedule(args.schedule)
    except PoolNotFoundError as exc:
        print(f"pool not found: {exc.describe()}", file=sys.stderr)
        return EXIT_POOL_NOT_FOUND
    except TransientControlPlaneError as exc:
        print(f"transient control-plane error: {exc.describe()}", file=sys.stderr)
        return EXIT_TRANSIENT
    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_FAILED if result.outcome is ReconcileOutcome.FAILED else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        configure_runtime_logging(args.log_level)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_CONFIG
    demote_library_logging()

    try:
        config = load_scaler_config(args.config)
        if args.command == "show":
            return _show(config)
        return _reconcile(config, args)
    except ConfigError as exc:
        print(f"configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
