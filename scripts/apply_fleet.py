#!/usr/bin/env python3
"""
Run one fleet pass from the command line and print the report as JSON.

Usage:
  python scripts/apply_fleet.py                         # FLEET_MODELS, FLEET_* settings
  python scripts/apply_fleet.py --models Mistral7b_Instruct,HuggingFaceM4/idefics-9b-instruct
  python scripts/apply_fleet.py --dry-run               # in-memory provider, no AWS calls
"""

import argparse
import asyncio
import json
import sys

from model_fleet.core.config import get_settings, parse_csv
from model_fleet.core.errors import FleetError
from model_fleet.core.logging import configure_logging
from model_fleet.services.fleet import run_fleet_pass
from model_fleet.services.memory_provider import MemoryFleetProvider
from model_fleet.services.secret_source import static_token_source


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve, publish and schedule the model fleet")
    parser.add_argument("--models", default=None,
                        help="Comma-separated model ids or aliases (default: FLEET_MODELS)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Use the in-memory provider; gated models get a placeholder token")
    parser.add_argument("--no-schedule", action="store_true",
                        help="Skip start/stop triggers even if FLEET_SCHEDULE_ENABLED is set")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    provider = None
    secret_for = None
    if args.dry_run:
        provider = MemoryFleetProvider(region=settings.aws_region)
        secret_for = static_token_source("dry-run-placeholder")

    try:
        report = asyncio.run(
            run_fleet_pass(
                settings,
                provider=provider,
                secret_for=secret_for,
                requested=parse_csv(args.models) if args.models is not None else None,
                schedule_enabled=False if args.no_schedule else None,
            )
        )
    except FleetError as exc:
        print(json.dumps({"error": exc.error_code, "message": exc.message, "details": exc.details}, indent=2))
        return 2

    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.fatal else 0


if __name__ == "__main__":
    sys.exit(main())
