"""
Command-line entry point: ``python -m canalwatch`` or ``canalwatch``.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import CANONICAL_LOCATIONS, DashboardConfig
from .controller import DashboardController
from .render import LAST_UPDATE_ID, OVERALL_STATUS_ID
from .sync import run_dashboard_sync


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="canalwatch",
        description="Poll the canal monitoring service and keep the ice-safety dashboard current.",
    )
    parser.add_argument("--base-url", help="Monitoring service origin (env: CANALWATCH_BASE_URL)")
    parser.add_argument(
        "--interval", type=float, help="Seconds between refresh cycles (default: 30)"
    )
    parser.add_argument(
        "--history-limit", type=int, help="History points per location (default: 12)"
    )
    parser.add_argument("--chart-dir", help="Write chart PNGs to this directory")
    parser.add_argument(
        "--strict-bindings",
        action="store_true",
        default=None,
        help="Fail the card update when a UI binding is missing",
    )
    parser.add_argument("--once", action="store_true", help="Run one cycle and exit")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def print_summary(controller: DashboardController) -> None:
    """Print the rendered card values."""
    bindings = controller.bindings
    print(f"Canal status: {bindings.get(OVERALL_STATUS_ID).text or 'unknown'}")
    print(f"Last update:  {bindings.get(LAST_UPDATE_ID).text or 'never'}")
    for location in CANONICAL_LOCATIONS:
        values = [
            bindings.get(f"{field}-{location.key}").text or "--"
            for field in ("ice", "temp", "snow", "status")
        ]
        print(
            f"  {location.display_name:<14} ice {values[0]:>6} cm  "
            f"temp {values[1]:>6} °C  snow {values[2]:>6} cm  {values[3]}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = DashboardConfig.from_env(
            base_url=args.base_url,
            refresh_interval=args.interval,
            history_limit=args.history_limit,
            strict_bindings=args.strict_bindings,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        controller = run_dashboard_sync(config, chart_dir=args.chart_dir, once=args.once)
    except KeyboardInterrupt:
        print("\n  Dashboard interrupted by user")
        return 130

    if args.once:
        print_summary(controller)
    return 0


if __name__ == "__main__":
    sys.exit(main())
