"""Command-line entry point for generating the Pulse briefing feed."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .config import load_config
from .digest import RunWatchdog, run
from .errors import PulseError

LOGGER = logging.getLogger("pulse_briefing")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate the Pulse AI news briefing feed")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional override for the briefings JSON path",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        config = load_config()
        if args.output:
            config = replace(config, output_path=args.output)
        with RunWatchdog(config.run_timeout):
            result = run(config)
    except PulseError as exc:
        LOGGER.error("ERROR: %s", exc)
        return 1
    except Exception:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Fatal error")
        return 1

    LOGGER.info(
        "Generation complete: %s briefing with %d items, archive holds %d days (%s)",
        result.briefing.period,
        len(result.briefing.items),
        len(result.archive),
        config.output_path,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
