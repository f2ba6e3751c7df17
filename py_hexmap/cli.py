"""Command-line map generator."""

import argparse
import json
import sys
from typing import List, Optional

import structlog

from .config import settings
from .core.errors import MapGenerationError
from .core.objects import ObjectManager
from .core.random_map import generate_random_map, summarize_map
from .core.snapshot import write_snapshot
from .utils.logging import configure_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a random hex map")
    parser.add_argument(
        "--width", type=int, default=settings.default_map_width, help="Map width in tiles"
    )
    parser.add_argument("--seed", help="Random seed (random if not specified)")
    parser.add_argument(
        "--objects",
        default=settings.object_config_file,
        help="Object catalog JSON file",
    )
    parser.add_argument("--output", help="Write the map snapshot to this file")
    parser.add_argument(
        "--attempts",
        type=int,
        default=settings.generation_attempts,
        help="Seeds to try before giving up",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, "plain")

    if args.width < 1 or args.width > settings.max_map_width:
        logger.error("Map width out of range", width=args.width, max_width=settings.max_map_width)
        return 2

    catalog = ObjectManager.from_file(args.objects)
    try:
        hex_map = generate_random_map(
            args.width, seed=args.seed, catalog=catalog, max_attempts=args.attempts
        )
    except MapGenerationError as e:
        logger.error("Map generation failed", width=args.width, seed=args.seed, error=e.reason)
        return 1

    if args.output:
        write_snapshot(hex_map, args.output)

    print(json.dumps(summarize_map(hex_map), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
