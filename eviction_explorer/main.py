"""
Eviction explorer loader: read tract statistics and boundaries, normalize
tract ids, compute global scales and report what was loaded.

Run once to check a data folder (or URL base) before starting the app.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_TIMEOUT, data_dir, default_sources
from .loader import load_data
from .state import AppState

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load eviction, boundary and census sources and report the result."
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help=f"Folder or URL holding the source files (default: {data_dir()}).",
    )
    for key in ("eviction", "neighborhoods", "tracts", "census"):
        parser.add_argument(
            f"--{key}-source",
            default=None,
            help=f"Override the {key} source path or URL.",
        )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Per-request timeout in seconds for URL sources (default: {DEFAULT_TIMEOUT}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    sources = default_sources(args.data_dir)
    for key in list(sources):
        override = getattr(args, f"{key}_source")
        if override:
            sources[key] = override

    state = AppState()
    ok = load_data(state, sources, timeout=args.timeout)

    records = state.eviction_data.get()
    missing_ids = int(records["normalized_id"].isna().sum()) if len(records) else 0
    logger.info(
        "Records: %d (%d without tract id) | Tract features: %d | "
        "Neighborhood features: %d | Census rows: %d",
        len(records),
        missing_ids,
        len(state.boundary_data.get()["features"]),
        len(state.neighborhoods_data.get()["features"]),
        len(state.census_data.get()),
    )
    for name, value in state.data_scales.get().to_dict().items():
        logger.info("  %s = %s", name, value)
    for source, status in state.load_report.get().sources.items():
        logger.info("  %-13s %s", source, status)

    if not ok:
        logger.error("Load finished with failed sources")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
