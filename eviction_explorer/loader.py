"""Load every source for a session and publish it into :class:`AppState`.

Sources are read in a fixed order:

* tract eviction / investor statistics (CSV),
* neighborhood boundaries (GeoJSON),
* census-tract boundaries (GeoJSON),
* auxiliary census figures (CSV).

Each step recovers from its own failures.  A boundary source that cannot
be fetched, returns a non-success status, does not parse, or parses into
something without a feature list is replaced by synthetic geometry, so the
state never holds a partial or malformed collection.  Scale bounds are
published before the records they were computed from.
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import pandas as pd
import requests

from .config import DEFAULT_TIMEOUT, default_sources
from .fetch import fetch_resource
from .identifiers import attach_normalized_ids, normalize_feature_ids
from .scales import compute_data_scales
from .state import AppState, LoadReport
from .synthetic import default_boundaries, default_neighborhoods, is_feature_collection

logger = logging.getLogger(__name__)

LOADED = "loaded"
SYNTHETIC = "synthetic"
FAILED = "failed"

# Transport, decoding and parse failures all end up here
SOURCE_ERRORS = (requests.RequestException, OSError, ValueError)


# ---------------------------------------------------------------------------
# Single-source readers
# ---------------------------------------------------------------------------


def read_table(source: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> pd.DataFrame:
    """Read a CSV source with every column kept as text.

    Values such as ``"NA"`` are kept verbatim; numeric coercion happens
    where each field is used.  Raises on a non-success status or a body
    that does not parse.
    """
    result = fetch_resource(source, timeout=timeout)
    if not result.ok:
        raise ValueError(f"Fetching {result.source} returned status {result.status}")
    return pd.read_csv(io.StringIO(result.text), dtype=str, keep_default_na=False)


def load_eviction_table(
    source: str | Path, *, timeout: float = DEFAULT_TIMEOUT
) -> pd.DataFrame:
    """Read the tract statistics table and attach ``normalized_id``."""
    return attach_normalized_ids(read_table(source, timeout=timeout))


def load_census_table(
    source: str | Path, *, timeout: float = DEFAULT_TIMEOUT
) -> pd.DataFrame:
    return read_table(source, timeout=timeout)


def load_geometry(
    source: str | Path,
    fallback: Callable[[], Dict[str, Any]],
    *,
    allow_empty: bool = True,
    timeout: float = DEFAULT_TIMEOUT,
) -> Tuple[Dict[str, Any], str]:
    """Fetch a GeoJSON feature collection, or build ``fallback()`` instead.

    Returns the collection and whether it was ``"loaded"`` or
    ``"synthetic"``.
    """
    try:
        result = fetch_resource(source, timeout=timeout)
    except SOURCE_ERRORS as exc:
        logger.error("Error loading %s: %s; using synthetic geometry", source, exc)
        return fallback(), SYNTHETIC

    if not result.ok:
        logger.error(
            "Failed to fetch %s (status %s); using synthetic geometry",
            source,
            result.status,
        )
        return fallback(), SYNTHETIC

    try:
        collection = json.loads(result.text)
    except ValueError as exc:
        logger.error("Error parsing %s: %s; using synthetic geometry", source, exc)
        return fallback(), SYNTHETIC

    if not is_feature_collection(collection):
        logger.error("%s is missing a features array; using synthetic geometry", source)
        return fallback(), SYNTHETIC
    if not allow_empty and not collection["features"]:
        logger.error("%s has no features; using synthetic geometry", source)
        return fallback(), SYNTHETIC

    return collection, LOADED


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


def load_data(
    state: AppState,
    sources: Optional[Mapping[str, str | Path]] = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> bool:
    """Load all sources into ``state``.

    Parameters
    ----------
    state : AppState
        Session state to publish into.
    sources : Mapping, optional
        Overrides for any of the ``"eviction"``, ``"neighborhoods"``,
        ``"tracts"`` and ``"census"`` locations; the rest come from
        :func:`config.default_sources`.
    timeout : float, optional
        Per-request timeout for URL sources, in seconds.

    Returns
    -------
    bool
        ``True`` when both tables loaded.  Boundary fallbacks are recorded
        in ``state.load_report`` but do not fail the load.
    """
    locations = {**default_sources(), **(sources or {})}
    report = LoadReport()
    logger.info("Loading data...")

    # 1. Tract statistics, then scales, then records
    try:
        records = load_eviction_table(locations["eviction"], timeout=timeout)
        report.sources["eviction"] = LOADED
        logger.info("Loaded eviction data: %d rows", len(records))
    except SOURCE_ERRORS as exc:
        logger.error("Error loading eviction data from %s: %s", locations["eviction"], exc)
        records = attach_normalized_ids(pd.DataFrame())
        report.sources["eviction"] = FAILED

    state.data_scales.set(compute_data_scales(records))
    state.eviction_data.set(records)

    # 2. Neighborhood boundaries
    neighborhoods, status = load_geometry(
        locations["neighborhoods"], default_neighborhoods, timeout=timeout
    )
    normalize_feature_ids(neighborhoods)
    report.sources["neighborhoods"] = status
    state.neighborhoods_data.set(neighborhoods)
    logger.info("Loaded neighborhoods data: %d features", len(neighborhoods["features"]))

    # 3. Census-tract boundaries
    boundaries, status = load_geometry(
        locations["tracts"],
        lambda: default_boundaries(records),
        allow_empty=False,
        timeout=timeout,
    )
    missing = normalize_feature_ids(boundaries)
    if missing:
        logger.warning("%d boundary feature(s) have no usable tract identifier", missing)
    report.sources["tracts"] = status
    state.boundary_data.set(boundaries)
    logger.info("Loaded boundary data: %d features", len(boundaries["features"]))

    # 4. Auxiliary census table (no join)
    try:
        census = load_census_table(locations["census"], timeout=timeout)
        report.sources["census"] = LOADED
        logger.info("Loaded census data: %d rows", len(census))
    except SOURCE_ERRORS as exc:
        logger.error("Error loading census data from %s: %s", locations["census"], exc)
        census = pd.DataFrame()
        report.sources["census"] = FAILED
    state.census_data.set(census)

    state.load_report.set(report)
    state.data_loaded.set(True)
    return report.ok
