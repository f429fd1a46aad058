"""
Configuration constants for the eviction explorer data pipeline.
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
DATA_DIR_ENV: str = "EVICTION_DATA_DIR"

EVICTION_FILE: str = "processed_eviction_data.csv"
NEIGHBORHOODS_FILE: str = "Boston_Neighborhoods.geojson"
TRACTS_FILE: str = "Metro_Boston_Census_Tracts.geojson"
CENSUS_FILE: str = "census.csv"

DEFAULT_TIMEOUT: float = 30.0

# Identifier aliases in lookup priority order
TRACT_ID_FIELDS: Tuple[str, ...] = ("GEOID", "tract_id", "geoid")

YEARS: Tuple[str, ...] = ("2020", "2021", "2022", "2023")
INVESTOR_TYPES: Tuple[str, ...] = ("institutional", "large", "medium", "small")

INDICATORS: Tuple[str, ...] = ("median_rent", "median_price_diff")


def investor_column(investor_type: str) -> str:
    return f"sum_{investor_type}_investor"


def eviction_column(year: str) -> str:
    return f"eviction_rate_{year}"


# ======================================================
#  SCALE POLICY
# ======================================================
# Rates at or above this are data-entry artifacts, not real 100% rates.
EVICTION_RATE_CEILING: float = 1.0

DEFAULT_MEDIAN_RENT_RANGE: Tuple[float, float] = (394.0, 3501.0)
DEFAULT_MIN_MEDIAN_PRICE_DIFF: float = -46625.0
# Capped well below the true maximum (~400k)
MEDIAN_PRICE_DIFF_CEILING: float = 134500.0

# ======================================================
#  SYNTHETIC GEOMETRY
# ======================================================
FALLBACK_NEIGHBORHOODS: List[Tuple[str, Tuple[float, float]]] = [
    ("Dorchester", (-71.053, 42.300)),
    ("Back Bay", (-71.080, 42.350)),
]
NEIGHBORHOOD_HALF_WIDTH: float = 0.02  # ~2km

GRID_ORIGIN: Tuple[float, float] = (-71.08, 42.35)
GRID_CELL_SIZE: float = 0.005  # ~500m
GRID_COLUMNS: int = 10

# ======================================================
#  UI DEFAULTS
# ======================================================
SELECTION_VIEWS: Tuple[str, ...] = ("dorchester", "back_bay")

NARRATIVE_SECTIONS: Tuple[str, ...] = (
    "title",
    "intro",
    "neighborhood1",
    "neighborhood2",
    "indicators",
    "conclusion",
)
# Section whose scatter view reads the Back Bay selection
BACK_BAY_SECTION: str = "neighborhood2"

DEFAULT_YEAR: str = "2023"
DEFAULT_INVESTOR_TYPE: str = "institutional"
DEFAULT_INDICATOR: str = "median_rent"
DEFAULT_SECTION: str = "title"
DEFAULT_THEME: str = "investor"

DEFAULT_VISIBLE_LAYERS: Dict[str, bool] = {
    "institutional": True,
    "large": False,
    "medium": False,
    "small": False,
    "evictions": True,
}

INVESTOR_OPTIONS: List[Tuple[str, str]] = [
    ("Institutional investors", "institutional"),
    ("Large investors", "large"),
    ("Medium investors", "medium"),
    ("Small investors", "small"),
]

INDICATOR_OPTIONS: List[Tuple[str, str]] = [
    ("Median rent", "median_rent"),
    ("Median price differential", "median_price_diff"),
]


def data_dir() -> Path:
    """Data root: ``$EVICTION_DATA_DIR`` if set, else ``./data``."""
    env = os.getenv(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path("data")


def default_sources(root: "str | Path | None" = None) -> Dict[str, str]:
    """Map each source key to its location under ``root``.

    URLs are joined with ``/``; anything else is treated as a local folder.
    """
    base = str(root) if root is not None else str(data_dir())
    files = {
        "eviction": EVICTION_FILE,
        "neighborhoods": NEIGHBORHOODS_FILE,
        "tracts": TRACTS_FILE,
        "census": CENSUS_FILE,
    }
    if base.lower().startswith(("http://", "https://")):
        return {key: f"{base.rstrip('/')}/{name}" for key, name in files.items()}
    return {key: str(Path(base) / name) for key, name in files.items()}
