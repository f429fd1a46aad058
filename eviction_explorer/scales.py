"""Global min/max statistics used for consistent axis and colour scales."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import pandas as pd

from .config import (
    DEFAULT_MEDIAN_RENT_RANGE,
    DEFAULT_MIN_MEDIAN_PRICE_DIFF,
    EVICTION_RATE_CEILING,
    INVESTOR_TYPES,
    MEDIAN_PRICE_DIFF_CEILING,
    YEARS,
    eviction_column,
    investor_column,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataScales:
    max_investor_count: float = 0.0
    max_eviction_rate: float = 0.0
    min_median_rent: float = DEFAULT_MEDIAN_RENT_RANGE[0]
    max_median_rent: float = DEFAULT_MEDIAN_RENT_RANGE[1]
    min_median_price_diff: float = DEFAULT_MIN_MEDIAN_PRICE_DIFF
    max_median_price_diff: float = MEDIAN_PRICE_DIFF_CEILING

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def numeric_column(
    df: pd.DataFrame, column: str, fill: Optional[float] = None
) -> pd.Series:
    """Coerce ``df[column]`` to floats.

    Non-numeric and non-finite entries (``"NA"``, ``"inf"``, ``"-Infinity"``)
    become NaN, or ``fill`` when given.  A missing column behaves like an
    all-missing one.
    """
    if column in df.columns:
        values = pd.to_numeric(df[column], errors="coerce").astype(float)
        values = values.replace([float("inf"), float("-inf")], float("nan"))
    else:
        values = pd.Series(float("nan"), index=df.index, dtype=float)
    if fill is not None:
        values = values.fillna(fill)
    return values


def _stacked(df: pd.DataFrame, columns: list[str]) -> pd.Series:
    if df.empty:
        return pd.Series(dtype=float)
    return pd.concat(
        [numeric_column(df, col, fill=0.0) for col in columns], ignore_index=True
    )


def compute_data_scales(df: pd.DataFrame) -> DataScales:
    """Compute Scale Bounds for a full set of tract records.

    * Investor counts: max across every category, missing values count as 0.
    * Eviction rates: max across every year after dropping rates >= 1.
    * Median rent: min/max of positive values, or the default range.
    * Median price differential: min of numeric values, or the default;
      the max is always the fixed ceiling.
    """
    investors = _stacked(df, [investor_column(t) for t in INVESTOR_TYPES])
    max_investor = float(investors.max()) if not investors.empty else 0.0

    rates = _stacked(df, [eviction_column(y) for y in YEARS])
    rates = rates[rates < EVICTION_RATE_CEILING]
    max_rate = float(rates.max()) if not rates.empty else 0.0

    rents = numeric_column(df, "median_rent").dropna()
    rents = rents[rents > 0]
    if rents.empty:
        logger.warning("No usable median_rent values; using default range")
        min_rent, max_rent = DEFAULT_MEDIAN_RENT_RANGE
    else:
        min_rent, max_rent = float(rents.min()), float(rents.max())

    diffs = numeric_column(df, "median_price_diff").dropna()
    min_diff = float(diffs.min()) if not diffs.empty else DEFAULT_MIN_MEDIAN_PRICE_DIFF

    scales = DataScales(
        max_investor_count=max_investor,
        max_eviction_rate=max_rate,
        min_median_rent=min_rent,
        max_median_rent=max_rent,
        min_median_price_diff=min_diff,
        max_median_price_diff=MEDIAN_PRICE_DIFF_CEILING,
    )
    logger.info("Computed data scales: %s", scales)
    return scales
