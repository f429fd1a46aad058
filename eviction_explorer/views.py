"""Pure functions turning tract records plus selections into plot-ready data.

Each function here is bound to a fixed list of state containers in
:mod:`eviction_explorer.state` and re-run whenever one of them changes.
None of them mutates its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

import pandas as pd

from .config import (
    BACK_BAY_SECTION,
    EVICTION_RATE_CEILING,
    INDICATORS,
    YEARS,
    eviction_column,
    investor_column,
)
from .identifiers import NORMALIZED_ID, index_by_tract
from .scales import DataScales, numeric_column

POINT_COLUMNS = ["id", "x", "y", "selected"]


@dataclass(frozen=True, eq=False)
class ScatterView:
    """One scatter plot's worth of points and the bounds to draw them in.

    ``points`` has columns ``id``, ``x``, ``y`` and ``selected``.
    ``years`` maps each supported year to that year's ``id``/``x``/``y``
    points, ignoring the active year (used for trajectories).
    """

    points: pd.DataFrame
    regional_average: Tuple[float, float]
    max_x: float
    max_y: float
    min_x: float = 0.0
    min_y: float = 0.0
    years: Dict[str, pd.DataFrame] = field(default_factory=dict)


def _empty_points() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": pd.Series(dtype=object),
            "x": pd.Series(dtype=float),
            "y": pd.Series(dtype=float),
            "selected": pd.Series(dtype=bool),
        }
    )


def _tract_ids(records: pd.DataFrame) -> pd.Series:
    if NORMALIZED_ID in records.columns:
        return records[NORMALIZED_ID].astype(object)
    return pd.Series(None, index=records.index, dtype=object)


def _points(
    ids: pd.Series,
    x: pd.Series,
    y: pd.Series,
    selected: FrozenSet[str],
    keep: Optional[pd.Series] = None,
) -> pd.DataFrame:
    frame = pd.DataFrame({"id": ids, "x": x, "y": y})
    mask = frame["y"] < EVICTION_RATE_CEILING
    if keep is not None:
        mask &= keep
    frame = frame[mask].reset_index(drop=True)
    frame["selected"] = frame["id"].isin(list(selected)).astype(bool)
    return frame[POINT_COLUMNS]


def _average(points: pd.DataFrame) -> Tuple[float, float]:
    if points.empty:
        return (0.0, 0.0)
    return (float(points["x"].mean()), float(points["y"].mean()))


def _is_empty(records: Optional[pd.DataFrame]) -> bool:
    return records is None or len(records) == 0


def investor_scatter(
    records: Optional[pd.DataFrame],
    investor_type: str,
    year: str,
    selected: FrozenSet[str],
    scales: DataScales,
) -> ScatterView:
    """Investor purchases (x) against eviction rate (y) for every tract.

    Missing counts and rates count as 0; rates >= 1 are dropped.
    """
    if _is_empty(records):
        return ScatterView(
            points=_empty_points(),
            regional_average=(0.0, 0.0),
            max_x=scales.max_investor_count,
            max_y=scales.max_eviction_rate,
            years={yr: _empty_points()[["id", "x", "y"]] for yr in YEARS},
        )

    ids = _tract_ids(records)
    x = numeric_column(records, investor_column(investor_type), fill=0.0)
    y = numeric_column(records, eviction_column(year), fill=0.0)
    points = _points(ids, x, y, selected)

    years = {}
    for yr in YEARS:
        y_year = numeric_column(records, eviction_column(yr), fill=0.0)
        years[yr] = _points(ids, x, y_year, frozenset())[["id", "x", "y"]]

    return ScatterView(
        points=points,
        regional_average=_average(points),
        max_x=scales.max_investor_count,
        max_y=scales.max_eviction_rate,
        years=years,
    )


def indicator_scatter(
    records: Optional[pd.DataFrame],
    indicator: str,
    year: str,
    selected: FrozenSet[str],
    scales: DataScales,
) -> ScatterView:
    """Median rent or median price differential (x) against eviction rate.

    Tracts whose indicator is missing, ``"NA"`` or non-numeric are left
    out entirely, as are zero rents.  Price differentials above the scale
    ceiling are clamped to it.
    """
    if indicator not in INDICATORS:
        raise ValueError(f"Unknown indicator {indicator!r}; expected one of {INDICATORS}")

    if indicator == "median_rent":
        min_x, max_x = scales.min_median_rent, scales.max_median_rent
    else:
        min_x, max_x = scales.min_median_price_diff, scales.max_median_price_diff

    if _is_empty(records):
        return ScatterView(
            points=_empty_points(),
            regional_average=(0.0, 0.0),
            max_x=max_x,
            max_y=scales.max_eviction_rate,
            min_x=min_x,
        )

    x = numeric_column(records, indicator)
    keep = x.notna()
    if indicator == "median_rent":
        keep &= x != 0
    else:
        x = x.clip(upper=scales.max_median_price_diff)

    y = numeric_column(records, eviction_column(year), fill=0.0)
    points = _points(_tract_ids(records), x, y, selected, keep=keep)

    return ScatterView(
        points=points,
        regional_average=_average(points),
        max_x=max_x,
        max_y=scales.max_eviction_rate,
        min_x=min_x,
    )


def active_selection(
    dorchester: FrozenSet[str], back_bay: FrozenSet[str], section: str
) -> FrozenSet[str]:
    """The selection set belonging to the view the narrative is showing."""
    if section == BACK_BAY_SECTION:
        return back_bay
    return dorchester


def tract_values(
    records: Optional[pd.DataFrame], boundaries: Dict[str, Any], column: str
) -> pd.DataFrame:
    """Join ``records[column]`` onto boundary features by normalized id.

    Returns one ``id``/``value`` row per boundary feature that matches a
    record with a numeric value.  Features or records without an id never
    match.
    """
    if _is_empty(records) or not boundaries.get("features"):
        return pd.DataFrame({"id": pd.Series(dtype=object), "value": pd.Series(dtype=float)})

    lookup = index_by_tract(records)
    values = numeric_column(records, column)
    rows = []
    for feature in boundaries["features"]:
        tract_id = (feature.get("properties") or {}).get(NORMALIZED_ID)
        position = lookup.get(tract_id) if tract_id is not None else None
        if position is None or pd.isna(values.iloc[position]):
            continue
        rows.append({"id": tract_id, "value": float(values.iloc[position])})
    return pd.DataFrame(rows, columns=["id", "value"])
