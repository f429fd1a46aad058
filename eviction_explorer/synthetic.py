"""Placeholder geometry for when a boundary source is missing or malformed.

Nothing in here raises: the map and scatter views always get a valid
``FeatureCollection`` to work with, even if it is empty.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .config import (
    FALLBACK_NEIGHBORHOODS,
    GRID_CELL_SIZE,
    GRID_COLUMNS,
    GRID_ORIGIN,
    NEIGHBORHOOD_HALF_WIDTH,
    TRACT_ID_FIELDS,
)
from .identifiers import raw_tract_id

Coordinate = Tuple[float, float]


def empty_collection() -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


def is_feature_collection(obj: Any) -> bool:
    """True when ``obj`` parsed into something with a usable feature list."""
    if not isinstance(obj, dict):
        return False
    features = obj.get("features")
    return isinstance(features, list) and all(isinstance(f, dict) for f in features)


def _rectangle(x0: float, y0: float, x1: float, y1: float) -> Dict[str, Any]:
    return {
        "type": "Polygon",
        "coordinates": [[[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]],
    }


def default_neighborhood(
    name: str, center: Coordinate, half_width: float = NEIGHBORHOOD_HALF_WIDTH
) -> Dict[str, Any]:
    """A square neighborhood polygon centred on ``center`` (lon, lat)."""
    lon, lat = center
    return {
        "type": "Feature",
        "properties": {"blockgr2020_ctr_neighb_name": name, "name": name},
        "geometry": _rectangle(
            lon - half_width, lat - half_width, lon + half_width, lat + half_width
        ),
    }


def default_neighborhoods(
    places: Sequence[Tuple[str, Coordinate]] = FALLBACK_NEIGHBORHOODS,
) -> Dict[str, Any]:
    collection = empty_collection()
    collection["features"] = [default_neighborhood(name, c) for name, c in places]
    return collection


def _distinct_ids(records: Iterable[Dict[str, Any]]) -> List[Any]:
    seen: Dict[Any, None] = {}
    for record in records:
        tract_id = raw_tract_id(record)
        if tract_id is not None:
            seen.setdefault(tract_id, None)
    return list(seen)


def default_boundaries(records: Optional[pd.DataFrame]) -> Dict[str, Any]:
    """Lay out one grid cell per distinct tract id found in ``records``.

    Cells fill ``GRID_COLUMNS`` per row starting at ``GRID_ORIGIN`` in the
    order the ids first appear.  Each cell carries every identifier alias a
    real boundary file would, so normalization treats it the same way.
    """
    collection = empty_collection()
    if records is None or len(records) == 0:
        return collection

    base_x, base_y = GRID_ORIGIN
    size = GRID_CELL_SIZE
    for index, tract_id in enumerate(_distinct_ids(records.to_dict(orient="records"))):
        row, col = divmod(index, GRID_COLUMNS)
        x0, y0 = base_x + col * size, base_y + row * size
        collection["features"].append(
            {
                "type": "Feature",
                "properties": {field: tract_id for field in TRACT_ID_FIELDS},
                "geometry": _rectangle(x0, y0, x0 + size, y0 + size),
            }
        )
    return collection
