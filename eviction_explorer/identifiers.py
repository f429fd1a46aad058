"""Tract identifier normalization.

Sources disagree on what the tract key is called (``GEOID``, ``tract_id``
or ``geoid``) and on how it is written (``"25025010100"``,
``25025010100.0``, ``"1400000US25025010100"``).  Everything downstream
joins on a single digits-only ``normalized_id`` produced here.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from .config import TRACT_ID_FIELDS

logger = logging.getLogger(__name__)

NORMALIZED_ID: str = "normalized_id"

_NON_DIGIT = re.compile(r"\D")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def normalize_tract_id(value: Any) -> Optional[str]:
    """Return the digits-only form of ``value``, or ``None`` if unusable.

    Whole floats lose their ``.0`` suffix before stripping so that a GEOID
    which went through a numeric column maps to the same key as its string
    form.
    """
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    digits = _NON_DIGIT.sub("", str(value))
    return digits or None


def raw_tract_id(mapping: Mapping[str, Any]) -> Any:
    """First present, non-blank identifier alias in priority order."""
    for field in TRACT_ID_FIELDS:
        value = mapping.get(field)
        if not _is_blank(value):
            return value
    return None


def resolve_tract_id(mapping: Mapping[str, Any]) -> Optional[str]:
    return normalize_tract_id(raw_tract_id(mapping))


def attach_normalized_ids(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with a ``normalized_id`` column added.

    Rows without any identifier keep ``None`` and are left out of joins.
    """
    out = df.copy()
    if out.empty:
        out[NORMALIZED_ID] = pd.Series(dtype=object)
        return out

    ids = [resolve_tract_id(row) for row in out.to_dict(orient="records")]
    out[NORMALIZED_ID] = pd.Series(ids, index=out.index, dtype=object)

    missing = sum(1 for tract_id in ids if tract_id is None)
    if missing:
        logger.warning("%d record(s) have no usable tract identifier", missing)
    return out


def normalize_feature_ids(collection: Dict[str, Any]) -> int:
    """Tag every feature's properties with ``normalized_id`` in place.

    Returns the number of features left without an identifier.
    """
    missing = 0
    for feature in collection.get("features", []):
        props = feature.get("properties")
        if not isinstance(props, dict):
            props = {}
            feature["properties"] = props
        props[NORMALIZED_ID] = resolve_tract_id(props)
        if props[NORMALIZED_ID] is None:
            missing += 1
    return missing


def index_by_tract(df: pd.DataFrame) -> Dict[str, int]:
    """Map normalized id -> row position; records without an id are skipped.

    On duplicate ids the first record wins.
    """
    index: Dict[str, int] = {}
    if NORMALIZED_ID not in df.columns:
        return index
    for position, tract_id in enumerate(df[NORMALIZED_ID]):
        if tract_id is None or tract_id in index:
            continue
        index[tract_id] = position
    return index
