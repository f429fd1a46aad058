"""Shared fixtures: a small on-disk data folder shaped like the real sources."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

import pytest

from eviction_explorer.config import default_sources

EVICTION_CSV = """\
GEOID,sum_institutional_investor,sum_large_investor,sum_medium_investor,sum_small_investor,eviction_rate_2020,eviction_rate_2021,eviction_rate_2022,eviction_rate_2023,median_rent,median_price_diff
25025010100,3,1,0,2,0.01,0.02,0.03,0.05,1500,20000
25025010200,0,4,1,,0.1,1.2,0.2,0.3,NA,999999
25025010300,7,0,2,5,0.04,0.06,0.08,1.0,2200,-5000
"""

CENSUS_CSV = """\
GEOID,total_population,renter_share
25025010100,4100,0.62
25025010200,3800,0.71
"""


def tract_collection() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"GEOID": "25025010100"},
                "geometry": {"type": "Polygon", "coordinates": []},
            },
            {
                "type": "Feature",
                "properties": {"geoid": "25025-010200"},
                "geometry": {"type": "Polygon", "coordinates": []},
            },
        ],
    }


def neighborhood_collection() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": "Roxbury"},
                "geometry": {"type": "Polygon", "coordinates": []},
            }
        ],
    }


@pytest.fixture
def data_folder(tmp_path: Path) -> Path:
    (tmp_path / "processed_eviction_data.csv").write_text(EVICTION_CSV, encoding="utf-8")
    (tmp_path / "census.csv").write_text(CENSUS_CSV, encoding="utf-8")
    (tmp_path / "Metro_Boston_Census_Tracts.geojson").write_text(
        json.dumps(tract_collection()), encoding="utf-8"
    )
    (tmp_path / "Boston_Neighborhoods.geojson").write_text(
        json.dumps(neighborhood_collection()), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def sources(data_folder: Path) -> Dict[str, str]:
    return default_sources(data_folder)
