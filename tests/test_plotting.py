"""
Tests for the Plotly figure builders in plotting.py.

Run: pytest tests/test_plotting.py -v
"""

import pandas as pd
import plotly.graph_objects as go

from eviction_explorer.identifiers import attach_normalized_ids
from eviction_explorer.plotting import (
    create_indicator_scatter,
    create_investor_scatter,
    create_tract_map,
)
from eviction_explorer.scales import compute_data_scales
from eviction_explorer.views import indicator_scatter, investor_scatter

# ── Fixtures ─────────────────────────────────────────────────────────────────


def _records() -> pd.DataFrame:
    rows = [
        {
            "GEOID": str(25025010100 + i),
            "sum_institutional_investor": str(i),
            "eviction_rate_2020": str(0.01 * i),
            "eviction_rate_2021": str(0.02 * i),
            "eviction_rate_2022": str(0.03 * i),
            "eviction_rate_2023": str(0.04 * i),
            "median_rent": str(1000 + 100 * i),
        }
        for i in range(1, 5)
    ]
    return attach_normalized_ids(pd.DataFrame(rows, dtype=str))


def _trace_names(fig: go.Figure) -> list:
    return [trace.name for trace in fig.data]


# ── Scatter figures ──────────────────────────────────────────────────────────


class TestInvestorScatter:
    def test_traces_without_selection(self):
        records = _records()
        view = investor_scatter(
            records, "institutional", "2023", frozenset(), compute_data_scales(records)
        )
        fig = create_investor_scatter(view, "Institutional investors", "2023")
        assert _trace_names(fig) == ["Census tracts", "Regional average"]

    def test_selected_tract_gets_trajectory(self):
        records = _records()
        view = investor_scatter(
            records,
            "institutional",
            "2023",
            frozenset({"25025010102"}),
            compute_data_scales(records),
        )
        fig = create_investor_scatter(view, "Institutional investors", "2023")
        names = _trace_names(fig)
        assert "Selected tracts" in names
        assert "Tract 25025010102" in names
        trajectory = fig.data[names.index("Tract 25025010102")]
        assert list(trajectory.text) == ["2020", "2021", "2022", "2023"]

    def test_axis_range_from_view(self):
        records = _records()
        scales = compute_data_scales(records)
        view = investor_scatter(records, "institutional", "2023", frozenset(), scales)
        fig = create_investor_scatter(view, "Institutional investors", "2023")
        assert tuple(fig.layout.xaxis.range) == (0.0, scales.max_investor_count)

    def test_empty_view(self):
        view = investor_scatter(
            pd.DataFrame(), "institutional", "2023", frozenset(), compute_data_scales(pd.DataFrame())
        )
        fig = create_investor_scatter(view, "Institutional investors", "2023")
        assert _trace_names(fig) == ["Regional average"]


class TestIndicatorScatter:
    def test_builds(self):
        records = _records()
        view = indicator_scatter(
            records, "median_rent", "2022", frozenset(), compute_data_scales(records)
        )
        fig = create_indicator_scatter(view, "Median rent", "2022")
        assert fig.data[0].meta == "Median rent"
        assert tuple(fig.layout.xaxis.range) == (1100.0, 1400.0)


# ── Map ──────────────────────────────────────────────────────────────────────


class TestTractMap:
    def test_keys_on_normalized_id(self):
        boundaries = {"type": "FeatureCollection", "features": []}
        values = pd.DataFrame({"id": ["25025010101"], "value": [0.1]})
        fig = create_tract_map(boundaries, values, value_label="Eviction rate", zmax=0.5)
        trace = fig.data[0]
        assert trace.type == "choroplethmap"
        assert trace.featureidkey == "properties.normalized_id"
        assert list(trace.locations) == ["25025010101"]
