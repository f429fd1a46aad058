"""
Tests for AppState wiring and its configuration surface.

Run: pytest tests/test_state.py -v
"""

import pandas as pd
import pytest

from eviction_explorer.identifiers import attach_normalized_ids
from eviction_explorer.scales import compute_data_scales
from eviction_explorer.state import AppState, LoadReport

# ── Fixtures ─────────────────────────────────────────────────────────────────


def _loaded_state() -> AppState:
    records = attach_normalized_ids(
        pd.DataFrame(
            [
                {
                    "GEOID": "25025010100",
                    "sum_institutional_investor": "2",
                    "sum_small_investor": "5",
                    "eviction_rate_2022": "0.2",
                    "eviction_rate_2023": "0.1",
                    "median_rent": "1800",
                },
                {
                    "GEOID": "25025010200",
                    "sum_institutional_investor": "4",
                    "sum_small_investor": "1",
                    "eviction_rate_2022": "0.4",
                    "eviction_rate_2023": "0.3",
                    "median_rent": "NA",
                },
            ],
            dtype=str,
        )
    )
    state = AppState()
    state.data_scales.set(compute_data_scales(records))
    state.eviction_data.set(records)
    return state


# ── Initial state ────────────────────────────────────────────────────────────


class TestInitialState:
    def test_views_valid_before_load(self):
        state = AppState()
        assert state.scatter_plot_data.get().points.empty
        assert state.indicator_plot_data.get().points.empty
        assert state.selected_census_tracts.get() == frozenset()
        assert state.eviction_map_data.get().empty
        assert state.data_loaded.get() is False

    def test_defaults(self):
        state = AppState()
        assert state.selected_year.get() == "2023"
        assert state.selected_investor_type.get() == "institutional"
        assert state.selected_indicator.get() == "median_rent"
        assert state.active_section.get() == "title"
        assert state.visible_layers.get()["evictions"] is True


# ── Derived recomputation ────────────────────────────────────────────────────


class TestDerivedViews:
    def test_scatter_follows_filters(self):
        state = _loaded_state()
        assert state.scatter_plot_data.get().points["x"].tolist() == [2.0, 4.0]
        state.set_investor_type("small")
        state.set_year("2022")
        view = state.scatter_plot_data.get()
        assert view.points["x"].tolist() == [5.0, 1.0]
        assert view.points["y"].tolist() == [0.2, 0.4]

    def test_indicator_view_uses_back_bay_selection(self):
        state = _loaded_state()
        state.select_tracts("back_bay", ["25025-010100"])
        assert state.indicator_plot_data.get().points["selected"].tolist() == [True]
        assert not state.scatter_plot_data.get().points["selected"].any()

    def test_subscribers_get_fresh_views(self):
        state = _loaded_state()
        seen = []
        state.scatter_plot_data.subscribe(lambda view: seen.append(len(view.points)))
        state.set_year("2022")
        state.toggle_tract("dorchester", "25025010200")
        assert seen == [2, 2, 2]

    def test_map_follows_boundaries_and_year(self):
        state = _loaded_state()
        state.boundary_data.set(
            {"features": [{"properties": {"normalized_id": "25025010200"}}]}
        )
        assert state.eviction_map_data.get()["value"].tolist() == [0.3]
        state.set_year("2022")
        assert state.eviction_map_data.get()["value"].tolist() == [0.4]


# ── Selections ───────────────────────────────────────────────────────────────


class TestSelections:
    def test_section_switches_unified_selection_without_mutation(self):
        state = AppState()
        state.select_tracts("dorchester", ["1"])
        state.select_tracts("back_bay", ["2"])
        state.set_section("neighborhood2")
        assert state.selected_census_tracts.get() == frozenset({"2"})
        state.set_section("neighborhood1")
        assert state.selected_census_tracts.get() == frozenset({"1"})
        assert state.selected_tracts["dorchester"].get() == frozenset({"1"})
        assert state.selected_tracts["back_bay"].get() == frozenset({"2"})

    def test_toggle_normalizes(self):
        state = AppState()
        state.toggle_tract("dorchester", "25025-010100")
        assert state.selected_tracts["dorchester"].get() == frozenset({"25025010100"})
        state.toggle_tract("dorchester", 25025010100)
        assert state.selected_tracts["dorchester"].get() == frozenset()

    def test_unusable_ids_ignored(self):
        state = AppState()
        state.select_tracts("back_bay", ["", None, "7"])
        state.toggle_tract("back_bay", "none")
        assert state.selected_tracts["back_bay"].get() == frozenset({"7"})

    def test_clear(self):
        state = AppState()
        state.select_tracts("dorchester", ["1", "2"])
        state.clear_selection("dorchester")
        assert state.selected_tracts["dorchester"].get() == frozenset()

    def test_unknown_view(self):
        with pytest.raises(ValueError):
            AppState().select_tracts("roxbury", ["1"])


# ── Configuration surface ────────────────────────────────────────────────────


class TestSetters:
    @pytest.mark.parametrize(
        "setter, value",
        [
            ("set_year", "2019"),
            ("set_investor_type", "mega"),
            ("set_indicator", "rent_burden"),
            ("set_section", "epilogue"),
        ],
    )
    def test_invalid_literals_rejected(self, setter, value):
        state = AppState()
        with pytest.raises(ValueError):
            getattr(state, setter)(value)

    def test_year_accepts_int(self):
        state = AppState()
        state.set_year(2021)
        assert state.selected_year.get() == "2021"

    @pytest.mark.parametrize("raw, expected", [(-0.5, 0.0), (0.4, 0.4), (3, 1.0)])
    def test_scroll_progress_clamped(self, raw, expected):
        state = AppState()
        state.set_scroll_progress(raw)
        assert state.scroll_progress.get() == expected

    def test_layer_toggle_replaces_mapping(self):
        state = AppState()
        before = state.visible_layers.get()
        state.set_layer_visible("large", True)
        assert state.visible_layers.get()["large"] is True
        assert before["large"] is False
        with pytest.raises(ValueError):
            state.set_layer_visible("parcels", True)

    def test_hovered_tract_normalized(self):
        state = AppState()
        state.set_hovered_tract("25025-010100")
        assert state.hovered_tract.get() == "25025010100"
        state.set_hovered_tract(None)
        assert state.hovered_tract.get() is None


# ── LoadReport ───────────────────────────────────────────────────────────────


class TestLoadReport:
    def test_synthetic_is_ok_but_degraded(self):
        report = LoadReport({"eviction": "loaded", "tracts": "synthetic"})
        assert report.ok
        assert report.degraded

    def test_failed(self):
        assert not LoadReport({"census": "failed"}).ok
