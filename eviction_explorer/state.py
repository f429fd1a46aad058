"""Per-session application state.

:class:`AppState` owns one :class:`~eviction_explorer.store.ReactiveGraph`
and every container in it.  Construction order matters: scale bounds and
the data containers exist before any derived view is declared, so each
view computes a valid result from the moment it is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

import pandas as pd

from . import views
from .config import (
    DEFAULT_INDICATOR,
    DEFAULT_INVESTOR_TYPE,
    DEFAULT_SECTION,
    DEFAULT_THEME,
    DEFAULT_VISIBLE_LAYERS,
    DEFAULT_YEAR,
    INDICATORS,
    INVESTOR_TYPES,
    NARRATIVE_SECTIONS,
    SELECTION_VIEWS,
    YEARS,
    eviction_column,
)
from .identifiers import normalize_tract_id
from .scales import DataScales
from .store import Calc, ReactiveGraph, Value
from .synthetic import empty_collection

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """How each source ended up after a load: loaded, synthetic or failed."""

    sources: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(status != "failed" for status in self.sources.values())

    @property
    def degraded(self) -> bool:
        return any(status != "loaded" for status in self.sources.values())


def _check(value: Any, allowed: Iterable[Any], what: str) -> None:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValueError(f"Unknown {what} {value!r}; expected one of {allowed}")


def _normalize_ids(tract_ids: Iterable[Any]) -> FrozenSet[str]:
    normalized = (normalize_tract_id(tract_id) for tract_id in tract_ids)
    return frozenset(tract_id for tract_id in normalized if tract_id is not None)


class AppState:
    def __init__(self) -> None:
        self.graph = ReactiveGraph()
        g = self.graph

        # Data, published by the loader
        self.data_scales: Value[DataScales] = g.value(DataScales(), name="data_scales")
        self.eviction_data: Value[pd.DataFrame] = g.value(
            pd.DataFrame(), name="eviction_data"
        )
        self.boundary_data: Value[Dict[str, Any]] = g.value(
            empty_collection(), name="boundary_data"
        )
        self.neighborhoods_data: Value[Dict[str, Any]] = g.value(
            empty_collection(), name="neighborhoods_data"
        )
        self.census_data: Value[pd.DataFrame] = g.value(pd.DataFrame(), name="census_data")
        self.load_report: Value[LoadReport] = g.value(LoadReport(), name="load_report")
        self.data_loaded: Value[bool] = g.value(False, name="data_loaded")

        # User selections
        self.selected_tracts: Dict[str, Value[FrozenSet[str]]] = {
            view: g.value(frozenset(), name=f"{view}_selected_tracts")
            for view in SELECTION_VIEWS
        }
        self.selected_year: Value[str] = g.value(DEFAULT_YEAR, name="selected_year")
        self.selected_investor_type: Value[str] = g.value(
            DEFAULT_INVESTOR_TYPE, name="selected_investor_type"
        )
        self.selected_indicator: Value[str] = g.value(
            DEFAULT_INDICATOR, name="selected_indicator"
        )
        self.visible_layers: Value[Dict[str, bool]] = g.value(
            dict(DEFAULT_VISIBLE_LAYERS), name="visible_layers"
        )
        self.active_section: Value[str] = g.value(DEFAULT_SECTION, name="active_section")
        self.scroll_progress: Value[float] = g.value(0.0, name="scroll_progress")
        self.hovered_tract: Value[Optional[str]] = g.value(None, name="hovered_tract")
        self.current_theme: Value[str] = g.value(DEFAULT_THEME, name="current_theme")

        # Derived views
        dorchester = self.selected_tracts["dorchester"]
        back_bay = self.selected_tracts["back_bay"]
        self.scatter_plot_data: Calc[views.ScatterView] = g.calc(
            views.investor_scatter,
            [
                self.eviction_data,
                self.selected_investor_type,
                self.selected_year,
                dorchester,
                self.data_scales,
            ],
            name="scatter_plot_data",
        )
        self.indicator_plot_data: Calc[views.ScatterView] = g.calc(
            views.indicator_scatter,
            [
                self.eviction_data,
                self.selected_indicator,
                self.selected_year,
                back_bay,
                self.data_scales,
            ],
            name="indicator_plot_data",
        )
        self.selected_census_tracts: Calc[FrozenSet[str]] = g.calc(
            views.active_selection,
            [dorchester, back_bay, self.active_section],
            name="selected_census_tracts",
        )
        self.eviction_map_data: Calc[pd.DataFrame] = g.calc(
            lambda records, boundaries, year: views.tract_values(
                records, boundaries, eviction_column(year)
            ),
            [self.eviction_data, self.boundary_data, self.selected_year],
            name="eviction_map_data",
        )

    # ------------------------------------------------------------------
    # Configuration surface
    # ------------------------------------------------------------------

    def set_year(self, year: str) -> None:
        year = str(year)
        _check(year, YEARS, "year")
        self.selected_year.set(year)

    def set_investor_type(self, investor_type: str) -> None:
        _check(investor_type, INVESTOR_TYPES, "investor type")
        self.selected_investor_type.set(investor_type)

    def set_indicator(self, indicator: str) -> None:
        _check(indicator, INDICATORS, "indicator")
        self.selected_indicator.set(indicator)

    def set_section(self, section: str) -> None:
        _check(section, NARRATIVE_SECTIONS, "section")
        self.active_section.set(section)

    def set_scroll_progress(self, progress: float) -> None:
        self.scroll_progress.set(min(max(float(progress), 0.0), 1.0))

    def set_layer_visible(self, layer: str, visible: bool) -> None:
        _check(layer, DEFAULT_VISIBLE_LAYERS, "layer")
        self.visible_layers.update(lambda layers: {**layers, layer: bool(visible)})

    def set_hovered_tract(self, tract_id: Any) -> None:
        self.hovered_tract.set(normalize_tract_id(tract_id))

    # ------------------------------------------------------------------
    # Tract selections
    # ------------------------------------------------------------------

    def _selection(self, view: str) -> Value[FrozenSet[str]]:
        _check(view, SELECTION_VIEWS, "selection view")
        return self.selected_tracts[view]

    def select_tracts(self, view: str, tract_ids: Iterable[Any]) -> None:
        self._selection(view).set(_normalize_ids(tract_ids))

    def toggle_tract(self, view: str, tract_id: Any) -> None:
        normalized = normalize_tract_id(tract_id)
        if normalized is None:
            logger.warning("Ignoring selection of unusable tract id %r", tract_id)
            return
        self._selection(view).update(lambda current: current ^ {normalized})

    def clear_selection(self, view: str) -> None:
        self._selection(view).set(frozenset())
