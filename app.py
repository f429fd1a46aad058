from shiny import reactive
from shiny.express import input, ui
from shinywidgets import render_plotly

# Import organized modules
from eviction_explorer.config import (
    DEFAULT_INDICATOR,
    DEFAULT_INVESTOR_TYPE,
    DEFAULT_SECTION,
    DEFAULT_YEAR,
    INDICATOR_OPTIONS,
    INVESTOR_OPTIONS,
    NARRATIVE_SECTIONS,
    YEARS,
)
from eviction_explorer.loader import load_data
from eviction_explorer.plotting import (
    create_indicator_scatter,
    create_investor_scatter,
    create_tract_map,
)
from eviction_explorer.state import AppState

# Helpers for UI mapping
INVESTOR_MAPPING = {value: label for label, value in INVESTOR_OPTIONS}
INDICATOR_MAPPING = {value: label for label, value in INDICATOR_OPTIONS}
SECTION_CHOICES = {
    value: value.replace("neighborhood", "neighborhood ").title()
    for value in NARRATIVE_SECTIONS
}

# ======================================================
#  REACTIVE STATE
# ======================================================
# Load once per session; values stay in-memory until the session ends.
state = AppState()
load_ok = load_data(state)

# Mirror derived containers into Shiny so renders invalidate on change.
investor_view = reactive.Value(state.scatter_plot_data.get())
indicator_view = reactive.Value(state.indicator_plot_data.get())
map_values = reactive.Value(state.eviction_map_data.get())
state.scatter_plot_data.subscribe(investor_view.set)
state.indicator_plot_data.subscribe(indicator_view.set)
state.eviction_map_data.subscribe(map_values.set)

TRACT_CHOICES = sorted(
    tract_id for tract_id in state.eviction_data.get().get("normalized_id", []) if tract_id
)


@reactive.effect
def _sync_filters():
    state.set_year(input.year())
    state.set_investor_type(input.investor_type())
    state.set_indicator(input.indicator())
    state.set_section(input.section())


@reactive.effect
def _sync_selections():
    state.select_tracts("dorchester", input.dorchester_tracts() or ())
    state.select_tracts("back_bay", input.back_bay_tracts() or ())


# ======================================================
#  UI LAYOUT
# ======================================================
ui.page_opts(
    title="Investors and evictions in Metro Boston",
    fillable=False,
    fillable_mobile=True,
    full_width=True,
    id="page",
    lang="en",
)

with ui.sidebar(open="always", position="right"):
    ui.input_select("section", "Story section", SECTION_CHOICES, selected=DEFAULT_SECTION)
    ui.input_select("year", "Year", list(YEARS), selected=DEFAULT_YEAR)
    ui.input_select(
        "investor_type", "Investor type", INVESTOR_MAPPING, selected=DEFAULT_INVESTOR_TYPE
    )
    ui.input_radio_buttons(
        "indicator", "Indicator", INDICATOR_MAPPING, selected=DEFAULT_INDICATOR
    )
    ui.input_selectize(
        "dorchester_tracts", "Highlight tracts (investors)", TRACT_CHOICES, multiple=True
    )
    ui.input_selectize(
        "back_bay_tracts", "Highlight tracts (indicators)", TRACT_CHOICES, multiple=True
    )
    if not load_ok:
        ui.markdown("Some sources failed to load; placeholder data is shown.")


with ui.navset_tab(id="main_tabs"):
    with ui.nav_panel("Investors"):

        @render_plotly
        def investor_plot():
            return create_investor_scatter(
                investor_view.get(),
                INVESTOR_MAPPING[input.investor_type()],
                input.year(),
            )

    with ui.nav_panel("Indicators"):

        @render_plotly
        def indicator_plot():
            return create_indicator_scatter(
                indicator_view.get(),
                INDICATOR_MAPPING[input.indicator()],
                input.year(),
            )

    with ui.nav_panel("Map"):

        @render_plotly
        def eviction_map():
            return create_tract_map(
                state.boundary_data.get(),
                map_values.get(),
                value_label=f"Eviction rate {input.year()}",
                zmax=state.data_scales.get().max_eviction_rate,
            )
