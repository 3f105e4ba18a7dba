"""
Unit tests for the filter stage and Dashboard session state.
"""

import csv
import json
import math
from decimal import Decimal

import pytest

from wxdash.classify import EventCategory
from wxdash.engine import Dashboard, available_categories, available_years, filter_events
from wxdash.scenarios import UnknownScenarioError


def test_filter_all_returns_copy(sample_events):
    out = filter_events(sample_events)
    assert out == list(sample_events)
    assert out is not sample_events


def test_filter_by_year(sample_events):
    assert {e.year for e in filter_events(sample_events, year=2023)} == {2023}
    assert len(filter_events(sample_events, year="2024")) == 3
    assert filter_events(sample_events, year=1999) == []


def test_filter_by_derived_category(sample_events):
    out = filter_events(sample_events, category=EventCategory.HurricaneTropicalStorm)
    # "Tropical Storm with high wind" matches through its derived category
    assert [e.event_description for e in out] == ["Hurricane", "Tropical Storm with high wind"]
    assert filter_events(sample_events, category="Hurricane/Tropical Storm") == out


def test_filter_year_and_category_anded(sample_events):
    out = filter_events(sample_events, year=2022, category="Hurricane/Tropical Storm")
    assert [e.named_storm for e in out] == ["Ian"]


def test_filter_does_not_mutate_input(sample_events):
    events = list(sample_events)
    filter_events(events, year=2022)
    assert events == list(sample_events)


@pytest.mark.parametrize("year", ["20x3", "-1"])
def test_filter_bad_year(sample_events, year):
    with pytest.raises(ValueError):
        filter_events(sample_events, year=year)


def test_filter_unknown_category(sample_events):
    with pytest.raises(ValueError):
        filter_events(sample_events, category="Volcano")


def test_available_options(sample_events):
    assert available_years(sample_events) == [2022, 2023, 2024]
    assert [c.value for c in available_categories(sample_events)] == [
        "Earthquake", "Flooding", "Hail", "Hurricane/Tropical Storm", "Tornado", "Winter Storm",
    ]


def test_dashboard_options_match_indices(dashboard, sample_events):
    assert dashboard.years() == available_years(sample_events)
    assert dashboard.categories() == available_categories(sample_events)
    assert dashboard.idx.year_to_ids[2024] == [4, 5, 6]


@pytest.mark.parametrize("year", [None, 2022, 2023, 2024, 1999])
@pytest.mark.parametrize("category", [None, "Hurricane/Tropical Storm", "Flooding", "Hail", "Other"])
def test_dashboard_filtered_matches_filter_events(dashboard, sample_events, year, category):
    dashboard.set_year(year)
    dashboard.set_category(category)
    expected = filter_events(sample_events, "all" if year is None else year, "all" if category is None else category)
    assert dashboard.filtered() == expected


def test_dashboard_filters_and_views(dashboard):
    dashboard.set_year("2024")
    assert dashboard.summary().event_count == 3
    assert [b.key for b in dashboard.cost_trend()] == ["2024"]

    dashboard.set_category("Flooding")
    assert [b.key for b in dashboard.category_breakdown()] == ["Flooding"]
    assert dashboard.category_breakdown()[0].percentage == 100

    dashboard.reset_filters()
    assert dashboard.summary().event_count == 7
    assert len(dashboard.top_events(limit=2)) == 2


def test_dashboard_empty_selection_no_nan(dashboard):
    dashboard.set_year(1999)
    s = dashboard.summary()
    assert s.avg_cost_per_event == 0.0
    assert dashboard.category_breakdown() == []
    assert dashboard.top_installations() == []
    assert dashboard.installation_markers() == []


def test_installation_markers(dashboard):
    markers = dashboard.installation_markers()
    names = [m.installation for m in markers]
    assert "Camp Zama" not in names  # no coordinates configured
    assert names[0] == "Fort Stewart"
    assert markers[0].lat == pytest.approx(31.8691)
    assert markers[0].radius == pytest.approx(math.sqrt(0.5) * 5)


def test_initial_scenario_result_is_baseline(dashboard):
    r = dashboard.scenario_result
    assert r.mitigated == r.baseline == Decimal("24500000")
    assert r.savings == 0


def test_toggle_and_run(dashboard):
    assert dashboard.toggle_scenario("scenario1") is True
    assert dashboard.toggle_scenario("scenario2") is True
    r = dashboard.run_scenarios()
    assert r.mitigated == Decimal("16537500")
    assert dashboard.scenario_result is r

    assert dashboard.toggle_scenario("scenario1") is False
    assert dashboard.selection.scenario_ids == ["scenario2"]


def test_toggle_unknown(dashboard):
    with pytest.raises(UnknownScenarioError):
        dashboard.toggle_scenario("scenario9")
    assert dashboard.selection.scenario_ids == []


def test_apply_optimal(dashboard):
    r = dashboard.apply_optimal()
    assert dashboard.selection.scenario_ids == ["scenario1", "scenario2", "scenario3", "scenario4"]
    assert r.savings == Decimal("7043750")


def test_select_scenarios_dedupes(dashboard):
    dashboard.select_scenarios(["scenario3", "scenario3"])
    assert dashboard.selection.scenario_ids == ["scenario3"]


def test_export_csv_and_json(dashboard, tmp_path):
    dashboard.set_category("Hurricane/Tropical Storm")
    csv_path = tmp_path / "out.csv"
    json_path = tmp_path / "out.json"
    assert dashboard.export_csv(str(csv_path)) == 2
    assert dashboard.export_json(str(json_path)) == 2

    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["weather_event"] == "Hurricane"
    assert rows[0]["category"] == "Hurricane/Tropical Storm"
    assert rows[0]["date"] == "2022-09-28"

    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert [p["installation"] for p in payload] == ["Fort Stewart", "Fort Bragg"]
