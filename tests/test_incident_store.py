import pytest
from pydantic import ValidationError

from models.incidents import FilterCriteria, DateRange, FilterUpdate, DateRangeUpdate
from services.filter_service import apply_filter
from services.incident_store import IncidentStore
from conftest import make_incident


def _consistent(store):
    s = store.state
    return list(s.filtered_incidents) == apply_filter(s.incidents, s.filters)


def test_initial_state():
    s = IncidentStore().state
    assert s.incidents == () and s.filtered_incidents == ()
    assert s.filters == FilterCriteria()
    assert s.selected_incident is None
    assert s.loading is False and s.error is None
    assert s.basemap_style == "streets"


def test_set_filters_type_scenario(pair, fire):
    store = IncidentStore(pair)
    store.set_filters({"types": ["Fire"]})
    assert store.filtered_incidents == (fire,)


def test_set_filters_date_scenario(pair, flood):
    store = IncidentStore(pair)
    store.set_filters({"dateRange": {"start": "2024-05-01"}})
    assert store.filtered_incidents == (flood,)


def test_set_filters_merges_instead_of_replacing(pair):
    store = IncidentStore(pair)
    store.set_filters({"severities": ["Critical"]})
    store.set_filters({"types": ["Flood"]})
    assert store.filters.types == ("Flood",)
    assert store.filters.severities == ("Critical",)
    assert store.filtered_incidents == ()
    assert _consistent(store)


@pytest.mark.parametrize("bad", [
    {"type": ["Flood"]},
    {"dateRange": {"begin": "2024-01-01"}},
])
def test_set_filters_rejects_unknown_keys(pair, bad):
    store = IncidentStore(pair)
    store.set_filters({"severities": ["Low"]})
    before = (store.filters, store.filtered_incidents)
    seen = []
    store.subscribe(seen.append)

    with pytest.raises(ValidationError):
        store.set_filters(bad)
    assert (store.filters, store.filtered_incidents) == before
    assert seen == []


def test_date_range_merged_as_nested_partial(pair):
    store = IncidentStore(pair)
    store.set_filters(date_range=DateRangeUpdate(start="2024-01-01"))
    store.set_filters(FilterUpdate(date_range=DateRangeUpdate(end="2024-03-01")))
    assert store.filters.date_range == DateRange(start="2024-01-01", end="2024-03-01")

    # 空字串代表清除該邊界
    store.set_filters({"dateRange": {"start": ""}})
    assert store.filters.date_range == DateRange(end="2024-03-01")


def test_clear_filters_is_idempotent(pair):
    store = IncidentStore(pair)
    store.set_filters({"types": ["Fire"], "dateRange": {"end": "2024-01-02"}})
    store.clear_filters()
    once = store.state
    store.clear_filters()
    assert store.state == once
    assert once.filtered_incidents == once.incidents
    assert once.filters == FilterCriteria()


def test_append_consistency(fire, flood):
    store = IncidentStore([fire])
    store.set_filters({"types": ["Fire"]})

    store.append_incident(flood)
    assert store.incidents[-1] == flood
    assert flood not in store.filtered_incidents

    another_fire = make_incident(id="9", incident_type="Fire", severity="Low")
    store.append_incident(another_fire)
    assert store.incidents[-1] == another_fire
    assert store.filtered_incidents == (fire, another_fire)


def test_replace_incidents_applies_current_filters(pair, flood):
    store = IncidentStore()
    store.set_filters({"severities": ["Low"]})
    store.replace_incidents(pair)
    assert store.incidents == tuple(pair)
    assert store.filtered_incidents == (flood,)


def test_selection_does_not_touch_filters(pair, fire):
    store = IncidentStore(pair)
    store.set_filters({"types": ["Flood"]})
    before = store.filtered_incidents
    store.set_selected_incident(fire)
    assert store.selected_incident == fire
    assert store.filtered_incidents is before
    store.set_selected_incident(None)
    assert store.selected_incident is None


def test_replace_clears_selection_when_incident_gone(pair, fire, flood):
    store = IncidentStore(pair)
    store.set_selected_incident(fire)
    store.replace_incidents([flood])
    assert store.selected_incident is None


def test_replace_repoints_selection_to_fresh_record(pair, fire, flood):
    store = IncidentStore(pair)
    store.set_selected_incident(fire)
    fresh = make_incident(id=fire.id, description="Updated from server")
    store.replace_incidents([fresh, flood])
    assert store.selected_incident is fresh


def test_toggle_basemap_style():
    store = IncidentStore()
    assert store.toggle_basemap_style() == "satellite"
    assert store.toggle_basemap_style() == "streets"


def test_request_status_transitions():
    store = IncidentStore()
    store.end_request(error="boom")
    store.begin_request()
    assert store.loading is True and store.error is None
    store.end_request(error="Failed to fetch incidents")
    assert store.loading is False
    assert store.error == "Failed to fetch incidents"


def test_listeners_receive_consistent_snapshots(pair):
    store = IncidentStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.replace_incidents(pair)
    store.set_filters({"types": ["Flood"]})
    assert len(seen) == 2
    for snap in seen:
        assert list(snap.filtered_incidents) == apply_filter(snap.incidents, snap.filters)

    unsubscribe()
    store.clear_filters()
    assert len(seen) == 2


def test_failing_listener_does_not_block_others(pair):
    store = IncidentStore()
    seen = []

    def broken(_):
        raise RuntimeError("render failed")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.replace_incidents(pair)
    assert len(seen) == 1
    assert store.incidents == tuple(pair)
