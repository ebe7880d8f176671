from models.incidents import FilterCriteria, DateRange
from services.filter_service import (
    apply_filter, matches, has_active_filters, is_critical, count_critical,
)
from conftest import make_incident


def test_empty_filter_is_identity(pair):
    out = apply_filter(pair, FilterCriteria())
    assert out == pair


def test_type_filter(pair, fire):
    assert apply_filter(pair, FilterCriteria(types=("Fire",))) == [fire]


def test_start_date_excludes_earlier(pair, flood):
    out = apply_filter(pair, FilterCriteria(date_range=DateRange(start="2024-05-01")))
    assert out == [flood]


def test_or_within_and_across_dimensions(pair, fire, flood):
    both_types = FilterCriteria(types=("Fire", "Flood"))
    assert apply_filter(pair, both_types) == [fire, flood]

    crossed = FilterCriteria(types=("Fire", "Flood"), severities=("Low",))
    assert apply_filter(pair, crossed) == [flood]

    nothing = FilterCriteria(types=("Fire",), severities=("Low",))
    assert apply_filter(pair, nothing) == []


def test_preserves_input_order(fire, flood):
    assert apply_filter([flood, fire], FilterCriteria(severities=("Low", "Critical"))) == [flood, fire]


def test_end_date_includes_whole_day():
    late = make_incident(id="x", timestamp="2024-06-01T23:59:59.999Z")
    next_day = make_incident(id="y", timestamp="2024-06-02T00:00:00.000Z")
    out = apply_filter([late, next_day], FilterCriteria(date_range=DateRange(end="2024-06-01")))
    assert out == [late]


def test_start_date_is_inclusive():
    midnight = make_incident(id="x", timestamp="2024-05-01T00:00:00.000Z")
    assert apply_filter([midnight], FilterCriteria(date_range=DateRange(start="2024-05-01"))) == [midnight]


def test_unparsable_bound_is_ignored(pair):
    out = apply_filter(pair, FilterCriteria(date_range=DateRange(start="not-a-date")))
    assert out == pair


def test_unparsable_timestamp_excluded_only_when_range_active():
    broken = make_incident(id="b", timestamp="yesterday")
    assert apply_filter([broken], FilterCriteria()) == [broken]
    assert apply_filter([broken], FilterCriteria(date_range=DateRange(start="2024-01-01"))) == []


def test_naive_timestamp_treated_as_utc():
    naive = make_incident(id="n", timestamp="2024-05-01T00:30:00")
    assert matches(naive, FilterCriteria(date_range=DateRange(start="2024-05-01", end="2024-05-01")))


def test_has_active_filters():
    assert not has_active_filters(FilterCriteria())
    assert has_active_filters(FilterCriteria(types=("Fire",)))
    assert has_active_filters(FilterCriteria(date_range=DateRange(end="2024-01-01")))


def test_critical_statistics(fire, flood):
    explosion = make_incident(id="3", incident_type="Explosion", severity="Critical")
    quake = make_incident(id="4", incident_type="Earthquake", severity="Critical")
    assert is_critical(fire)
    assert not is_critical(quake)
    assert count_critical([fire, flood, explosion, quake]) == 2

