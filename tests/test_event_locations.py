"""Tests for the event save and render entry points."""

import logging

import pytest

from core.event_locations import (
    apply_location_defaults,
    event_location_display,
    geocode_and_create_hierarchy,
    maybe_geocode_event_venue,
)
from core.exception import custom_exception_hook
from core.hierarchy_sync import TermArgsHooks
from core.location_types import LevelRange, LocationRecord
from db.term_store import SqlTermStore


class FakeGeocoder:
    """Returns a canned Nominatim result and records the queried addresses."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, address):
        self.calls.append(address)
        return self.result


VENUE = {"name": "Rathaus", "full_address": "Marienplatz 1, 80331 Munich, Germany", "permalink": ""}


class TestGeocodeAndCreateHierarchy:
    """Test the geocode → normalize → synchronize → associate flow."""

    def test_tags_event(self, session, munich_result):
        geocoder = FakeGeocoder(munich_result)
        ids = geocode_and_create_hierarchy(session, 7, "Marienplatz 1, Munich", geocoder=geocoder)

        assert len(ids) == 6
        assert geocoder.calls == ["Marienplatz 1, Munich"]
        assert [node.id for node in SqlTermStore(session).get_event_terms(7)] == ids

    def test_default_hooks_qualify_street_slugs(self, session, munich_result):
        ids = geocode_and_create_hierarchy(session, 7, "x", geocoder=FakeGeocoder(munich_result))
        assert SqlTermStore(session).get_by_id(ids[-1]).slug == "munich-marienplatz-1"

    def test_range_change_replaces_association(self, session, munich_result):
        """Test that a narrower range leaves no stale terms on the event."""
        geocoder = FakeGeocoder(munich_result)
        geocode_and_create_hierarchy(session, 7, "x", geocoder=geocoder)
        ids = geocode_and_create_hierarchy(
            session, 7, "x", level_range=LevelRange(min_level=2, max_level=4),
            hook=TermArgsHooks(), geocoder=geocoder,
        )

        names = [node.name for node in SqlTermStore(session).get_event_terms(7)]
        assert len(ids) == 3
        assert names == ["Germany", "Bavaria", "Munich"]

    def test_geocoding_failure(self, session, caplog):
        with caplog.at_level(logging.ERROR):
            assert geocode_and_create_hierarchy(session, 7, "nowhere", geocoder=FakeGeocoder(None)) == []
        assert "Failed to geocode" in caplog.text
        assert SqlTermStore(session).get_event_terms(7) == []

    def test_normalization_failure(self, session):
        ids = geocode_and_create_hierarchy(session, 7, "x", geocoder=FakeGeocoder({"address": {}}))
        assert ids == []


class TestMaybeGeocodeEventVenue:
    """Test the save trigger guards."""

    @pytest.mark.parametrize("venue_info", [None, {}, {"name": "Rathaus"}, {"full_address": "  "}])
    def test_no_address(self, session, munich_result, venue_info):
        geocoder = FakeGeocoder(munich_result)
        assert maybe_geocode_event_venue(session, 7, venue_info, geocoder=geocoder) == []
        assert geocoder.calls == []

    def test_skips_tagged_event(self, session, munich_result):
        geocoder = FakeGeocoder(munich_result)
        first = maybe_geocode_event_venue(session, 7, VENUE, geocoder=geocoder)
        second = maybe_geocode_event_venue(session, 7, VENUE, geocoder=geocoder)

        assert second == first
        assert len(geocoder.calls) == 1

    def test_force_rebuilds(self, session, munich_result):
        geocoder = FakeGeocoder(munich_result)
        first = maybe_geocode_event_venue(session, 7, VENUE, geocoder=geocoder)
        second = maybe_geocode_event_venue(session, 7, VENUE, force=True, geocoder=geocoder)

        assert second == first
        assert len(geocoder.calls) == 2

    def test_rebuilds_after_manual_removal(self, session, munich_result):
        geocoder = FakeGeocoder(munich_result)
        maybe_geocode_event_venue(session, 7, VENUE, geocoder=geocoder)
        SqlTermStore(session).set_event_terms(7, [])
        assert len(maybe_geocode_event_venue(session, 7, VENUE, geocoder=geocoder)) == 6


class TestEventLocationDisplay:

    def test_renders_with_venue(self, session, munich_result):
        maybe_geocode_event_venue(session, 7, VENUE, geocoder=FakeGeocoder(munich_result))
        html = event_location_display(
            session, 7, VENUE, level_range=LevelRange(), start_level=2, end_level=4, show_venue=True,
        )
        assert html == '<p class="location-hierarchy">Germany > Bavaria > Munich > Rathaus</p>'

    def test_untagged_event_shows_venue(self, session):
        html = event_location_display(session, 8, VENUE, level_range=LevelRange(), show_venue=True)
        assert html == '<p class="location-hierarchy">Rathaus</p>'


class TestApplyLocationDefaults:

    def test_fills_empty_levels(self):
        record = LocationRecord(country="Germany", country_code="de", city="Munich")
        filled = apply_location_defaults(record, {"continent": "Europe", "country": "Austria", "state": "Bavaria"})
        assert filled.continent == "Europe"
        assert filled.country == "Germany"
        assert filled.state == "Bavaria"
        assert filled.city == "Munich"

    def test_no_defaults(self, munich_record):
        assert apply_location_defaults(munich_record, {}) is munich_record


class TestExceptionHook:

    def test_logs_and_returns_short_message(self, caplog):
        try:
            raise ValueError("bad level")
        except ValueError as e:
            with caplog.at_level(logging.ERROR):
                message = custom_exception_hook(type(e), e, e.__traceback__)
        assert message == "ValueError"
        assert "First line: ValueError: bad level" in caplog.text
