from datetime import datetime, timezone

import pytest

from calshare.feed import CompanyNotFoundError
from calshare.services.event_store import SqlEventStore
from calshare.services.events import (
    EventNotFoundError,
    EventService,
    ValidationError,
    parse_datetime,
)


class SpyInvalidator:
    def __init__(self):
        self.calls = []

    def invalidate(self, company_id):
        self.calls.append(company_id)


VALID_PAYLOAD = {
    "title": "Quarterly Review",
    "description": "Numbers, plans; next steps",
    "start": "2025-03-01T09:00:00Z",
    "end": "2025-03-01T11:00:00Z",
    "location": "Main hall",
}


@pytest.fixture
def spy():
    return SpyInvalidator()


@pytest.fixture
def service(db_session, spy):
    return EventService(db_session, spy)


def test_create_event_invalidates_company_feed(service, spy, company):
    event = service.create_event(company["id"], VALID_PAYLOAD)

    assert spy.calls == [company["id"]]
    assert event["title"] == "Quarterly Review"
    assert event["start"] == "2025-03-01T09:00:00Z"
    assert event["is_public"] is True


def test_update_event_invalidates_company_feed(service, spy, company):
    event = service.create_event(company["id"], VALID_PAYLOAD)
    updated = service.update_event(company["id"], event["id"], {"title": "Annual Review"})

    assert updated["title"] == "Annual Review"
    assert spy.calls == [company["id"], company["id"]]


def test_delete_event_invalidates_company_feed(service, spy, company):
    event = service.create_event(company["id"], VALID_PAYLOAD)
    service.delete_event(company["id"], event["id"])

    assert spy.calls == [company["id"], company["id"]]
    with pytest.raises(EventNotFoundError):
        service.get_event(company["id"], event["id"])


def test_failed_create_does_not_invalidate(service, spy, company):
    with pytest.raises(ValidationError) as exc_info:
        service.create_event(company["id"], {"title": "No dates"})

    assert "start" in exc_info.value.errors
    assert "end" in exc_info.value.errors
    assert spy.calls == []


def test_end_before_start_is_rejected(service, spy, company):
    payload = dict(VALID_PAYLOAD, start="2025-03-01T12:00:00Z")
    with pytest.raises(ValidationError) as exc_info:
        service.create_event(company["id"], payload)
    assert "end" in exc_info.value.errors
    assert spy.calls == []


def test_update_validates_against_stored_times(service, spy, company):
    event = service.create_event(company["id"], VALID_PAYLOAD)
    with pytest.raises(ValidationError):
        service.update_event(
            company["id"], event["id"], {"end": "2025-03-01T08:00:00Z"}
        )
    assert spy.calls == [company["id"]]


def test_update_missing_event_does_not_invalidate(service, spy, company):
    with pytest.raises(EventNotFoundError):
        service.update_event(company["id"], "missing", {"title": "Whatever"})
    assert spy.calls == []


def test_events_of_another_company_are_not_reachable(service, spy, company, db_session):
    from calshare.services.companies import CompanyService

    other = CompanyService(db_session).create_company({"name": "Globex"})
    event = service.create_event(company["id"], VALID_PAYLOAD)

    with pytest.raises(EventNotFoundError):
        service.delete_event(other["id"], event["id"])
    assert spy.calls == [company["id"]]


def test_create_for_unknown_company(service, spy):
    with pytest.raises(CompanyNotFoundError):
        service.create_event("missing-company", VALID_PAYLOAD)
    assert spy.calls == []


def test_invalid_field_types_are_reported(service, company):
    payload = dict(VALID_PAYLOAD, is_public="yes", location=42, title="ab")
    with pytest.raises(ValidationError) as exc_info:
        service.create_event(company["id"], payload)
    assert set(exc_info.value.errors) == {"is_public", "location", "title"}


def test_list_events_filters_public_and_range(service, company):
    service.create_event(company["id"], VALID_PAYLOAD)
    service.create_event(
        company["id"],
        dict(VALID_PAYLOAD, title="Private planning", is_public=False),
    )
    service.create_event(
        company["id"],
        dict(
            VALID_PAYLOAD,
            title="Summer party",
            start="2025-07-01T18:00:00Z",
            end="2025-07-01T23:00:00Z",
        ),
    )

    assert len(service.list_events(company["id"])) == 3
    public = service.list_events(company["id"], public_only=True)
    assert [event["title"] for event in public] == ["Quarterly Review", "Summer party"]
    summer = service.list_events(company["id"], after="2025-06-01T00:00:00Z")
    assert [event["title"] for event in summer] == ["Summer party"]

    with pytest.raises(ValidationError):
        service.list_events(company["id"], after="next week")


def test_sql_event_store_returns_public_events_in_utc(service, company):
    service.create_event(company["id"], dict(VALID_PAYLOAD, start="2025-03-01T10:00:00+01:00"))
    service.create_event(company["id"], dict(VALID_PAYLOAD, title="Hidden", is_public=False))

    store = SqlEventStore()
    events = store.list_public_events(company["id"])

    assert [event.title for event in events] == ["Quarterly Review"]
    assert events[0].start == datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
    assert events[0].location == "Main hall"
    assert store.company_display_name(company["id"]) == "Acme Corp"


def test_sql_event_store_unknown_company():
    store = SqlEventStore()
    with pytest.raises(CompanyNotFoundError):
        store.list_public_events("missing")
    with pytest.raises(CompanyNotFoundError):
        store.company_display_name("missing")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-01T09:00:00Z", datetime(2025, 3, 1, 9, tzinfo=timezone.utc)),
        ("2025-03-01T11:00:00+02:00", datetime(2025, 3, 1, 9, tzinfo=timezone.utc)),
        ("2025-03-01T09:00:00", datetime(2025, 3, 1, 9, tzinfo=timezone.utc)),
        ("tomorrow", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_datetime(value, expected):
    assert parse_datetime(value) == expected
