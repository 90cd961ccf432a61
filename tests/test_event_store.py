"""Unit tests for the DynamoDB event store."""
from dataclasses import asdict
from decimal import Decimal

import pytest

from processor.models import LocalEventRecord
from storage.event_store import DynamoDBEventStore, EventAlreadyExistsError

NOW = '2024-06-01T12:00:00'


@pytest.fixture
def event_store(events_table):
    """Create DynamoDBEventStore instance with mock table."""
    return DynamoDBEventStore('test-external-events', region_name='us-east-1')


def make_record(event_id, external_id, end_date='2099-01-01T22:00:00'):
    return LocalEventRecord(
        event_id=event_id,
        external_id=external_id,
        title=f'Event {external_id}',
        body='Description',
        start_date='2024-01-01T20:00:00',
        end_date=end_date,
        tickets=5,
        price=Decimal('12.50'),
        organizer_id='3',
        primary_image=f'external_events/{external_id}',
        created_at=1700000000
    )


def test_create_event_stores_all_fields(event_store, stored_events):
    """Test a created event is stored with every field of the record."""
    record = make_record('local-1', 'E1')

    event_store.create_event(record)

    assert stored_events() == {'E1': asdict(record)}


def test_create_event_rejects_existing_external_id(event_store, stored_events):
    """Test that a second record for the same external ID is rejected."""
    event_store.create_event(make_record('local-1', 'E1'))

    with pytest.raises(EventAlreadyExistsError) as exc_info:
        event_store.create_event(make_record('local-2', 'E1'))

    assert exc_info.value.external_id == 'E1'
    events = stored_events()
    assert len(events) == 1
    assert events['E1']['event_id'] == 'local-1'


def test_event_exists(event_store):
    """Test lookup by external ID."""
    event_store.create_event(make_record('local-1', 'E1'))

    assert event_store.event_exists('E1') is True
    assert event_store.event_exists('missing') is False


def test_get_live_external_ids_empty_table(event_store):
    assert event_store.get_live_external_ids(NOW) == set()


def test_get_live_external_ids_excludes_past_events(event_store):
    """Test that only events ending at or after now are live."""
    event_store.create_event(make_record('local-1', 'FUTURE'))
    event_store.create_event(make_record('local-2', 'PAST', end_date='2024-05-31T23:00:00'))
    event_store.create_event(make_record('local-3', 'ENDS_NOW', end_date=NOW))

    assert event_store.get_live_external_ids(NOW) == {'FUTURE', 'ENDS_NOW'}


def test_delete_events_by_external_ids(event_store, stored_events):
    """Test deletion removes every event with a listed external ID."""
    event_store.create_event(make_record('local-1', 'E1'))
    event_store.create_event(make_record('local-2', 'E2'))
    event_store.create_event(make_record('local-3', 'E3'))

    count = event_store.delete_events_by_external_ids({'E1', 'E2'})

    assert count == 2
    assert list(stored_events()) == ['E3']


def test_delete_events_large_batch(event_store, stored_events):
    """Test deletion with more than 25 events (batch limit)."""
    external_ids = set()
    for i in range(30):
        event_store.create_event(make_record(f'local-{i}', f'E{i}'))
        external_ids.add(f'E{i}')

    count = event_store.delete_events_by_external_ids(external_ids)

    assert count == 30
    assert stored_events() == {}


def test_delete_events_nothing_to_delete(event_store):
    assert event_store.delete_events_by_external_ids(set()) == 0
