"""Mapping of feed entries to local event records."""
import time
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from processor.models import ExternalEvent, LocalEventRecord


# Storage format for date-time values, always expressed in UTC.
STORAGE_FORMAT = '%Y-%m-%dT%H:%M:%S'

REQUIRED_FIELDS = (
    'id',
    'title',
    'description',
    'image',
    'start_date',
    'end_date',
    'available_tickets',
    'price',
    'organizer',
)


class InvalidEventError(ValueError):
    """Raised when a feed entry cannot be turned into an event."""


def parse_external_event(raw: Dict[str, Any]) -> ExternalEvent:
    """
    Build an ExternalEvent from a decoded feed entry.

    Args:
        raw: Dictionary decoded from the feed JSON

    Returns:
        ExternalEvent object with dates in storage format

    Raises:
        InvalidEventError: If a field is missing or malformed
    """
    if not isinstance(raw, dict):
        raise InvalidEventError(f"Feed entry is not an object: {raw!r}")

    missing = [field for field in REQUIRED_FIELDS if field not in raw]
    if missing:
        raise InvalidEventError(
            f"Feed entry {raw.get('id')!r} missing fields: {', '.join(missing)}"
        )

    event_id = str(raw['id'])

    try:
        tickets = int(raw['available_tickets'])
    except (TypeError, ValueError):
        raise InvalidEventError(
            f"Invalid ticket count for event {event_id}: "
            f"{raw['available_tickets']!r}"
        )
    if tickets < 0:
        raise InvalidEventError(
            f"Negative ticket count for event {event_id}: {tickets}"
        )

    try:
        amount = Decimal(str(raw['price']['amount']))
    except (KeyError, TypeError, InvalidOperation):
        raise InvalidEventError(
            f"Invalid price for event {event_id}: {raw['price']!r}"
        )

    try:
        organizer_id = str(raw['organizer']['id'])
    except (KeyError, TypeError):
        raise InvalidEventError(
            f"Missing organizer reference for event {event_id}"
        )

    return ExternalEvent(
        id=event_id,
        title=raw['title'],
        description=raw['description'],
        image=raw['image'],
        start_date=normalize_datetime(raw['start_date']),
        end_date=normalize_datetime(raw['end_date']),
        available_tickets=tickets,
        price_amount=amount,
        organizer_id=organizer_id,
    )


def normalize_datetime(value: str) -> str:
    """
    Normalize a feed date-time to storage format (YYYY-MM-DDTHH:MM:SS).

    Values with a UTC offset are converted to UTC, naive values are
    re-formatted as they are.

    Args:
        value: Date-time string in one of the accepted formats

    Returns:
        Date-time string in storage format

    Raises:
        InvalidEventError: If the value cannot be parsed
    """
    parsed = _parse_datetime(value)
    if parsed is None:
        raise InvalidEventError(f"Invalid date format: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    return parsed.strftime(STORAGE_FORMAT)


def _parse_datetime(value: str) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None

    value = value.strip()

    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        pass

    # Try common non-ISO formats
    date_formats = [
        '%Y-%m-%d %H:%M',
        '%Y/%m/%d %H:%M:%S',
        '%m/%d/%Y %H:%M:%S',
        '%m/%d/%Y %H:%M',
        '%m/%d/%Y',
        '%d %B %Y %H:%M',
        '%B %d, %Y %H:%M',
        '%B %d, %Y',
    ]

    for fmt in date_formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    return None


def to_local_record(
    event: ExternalEvent,
    primary_image: str,
    event_id: Optional[str] = None,
    created_at: Optional[int] = None
) -> LocalEventRecord:
    """
    Map an ExternalEvent to a new LocalEventRecord.

    Args:
        event: Event decoded from the feed
        primary_image: Identity of the stored image
        event_id: Local identity, a new UUID when omitted
        created_at: Creation timestamp, the current time when omitted

    Returns:
        LocalEventRecord ready to be persisted
    """
    return LocalEventRecord(
        event_id=event_id or str(uuid.uuid4()),
        external_id=event.id,
        title=event.title,
        body=event.description,
        start_date=event.start_date,
        end_date=event.end_date,
        tickets=event.available_tickets,
        price=event.price_amount,
        organizer_id=event.organizer_id,
        primary_image=primary_image,
        created_at=created_at if created_at is not None else int(time.time()),
    )
