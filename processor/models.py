"""Data models for the events sync."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class ExternalEvent:
    """Event as received from the external feed, dates in storage format."""
    id: str
    title: str
    description: str
    image: str
    start_date: str
    end_date: str
    available_tickets: int
    price_amount: Decimal
    organizer_id: str


@dataclass
class LocalEventRecord:
    """Event persisted in the local store."""
    event_id: str
    external_id: str
    title: str
    body: str
    start_date: str
    end_date: str
    tickets: int
    price: Decimal
    organizer_id: str
    primary_image: str
    created_at: int


@dataclass
class SyncResult:
    """Result of a sync run."""
    created: int
    skipped: int
    deleted: int
    feed_error: Optional[str] = None
