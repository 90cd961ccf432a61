"""Sync of external feed events into the local event store."""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Set

import requests

from feed.events_feed import EventsFeedClient
from processor.event_mapper import STORAGE_FORMAT, parse_external_event, to_local_record
from processor.models import ExternalEvent, SyncResult
from storage.event_store import DynamoDBEventStore, EventAlreadyExistsError
from storage.image_store import S3ImageStore

logger = logging.getLogger(__name__)


class FeedErrorPolicy(Enum):
    """What to do with the live snapshot when the feed answers with an error."""

    # Leave local events alone
    SKIP = 'skip'
    # Delete every live event, as if the feed had been empty
    DELETE = 'delete'


class EventSyncJob:
    """Creates local events for new feed entries and deletes stale ones."""

    def __init__(
        self,
        feed_client: EventsFeedClient,
        event_store: DynamoDBEventStore,
        image_store: S3ImageStore,
        on_feed_error: FeedErrorPolicy = FeedErrorPolicy.SKIP,
        clock: Callable[[], datetime] = None
    ):
        """
        Initialize the sync job.

        Args:
            feed_client: Client for the external feed
            event_store: Local event store
            image_store: Store for downloaded images
            on_feed_error: Deletion policy when the feed returns an error status
            clock: Returns the current time, UTC now when omitted
        """
        self.feed_client = feed_client
        self.event_store = event_store
        self.image_store = image_store
        self.on_feed_error = on_feed_error
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def sync(self) -> SyncResult:
        """
        Synchronize local events with the external feed.

        Entries with no local counterpart are created, live local events
        whose external ID is missing from the feed are deleted. Existing
        events are never updated.

        Returns:
            SyncResult with counts of created, skipped and deleted events

        Raises:
            requests.RequestException: If the feed could not be reached
        """
        external_ids = self.get_live_external_ids()
        result = SyncResult(created=0, skipped=0, deleted=0)
        run_deletion = True

        try:
            raw_events = self.feed_client.fetch_events()
        except requests.RequestException as e:
            if e.response is None:
                logger.error(f"Failed to reach events feed: {e}")
                raise
            result.feed_error = str(e)
            run_deletion = self.on_feed_error is FeedErrorPolicy.DELETE
            logger.warning(
                f"Events feed returned an error: {e}. "
                f"Deletion {'runs' if run_deletion else 'skipped'} "
                f"(policy: {self.on_feed_error.value})"
            )
            raw_events = []

        for raw_event in raw_events:
            event = parse_external_event(raw_event)
            external_ids.discard(event.id)

            if self.event_store.event_exists(event.id):
                result.skipped += 1
                continue

            try:
                external_ids = self.create_event(event, external_ids)
            except EventAlreadyExistsError:
                logger.warning(f"Event {event.id} was created concurrently, skipping")
                result.skipped += 1
                continue
            result.created += 1

        # Delete events that have been deleted at the source
        if run_deletion and external_ids:
            logger.info(f"Deleting events removed at source: {sorted(external_ids)}")
            result.deleted = self.event_store.delete_events_by_external_ids(
                external_ids
            )

        logger.info(
            f"Sync complete: {result.created} created, {result.skipped} skipped, "
            f"{result.deleted} deleted"
        )
        return result

    def create_event(self, event: ExternalEvent, external_ids: Set[str]) -> Set[str]:
        """
        Create a local event from a feed entry.

        Args:
            event: Event decoded from the feed
            external_ids: Live external IDs still pending deletion

        Returns:
            The external IDs with this event's ID removed
        """
        image_data = self.feed_client.download_image(event.image)
        image_key = self.image_store.write_data(image_data, event.id)

        record = to_local_record(event, primary_image=image_key)
        self.event_store.create_event(record)

        external_ids.discard(event.id)
        return external_ids

    def get_live_external_ids(self) -> Set[str]:
        """Return external IDs of local events that have not ended yet."""
        now = self.clock().astimezone(timezone.utc).strftime(STORAGE_FORMAT)
        return self.event_store.get_live_external_ids(now)
