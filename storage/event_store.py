"""DynamoDB store for local event records."""
import logging
from typing import Iterable, Optional, Set

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from processor.models import LocalEventRecord

logger = logging.getLogger(__name__)


class EventAlreadyExistsError(Exception):
    """Raised when a new record collides with an existing external ID."""

    def __init__(self, external_id: str):
        super().__init__(f"Event with external ID {external_id} already exists")
        self.external_id = external_id


class DynamoDBEventStore:
    """
    Store for LocalEventRecord items in a DynamoDB table.

    The table is keyed on external_id, so at most one record exists per
    external ID. The local event_id is stored as a plain attribute.
    """

    BATCH_SIZE = 25  # DynamoDB batch operation limit

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB resource and table reference.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region, the environment default when omitted
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBEventStore for table: {table_name}")

    def get_live_external_ids(self, now: str) -> Set[str]:
        """
        Return the external IDs of events that have not ended yet.

        Args:
            now: Current time in storage format (UTC)

        Returns:
            Set of external ID strings
        """
        scan_kwargs = {
            'FilterExpression': Attr('end_date').gte(now),
            'ProjectionExpression': 'external_id',
        }

        try:
            response = self.table.scan(**scan_kwargs)
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = self.table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey'],
                    **scan_kwargs
                )
                items.extend(response.get('Items', []))

        except ClientError as e:
            logger.error(f"Error scanning DynamoDB table: {e}")
            raise

        external_ids = {item['external_id'] for item in items}
        logger.info(f"Found {len(external_ids)} live events in DynamoDB")
        return external_ids

    def event_exists(self, external_id: str) -> bool:
        """
        Check if an event with the given external ID is stored.

        Args:
            external_id: External ID to look up

        Returns:
            True if a record exists, False otherwise
        """
        try:
            response = self.table.get_item(
                Key={'external_id': external_id},
                ProjectionExpression='external_id',
                ConsistentRead=True
            )
        except ClientError as e:
            logger.error(f"Error reading event {external_id}: {e}")
            raise

        return 'Item' in response

    def create_event(self, record: LocalEventRecord) -> None:
        """
        Persist a new event, never overwriting an existing item.

        Args:
            record: LocalEventRecord to persist

        Raises:
            EventAlreadyExistsError: If the external ID is already stored
        """
        try:
            self.table.put_item(
                Item=self._record_to_item(record),
                ConditionExpression=Attr('external_id').not_exists()
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                raise EventAlreadyExistsError(record.external_id) from e
            logger.error(f"Error writing event {record.external_id}: {e}")
            raise

        logger.info(
            f"Created event {record.event_id} for external ID {record.external_id}"
        )

    def delete_events_by_external_ids(self, external_ids: Iterable[str]) -> int:
        """
        Delete events by external ID in batches of 25 items.

        Args:
            external_ids: External IDs to delete

        Returns:
            Count of delete requests sent
        """
        external_ids = sorted(external_ids)
        if not external_ids:
            return 0

        logger.info(f"Deleting {len(external_ids)} events from DynamoDB")
        deleted_count = 0

        # Process in batches of 25 (DynamoDB limit)
        for i in range(0, len(external_ids), self.BATCH_SIZE):
            batch = external_ids[i:i + self.BATCH_SIZE]

            try:
                with self.table.batch_writer() as writer:
                    for external_id in batch:
                        writer.delete_item(Key={'external_id': external_id})
            except ClientError as e:
                logger.error(
                    f"Error deleting batch {i // self.BATCH_SIZE + 1}: {e}"
                )
                raise

            deleted_count += len(batch)

        logger.info(f"Successfully deleted {deleted_count} events")
        return deleted_count

    def _record_to_item(self, record: LocalEventRecord) -> dict:
        return {
            'external_id': record.external_id,
            'event_id': record.event_id,
            'title': record.title,
            'body': record.body,
            'start_date': record.start_date,
            'end_date': record.end_date,
            'tickets': record.tickets,
            'price': record.price,
            'organizer_id': record.organizer_id,
            'primary_image': record.primary_image,
            'created_at': record.created_at
        }
