"""AWS Lambda handler for the external events sync."""
import json
import logging
import os
import time
from typing import Dict, Any

from feed.events_feed import EventsFeedClient
from importer.events_importer import EventSyncJob, FeedErrorPolicy
from storage.event_store import DynamoDBEventStore
from storage.image_store import S3ImageStore


# Attributes every LogRecord carries; anything else came in through ``extra``
RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including any ``extra`` fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for the events sync.

    Args:
        event: EventBridge event payload (unused)
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    # Read configuration from environment variables
    feed_url = os.environ.get('FEED_URL', EventsFeedClient.DEFAULT_URL)
    table_name = os.environ.get('TABLE_NAME', 'external-events')
    image_bucket = os.environ.get('IMAGE_BUCKET', 'external-events-images')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = os.environ.get('TIMEOUT_SECONDS', '30')
    on_feed_error = os.environ.get('ON_FEED_ERROR', FeedErrorPolicy.SKIP.value)
    image_indirection = os.environ.get('IMAGE_INDIRECTION', 'false').lower() in ('1', 'true', 'yes')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={
            'feed_url': feed_url,
            'table_name': table_name,
            'image_bucket': image_bucket,
            'on_feed_error': on_feed_error
        }
    )

    try:
        policy = FeedErrorPolicy(on_feed_error.lower())
        timeout = int(timeout_seconds)

        job = EventSyncJob(
            feed_client=EventsFeedClient(
                url=feed_url,
                timeout=timeout,
                image_indirection=image_indirection
            ),
            event_store=DynamoDBEventStore(table_name=table_name),
            image_store=S3ImageStore(bucket_name=image_bucket),
            on_feed_error=policy
        )

        logger.info("Synchronizing events with external feed")
        sync_result = job.sync()

        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'events_created': sync_result.created,
                'events_skipped': sync_result.skipped,
                'events_deleted': sync_result.deleted,
                'feed_error': sync_result.feed_error
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Sync completed successfully',
                'statistics': {
                    'events_created': sync_result.created,
                    'events_skipped': sync_result.skipped,
                    'events_deleted': sync_result.deleted,
                    'duration_seconds': round(duration, 2)
                },
                'feed_error': sync_result.feed_error
            })
        }

    except Exception as e:
        duration = time.time() - start_time

        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )

        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Sync failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }
