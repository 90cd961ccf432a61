"""S3 store for downloaded event images."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class S3ImageStore:
    """Writes raw image bytes to an S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str = 'external_events/',
        region_name: Optional[str] = None
    ):
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.s3 = boto3.client('s3', region_name=region_name)

    def write_data(self, data: bytes, name: str) -> str:
        """
        Store bytes under the configured prefix.

        Args:
            data: Raw file contents
            name: Object name below the prefix

        Returns:
            Object key of the stored file
        """
        key = f"{self.prefix}{name}"

        try:
            self.s3.put_object(Bucket=self.bucket_name, Key=key, Body=data)
        except ClientError as e:
            logger.error(f"Error writing s3://{self.bucket_name}/{key}: {e}")
            raise

        logger.info(f"Stored {len(data)} bytes at s3://{self.bucket_name}/{key}")
        return key
