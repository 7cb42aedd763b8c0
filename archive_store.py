import logging
import boto3
from typing import Any, BinaryIO, Optional

logger = logging.getLogger(__name__)

SERVER_SIDE_ENCRYPTION = "AES256"
ARCHIVE_CONTENT_TYPE = "application/zip"


class ArchiveStore:
    """S3 bucket holding the latest zip snapshot of every pushed branch."""

    def __init__(self, bucket: str, s3_client: Optional[Any] = None):
        self.bucket = bucket
        self._s3 = s3_client

    @property
    def s3(self) -> Any:
        if self._s3 is None:
            self._s3 = boto3.client("s3")
        return self._s3

    def upload(self, key: str, stream: BinaryIO) -> str:
        # existing objects under the same key are overwritten
        self.s3.upload_fileobj(
            Fileobj=stream,
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={
                "ServerSideEncryption": SERVER_SIDE_ENCRYPTION,
                "ContentType": ARCHIVE_CONTENT_TYPE,
            },
        )

        location = f"s3://{self.bucket}/{key}"
        logger.info("Uploaded archive to %s", location)
        return location
