import os
import uuid
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, settings as default_settings
from app.core.errors import UploadError

logger = logging.getLogger(__name__)


def create_s3_client(settings: Settings = default_settings):
    kwargs = {"region_name": settings.AWS_DEFAULT_REGION}
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.client("s3", **kwargs)


class UploadService:
    """Stores event images on S3 and hands back a public URL"""

    def __init__(
        self,
        s3_client,
        bucket: str,
        public_base_url: Optional[str] = None,
        folder: str = "DevEvent",
        max_size: Optional[int] = None,
    ):
        self.s3 = s3_client
        self.bucket = bucket
        self.public_base_url = public_base_url
        self.folder = folder.strip("/")
        self.max_size = max_size

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        region = self.s3.meta.region_name
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def upload_image(
        self,
        content: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        if not content:
            raise UploadError("Image file is empty", field="image")
        if content_type and not content_type.startswith("image/"):
            raise UploadError(
                f"Unsupported content type for image: {content_type}", field="image"
            )
        if self.max_size and len(content) > self.max_size:
            raise UploadError(
                f"Image exceeds the {self.max_size} byte limit", field="image"
            )

        extension = os.path.splitext(filename or "")[1].lower()
        key = f"{self.folder}/{uuid.uuid4().hex}{extension}"

        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Image upload to s3://%s/%s failed: %s", self.bucket, key, e)
            raise UploadError(f"Image upload failed: {e}", field="image") from e

        return self.url_for(key)
