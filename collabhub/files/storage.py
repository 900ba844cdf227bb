# collabhub/files/storage.py
"""
Object store gateway.

Issues time-bounded pre-signed URLs against one S3 bucket and deletes
objects by key. Bytes never pass through this service: clients PUT to the
upload URL and GET from the download URL themselves.
"""
import logging
import mimetypes
import re
import uuid
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from collabhub.shared.config import settings
from collabhub.shared.errors import UpstreamFailure

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class UploadTarget:
    upload_url: str
    key: str


def extension_for(file_type: str) -> str:
    """Best-effort extension (without dot) for a MIME type, e.g. application/pdf -> pdf."""
    mime = (file_type or "").split(";")[0].strip().lower()
    guess = mimetypes.guess_extension(mime) if mime else None
    if guess:
        return guess.lstrip(".")
    subtype = mime.split("/")[-1] if "/" in mime else ""
    subtype = re.sub(r"[^a-z0-9]+", "", subtype.split("+")[0])
    return subtype or "bin"


def new_object_key(file_type: str, owner: str) -> str:
    return f"{owner}/{uuid.uuid4()}.{extension_for(file_type)}"


class ObjectStore:
    def __init__(self, client, bucket: str, expires_in: int = 3600):
        self.client = client
        self.bucket = bucket
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls) -> "ObjectStore":
        client = boto3.client(
            "s3",
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
        )
        return cls(client, settings.S3_BUCKET, settings.S3_URL_EXPIRES)

    def issue_upload_target(self, file_type: str, owner: str) -> UploadTarget:
        key = new_object_key(file_type, owner)
        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": file_type},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Could not sign upload URL for %s: %s", key, e)
            raise UpstreamFailure("could not issue upload URL", details=str(e))
        logger.debug("Issued upload URL for %s", key)
        return UploadTarget(upload_url=url, key=key)

    def issue_download_target(self, key: str) -> str:
        # signing does not touch the bucket; callers check the key exists in the DB first
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Could not sign download URL for %s: %s", key, e)
            raise UpstreamFailure("could not issue download URL", details=str(e))

    def delete_object(self, key: str) -> None:
        """Idempotent: S3 reports success for keys that are already gone."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamFailure(f"could not delete object {key}", details=str(e))
        logger.info("Deleted object %s", key)

    def object_exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if str(e.response.get("Error", {}).get("Code")) in _MISSING_CODES:
                return False
            raise UpstreamFailure(f"could not inspect object {key}", details=str(e))
        except BotoCoreError as e:
            raise UpstreamFailure(f"could not inspect object {key}", details=str(e))
        return True


@lru_cache(maxsize=1)
def get_object_store() -> ObjectStore:
    # FastAPI dep; tests override it with an in-memory fake
    return ObjectStore.from_settings()
