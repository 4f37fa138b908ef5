# mediaboard/utils/aws.py
from __future__ import annotations

"""
🧊 Mediaboard • S3 Utilities
============================

Small boto3 wrapper bound to one bucket, used by `S3ImageStore`.

- Any S3-compatible endpoint (MinIO, R2, Spaces, AWS) with static credentials
- Path-style addressing, bounded retries, short timeouts
- Image objects are immutable (new name per upload) and cached accordingly
- Credentials never appear in `repr` or logs

`S3Client.client` is the raw boto3 client; tests hand in a fake.
"""

from typing import Any, Dict, Optional
import logging
import re

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from mediaboard.core.exceptions import StorageError

logger = logging.getLogger(__name__)

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"

# status/codes meaning "already gone"
_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}

_SAFE_KEY = re.compile(r"[A-Za-z0-9._\-/]+")


class S3StorageError(StorageError):
    """Upload or configuration failure against the bucket."""


def _normalize_key(key: str) -> str:
    """Strip leading slashes and reject empty, traversing or odd keys."""
    k = re.sub(r"/{2,}", "/", str(key or "").strip()).lstrip("/")
    if not k or ".." in k.split("/") or ".." in k or not _SAFE_KEY.fullmatch(k):
        raise S3StorageError(f"Invalid storage key: {key!r}")
    return k


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3Client:
    """
    S3-compatible client for a single bucket.

    Parameters
    ----------
    bucket : str
    endpoint_url : str
        e.g. `http://minio:9000`
    access_key / secret_key : str
    region_name : str | None
        Signing region; S3-compatible services generally accept `us-east-1`.
    client : Any | None
        Pre-built boto3-like client.
    """

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        region_name: Optional[str] = None,
        client: Any = None,
    ) -> None:
        if not bucket:
            raise S3StorageError("S3 bucket not configured")
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.client = client or self._build_client(endpoint_url, access_key, secret_key, region_name)

    @staticmethod
    def _build_client(endpoint_url: str, access_key: str, secret_key: str, region_name: Optional[str]):
        cfg = BotoConfig(
            signature_version="s3v4",
            retries={"max_attempts": 5, "mode": "standard"},
            connect_timeout=3,
            read_timeout=10,
            s3={"addressing_style": "path"},
        )
        try:
            return boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region_name or None,
                config=cfg,
            )
        except (BotoCoreError, ValueError) as e:  # pragma: no cover
            raise S3StorageError(f"Failed to create S3 client: {e}") from e

    def __repr__(self) -> str:  # pragma: no cover
        return f"S3Client(bucket={self.bucket!r}, endpoint={self.endpoint_url!r})"

    # ── Writes ──────────────────────────────────────────────────────────────

    def put_bytes(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        public: bool = False,
        cache_control: Optional[str] = None,
    ) -> None:
        """
        Upload `data` under `key`.

        `public=True` writes the object with the `public-read` ACL and, unless
        `cache_control` says otherwise, long-lived immutable caching.

        Raises
        ------
        S3StorageError
            Invalid key or any upload failure.
        """
        args: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": _normalize_key(key),
            "Body": data,
            "ContentType": content_type,
        }
        if public:
            args["ACL"] = "public-read"
            cache_control = cache_control or IMMUTABLE_CACHE_CONTROL
        if cache_control:
            args["CacheControl"] = cache_control

        try:
            self.client.put_object(**args)
        except (ClientError, BotoCoreError) as e:
            raise S3StorageError(f"Failed to upload {args['Key']}: {e}") from e

    def delete(self, key: str) -> bool:
        """
        Remove `key`; True when the object is gone (including "never existed").
        Other failures are logged at WARNING and reported as False.
        """
        k = _normalize_key(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=k)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return True
            logger.warning("delete_object %s failed: %s", k, _error_code(e) or e)
            return False
        except BotoCoreError as e:
            logger.warning("delete_object %s failed: %s", k, e)
            return False
        return True


__all__ = ["S3Client", "S3StorageError", "IMMUTABLE_CACHE_CONTROL"]
