# tests/fixtures/images.py
"""
Image payload helpers:
- PNG-looking byte payloads of any size (for size limits)
- A fake S3 client recording puts/deletes, usable with `S3ImageStore`
- A fake boto3 client for exercising `S3Client` without a network
"""

from typing import Any, Dict, List, Optional

import pytest
from botocore.exceptions import ClientError

from mediaboard.core.exceptions import StorageError

# PNG signature + IHDR chunk header; contents are never decoded
PNG_HEADER = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def png_bytes(size: int = 1024) -> bytes:
    """PNG header followed by padding up to `size` bytes."""
    return PNG_HEADER + b"\0" * max(0, size - len(PNG_HEADER))


class FakeS3Client:
    """Stand-in for `mediaboard.utils.aws.S3Client`."""

    def __init__(self, *, fail_put: bool = False, fail_delete: bool = False) -> None:
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.deleted: List[str] = []
        self.fail_put = fail_put
        self.fail_delete = fail_delete

    def put_bytes(self, key: str, data: bytes, *, content_type: str, public: bool = False, cache_control: Optional[str] = None) -> None:
        if self.fail_put:
            raise StorageError("bucket unavailable")
        self.objects[key] = {"data": data, "content_type": content_type, "public": public}

    def delete(self, key: str) -> bool:
        if self.fail_delete:
            raise StorageError("bucket unavailable")
        self.deleted.append(key)
        self.objects.pop(key, None)
        return True


class FakeBotoS3:
    """Minimal boto3 S3 client double (put_object / delete_object)."""

    def __init__(self, *, delete_error_code: Optional[str] = None) -> None:
        self.put_calls: List[Dict[str, Any]] = []
        self.delete_calls: List[Dict[str, Any]] = []
        self.delete_error_code = delete_error_code

    def put_object(self, **kwargs) -> Dict[str, Any]:
        self.put_calls.append(kwargs)
        return {"ETag": '"etag"'}

    def delete_object(self, **kwargs) -> Dict[str, Any]:
        self.delete_calls.append(kwargs)
        if self.delete_error_code:
            raise ClientError({"Error": {"Code": self.delete_error_code, "Message": "x"}}, "DeleteObject")
        return {}


@pytest.fixture()
def fake_s3() -> FakeS3Client:
    return FakeS3Client()
