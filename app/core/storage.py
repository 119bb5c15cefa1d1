import os
import re
import time
import uuid
import logging
import threading
import traceback
from pathlib import Path
from typing import Optional

import boto3

from .config import settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class AssetStorage:
    """Stores post images and maps them to public URLs.

    Subclasses implement ``_put``/``_remove`` and the URL <-> key mapping.
    """

    def __init__(self, prefix: str = None):
        self.prefix = (prefix or settings.UPLOAD_KEY_PREFIX).strip("/")

    def key_for(self, filename: Optional[str]) -> str:
        """Build a unique object key: ``<prefix>/<epoch ms>-<random>-<name>``"""
        name = os.path.basename(filename or "") or "image"
        safe_name = _UNSAFE_CHARS.sub("_", name)
        return f"{self.prefix}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"

    def upload(self, content: bytes, content_type: Optional[str], filename: Optional[str]) -> str:
        """Store the payload under a fresh key and return its public URL"""
        key = self.key_for(filename)
        logger.info(f"[UPLOAD] Storing '{filename}' ({len(content)} bytes) with key '{key}'")
        try:
            self._put(key, content, content_type or "application/octet-stream")
        except Exception as e:
            logger.error(f"[UPLOAD] Failed to store '{key}': {str(e)}")
            logger.debug(traceback.format_exc())
            raise StorageError("Failed to upload image.") from e
        url = self.url_for(key)
        logger.info(f"[UPLOAD] Stored file, public URL: {url}")
        return url

    def delete(self, url: str) -> bool:
        """Remove the object behind ``url``.

        Never raises. Returns False when the URL is not one of ours or the
        backend reported an error; deleting an already missing object is a
        success.
        """
        if not url:
            logger.error("No URL provided for file deletion")
            return False

        key = self.key_from_url(url)
        if not key:
            logger.error(f"URL {url} doesn't match any expected URL pattern")
            return False

        try:
            logger.info(f"Deleting file with key '{key}'")
            self._remove(key)
            return True
        except Exception as e:
            logger.error(f"Failed to delete '{key}': {str(e)}")
            logger.debug(traceback.format_exc())
            return False

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        base = f"{self.base_url}/"
        if not url.startswith(base):
            return None
        key = url[len(base):].split("?", 1)[0]
        # Only keys under our prefix are ever produced by upload()
        if not key.startswith(f"{self.prefix}/") or ".." in key.split("/"):
            return None
        return key

    @property
    def base_url(self) -> str:
        raise NotImplementedError

    def _put(self, key: str, content: bytes, content_type: str) -> None:
        raise NotImplementedError

    def _remove(self, key: str) -> None:
        raise NotImplementedError


class S3Storage(AssetStorage):
    """Handles file storage on S3 or an S3-compatible service (R2, MinIO)"""

    def __init__(self, client=None, bucket: str = None, prefix: str = None,
                 public_url: str = None, region: str = None, endpoint: str = None):
        super().__init__(prefix)
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self.region = region or settings.S3_REGION
        self.endpoint = settings.S3_ENDPOINT if endpoint is None else endpoint
        self.public_url = (settings.S3_PUBLIC_URL if public_url is None else public_url).rstrip("/")

        logger.info("Initializing S3Storage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Region: {self.region}")
        logger.info(f"  Endpoint: {self.endpoint or 'AWS default'}")
        logger.info(f"  Public URL: {self.public_url or 'Not set'}")

        if client is None:
            # Missing keys fall through to boto3's credential chain (env, IAM role)
            client = boto3.client(
                "s3",
                endpoint_url=self.endpoint or None,
                region_name=self.region,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
            )
        self.client = client

    @property
    def base_url(self) -> str:
        if self.public_url:
            return self.public_url
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def _put(self, key: str, content: bytes, content_type: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType=content_type,
        )

    def _remove(self, key: str) -> None:
        # S3 reports success for keys that do not exist
        self.client.delete_object(Bucket=self.bucket, Key=key)


class LocalStorage(AssetStorage):
    """Stores files on the local filesystem, served from /static"""

    def __init__(self, directory: str = None, prefix: str = None, base_url: str = None):
        super().__init__(prefix)
        self.directory = Path(directory or settings.UPLOAD_DIRECTORY)
        self._base_url = (base_url or f"{settings.BASE_URL}/static").rstrip("/")
        self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def base_url(self) -> str:
        return self._base_url

    def path_for(self, key: str) -> Path:
        return self.directory / key

    def _put(self, key: str, content: bytes, content_type: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as out_file:
            out_file.write(content)

    def _remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


_storage: Optional[AssetStorage] = None
_storage_lock = threading.Lock()

def build_storage() -> AssetStorage:
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage()
    return LocalStorage()

def get_storage() -> AssetStorage:
    """Return the configured storage backend, created once on first use"""
    global _storage
    if _storage is None:
        # Sync endpoints resolve this from the threadpool
        with _storage_lock:
            if _storage is None:
                _storage = build_storage()
                logger.info(f"Asset storage initialised: {type(_storage).__name__}")
    return _storage
