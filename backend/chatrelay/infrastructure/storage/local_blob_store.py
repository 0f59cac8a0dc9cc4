"""
LocalBlobStore - attachment storage on the local disk.

Each payload is written under a freshly generated key with exclusive create,
so an existing object is never overwritten. Disk I/O runs in a worker thread.

URL layout:
    {public_base_url}{public_path}/{key}
e.g. "/files/20250127_120000123456_3f2a9c1e_photo.png"
"""

import asyncio
import logging
import mimetypes
import os
from datetime import datetime
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

from werkzeug.utils import secure_filename

from chatrelay.config.settings import Config
from chatrelay.domain.exceptions import StorageError, StorageErrorKind
from chatrelay.domain.ports.blob_store import BlobStore

logger = logging.getLogger(__name__)

MAX_KEY_ATTEMPTS = 3


class LocalBlobStore(BlobStore):
    def __init__(
        self,
        base_dir: Optional[str] = None,
        public_path: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Args:
            base_dir: Directory blobs are written to (default: Config.BLOB_STORAGE_DIR)
            public_path: URL path the directory is served under (default: Config.BLOB_PUBLIC_PATH)
            public_base_url: Scheme and host prefix for URLs (default: Config.BLOB_PUBLIC_BASE_URL)
        """
        self.base_dir = base_dir or Config.BLOB_STORAGE_DIR
        self.public_path = "/" + (public_path or Config.BLOB_PUBLIC_PATH).strip("/")
        self.public_base_url = (
            Config.BLOB_PUBLIC_BASE_URL if public_base_url is None else public_base_url
        ).rstrip("/")

    async def store(
        self, data: bytes, content_type: str, filename: Optional[str] = None
    ) -> str:
        key = await asyncio.to_thread(self._write, data, content_type, filename)
        return self.url_for(key)

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}{self.public_path}/{quote(key)}"

    def path_for(self, key: str) -> str:
        return os.path.join(self.base_dir, key)

    def _write(self, data: bytes, content_type: str, filename: Optional[str]) -> str:
        try:
            os.makedirs(self.base_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(StorageErrorKind.BLOB_UNAVAILABLE, str(e)) from e

        for _ in range(MAX_KEY_ATTEMPTS):
            key = self._make_key(content_type, filename)
            try:
                with open(self.path_for(key), "xb") as f:
                    f.write(data)
            except FileExistsError:
                logger.warning(f"[BlobStore] Key collision on {key}, retrying")
                continue
            except OSError as e:
                logger.error(f"[BlobStore] Failed to write {key}: {e}")
                raise StorageError(StorageErrorKind.BLOB_UNAVAILABLE, str(e)) from e

            logger.debug(f"[BlobStore] Stored {key} ({len(data)} bytes)")
            return key

        raise StorageError(
            StorageErrorKind.BLOB_UNAVAILABLE, "Could not allocate a unique blob key"
        )

    def _make_key(self, content_type: str, filename: Optional[str]) -> str:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S%f")
        name = secure_filename(filename or "")
        if not name:
            extension = mimetypes.guess_extension(content_type or "") or ".bin"
            name = f"blob{extension}"
        return f"{timestamp}_{uuid4().hex[:8]}_{name}"
