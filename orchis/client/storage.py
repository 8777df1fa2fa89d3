"""
Logo uploads to Cloud Storage.
"""
import logging
import time
from typing import Any, Optional

from firebase_admin import storage

from ..errors import StorageError
from .firestore import get_app


logger = logging.getLogger(__name__)


class LogoStorage:
    """Stores tool logos under ``logos/`` in the project bucket."""

    def __init__(self, bucket: Any = None):
        self._bucket = bucket

    @property
    def bucket(self) -> Any:
        if self._bucket is None:
            self._bucket = storage.bucket(app=get_app())
        return self._bucket

    @staticmethod
    def logo_path(slug: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        return f"logos/{slug}_{stamp}_{filename}"

    def upload_logo(
        self,
        slug: str,
        filename: str,
        data: bytes,
        content_type: str = "image/png",
    ) -> str:
        """
        Upload a logo image and return its public URL.

        Raises:
            StorageError: If the upload fails
        """
        path = self.logo_path(slug, filename)
        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(data, content_type=content_type)
            blob.make_public()
        except Exception as e:
            logger.error(f"Logo upload failed for {path}: {e}")
            raise StorageError(f"Logo upload failed: {e}") from e

        logger.info(f"Uploaded logo {path}")
        return blob.public_url
