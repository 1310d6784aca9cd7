"""Local object storage for uploaded study files.

Objects live under ``{storage_dir}/{bucket}/{study_id}/{category}/`` and are
named ``{timestamp_ms}_{filename}``. Public URLs are
``{public_base_url}/{bucket}/{object_path}``.
"""

import logging
import shutil
import time
from enum import Enum
from pathlib import Path

from sora.config import get_settings
from sora.schemas.snapshot import FileReference

logger = logging.getLogger(__name__)


class FileCategory(str, Enum):
    GEO = "geo"
    TECHNICAL = "technical"
    TRAJECTORY = "trajectory"
    DROSERA = "drosera"


class StorageError(Exception):
    """Upload or deletion failed."""


class LocalFileStorage:
    def __init__(self, root: str | Path, bucket: str, public_base_url: str):
        self.root = Path(root)
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def object_path(self, study_id: str, category: FileCategory, filename: str, timestamp_ms: int) -> str:
        # Drop any directory part the client sent along with the name
        safe_name = Path(filename).name
        if not safe_name or safe_name in (".", ".."):
            raise StorageError(f"Invalid file name: {filename!r}")
        return f"{study_id}/{FileCategory(category).value}/{timestamp_ms}_{safe_name}"

    def public_url(self, object_path: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{object_path}"

    def _path_from_url(self, url: str) -> str:
        prefix = f"{self.public_base_url}/{self.bucket}/"
        if not url.startswith(prefix):
            raise StorageError(f"URL is not in bucket {self.bucket}: {url}")
        object_path = url[len(prefix):]
        if not object_path or ".." in Path(object_path).parts:
            raise StorageError(f"Invalid object path: {object_path}")
        return object_path

    def upload(
        self,
        study_id: str,
        category: FileCategory,
        filename: str,
        content: bytes,
        content_type: str = "",
    ) -> FileReference:
        """Store ``content`` and return its reference. Never overwrites."""
        object_path = self.object_path(study_id, category, filename, int(time.time() * 1000))
        target = self.bucket_dir / object_path
        if target.exists():
            raise StorageError(f"Object already exists: {object_path}")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info("Stored %s (%d bytes)", object_path, len(content))

        return FileReference(
            name=Path(filename).name,
            url=self.public_url(object_path),
            size=len(content),
            content_type=content_type,
        )

    def delete(self, url: str) -> None:
        object_path = self._path_from_url(url)
        target = self.bucket_dir / object_path
        if not target.is_file():
            raise StorageError(f"No such object: {object_path}")
        target.unlink()
        logger.info("Deleted %s", object_path)

    def belongs_to(self, url: str, study_id: str) -> bool:
        try:
            return self._path_from_url(url).startswith(f"{study_id}/")
        except StorageError:
            return False

    def delete_study_files(self, study_id: str) -> int:
        """Remove every object of a study. Returns the number of files removed."""
        study_dir = self.bucket_dir / study_id
        if not study_dir.is_dir():
            return 0
        count = sum(1 for p in study_dir.rglob("*") if p.is_file())
        shutil.rmtree(study_dir)
        logger.info("Deleted %d files of study %s", count, study_id)
        return count


def get_file_storage() -> LocalFileStorage:
    settings = get_settings()
    return LocalFileStorage(
        root=settings.storage_dir,
        bucket=settings.storage_bucket,
        public_base_url=settings.storage_public_base_url,
    )
