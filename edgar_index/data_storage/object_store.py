"""Content-addressed blob storage on the local filesystem.

Objects live under ``<root>/<bucket>/<id[:2]>/<id>`` so no single directory
grows past 256 sub-directories for hex ids.
"""
import logging
import os
from pathlib import Path
from typing import Union

from ..errors import InvalidKey, NotFound, StorageFailure


logger = logging.getLogger(__name__)

MIN_OBJECT_ID_LENGTH = 2


class FileObjectStore:

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def object_path(self, bucket: str, object_id: str) -> Path:
        if len(object_id) < MIN_OBJECT_ID_LENGTH:
            raise InvalidKey(f"object id must be at least {MIN_OBJECT_ID_LENGTH} characters: {object_id!r}")
        if "/" in object_id or "\\" in object_id or object_id in (".", ".."):
            raise InvalidKey(f"object id must be a single path component: {object_id!r}")
        return self.root / bucket / object_id[:2] / object_id

    def exists(self, bucket: str, object_id: str) -> bool:
        path = self.object_path(bucket, object_id)
        try:
            return path.is_file() and path.stat().st_size > 0
        except OSError:
            return False

    def put(self, bucket: str, object_id: str, data: bytes) -> None:
        if self.exists(bucket, object_id):
            logger.debug("%s/%s already stored", bucket, object_id)
            return

        path = self.object_path(bucket, object_id)
        temporary_path = path.with_name(f"{path.name}.tmp.{os.getpid()}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temporary_path, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temporary_path, path)
        except OSError as e:
            try:
                temporary_path.unlink(missing_ok=True)
            except OSError as cleanup_error:
                logger.warning("Could not remove %s: %s", temporary_path, cleanup_error)
            raise StorageFailure(f"Error writing {bucket}/{object_id}: {str(e)}") from e
        logger.debug("Stored %d bytes as %s/%s", len(data), bucket, object_id)

    def get(self, bucket: str, object_id: str) -> bytes:
        path = self.object_path(bucket, object_id)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise NotFound(f"No object {object_id} in bucket {bucket}") from e
        except OSError as e:
            raise StorageFailure(f"Error reading {bucket}/{object_id}: {str(e)}") from e
