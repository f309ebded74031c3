"""File-backed blob storage for resumes and interview recordings.

Blobs live under ``<base_dir>/<bucket>/<key>`` and are referenced as
``blob://<bucket>/<key>``. Callers only pass references around; they never
inspect the paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from ...observability.logger import get_logger

logger = get_logger(__name__)

SCHEME = "blob://"
RESUMES_BUCKET = "resumes"
RECORDINGS_BUCKET = "interview-recordings"


class BlobUpload:
    """Chunked upload that only becomes visible on ``commit``.

    ``abort`` discards whatever was written (or the committed blob), so a
    cancelled upload leaves nothing behind.
    """

    def __init__(self, store: "BlobStore", bucket: str, key: str):
        self.store = store
        self.bucket = bucket
        self.key = key
        self.ref = store.make_ref(bucket, key)
        self.bytes_written = 0
        self.committed = False

        self._final_path = store.path_for(self.ref)
        self._part_path = self._final_path.with_name(self._final_path.name + ".part")
        self._part_path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self._part_path, "wb")

    def write(self, chunk: bytes) -> None:
        self._handle.write(chunk)
        self.bytes_written += len(chunk)

    def commit(self) -> str:
        self._handle.close()
        os.replace(self._part_path, self._final_path)
        self.committed = True
        logger.info("blob_committed", ref=self.ref, size_bytes=self.bytes_written)
        return self.ref

    def abort(self) -> None:
        if not self._handle.closed:
            self._handle.close()
        self._part_path.unlink(missing_ok=True)
        if self.committed:
            self._final_path.unlink(missing_ok=True)
            self.committed = False
        logger.info("blob_upload_aborted", ref=self.ref, size_bytes=self.bytes_written)


class BlobStore:
    """Stores opaque binary documents and hands out references."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir) if base_dir else Path("data/blobs")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "BlobStore":
        return cls(config.get("storage", {}).get("blob_dir", "data/blobs"))

    @staticmethod
    def make_ref(bucket: str, key: str) -> str:
        return f"{SCHEME}{bucket}/{key}"

    def path_for(self, ref: str) -> Path:
        if not ref.startswith(SCHEME):
            raise ValueError(f"Not a blob reference: {ref}")
        bucket, _, key = ref[len(SCHEME):].partition("/")
        if not bucket or not key or ".." in Path(key).parts:
            raise ValueError(f"Malformed blob reference: {ref}")
        return self.base_dir / bucket / key

    def put(self, bucket: str, key: str, data: bytes) -> str:
        upload = self.open_upload(bucket, key)
        try:
            upload.write(data)
            return upload.commit()
        except OSError:
            upload.abort()
            raise

    def open_upload(self, bucket: str, key: str) -> BlobUpload:
        return BlobUpload(self, bucket, key)

    def get(self, ref: str) -> bytes:
        return self.path_for(ref).read_bytes()

    def exists(self, ref: str) -> bool:
        return self.path_for(ref).exists()

    def delete(self, ref: str) -> None:
        self.path_for(ref).unlink(missing_ok=True)
        logger.info("blob_deleted", ref=ref)
