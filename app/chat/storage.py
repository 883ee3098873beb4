"""
Attachment blob storage.

Components:
    BlobStorage: Protocol for uploading/deleting attachment blobs
    DjangoBlobStorage: Default implementation on top of a Django storage
        backend (FileSystemStorage locally, S3 or similar via STORAGES)

Blob references:
    upload() returns one dict per file, in input order:
        {"public_id": str, "resource_type": str, "url": str}
    delete() accepts dicts with at least public_id and resource_type and
    returns the references it could not delete.

Uploads and deletes run on a small worker pool so several blobs are
transferred at once.

Usage:
    from chat.storage import get_default_storage

    storage = get_default_storage()
    refs = storage.upload(request.FILES.getlist("files"))
    failed = storage.delete([{"public_id": r["public_id"], "resource_type": r["resource_type"]} for r in refs])
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Protocol

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.module_loading import import_string
from django.utils.text import get_valid_filename

from chat.constants import ATTACHMENT_CONFIG
from core.exceptions import ExternalServiceError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from django.core.files.base import File
    from django.core.files.storage import Storage

logger = logging.getLogger(__name__)

BlobRef = dict[str, str]


class BlobStorage(Protocol):
    """Binary object storage for attachments."""

    def upload(self, files: Sequence[File]) -> list[BlobRef]:
        """Store every file; return references in input order."""
        ...

    def delete(self, refs: Sequence[BlobRef]) -> list[BlobRef]:
        """Delete blobs; return the references that failed. Must not raise."""
        ...


def resource_type_for(content_type: str | None, name: str = "") -> str:
    """
    Classify a blob as image, video, audio or raw.

    Falls back to guessing from the file name when the upload carries no
    content type.
    """
    if not content_type:
        content_type, _ = mimetypes.guess_type(name)
    major = (content_type or "").split("/", 1)[0]
    if major in ATTACHMENT_CONFIG.MEDIA_RESOURCE_TYPES:
        return major
    return ATTACHMENT_CONFIG.RAW_RESOURCE_TYPE


class DjangoBlobStorage:
    """
    BlobStorage backed by a Django storage backend.

    Args:
        storage: Django storage (defaults to default_storage)
        max_workers: Size of the transfer worker pool
    """

    def __init__(self, storage: Storage | None = None, max_workers: int | None = None):
        self.storage = storage or default_storage
        self.max_workers = max_workers or ATTACHMENT_CONFIG.STORAGE_WORKERS

    def _blob_name(self, file: File) -> str:
        filename = get_valid_filename(getattr(file, "name", "") or "file")
        return f"{ATTACHMENT_CONFIG.UPLOAD_PREFIX}/{uuid.uuid4().hex}/{filename}"

    def _upload_one(self, file: File) -> BlobRef:
        public_id = self.storage.save(self._blob_name(file), file)
        return {
            "public_id": public_id,
            "resource_type": resource_type_for(
                getattr(file, "content_type", None), getattr(file, "name", "")
            ),
            "url": self.storage.url(public_id),
        }

    def _delete_one(self, ref: BlobRef) -> BlobRef | None:
        try:
            self.storage.delete(ref["public_id"])
        except Exception:
            logger.warning(f"Failed to delete blob {ref.get('public_id')}", exc_info=True)
            return ref
        return None

    def upload(self, files: Sequence[File]) -> list[BlobRef]:
        """
        Upload all files concurrently.

        If any upload fails, the blobs that did get stored are deleted again
        and ExternalServiceError is raised.
        """
        if not files:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self._upload_one, file) for file in files]

        refs: list[BlobRef] = []
        errors: list[BaseException] = []
        for future in futures:
            exc = future.exception()
            if exc is None:
                refs.append(future.result())
            else:
                errors.append(exc)

        if errors:
            logger.error(
                f"Uploaded {len(refs)}/{len(files)} attachments, rolling back",
                exc_info=errors[0],
            )
            self.delete(refs)
            raise ExternalServiceError(
                "Failed to upload attachments",
                error_code="ATTACHMENT_UPLOAD_FAILED",
                details={"failed": len(errors)},
            )

        return refs

    def delete(self, refs: Sequence[BlobRef]) -> list[BlobRef]:
        if not refs:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            results = list(pool.map(self._delete_one, refs))

        failed = [ref for ref in results if ref is not None]
        if failed:
            logger.warning(f"Failed to delete {len(failed)}/{len(refs)} blobs")
        return failed


def get_default_storage() -> BlobStorage:
    """Instantiate the storage class named by settings.CHAT_BLOB_STORAGE."""
    storage_class = import_string(
        getattr(settings, "CHAT_BLOB_STORAGE", "chat.storage.DjangoBlobStorage")
    )
    return storage_class()
