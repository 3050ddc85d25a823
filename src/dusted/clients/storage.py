"""
Google Cloud Storage upload helper.

``put_file`` stores a file only when no object with the same name exists
yet, which makes it safe to call repeatedly with content-addressed names
(see ``dusted.webfile.hash_file``).

Examples:
    >>> client = StorageClient()
    >>> name = hash_file(upload.file) + ".png"
    >>> client.put_file("media", name, upload.file, "image/png",
    ...                 "public, max-age=31536000", "allUsers", "READER")
    True

Tags:
    storage, google-cloud, upload, dusted
"""

from __future__ import annotations

from typing import BinaryIO

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import storage

from dusted.fault import system_wrap
from dusted.logging import get_logger
from dusted.settings import get_settings

logger = get_logger(__name__)

COMPONENT = "storage"


class StorageClient:
    """Thin wrapper around ``google.cloud.storage.Client``."""

    def __init__(self, client: storage.Client | None = None, *, timeout: float | None = None):
        if client is None:
            try:
                client = storage.Client()
            except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
                raise system_wrap(
                    exc, COMPONENT, "StorageClient", "creating Google Cloud Storage client failed"
                ) from exc
        self._client = client
        self._timeout = timeout or get_settings().storage_timeout

    def put_file(
        self,
        bucket_name: str,
        file_name: str,
        file: BinaryIO,
        mime_type: str,
        cache_control: str,
        acl_entity: str,
        acl_role: str,
    ) -> bool:
        """Upload a file unless an object with the same name already exists.

        Args:
            bucket_name: Target bucket
            file_name: Object name
            file: Binary stream positioned at the start of the content
            mime_type: Content-Type stored with the object
            cache_control: Cache-Control stored with the object
            acl_entity: ACL entity, e.g. ``allUsers`` or ``user-jane@example.com``
            acl_role: ACL role, e.g. ``READER``

        Returns:
            True if the file was written, False if the object already existed.
        """
        blob = self._client.bucket(bucket_name).blob(file_name)

        try:
            exists = blob.exists(timeout=self._timeout)
        except google_exceptions.GoogleAPIError as exc:
            raise system_wrap(
                exc, COMPONENT, "put_file",
                "retrieving object's metadata from Google Cloud Storage failed",
            ) from exc

        if exists:
            logger.debug("object_exists", bucket=bucket_name, name=file_name)
            return False

        blob.cache_control = cache_control
        try:
            # generation 0 only matches a missing object
            blob.upload_from_file(
                file, content_type=mime_type, timeout=self._timeout, if_generation_match=0
            )
        except google_exceptions.PreconditionFailed:
            logger.debug("object_exists", bucket=bucket_name, name=file_name)
            return False
        except (google_exceptions.GoogleAPIError, OSError) as exc:
            raise system_wrap(
                exc, COMPONENT, "put_file",
                f"writing file to Google Cloud Storage bucket '{bucket_name}' failed",
            ) from exc

        try:
            blob.acl.entity_from_dict({"entity": acl_entity, "role": acl_role})
            blob.acl.save(timeout=self._timeout)
        except (google_exceptions.GoogleAPIError, ValueError) as exc:
            raise system_wrap(
                exc, COMPONENT, "put_file",
                "setting ACL on Google Cloud Storage object failed",
            ) from exc

        logger.info("object_written", bucket=bucket_name, name=file_name, mime_type=mime_type)
        return True


__all__ = ["StorageClient"]
