"""Blob storage glue.

The engine stores submission content as opaque blobs and keeps only the reference.
"""

import abc
import uuid

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils.module_loading import import_string


class BaseBlobStorage(abc.ABC):
    @abc.abstractmethod
    def store(self, data: bytes) -> str:
        """Save the data and return the reference to retrieve it."""

    @abc.abstractmethod
    def retrieve(self, reference: str) -> bytes:
        ...


class DjangoBlobStorage(BaseBlobStorage):
    """Blobs on Django's default storage, under ``submissions/``."""

    prefix = "submissions"

    def store(self, data: bytes) -> str:
        return default_storage.save(f"{self.prefix}/{uuid.uuid4().hex}", ContentFile(data))

    def retrieve(self, reference: str) -> bytes:
        with default_storage.open(reference, "rb") as blob:
            return blob.read()


def get_blob_storage() -> BaseBlobStorage:
    return import_string(settings.QUILL_BLOB_STORAGE)()
