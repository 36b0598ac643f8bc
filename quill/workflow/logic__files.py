"""File exchange logic.

This module should be imported into logic.py
"""

import dataclasses
import logging
import os
from typing import Any

from django.conf import settings
from django.utils import timezone

from . import permissions
from .custom_types import Actor
from .events import WorkflowEvent
from .exceptions import Forbidden, TooLarge, UnsupportedType, ValidationError
from .models import FileAsset
from .repository import BaseRepository, get_repository
from .utils import check_not_archived, emit_event

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RegisterUpload:
    """
    Register a new version of a file slot of a submission.

    The bytes are already in blob storage (``asset_reference``): only the metadata is checked and recorded. Every
    upload is a new version of the (submission, type) slot, starting at 1; previous versions are kept and the new
    one waits for a decision, whoever uploaded it.
    """

    submission_id: int
    uploader: Actor
    file_type: str
    size: Any
    mime_type: str
    file_name: str = ""
    asset_reference: str = ""
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def _check_size(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise ValidationError("File size must be a non-negative number of bytes.")
        limit = settings.QUILL_UPLOAD_SIZE_LIMITS[self.file_type]
        if self.size > limit:
            raise TooLarge(
                f"{FileAsset.FileTypes(self.file_type).label} files can be at most {limit} bytes, "
                f"this one is {self.size}.",
            )

    def _check_type(self) -> None:
        allowed = settings.QUILL_UPLOAD_ALLOWED_TYPES[self.file_type]
        mime_type = (self.mime_type or "").strip().lower()
        if mime_type not in allowed:
            raise UnsupportedType(f'"{self.mime_type}" is not accepted for {self.file_type}.')
        if self.file_name:
            extension = os.path.splitext(self.file_name)[1].lower()
            if extension not in allowed[mime_type]:
                raise UnsupportedType(f'"{self.file_name}" does not look like a {mime_type} file.')

    def check_conditions(self, submission) -> None:
        if not permissions.can_upload_file(submission, self.uploader):
            raise Forbidden("You cannot upload files for this submission.")
        check_not_archived(submission)
        if self.file_type not in FileAsset.FileTypes.values:
            raise ValidationError(f'"{self.file_type}" is not a file type.')
        self._check_size()
        self._check_type()

    def run(self) -> FileAsset:
        with self.repository.atomic():
            submission = self.repository.get_submission(self.submission_id)
            self.check_conditions(submission)
            version = self.repository.count_file_assets(submission.pk, self.file_type) + 1
            asset = self.repository.save_file_asset(
                FileAsset(
                    submission=submission,
                    uploader_id=self.uploader.id,
                    file_type=self.file_type,
                    file_name=self.file_name,
                    mime_type=self.mime_type.strip().lower(),
                    size=self.size,
                    asset_reference=self.asset_reference,
                    version=version,
                ),
            )
        emit_event(
            WorkflowEvent.ON_FILE_UPLOADED,
            submission.pk,
            self.uploader,
            file_asset_id=asset.pk,
            file_type=asset.file_type,
            version=asset.version,
        )
        return asset


@dataclasses.dataclass
class ApproveFile:
    """
    Decide on an uploaded file.

    A new decision overwrites the previous one. Deciding never moves the submission: the approval only unblocks the
    exit of the stage that waits for it.
    """

    file_asset_id: int
    approved: Any
    approver: Actor
    notes: str = ""
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self, asset: FileAsset) -> None:
        if not permissions.can_decide_file(asset.submission, self.approver):
            raise Forbidden("You cannot decide on files of this submission.")
        check_not_archived(asset.submission)
        if not isinstance(self.approved, bool):
            raise ValidationError("Approved must be true or false.")

    def run(self) -> FileAsset:
        with self.repository.atomic():
            asset = self.repository.get_file_asset(self.file_asset_id)
            self.check_conditions(asset)
            if asset.is_approved is not None:
                logger.info(f"File {asset.pk}: decision {asset.is_approved} replaced by {self.approved}")
            asset.is_approved = self.approved
            asset.approval_notes = self.notes or ""
            asset.approved_by_id = self.approver.id
            asset.decided_at = timezone.now()
            self.repository.save_file_asset(asset)
        emit_event(
            WorkflowEvent.ON_FILE_DECIDED,
            asset.submission_id,
            self.approver,
            file_asset_id=asset.pk,
            file_type=asset.file_type,
            version=asset.version,
            approved=asset.is_approved,
        )
        return asset
