"""Persistence boundary of the workflow engine.

Logic classes never query the ORM for the entities they mutate: they go through a repository, chosen with the
``QUILL_REPOSITORY`` setting. :py:class:`DjangoRepository` is the shipped implementation.
"""

import abc
import logging
from datetime import datetime
from typing import ContextManager, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.module_loading import import_string

from .exceptions import ConcurrentModification, NotFound
from .models import (
    EditorAssignment,
    Event,
    EventRSVP,
    FileAsset,
    Review,
    Submission,
    WorkflowStageRecord,
)

logger = logging.getLogger(__name__)

Account = get_user_model()

# Fields save_submission never writes: bookkeeping, and the score owned by save_review
SUBMISSION_UNSAVED_FIELDS = {"id", "created", "modified", "lock_version", "plagiarism_score"}


class BaseRepository(abc.ABC):
    """Storage contract.

    Every method is atomic on its own entity; :py:meth:`atomic` groups several calls into one unit of work.
    ``get_*`` methods raise :py:class:`NotFound` when the entity does not exist.
    """

    @abc.abstractmethod
    def atomic(self) -> ContextManager:
        ...

    @abc.abstractmethod
    def get_submission(self, submission_id: int) -> Submission:
        ...

    @abc.abstractmethod
    def save_submission(self, submission: Submission) -> Submission:
        """Persist a submission, failing with ConcurrentModification if someone else saved it first."""

    @abc.abstractmethod
    def append_stage_record(self, record: WorkflowStageRecord) -> WorkflowStageRecord:
        ...

    @abc.abstractmethod
    def list_unassigned(self) -> List[Submission]:
        ...

    @abc.abstractmethod
    def list_by_editor(self, editor_id: int) -> List[Submission]:
        ...

    @abc.abstractmethod
    def list_by_stage(self, stage: str) -> List[Submission]:
        ...

    @abc.abstractmethod
    def list_open_by_student(self, student_id: int) -> List[Submission]:
        ...

    @abc.abstractmethod
    def list_stalled_analyses(self, pending_before: datetime) -> List[Submission]:
        ...

    @abc.abstractmethod
    def save_review(self, review: Review) -> Review:
        """Append a review, superseding the active one, and copy its score on the submission."""

    @abc.abstractmethod
    def save_file_asset(self, asset: FileAsset) -> FileAsset:
        ...

    @abc.abstractmethod
    def get_file_asset(self, asset_id: int) -> FileAsset:
        ...

    @abc.abstractmethod
    def count_file_assets(self, submission_id: int, file_type: str) -> int:
        ...

    @abc.abstractmethod
    def count_active_by_editor(self, editor_id: int) -> int:
        ...

    @abc.abstractmethod
    def get_user(self, user_id: int) -> Account:
        ...

    @abc.abstractmethod
    def list_active_editors(self) -> List[Account]:
        ...

    @abc.abstractmethod
    def get_active_assignment(self, student_id: int) -> Optional[EditorAssignment]:
        ...

    @abc.abstractmethod
    def save_assignment(self, assignment: EditorAssignment) -> EditorAssignment:
        """Save a new assignment, deactivating the student's previous active one."""

    @abc.abstractmethod
    def get_event(self, event_id: int) -> Event:
        ...

    @abc.abstractmethod
    def save_event(self, event: Event) -> Event:
        ...

    @abc.abstractmethod
    def get_rsvp(self, event_id: int, user_id: int) -> Optional[EventRSVP]:
        ...

    @abc.abstractmethod
    def save_rsvp(self, rsvp: EventRSVP) -> EventRSVP:
        ...

    @abc.abstractmethod
    def count_attendees(self, event_id: int, exclude_user_id: Optional[int] = None) -> int:
        ...


class DjangoRepository(BaseRepository):
    def atomic(self) -> ContextManager:
        return transaction.atomic()

    def get_submission(self, submission_id: int) -> Submission:
        try:
            return Submission.objects.select_related("student", "assigned_editor").get(pk=submission_id)
        except (Submission.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Submission {submission_id} does not exist.")

    def save_submission(self, submission: Submission) -> Submission:
        """
        Save the submission with an optimistic lock.

        New submissions are inserted. Existing ones are written with a single conditional UPDATE that matches the
        lock version read together with the instance and bumps it; when no row matches, another writer came first.

        :param submission: The submission to save.
        :type submission: Submission

        :return: The same instance, with its lock version bumped.
        :rtype: Submission
        """
        if submission._state.adding:
            submission.save()
            return submission

        now = timezone.now()
        values = {
            field.attname: getattr(submission, field.attname)
            for field in Submission._meta.concrete_fields
            if field.name not in SUBMISSION_UNSAVED_FIELDS
        }
        updated = Submission.objects.filter(pk=submission.pk, lock_version=submission.lock_version).update(
            lock_version=F("lock_version") + 1,
            modified=now,
            **values,
        )
        if not updated:
            if not Submission.objects.filter(pk=submission.pk).exists():
                raise NotFound(f"Submission {submission.pk} does not exist.")
            logger.info(f"Stale write on submission {submission.pk} (lock version {submission.lock_version})")
            raise ConcurrentModification(
                f"Submission {submission.pk} was modified by someone else. Reload it and try again.",
            )
        submission.lock_version += 1
        submission.modified = now
        return submission

    def append_stage_record(self, record: WorkflowStageRecord) -> WorkflowStageRecord:
        record.save()
        return record

    def list_unassigned(self) -> List[Submission]:
        return list(Submission.objects.unassigned().select_related("student"))

    def list_by_editor(self, editor_id: int) -> List[Submission]:
        return list(Submission.objects.by_editor(editor_id).select_related("student"))

    def list_by_stage(self, stage: str) -> List[Submission]:
        return list(Submission.objects.filter(archived=False).in_stage(stage).order_by("created", "pk"))

    def list_open_by_student(self, student_id: int) -> List[Submission]:
        return list(Submission.objects.open().filter(student_id=student_id))

    def list_stalled_analyses(self, pending_before: datetime) -> List[Submission]:
        return list(Submission.objects.stalled_analyses(pending_before))

    def save_review(self, review: Review) -> Review:
        with transaction.atomic():
            Review.objects.filter(submission_id=review.submission_id).active().update(superseded=True)
            review.superseded = False
            review.save()
            # targeted update: does not take part in the submission optimistic lock
            Submission.objects.filter(pk=review.submission_id).update(plagiarism_score=review.score)
        return review

    def save_file_asset(self, asset: FileAsset) -> FileAsset:
        try:
            with transaction.atomic():
                asset.save()
        except IntegrityError:
            raise ConcurrentModification(
                f"Version {asset.version} of {asset.file_type} for submission {asset.submission_id} "
                "has just been uploaded by someone else. Please retry.",
            )
        return asset

    def get_file_asset(self, asset_id: int) -> FileAsset:
        try:
            return FileAsset.objects.select_related("submission").get(pk=asset_id)
        except (FileAsset.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"File {asset_id} does not exist.")

    def count_file_assets(self, submission_id: int, file_type: str) -> int:
        return FileAsset.objects.of_type(submission_id, file_type).count()

    def count_active_by_editor(self, editor_id: int) -> int:
        return Submission.objects.by_editor(editor_id).count()

    def get_user(self, user_id: int) -> Account:
        try:
            return Account.objects.get(pk=user_id)
        except (Account.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"User {user_id} does not exist.")

    def list_active_editors(self) -> List[Account]:
        return list(Account.objects.editors().active())

    def get_active_assignment(self, student_id: int) -> Optional[EditorAssignment]:
        return EditorAssignment.objects.active().filter(student_id=student_id).first()

    def save_assignment(self, assignment: EditorAssignment) -> EditorAssignment:
        with transaction.atomic():
            EditorAssignment.objects.active().filter(student_id=assignment.student_id).exclude(
                pk=assignment.pk,
            ).update(is_active=False)
            assignment.is_active = True
            assignment.save()
        return assignment

    def get_event(self, event_id: int) -> Event:
        try:
            return Event.objects.get(pk=event_id)
        except (Event.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Event {event_id} does not exist.")

    def save_event(self, event: Event) -> Event:
        event.save()
        return event

    def get_rsvp(self, event_id: int, user_id: int) -> Optional[EventRSVP]:
        return EventRSVP.objects.filter(event_id=event_id, user_id=user_id).first()

    def save_rsvp(self, rsvp: EventRSVP) -> EventRSVP:
        rsvp.save()
        return rsvp

    def count_attendees(self, event_id: int, exclude_user_id: Optional[int] = None) -> int:
        rsvps = EventRSVP.objects.filter(event_id=event_id)
        if exclude_user_id is not None:
            rsvps = rsvps.exclude(user_id=exclude_user_id)
        return rsvps.attendees_count()


def get_repository() -> BaseRepository:
    """Instantiate the repository configured in ``QUILL_REPOSITORY``."""
    return import_string(settings.QUILL_REPOSITORY)()
