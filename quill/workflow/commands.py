"""Commands exposed to the HTTP layer.

Each command returns :py:class:`Ok` with the produced value or :py:class:`Err` with the kind and reason of a
business-rule failure. Infrastructure faults (database, storage) are logged here, once, and propagate.

The actor is always supplied by the caller (see :py:class:`quill.workflow.custom_types.Actor`).
"""

import functools
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from . import logic
from .custom_types import Actor, Err, Ok, Result
from .exceptions import WorkflowError
from .repository import get_repository

logger = logging.getLogger(__name__)


def command(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Result:
        try:
            return Ok(func(*args, **kwargs))
        except WorkflowError as e:
            logger.info(f"{func.__name__} rejected: {e.kind.value}: {e.message}")
            return Err(e.kind, e.message)
        except Exception:
            logger.exception(f"{func.__name__} failed")
            raise

    return wrapper


@command
def create_submission(actor: Actor, title: str, content: str):
    return logic.CreateSubmission(actor=actor, title=title, content=content).run()


@command
def advance_stage(submission_id: int, target_stage: str, actor: Actor, notes: str = "", override: bool = False):
    repository = get_repository()
    return logic.AdvanceStage(
        submission=repository.get_submission(submission_id),
        target_stage=target_stage,
        actor=actor,
        notes=notes,
        override=override,
        repository=repository,
    ).run()


@command
def trigger_analysis(submission_id: int, actor: Actor):
    repository = get_repository()
    return logic.TriggerAnalysis(
        submission=repository.get_submission(submission_id),
        actor=actor,
        repository=repository,
    ).run()


@command
def handle_analysis_result(submission_id: int, outcome):
    """Completion callback of the analysis service (``AnalysisResult`` or ``AnalysisFailure``)."""
    return logic.HandleAnalysisResult(submission_id=submission_id, outcome=outcome).run()


@command
def assign_editor(
    student_id: int,
    editor_id: int,
    assigned_by: Actor,
    notes: str = "",
    submission_id: Optional[int] = None,
):
    return logic.AssignToEditor(
        student_id=student_id,
        editor_id=editor_id,
        assigned_by=assigned_by,
        notes=notes,
        submission_id=submission_id,
    ).run()


@command
def bulk_assign_editor(submission_ids: Iterable[int], editor_id: int, assigned_by: Actor, notes: str = ""):
    """Return one :py:class:`BulkItemResult` per submission id, in the given order."""
    return logic.BulkAssignToEditor(
        submission_ids=list(submission_ids),
        editor_id=editor_id,
        assigned_by=assigned_by,
        notes=notes,
    ).run()


@command
def get_workload(actor: Actor):
    return logic.GetWorkload(actor=actor).run()


@command
def list_unassigned(actor: Actor):
    return logic.ListUnassigned(actor=actor).run()


@command
def list_editor_submissions(actor: Actor, editor_id: int):
    return logic.ListEditorSubmissions(actor=actor, editor_id=editor_id).run()


@command
def list_pending_reviews(actor: Actor):
    return logic.ListPendingReviews(actor=actor).run()


@command
def submit_review(submission_id: int, score: Any, notes: Any, passed: Any, reviewer: Actor):
    """Return a :py:class:`ReviewOutcome`: the review is saved even when the stage advance is refused."""
    return logic.SubmitReview(
        submission_id=submission_id,
        score=score,
        notes=notes,
        passed=passed,
        reviewer=reviewer,
    ).run()


@command
def register_upload(
    submission_id: int,
    uploader: Actor,
    file_type: str,
    size: int,
    mime_type: str,
    file_name: str = "",
    asset_reference: str = "",
):
    return logic.RegisterUpload(
        submission_id=submission_id,
        uploader=uploader,
        file_type=file_type,
        size=size,
        mime_type=mime_type,
        file_name=file_name,
        asset_reference=asset_reference,
    ).run()


@command
def approve_file(file_asset_id: int, approved: Any, notes: str, approver: Actor):
    return logic.ApproveFile(file_asset_id=file_asset_id, approved=approved, notes=notes, approver=approver).run()


@command
def archive_submission(submission_id: int, actor: Actor, notes: str = ""):
    return logic.ArchiveSubmission(submission_id=submission_id, actor=actor, notes=notes).run()


@command
def create_event(actor: Actor, title: str, event_date: datetime, **details):
    """``details`` are the optional event fields: description, location, is_virtual, meeting_link, max_attendees,
    submission_id."""
    return logic.CreateEvent(actor=actor, title=title, event_date=event_date, **details).run()


@command
def rsvp_event(
    actor: Actor,
    event_id: int,
    status: str,
    attendee_count: int = 1,
    dietary_requirements: str = "",
    notes: str = "",
):
    return logic.RsvpToEvent(
        actor=actor,
        event_id=event_id,
        status=status,
        attendee_count=attendee_count,
        dietary_requirements=dietary_requirements,
        notes=notes,
    ).run()
