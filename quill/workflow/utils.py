from typing import Any, Optional

from .custom_types import Actor
from .events import DomainEvent
from .events.dispatcher import emit
from .exceptions import AlreadyArchived
from .models import Submission, WorkflowStageRecord


def emit_event(name: str, submission_id: Optional[int], actor: Actor, **payload: Any) -> None:
    emit(DomainEvent(name=name, submission_id=submission_id, actor_id=actor.id, payload=payload))


def check_not_archived(submission: Submission) -> None:
    if submission.archived:
        raise AlreadyArchived(f"Submission {submission.pk} is archived.")


def stage_record(submission: Submission, stage: str, status: str, actor: Actor, notes: str) -> WorkflowStageRecord:
    """Build (not save) a stage record; the system actor leaves ``actor`` empty."""
    return WorkflowStageRecord(
        submission=submission,
        stage=stage,
        status=status,
        actor_id=actor.id,
        notes=notes,
    )
