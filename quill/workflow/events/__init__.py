"""
Domain events of the submission workflow.

Logic classes emit a :py:class:`DomainEvent` after their unit of work is committed. Delivery (mail, dashboards,
analytics) belongs to whoever listens: the default dispatcher
(:py:class:`quill.workflow.events.dispatcher.SignalDispatcher`) sends the
:py:data:`quill.workflow.events.dispatcher.domain_event` signal and receivers are connected in
:py:meth:`quill.workflow.apps.WorkflowConfig.ready`.
"""

import dataclasses
from typing import Any, Dict, Optional

from django.utils import timezone


class WorkflowEvent:
    ON_SUBMISSION_CREATED = "on_submission_created"
    ON_STAGE_CHANGED = "on_stage_changed"
    ON_ANALYSIS_REQUESTED = "on_analysis_requested"
    ON_ANALYSIS_COMPLETED = "on_analysis_completed"
    ON_ANALYSIS_FAILED = "on_analysis_failed"
    ON_EDITOR_ASSIGNED = "on_editor_assigned"
    ON_REVIEW_SUBMITTED = "on_review_submitted"
    ON_FILE_UPLOADED = "on_file_uploaded"
    ON_FILE_DECIDED = "on_file_decided"
    ON_SUBMISSION_ARCHIVED = "on_submission_archived"
    ON_EVENT_CREATED = "on_event_created"
    ON_RSVP_RECORDED = "on_rsvp_recorded"


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    name: str
    submission_id: Optional[int] = None
    actor_id: Optional[int] = None
    payload: Dict[str, Any] = dataclasses.field(default_factory=dict)
    occurred_at: Any = dataclasses.field(default_factory=timezone.now)
