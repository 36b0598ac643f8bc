"""Exit guards of the pipeline stages.

Each stage has one guard: the transition that leaves it, who may run it and what must be true. Guards are looked up
by stage, so adding a role to a stage is a change to this table and not to the state machine.
"""

import dataclasses
from typing import Callable, Dict

from . import conditions, permissions
from .models import Submission

Stages = Submission.Stages


@dataclasses.dataclass(frozen=True)
class StageGuard:
    stage: str
    transition: str
    """Name of the :py:class:`Submission` transition method that leaves the stage."""
    permission: Callable[[Submission, object], bool]
    precondition: Callable[[Submission], str]
    """Returns the reason why the stage cannot be left, empty when it can."""

    def get_transition(self, submission: Submission) -> Callable:
        return getattr(submission, self.transition)

    def is_permitted(self, submission: Submission, actor) -> bool:
        return self.permission(submission, actor)

    def unmet_precondition(self, submission: Submission) -> str:
        return self.precondition(submission)


STAGE_GUARDS: Dict[str, StageGuard] = {
    guard.stage: guard
    for guard in (
        StageGuard(
            Stages.ANALYSIS,
            "complete_analysis",
            permissions.can_exit_analysis,
            conditions.missing_analysis_result,
        ),
        StageGuard(
            Stages.PLAGIARISM_REVIEW,
            "pass_plagiarism_review",
            permissions.can_exit_plagiarism_review,
            conditions.missing_passed_review,
        ),
        StageGuard(
            Stages.EDITOR_MEETING,
            "conclude_editor_meeting",
            permissions.can_exit_editor_meeting,
            conditions.missing_editor_assignment,
        ),
        StageGuard(
            Stages.APPROVAL_PROCESS,
            "approve_submission",
            permissions.can_exit_approval_process,
            conditions.missing_content_approval,
        ),
        StageGuard(
            Stages.PDF_REVIEW,
            "approve_pdf",
            permissions.can_exit_pdf_review,
            conditions.missing_pdf_approval,
        ),
        StageGuard(
            Stages.COVER_APPROVAL,
            "approve_cover",
            permissions.can_exit_cover_approval,
            conditions.missing_cover_approval,
        ),
        StageGuard(
            Stages.EVENT_PLANNING,
            "complete_event_planning",
            permissions.can_exit_event_planning,
            conditions.never,
        ),
    )
}


def get_stage_guard(stage: str) -> StageGuard:
    """Return the exit guard of a stage; COMPLETED has none and raises KeyError."""
    return STAGE_GUARDS[stage]
