"""Business logic is here.

Most logic is encapsulated into dataclasses that take the necessary data structures upon creation and perform their
action in a method named "run()". Checks live in "check_conditions()", which raises a
:py:class:`quill.workflow.exceptions.WorkflowError` when the action is not allowed; nothing is written in that case.

Persistence goes through the repository and every "run()" is one unit of work (``repository.atomic()``); domain
events are emitted once the unit of work is over.
"""

import dataclasses
import logging
from typing import Any, List, Optional

from django.conf import settings
from django.utils import timezone

from . import permissions
from .analysis import AnalysisFailure, AnalysisResult, get_analysis_dispatcher
from .custom_types import Actor, BulkItemResult, EditorWorkload, Err, Ok, ReviewOutcome
from .events import WorkflowEvent
from .exceptions import (
    EditorInactive,
    Forbidden,
    InvalidTransition,
    NotFound,
    ValidationError,
    WorkflowError,
)
from .logic__events import CreateEvent, RsvpToEvent  # noqa F401
from .logic__files import ApproveFile, RegisterUpload  # noqa F401
from .models import EditorAssignment, Review, Submission, WorkflowStageRecord
from .repository import BaseRepository, get_repository
from .states import get_stage_guard
from .storage import get_blob_storage
from .utils import check_not_archived, emit_event, stage_record

logger = logging.getLogger(__name__)

Stages = Submission.Stages


@dataclasses.dataclass
class AdvanceStage:
    """
    Move a submission to another stage.

    The normal path goes to the next stage of the pipeline through the transition of the current stage, checking its
    exit guard (role and precondition, see :py:mod:`quill.workflow.states`).

    Admin and operations may also set any stage directly (override path): this happens when they target a stage
    that is not the next one, or when they pass ``override=True`` to skip the exit guard of the current stage.
    Nobody leaves COMPLETED.
    """

    submission: Submission
    target_stage: str
    actor: Actor
    notes: str = ""
    override: bool = False
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def __post_init__(self):
        self._use_override = False

    def check_conditions(self) -> None:
        check_not_archived(self.submission)
        try:
            self.target_stage = Stages(self.target_stage)
        except ValueError:
            raise ValidationError(f'"{self.target_stage}" is not a stage.')

        current = self.submission.stage
        if current == Stages.COMPLETED:
            raise InvalidTransition("Completed submissions cannot change stage.")

        can_override = permissions.can_override_stage(self.submission, self.actor)
        is_next_stage = self.target_stage == self.submission.next_stage
        if self.override and not can_override:
            raise Forbidden("Only admin and operations can override the workflow.")
        if not is_next_stage and not can_override:
            raise InvalidTransition(
                f"A submission in {current} can only move to {self.submission.next_stage}, "
                f"not to {self.target_stage}.",
            )

        self._use_override = can_override and (self.override or not is_next_stage)
        if self._use_override:
            if self.target_stage == current:
                raise InvalidTransition(f"The submission is already in {current}.")
            return

        guard = get_stage_guard(current)
        if not guard.is_permitted(self.submission, self.actor):
            raise Forbidden(f"You are not allowed to move a submission out of {current}.")
        reason = guard.unmet_precondition(self.submission)
        if reason:
            raise InvalidTransition(reason)

    def _apply_transition(self) -> None:
        if self._use_override:
            self.submission.override_stage(self.target_stage)
        else:
            get_stage_guard(self.submission.stage).get_transition(self.submission)()

    def _persist(self, vacated: str) -> None:
        with self.repository.atomic():
            self._apply_transition()
            self.repository.append_stage_record(
                stage_record(
                    self.submission,
                    vacated,
                    WorkflowStageRecord.Status.COMPLETED,
                    self.actor,
                    self.notes,
                ),
            )
            self.repository.append_stage_record(
                stage_record(
                    self.submission,
                    self.target_stage,
                    (
                        WorkflowStageRecord.Status.COMPLETED
                        if self.target_stage == Stages.COMPLETED
                        else WorkflowStageRecord.Status.IN_PROGRESS
                    ),
                    self.actor,
                    self.notes,
                ),
            )
            self.repository.save_submission(self.submission)

    def run(self) -> Submission:
        self.check_conditions()
        vacated = self.submission.stage
        previous_change = self.submission.latest_state_change
        try:
            self._persist(vacated)
        except Exception:
            # a rolled back write must not leave the instance in the new stage
            self.submission.stage = vacated
            self.submission.latest_state_change = previous_change
            raise
        logger.info(
            f"Submission {self.submission.pk}: {vacated} -> {self.target_stage} by {self.actor}"
            f"{' (override)' if self._use_override else ''}",
        )
        emit_event(
            WorkflowEvent.ON_STAGE_CHANGED,
            self.submission.pk,
            self.actor,
            from_stage=vacated,
            to_stage=str(self.target_stage),
            override=self._use_override,
            notes=self.notes,
        )
        return self.submission


@dataclasses.dataclass
class TriggerAnalysis:
    """
    Ask the analysis service to (re)analyze a submission.

    The request is handed to the configured dispatcher and never awaited: the outcome comes back through
    :py:class:`HandleAnalysisResult`. The stage is not touched.
    """

    submission: Submission
    actor: Actor
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self) -> None:
        if not permissions.can_trigger_analysis(self.submission, self.actor):
            raise Forbidden("Only admin and operations can request a new analysis.")
        check_not_archived(self.submission)

    def run(self) -> Submission:
        self.check_conditions()
        with self.repository.atomic():
            self.submission.analysis_status = Submission.AnalysisStatus.PENDING
            self.submission.analysis_attempts += 1
            self.submission.analysis_requested_at = timezone.now()
            self.submission.analysis_error = ""
            self.repository.save_submission(self.submission)
        emit_event(
            WorkflowEvent.ON_ANALYSIS_REQUESTED,
            self.submission.pk,
            self.actor,
            attempt=self.submission.analysis_attempts,
        )
        get_analysis_dispatcher()(self.submission.pk)
        return self.submission


@dataclasses.dataclass
class HandleAnalysisResult:
    """Record the outcome of an analysis and, on success, let the system leave ANALYSIS."""

    submission_id: int
    outcome: Any
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self, submission: Submission) -> None:
        if not isinstance(self.outcome, (AnalysisResult, AnalysisFailure)):
            raise ValidationError(f"Unknown analysis outcome {self.outcome!r}.")
        check_not_archived(submission)

    def _auto_advance(self, submission: Submission) -> None:
        try:
            AdvanceStage(
                submission=submission,
                target_stage=Stages.PLAGIARISM_REVIEW,
                actor=Actor.system(),
                notes="Automated analysis completed.",
                repository=self.repository,
            ).run()
        except WorkflowError as e:
            logger.warning(f"Submission {submission.pk} analyzed but not moved to plagiarism review: {e}")

    def run(self) -> Submission:
        system = Actor.system()
        with self.repository.atomic():
            submission = self.repository.get_submission(self.submission_id)
            self.check_conditions(submission)
            if isinstance(self.outcome, AnalysisResult):
                submission.analysis_result = self.outcome.as_dict()
                submission.analysis_status = Submission.AnalysisStatus.COMPLETED
                submission.analysis_error = ""
            else:
                submission.analysis_status = Submission.AnalysisStatus.FAILED
                submission.analysis_error = self.outcome.reason
            self.repository.save_submission(submission)

        if isinstance(self.outcome, AnalysisFailure):
            emit_event(WorkflowEvent.ON_ANALYSIS_FAILED, submission.pk, system, reason=self.outcome.reason)
            return submission

        emit_event(
            WorkflowEvent.ON_ANALYSIS_COMPLETED,
            submission.pk,
            system,
            overall_score=self.outcome.overall_score,
        )
        if submission.stage == Stages.ANALYSIS:
            self._auto_advance(submission)
        return submission


@dataclasses.dataclass
class CreateSubmission:
    actor: Actor
    title: str
    content: str
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self) -> None:
        if not permissions.can_create_submission(self.actor):
            raise Forbidden("Only students can create submissions.")
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValidationError("Title is required.")
        if len(self.title.strip()) > 255:
            raise ValidationError("Title must be at most 255 characters long.")
        min_length = settings.QUILL_SUBMISSION_MIN_LENGTH
        if not isinstance(self.content, str) or len(self.content.strip()) < min_length:
            raise ValidationError(f"Content must be at least {min_length} characters long.")

    def run(self) -> Submission:
        self.check_conditions()
        with self.repository.atomic():
            submission = Submission(
                student_id=self.actor.id,
                title=self.title.strip(),
                content_ref=get_blob_storage().store(self.content.encode("utf-8")),
                stage=Stages.ANALYSIS,
            )
            self.repository.save_submission(submission)
            self.repository.append_stage_record(
                stage_record(
                    submission,
                    Stages.ANALYSIS,
                    WorkflowStageRecord.Status.IN_PROGRESS,
                    self.actor,
                    "Submission created.",
                ),
            )
        emit_event(WorkflowEvent.ON_SUBMISSION_CREATED, submission.pk, self.actor, title=submission.title)
        TriggerAnalysis(submission=submission, actor=Actor.system(), repository=self.repository).run()
        # the analysis may already have moved things on
        return self.repository.get_submission(submission.pk)


@dataclasses.dataclass
class ArchiveSubmission:
    submission_id: int
    actor: Actor
    notes: str = ""
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self, submission: Submission) -> None:
        if not permissions.can_archive_submission(submission, self.actor):
            raise Forbidden("Only the owner or an admin can archive a submission.")
        check_not_archived(submission)
        if submission.stage == Stages.COMPLETED:
            raise InvalidTransition("Completed submissions cannot be archived.")

    def run(self) -> Submission:
        with self.repository.atomic():
            submission = self.repository.get_submission(self.submission_id)
            self.check_conditions(submission)
            submission.archived = True
            self.repository.save_submission(submission)
            self.repository.append_stage_record(
                stage_record(
                    submission,
                    submission.stage,
                    WorkflowStageRecord.Status.COMPLETED,
                    self.actor,
                    f"Submission archived. {self.notes}".strip(),
                ),
            )
        emit_event(WorkflowEvent.ON_SUBMISSION_ARCHIVED, submission.pk, self.actor, stage=submission.stage)
        return submission


@dataclasses.dataclass
class AssignToEditor:
    """
    Give a student an editor.

    With a submission, only that submission gets the editor; without, every open submission of the student does.
    The new assignment supersedes the student's previous one, which is kept for audit.
    """

    student_id: int
    editor_id: int
    assigned_by: Actor
    notes: str = ""
    submission_id: Optional[int] = None
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self):
        if not permissions.can_assign_editor(self.assigned_by):
            raise Forbidden("Only admin and operations can assign editors.")
        self.student = self.repository.get_user(self.student_id)
        if self.student.role != self.student.Roles.STUDENT:
            raise NotFound(f"Student {self.student_id} does not exist.")
        self.editor = self.repository.get_user(self.editor_id)
        if self.editor.role != self.editor.Roles.EDITOR:
            raise NotFound(f"Editor {self.editor_id} does not exist.")
        if not self.editor.is_active:
            raise EditorInactive(f"Editor {self.editor} is not active.")
        self.submission = None
        if self.submission_id is not None:
            self.submission = self.repository.get_submission(self.submission_id)
            check_not_archived(self.submission)
            if self.submission.student_id != self.student.pk:
                raise ValidationError(f"Submission {self.submission_id} does not belong to {self.student}.")

    def _submissions_to_assign(self) -> List[Submission]:
        if self.submission is not None:
            return [self.submission]
        return self.repository.list_open_by_student(self.student.pk)

    def run(self) -> EditorAssignment:
        with self.repository.atomic():
            self.check_conditions()
            submissions = self._submissions_to_assign()
            for submission in submissions:
                submission.assigned_editor = self.editor
                self.repository.save_submission(submission)
            assignment = self.repository.save_assignment(
                EditorAssignment(
                    student=self.student,
                    editor=self.editor,
                    assigned_by_id=self.assigned_by.id,
                    submission=self.submission,
                    notes=self.notes,
                ),
            )
        emit_event(
            WorkflowEvent.ON_EDITOR_ASSIGNED,
            self.submission_id,
            self.assigned_by,
            student_id=self.student.pk,
            editor_id=self.editor.pk,
            submission_ids=[submission.pk for submission in submissions],
        )
        return assignment


@dataclasses.dataclass
class BulkAssignToEditor:
    """
    Assign the same editor to many submissions.

    Each submission is a separate unit of work: a failure is reported in its item and does not undo the others.
    """

    submission_ids: List[int]
    editor_id: int
    assigned_by: Actor
    notes: str = ""
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self):
        if not permissions.can_assign_editor(self.assigned_by):
            raise Forbidden("Only admin and operations can assign editors.")

    def _assign(self, submission_id: int) -> BulkItemResult:
        try:
            submission = self.repository.get_submission(submission_id)
            assignment = AssignToEditor(
                student_id=submission.student_id,
                editor_id=self.editor_id,
                assigned_by=self.assigned_by,
                notes=self.notes,
                submission_id=submission_id,
                repository=self.repository,
            ).run()
        except WorkflowError as e:
            logger.info(f"Bulk assignment of submission {submission_id} failed: {e.kind.value} {e}")
            return BulkItemResult(submission_id, Err(e.kind, e.message))
        return BulkItemResult(submission_id, Ok(assignment))

    def run(self) -> List[BulkItemResult]:
        self.check_conditions()
        return [self._assign(submission_id) for submission_id in self.submission_ids]


@dataclasses.dataclass
class GetWorkload:
    """Active editors with their open caseload, lightest first; ties go to the oldest account."""

    actor: Actor
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self):
        if not permissions.can_see_workload(self.actor):
            raise Forbidden("Only admin and operations can see the editors workload.")

    def run(self) -> List[EditorWorkload]:
        self.check_conditions()
        workload = [
            EditorWorkload(editor, self.repository.count_active_by_editor(editor.pk), editor.date_joined)
            for editor in self.repository.list_active_editors()
        ]
        return sorted(workload, key=lambda item: (item.active_count, item.date_joined, item.editor.pk))


@dataclasses.dataclass
class ListUnassigned:
    actor: Actor
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def run(self) -> List[Submission]:
        if not permissions.can_assign_editor(self.actor):
            raise Forbidden("Only admin and operations can see unassigned submissions.")
        return self.repository.list_unassigned()


@dataclasses.dataclass
class ListEditorSubmissions:
    actor: Actor
    editor_id: int
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def run(self) -> List[Submission]:
        if not permissions.can_see_editor_submissions(self.editor_id, self.actor):
            raise Forbidden("You cannot see the submissions of this editor.")
        return self.repository.list_by_editor(self.editor_id)


@dataclasses.dataclass
class ListPendingReviews:
    actor: Actor
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def run(self) -> List[Submission]:
        if not permissions.can_see_pending_reviews(self.actor):
            raise Forbidden("Only reviewers and admins can see the pending reviews.")
        return self.repository.list_by_stage(Stages.PLAGIARISM_REVIEW)


@dataclasses.dataclass
class SubmitReview:
    """
    Record a plagiarism review.

    The review is always appended (superseding the active one); when it passed, the submission is moved on to the
    editor meeting. The two outcomes are reported separately: a refused advance does not undo the review.
    """

    submission_id: int
    score: Any
    notes: Any
    passed: Any
    reviewer: Actor
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self, submission: Submission) -> None:
        if not permissions.can_submit_review(submission, self.reviewer):
            raise Forbidden("Only reviewers and admins can review submissions.")
        check_not_archived(submission)
        # bool is an int subclass, but True is not a score
        if isinstance(self.score, bool) or not isinstance(self.score, int) or not 0 <= self.score <= 100:
            raise ValidationError("Score must be an integer between 0 and 100.")
        if not isinstance(self.notes, str) or not self.notes.strip():
            raise ValidationError("Review notes are required.")
        if not isinstance(self.passed, bool):
            raise ValidationError("Passed must be true or false.")

    def _advance(self, submission: Submission):
        if submission.stage != Stages.PLAGIARISM_REVIEW:
            return Err(
                InvalidTransition.kind,
                f"The submission is in {submission.stage}, not waiting for a plagiarism review.",
            )
        try:
            AdvanceStage(
                submission=submission,
                target_stage=Stages.EDITOR_MEETING,
                actor=self.reviewer,
                notes=f"Plagiarism score: {self.score}%. {self.notes.strip()}",
                repository=self.repository,
            ).run()
        except WorkflowError as e:
            logger.info(f"Review of submission {submission.pk} saved, stage not advanced: {e}")
            return Err(e.kind, e.message)
        return Ok(submission)

    def run(self) -> ReviewOutcome:
        with self.repository.atomic():
            submission = self.repository.get_submission(self.submission_id)
            self.check_conditions(submission)
            review = self.repository.save_review(
                Review(
                    submission=submission,
                    reviewer_id=self.reviewer.id,
                    score=self.score,
                    notes=self.notes.strip(),
                    passed=self.passed,
                ),
            )
            submission.plagiarism_score = review.score
        emit_event(
            WorkflowEvent.ON_REVIEW_SUBMITTED,
            submission.pk,
            self.reviewer,
            review_id=review.pk,
            score=review.score,
            passed=review.passed,
        )
        advance = self._advance(submission) if review.passed else None
        return ReviewOutcome(review, advance)
