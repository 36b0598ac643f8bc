"""Submission pipeline models."""

from typing import Optional

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from django_fsm import RETURN_VALUE, FSMField, transition
from model_utils.models import TimeStampedModel

from . import permissions
from .managers import (
    EditorAssignmentQuerySet,
    EventQuerySet,
    EventRSVPQuerySet,
    FileAssetQuerySet,
    ReviewQuerySet,
    SubmissionQuerySet,
)

score_validators = [MinValueValidator(0), MaxValueValidator(100)]


def analysis_result_present(submission: "Submission") -> bool:
    from .conditions import missing_analysis_result

    return not missing_analysis_result(submission)


def active_review_passed(submission: "Submission") -> bool:
    from .conditions import missing_passed_review

    return not missing_passed_review(submission)


def editor_assignment_present(submission: "Submission") -> bool:
    from .conditions import missing_editor_assignment

    return not missing_editor_assignment(submission)


def submission_content_approved(submission: "Submission") -> bool:
    from .conditions import missing_content_approval

    return not missing_content_approval(submission)


def pdf_soft_copy_approved(submission: "Submission") -> bool:
    from .conditions import missing_pdf_approval

    return not missing_pdf_approval(submission)


def cover_design_approved(submission: "Submission") -> bool:
    from .conditions import missing_cover_approval

    return not missing_cover_approval(submission)


class Submission(TimeStampedModel):
    class Stages(models.TextChoices):
        # Declaration order is the pipeline order
        ANALYSIS = "ANALYSIS", _("Analysis")
        PLAGIARISM_REVIEW = "PLAGIARISM_REVIEW", _("Plagiarism review")
        EDITOR_MEETING = "EDITOR_MEETING", _("Editor meeting")
        APPROVAL_PROCESS = "APPROVAL_PROCESS", _("Approval process")
        PDF_REVIEW = "PDF_REVIEW", _("PDF review")
        COVER_APPROVAL = "COVER_APPROVAL", _("Cover approval")
        EVENT_PLANNING = "EVENT_PLANNING", _("Event planning")
        COMPLETED = "COMPLETED", _("Completed")

    class AnalysisStatus(models.TextChoices):
        NOT_REQUESTED = "NOT_REQUESTED", _("Not requested")
        PENDING = "PENDING", _("Pending")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Student"),
        on_delete=models.PROTECT,
        related_name="submissions",
    )
    title = models.CharField(_("Title"), max_length=255)
    content_ref = models.CharField(_("Content reference"), max_length=255, blank=True)
    stage = FSMField(
        default=Stages.ANALYSIS,
        choices=Stages.choices,
        verbose_name=_("Stage"),
        protected=False,
    )
    # Lookup only: the editor does not own the submission
    assigned_editor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Assigned editor"),
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="edited_submissions",
    )
    # Written only by the review save (see DjangoRepository.save_review)
    plagiarism_score = models.PositiveSmallIntegerField(
        _("Plagiarism score"),
        null=True,
        blank=True,
        validators=score_validators,
    )
    archived = models.BooleanField(_("Archived"), default=False)

    analysis_status = models.CharField(
        _("Analysis status"),
        max_length=20,
        choices=AnalysisStatus.choices,
        default=AnalysisStatus.NOT_REQUESTED,
    )
    analysis_result = models.JSONField(_("Analysis result"), null=True, blank=True)
    analysis_error = models.TextField(_("Analysis error"), blank=True)
    analysis_requested_at = models.DateTimeField(_("Analysis requested at"), null=True, blank=True)
    analysis_attempts = models.PositiveSmallIntegerField(_("Analysis attempts"), default=0)

    latest_state_change = models.DateTimeField(default=timezone.now, null=True, blank=True)
    lock_version = models.PositiveIntegerField(default=0, editable=False)

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        verbose_name = _("Submission")
        verbose_name_plural = _("Submissions")
        ordering = ("created", "pk")

    def __str__(self):
        return f"{self.title} ({self.get_stage_display()})"

    @property
    def next_stage(self) -> Optional[str]:
        """Return the canonical successor of the current stage, None for COMPLETED."""
        stages = self.Stages.values
        position = stages.index(self.stage)
        if position + 1 < len(stages):
            return self.Stages(stages[position + 1])
        return None

    @property
    def is_open(self) -> bool:
        return not self.archived and self.stage != self.Stages.COMPLETED

    @transition(
        field=stage,
        source=Stages.ANALYSIS,
        target=Stages.PLAGIARISM_REVIEW,
        permission=permissions.can_exit_analysis,
        conditions=[analysis_result_present],
    )
    def complete_analysis(self):
        pass

    @transition(
        field=stage,
        source=Stages.PLAGIARISM_REVIEW,
        target=Stages.EDITOR_MEETING,
        permission=permissions.can_exit_plagiarism_review,
        conditions=[active_review_passed],
    )
    def pass_plagiarism_review(self):
        pass

    @transition(
        field=stage,
        source=Stages.EDITOR_MEETING,
        target=Stages.APPROVAL_PROCESS,
        permission=permissions.can_exit_editor_meeting,
        conditions=[editor_assignment_present],
    )
    def conclude_editor_meeting(self):
        pass

    @transition(
        field=stage,
        source=Stages.APPROVAL_PROCESS,
        target=Stages.PDF_REVIEW,
        permission=permissions.can_exit_approval_process,
        conditions=[submission_content_approved],
    )
    def approve_submission(self):
        pass

    @transition(
        field=stage,
        source=Stages.PDF_REVIEW,
        target=Stages.COVER_APPROVAL,
        permission=permissions.can_exit_pdf_review,
        conditions=[pdf_soft_copy_approved],
    )
    def approve_pdf(self):
        pass

    @transition(
        field=stage,
        source=Stages.COVER_APPROVAL,
        target=Stages.EVENT_PLANNING,
        permission=permissions.can_exit_cover_approval,
        conditions=[cover_design_approved],
    )
    def approve_cover(self):
        pass

    # informational stage: nothing to check
    @transition(
        field=stage,
        source=Stages.EVENT_PLANNING,
        target=Stages.COMPLETED,
        permission=permissions.can_exit_event_planning,
    )
    def complete_event_planning(self):
        pass

    # admin or operations unblock a stuck workflow; COMPLETED is terminal even for them
    @transition(
        field=stage,
        source=[
            Stages.ANALYSIS,
            Stages.PLAGIARISM_REVIEW,
            Stages.EDITOR_MEETING,
            Stages.APPROVAL_PROCESS,
            Stages.PDF_REVIEW,
            Stages.COVER_APPROVAL,
            Stages.EVENT_PLANNING,
        ],
        target=RETURN_VALUE(*Stages.values),
        permission=permissions.can_override_stage,
    )
    def override_stage(self, target: str) -> str:
        return target


class WorkflowStageRecord(models.Model):
    """
    Audit trail of the pipeline.

    Records are appended at every stage change and never modified afterwards.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        IN_PROGRESS = "in_progress", _("In progress")
        COMPLETED = "completed", _("Completed")

    submission = models.ForeignKey(
        Submission,
        verbose_name=_("Submission"),
        on_delete=models.CASCADE,
        related_name="stage_records",
    )
    stage = models.CharField(_("Stage"), max_length=30, choices=Submission.Stages.choices)
    status = models.CharField(_("Status"), max_length=20, choices=Status.choices)
    # null when the system acted
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Actor"),
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    timestamp = models.DateTimeField(_("Timestamp"), default=timezone.now)
    notes = models.TextField(_("Notes"), blank=True)

    class Meta:
        verbose_name = _("Workflow stage record")
        verbose_name_plural = _("Workflow stage records")
        ordering = ("timestamp", "id")

    def __str__(self):
        return f"{self.submission_id} {self.stage} {self.status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Workflow stage records are append-only and cannot be modified.")
        super().save(*args, **kwargs)


class FileAsset(TimeStampedModel):
    class FileTypes(models.TextChoices):
        SUBMISSION_CONTENT = "SUBMISSION_CONTENT", _("Submission content")
        PDF_SOFT_COPY = "PDF_SOFT_COPY", _("PDF soft copy")
        COVER_DESIGN = "COVER_DESIGN", _("Cover design")
        ATTACHMENT = "ATTACHMENT", _("Attachment")

    submission = models.ForeignKey(
        Submission,
        verbose_name=_("Submission"),
        on_delete=models.CASCADE,
        related_name="file_assets",
    )
    uploader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Uploader"),
        on_delete=models.PROTECT,
        related_name="uploaded_files",
    )
    file_type = models.CharField(_("Type"), max_length=30, choices=FileTypes.choices)
    file_name = models.CharField(_("File name"), max_length=255, blank=True)
    mime_type = models.CharField(_("MIME type"), max_length=100)
    size = models.PositiveBigIntegerField(_("Size (bytes)"))
    asset_reference = models.CharField(_("Blob reference"), max_length=255, blank=True)
    # null: pending decision
    is_approved = models.BooleanField(_("Approved"), null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Decided by"),
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    approval_notes = models.TextField(_("Decision notes"), blank=True)
    decided_at = models.DateTimeField(_("Decided at"), null=True, blank=True)
    version = models.PositiveIntegerField(_("Version"))

    objects = FileAssetQuerySet.as_manager()

    class Meta:
        verbose_name = _("File asset")
        verbose_name_plural = _("File assets")
        ordering = ("submission", "file_type", "version")
        constraints = [
            models.UniqueConstraint(
                fields=["submission", "file_type", "version"],
                name="unique_file_asset_version",
            ),
        ]

    def __str__(self):
        return f"{self.get_file_type_display()} v{self.version} of {self.submission_id}"

    @property
    def is_pending(self) -> bool:
        return self.is_approved is None


class Review(models.Model):
    submission = models.ForeignKey(
        Submission,
        verbose_name=_("Submission"),
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Reviewer"),
        on_delete=models.PROTECT,
        related_name="reviews",
    )
    score = models.PositiveSmallIntegerField(_("Plagiarism score"), validators=score_validators)
    notes = models.TextField(_("Notes"))
    passed = models.BooleanField(_("Passed"))
    superseded = models.BooleanField(_("Superseded"), default=False)
    reviewed_at = models.DateTimeField(_("Reviewed at"), default=timezone.now)

    objects = ReviewQuerySet.as_manager()

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering = ("reviewed_at", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["submission"],
                condition=Q(superseded=False),
                name="one_active_review_per_submission",
            ),
        ]

    def __str__(self):
        return f"Review of {self.submission_id}: {self.score}% ({'passed' if self.passed else 'not passed'})"


class EditorAssignment(models.Model):
    """
    An editor taking care of a student.

    Only the most recent assignment of a student is active; previous ones are kept with ``is_active=False``.
    """

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Student"),
        on_delete=models.CASCADE,
        related_name="editor_assignments_as_student",
    )
    editor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Editor"),
        on_delete=models.CASCADE,
        related_name="editor_assignments",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Assigned by"),
        on_delete=models.PROTECT,
        related_name="+",
    )
    submission = models.ForeignKey(
        Submission,
        verbose_name=_("Submission"),
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="editor_assignments",
    )
    notes = models.TextField(_("Notes"), blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    assigned_at = models.DateTimeField(_("Assigned at"), default=timezone.now)

    objects = EditorAssignmentQuerySet.as_manager()

    class Meta:
        verbose_name = _("Editor assignment")
        verbose_name_plural = _("Editor assignments")
        ordering = ("assigned_at", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["student"],
                condition=Q(is_active=True),
                name="one_active_assignment_per_student",
            ),
        ]

    def __str__(self):
        return f"{self.editor} for {self.student}"


class Event(TimeStampedModel):
    title = models.CharField(_("Title"), max_length=255)
    description = models.TextField(_("Description"), blank=True)
    event_date = models.DateTimeField(_("Date"))
    location = models.CharField(_("Location"), max_length=255, blank=True)
    is_virtual = models.BooleanField(_("Virtual"), default=False)
    meeting_link = models.URLField(_("Meeting link"), blank=True)
    max_attendees = models.PositiveIntegerField(_("Max attendees"), null=True, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("Created by"),
        on_delete=models.PROTECT,
        related_name="created_events",
    )
    # context only, the event does not belong to the submission
    submission = models.ForeignKey(
        Submission,
        verbose_name=_("Submission"),
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="events",
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        verbose_name = _("Event")
        verbose_name_plural = _("Events")
        ordering = ("event_date", "pk")

    def __str__(self):
        return self.title


class EventRSVP(TimeStampedModel):
    class Status(models.TextChoices):
        ATTENDING = "attending", _("Attending")
        MAYBE = "maybe", _("Maybe")
        DECLINED = "declined", _("Declined")

    event = models.ForeignKey(Event, verbose_name=_("Event"), on_delete=models.CASCADE, related_name="rsvps")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("User"),
        on_delete=models.CASCADE,
        related_name="rsvps",
    )
    status = models.CharField(_("Status"), max_length=20, choices=Status.choices)
    attendee_count = models.PositiveSmallIntegerField(_("Attendees"), default=1)
    dietary_requirements = models.TextField(_("Dietary requirements"), blank=True)
    notes = models.TextField(_("Notes"), blank=True)

    objects = EventRSVPQuerySet.as_manager()

    class Meta:
        verbose_name = _("Event RSVP")
        verbose_name_plural = _("Event RSVPs")
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="unique_event_rsvp"),
        ]

    def __str__(self):
        return f"{self.user} {self.status} {self.event}"
