from datetime import datetime
from typing import TYPE_CHECKING, Optional

from django.db import models
from django.db.models import Q, QuerySet, Sum

if TYPE_CHECKING:
    from .models import FileAsset


class SubmissionQuerySet(models.QuerySet):
    def open(self) -> QuerySet:  # noqa: A003
        """
        Return submissions that can still move through the pipeline.

        A submission is open when it is neither archived nor COMPLETED.

        :return: the queryset of open submissions
        :rtype: QuerySet
        """
        from .models import Submission

        return self.filter(archived=False).exclude(stage=Submission.Stages.COMPLETED)

    def unassigned(self) -> QuerySet:
        return self.open().filter(assigned_editor__isnull=True)

    def by_editor(self, editor_id: int) -> QuerySet:
        return self.open().filter(assigned_editor_id=editor_id)

    def in_stage(self, stage: str) -> QuerySet:
        return self.filter(stage=stage)

    def pending_reviews(self) -> QuerySet:
        """Return open submissions waiting for a plagiarism review, oldest first."""
        from .models import Submission

        return self.open().in_stage(Submission.Stages.PLAGIARISM_REVIEW).order_by("created", "pk")

    def stalled_analyses(self, pending_before: datetime) -> QuerySet:
        """
        Return submissions stuck in ANALYSIS.

        Analysis is stuck either when it failed or when it was requested before ``pending_before`` and never
        completed.

        :param pending_before: requests older than this are considered lost
        :type pending_before: datetime

        :return: the queryset of submissions whose analysis must be requested again
        :rtype: QuerySet
        """
        from .models import Submission

        return (
            self.open()
            .in_stage(Submission.Stages.ANALYSIS)
            .filter(
                Q(analysis_status=Submission.AnalysisStatus.FAILED)
                | Q(
                    analysis_status=Submission.AnalysisStatus.PENDING,
                    analysis_requested_at__lt=pending_before,
                )
            )
        )


class ReviewQuerySet(models.QuerySet):
    def active(self) -> QuerySet:
        return self.filter(superseded=False)


class FileAssetQuerySet(models.QuerySet):
    def of_type(self, submission_id: int, file_type: str) -> QuerySet:
        return self.filter(submission_id=submission_id, file_type=file_type)

    def latest_of_type(self, submission_id: int, file_type: str) -> Optional["FileAsset"]:
        """Return the most recent version of a file slot, or None if nothing was uploaded."""
        return self.of_type(submission_id, file_type).order_by("-version").first()


class EditorAssignmentQuerySet(models.QuerySet):
    def active(self) -> QuerySet:
        return self.filter(is_active=True)


class EventQuerySet(models.QuerySet):
    def active(self) -> QuerySet:
        return self.filter(is_active=True)


class EventRSVPQuerySet(models.QuerySet):
    def attending(self) -> QuerySet:
        from .models import EventRSVP

        return self.filter(status=EventRSVP.Status.ATTENDING)

    def attendees_count(self) -> int:
        """Sum the attendee counts of the "attending" answers."""
        return self.attending().aggregate(total=Sum("attendee_count"))["total"] or 0
