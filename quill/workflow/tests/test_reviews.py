import pytest

from ..commands import list_pending_reviews, submit_review
from ..events import WorkflowEvent
from ..exceptions import ErrorKind
from ..models import Review, Submission, WorkflowStageRecord
from .test_helpers import as_actor, stage_history

Stages = Submission.Stages
Status = WorkflowStageRecord.Status


@pytest.mark.django_db
def test_passed_review_moves_to_editor_meeting(reviewer, submission_in_stage, domain_events):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)

    result = submit_review(submission.pk, 12, "  No overlap found. ", True, as_actor(reviewer))

    assert result.ok
    review, advance = result.value
    assert review.score == 12
    assert review.notes == "No overlap found."
    assert advance.ok
    submission.refresh_from_db()
    assert submission.stage == Stages.EDITOR_MEETING
    assert submission.plagiarism_score == 12
    assert stage_history(submission) == [
        (Stages.PLAGIARISM_REVIEW, Status.COMPLETED),
        (Stages.EDITOR_MEETING, Status.IN_PROGRESS),
    ]
    assert WorkflowStageRecord.objects.filter(submission=submission).last().notes == (
        "Plagiarism score: 12%. No overlap found."
    )
    assert [event.name for event in domain_events] == [
        WorkflowEvent.ON_REVIEW_SUBMITTED,
        WorkflowEvent.ON_STAGE_CHANGED,
    ]


@pytest.mark.django_db
def test_failed_review_keeps_stage(reviewer, submission_in_stage):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)

    result = submit_review(submission.pk, 64, "Large passages from a published novel.", False, as_actor(reviewer))

    assert result.ok
    assert result.value.advance is None
    submission.refresh_from_db()
    assert submission.stage == Stages.PLAGIARISM_REVIEW
    assert submission.plagiarism_score == 64


@pytest.mark.django_db
def test_new_review_supersedes_previous(reviewer, admin, submission_in_stage):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)
    first = submit_review(submission.pk, 40, "Suspicious quotes.", False, as_actor(reviewer)).value.review

    second = submit_review(submission.pk, 8, "Quotes are attributed.", True, as_actor(admin)).value.review

    first.refresh_from_db()
    assert first.superseded
    assert list(Review.objects.filter(submission=submission).active()) == [second]
    submission.refresh_from_db()
    assert submission.plagiarism_score == 8
    assert submission.stage == Stages.EDITOR_MEETING


@pytest.mark.django_db
def test_review_outside_plagiarism_review_is_kept(reviewer, submission_in_stage):
    submission = submission_in_stage(Stages.ANALYSIS)

    result = submit_review(submission.pk, 3, "Clean.", True, as_actor(reviewer))

    assert result.ok
    review, advance = result.value
    assert review.pk is not None
    assert advance.kind == ErrorKind.INVALID_TRANSITION
    submission.refresh_from_db()
    assert submission.stage == Stages.ANALYSIS


@pytest.mark.django_db
@pytest.mark.parametrize(
    "score,notes,passed",
    (
        (101, "Clean.", True),
        (-1, "Clean.", True),
        (True, "Clean.", True),
        ("12", "Clean.", True),
        (12, "   ", True),
        (12, "Clean.", "yes"),
    ),
)
def test_review_validation(reviewer, submission_in_stage, score, notes, passed):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)

    result = submit_review(submission.pk, score, notes, passed, as_actor(reviewer))

    assert result.kind == ErrorKind.VALIDATION_ERROR
    assert not Review.objects.exists()


@pytest.mark.django_db
@pytest.mark.parametrize("score", (0, 100))
def test_review_score_bounds_are_inclusive(reviewer, submission_in_stage, score):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)

    assert submit_review(submission.pk, score, "Checked.", False, as_actor(reviewer)).ok


@pytest.mark.django_db
def test_only_reviewers_and_admins_review(editor, student, submission_in_stage):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW)

    assert submit_review(submission.pk, 5, "Clean.", True, as_actor(editor)).kind == ErrorKind.FORBIDDEN
    assert submit_review(submission.pk, 5, "Clean.", True, as_actor(student)).kind == ErrorKind.FORBIDDEN


@pytest.mark.django_db
def test_archived_submission_cannot_be_reviewed(reviewer, submission_in_stage):
    submission = submission_in_stage(Stages.PLAGIARISM_REVIEW, archived=True)

    result = submit_review(submission.pk, 5, "Clean.", True, as_actor(reviewer))

    assert result.kind == ErrorKind.ALREADY_ARCHIVED


@pytest.mark.django_db
def test_pending_reviews(reviewer, editor, submission_in_stage):
    oldest = submission_in_stage(Stages.PLAGIARISM_REVIEW)
    newest = submission_in_stage(Stages.PLAGIARISM_REVIEW)
    submission_in_stage(Stages.PLAGIARISM_REVIEW, archived=True)
    submission_in_stage(Stages.EDITOR_MEETING)

    assert list_pending_reviews(as_actor(reviewer)).value == [oldest, newest]
    assert list_pending_reviews(as_actor(editor)).kind == ErrorKind.FORBIDDEN
