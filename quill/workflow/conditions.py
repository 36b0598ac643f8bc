"""Stage exit preconditions.

A condition function tells why a submission cannot leave its current stage by returning an explanatory string; an
empty string means the precondition holds. The string is what the actor sees in an ``InvalidTransition`` error.

"""

from .models import EditorAssignment, FileAsset, Review, Submission


def missing_analysis_result(submission: Submission) -> str:
    if submission.analysis_result is None:
        return "The automated analysis has not produced a result yet."
    return ""


def missing_passed_review(submission: Submission) -> str:
    """Tell if the active review is missing or did not pass."""
    active_review = Review.objects.filter(submission_id=submission.pk).active().first()
    if active_review is None:
        return "No plagiarism review has been submitted."
    if not active_review.passed:
        return "The plagiarism review did not pass."
    return ""


def missing_editor_assignment(submission: Submission) -> str:
    """Tell if the submission has no editor or its student has no active editor assignment.

    The active assignment is the student's most recent one, whichever submission it was made for: a later
    assignment of a single submission does not take the editor away from the student's other submissions.
    """
    if submission.assigned_editor_id is None:
        return "No editor is assigned to this submission."
    if not EditorAssignment.objects.active().filter(student_id=submission.student_id).exists():
        return "The student has no active editor assignment."
    return ""


def _missing_approval(submission: Submission, file_type: str) -> str:
    """Tell if the latest version of the given file slot is not approved."""
    label = FileAsset.FileTypes(file_type).label
    latest = FileAsset.objects.latest_of_type(submission.pk, file_type)
    if latest is None:
        return f"No {label} has been uploaded."
    if latest.is_approved is None:
        return f"The latest {label} (version {latest.version}) is waiting for a decision."
    if not latest.is_approved:
        return f"The latest {label} (version {latest.version}) has been rejected."
    return ""


def missing_content_approval(submission: Submission) -> str:
    return _missing_approval(submission, FileAsset.FileTypes.SUBMISSION_CONTENT)


def missing_pdf_approval(submission: Submission) -> str:
    return _missing_approval(submission, FileAsset.FileTypes.PDF_SOFT_COPY)


def missing_cover_approval(submission: Submission) -> str:
    return _missing_approval(submission, FileAsset.FileTypes.COVER_DESIGN)


def never(submission: Submission) -> str:
    """Nothing is required."""
    return ""
