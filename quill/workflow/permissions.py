"""Who may do what on a submission.

Every function takes the object first and the actor second, which is the signature django-fsm expects from a
``permission`` callable. The actor is a :py:class:`quill.workflow.custom_types.Actor` (or anything exposing ``id``,
``role`` and, optionally, ``is_system``).
"""

from typing import TYPE_CHECKING

from quill.accounts.constants import (
    EVENT_ORGANISER_ROLES,
    OVERRIDE_ROLES,
    REVIEW_ROLES,
    Roles,
)
from quill.accounts.permissions import (
    has_admin_or_operations_role,
    has_admin_role,
    has_any_role,
    has_editor_role,
    has_student_role,
)

if TYPE_CHECKING:
    from .custom_types import Actor
    from .models import Submission


def is_system(instance, actor: "Actor") -> bool:
    return bool(getattr(actor, "is_system", False))


def is_submission_owner(submission: "Submission", actor: "Actor") -> bool:
    return actor.id is not None and submission.student_id == actor.id


def is_assigned_editor(submission: "Submission", actor: "Actor") -> bool:
    """
    Check if the actor is the editor currently assigned to the submission.

    :param submission: The submission to check.
    :type submission: Submission

    :param actor: The actor to check.
    :type actor: Actor

    :return: True if the actor has the editor role and is the submission's assigned editor.
    :rtype: bool
    """
    return (
        has_editor_role(actor)
        and submission.assigned_editor_id is not None
        and submission.assigned_editor_id == actor.id
    )


def is_admin_or_operations(instance, actor: "Actor") -> bool:
    return has_admin_or_operations_role(actor)


# Stage exit permissions, used by the django-fsm transitions of Submission


def can_exit_analysis(submission: "Submission", actor: "Actor") -> bool:
    """Analysis is exited by staff or by the system when the analysis completes."""
    return is_system(submission, actor) or has_admin_or_operations_role(actor)


def can_exit_plagiarism_review(submission: "Submission", actor: "Actor") -> bool:
    return has_any_role(actor, REVIEW_ROLES)


def can_exit_editor_meeting(submission: "Submission", actor: "Actor") -> bool:
    return has_admin_role(actor) or is_assigned_editor(submission, actor)


def can_exit_approval_process(submission: "Submission", actor: "Actor") -> bool:
    return has_admin_or_operations_role(actor)


def can_exit_pdf_review(submission: "Submission", actor: "Actor") -> bool:
    return has_any_role(actor, OVERRIDE_ROLES | {Roles.EDITOR})


def can_exit_cover_approval(submission: "Submission", actor: "Actor") -> bool:
    return has_admin_or_operations_role(actor)


def can_exit_event_planning(submission: "Submission", actor: "Actor") -> bool:
    return has_any_role(actor, OVERRIDE_ROLES | {Roles.SALES})


def can_override_stage(submission: "Submission", actor: "Actor") -> bool:
    """
    Check if the actor may set any stage directly.

    :param submission: The submission whose stage is being forced.
    :type submission: Submission

    :param actor: The actor to check.
    :type actor: Actor

    :return: True if the actor is an admin or an operations member.
    :rtype: bool
    """
    return has_admin_or_operations_role(actor)


# Command permissions


def can_create_submission(actor: "Actor") -> bool:
    return has_student_role(actor)


def can_trigger_analysis(submission: "Submission", actor: "Actor") -> bool:
    return is_system(submission, actor) or has_admin_or_operations_role(actor)


def can_assign_editor(actor: "Actor") -> bool:
    return has_admin_or_operations_role(actor)


def can_see_workload(actor: "Actor") -> bool:
    return has_admin_or_operations_role(actor)


def can_submit_review(submission: "Submission", actor: "Actor") -> bool:
    return has_any_role(actor, REVIEW_ROLES)


def can_see_pending_reviews(actor: "Actor") -> bool:
    return has_any_role(actor, REVIEW_ROLES)


def can_decide_file(submission: "Submission", actor: "Actor") -> bool:
    """Files are approved by staff or by the editor in charge of the submission."""
    return has_admin_or_operations_role(actor) or is_assigned_editor(submission, actor)


def can_upload_file(submission: "Submission", actor: "Actor") -> bool:
    return (
        is_submission_owner(submission, actor)
        or has_admin_or_operations_role(actor)
        or is_assigned_editor(submission, actor)
    )


def can_archive_submission(submission: "Submission", actor: "Actor") -> bool:
    return has_admin_role(actor) or (has_student_role(actor) and is_submission_owner(submission, actor))


def can_organise_event(actor: "Actor") -> bool:
    return has_any_role(actor, EVENT_ORGANISER_ROLES)


def can_see_editor_submissions(editor_id: int, actor: "Actor") -> bool:
    """Editors see their own caseload; staff see everybody's."""
    return has_admin_or_operations_role(actor) or (has_editor_role(actor) and actor.id == editor_id)
