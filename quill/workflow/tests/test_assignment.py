import pytest
from django.utils import timezone

from quill.accounts.factories import AccountFactory
from quill.accounts.models import Account

from ..commands import (
    advance_stage,
    assign_editor,
    bulk_assign_editor,
    get_workload,
    list_editor_submissions,
    list_unassigned,
)
from ..events import WorkflowEvent
from ..exceptions import ErrorKind
from ..factories import SubmissionFactory
from ..models import EditorAssignment, Submission
from .test_helpers import as_actor

Roles = Account.Roles
Stages = Submission.Stages


@pytest.mark.django_db
def test_assign_editor_to_all_open_submissions(student, editor, admin, submission_in_stage, domain_events):
    first = submission_in_stage(Stages.PLAGIARISM_REVIEW)
    second = submission_in_stage(Stages.EDITOR_MEETING)
    done = submission_in_stage(Stages.COMPLETED)

    result = assign_editor(student.pk, editor.pk, as_actor(admin), notes="Poetry specialist")

    assert result.ok
    assignment = result.value
    assert assignment.is_active
    assert assignment.submission is None
    assert assignment.notes == "Poetry specialist"
    for submission in (first, second):
        submission.refresh_from_db()
        assert submission.assigned_editor == editor
    done.refresh_from_db()
    assert done.assigned_editor is None
    (event,) = [event for event in domain_events if event.name == WorkflowEvent.ON_EDITOR_ASSIGNED]
    assert event.payload["editor_id"] == editor.pk
    assert sorted(event.payload["submission_ids"]) == sorted([first.pk, second.pk])


@pytest.mark.django_db
def test_reassignment_keeps_history(student, editor, other_editor, operations, submission):
    assign_editor(student.pk, editor.pk, as_actor(operations))
    result = assign_editor(student.pk, other_editor.pk, as_actor(operations))

    assert result.ok
    assignments = EditorAssignment.objects.filter(student=student)
    assert assignments.count() == 2
    assert list(assignments.active()) == [result.value]
    submission.refresh_from_db()
    assert submission.assigned_editor == other_editor


@pytest.mark.django_db
def test_assign_editor_to_one_submission(student, editor, admin, submission_in_stage):
    target = submission_in_stage(Stages.EDITOR_MEETING)
    other = submission_in_stage(Stages.EDITOR_MEETING)

    result = assign_editor(student.pk, editor.pk, as_actor(admin), submission_id=target.pk)

    assert result.ok
    assert result.value.submission == target
    target.refresh_from_db()
    other.refresh_from_db()
    assert target.assigned_editor == editor
    assert other.assigned_editor is None


@pytest.mark.django_db
def test_editor_cannot_assign(student, editor):
    result = assign_editor(student.pk, editor.pk, as_actor(editor))

    assert result.kind == ErrorKind.FORBIDDEN


@pytest.mark.django_db
def test_inactive_editor_is_refused(student, admin):
    retired = AccountFactory(username="retired", role=Roles.EDITOR, is_active=False)

    result = assign_editor(student.pk, retired.pk, as_actor(admin))

    assert result.kind == ErrorKind.EDITOR_INACTIVE
    assert not EditorAssignment.objects.exists()


@pytest.mark.django_db
def test_editor_must_have_editor_role(student, reviewer, admin):
    result = assign_editor(student.pk, reviewer.pk, as_actor(admin))

    assert result.kind == ErrorKind.NOT_FOUND


@pytest.mark.django_db
def test_student_must_exist(editor, admin):
    result = assign_editor(999999, editor.pk, as_actor(admin))

    assert result.kind == ErrorKind.NOT_FOUND


@pytest.mark.django_db
def test_submission_must_belong_to_student(student, other_student, editor, admin):
    foreign = SubmissionFactory(student=other_student)

    result = assign_editor(student.pk, editor.pk, as_actor(admin), submission_id=foreign.pk)

    assert result.kind == ErrorKind.VALIDATION_ERROR


@pytest.mark.django_db
def test_archived_submission_cannot_be_assigned(student, editor, admin, submission_in_stage):
    archived = submission_in_stage(Stages.EDITOR_MEETING, archived=True)

    result = assign_editor(student.pk, editor.pk, as_actor(admin), submission_id=archived.pk)

    assert result.kind == ErrorKind.ALREADY_ARCHIVED


@pytest.mark.django_db
def test_bulk_assignment_reports_each_item(student, other_student, editor, admin):
    first = SubmissionFactory(student=student)
    archived = SubmissionFactory(student=other_student, archived=True)
    third = SubmissionFactory(student=AccountFactory(username="third-student"))

    result = bulk_assign_editor([first.pk, archived.pk, 999999, third.pk], editor.pk, as_actor(admin))

    assert result.ok
    items = result.value
    assert [item.submission_id for item in items] == [first.pk, archived.pk, 999999, third.pk]
    assert [item.result.ok for item in items] == [True, False, False, True]
    assert items[1].result.kind == ErrorKind.ALREADY_ARCHIVED
    assert items[2].result.kind == ErrorKind.NOT_FOUND
    first.refresh_from_db()
    third.refresh_from_db()
    assert first.assigned_editor == editor
    assert third.assigned_editor == editor
    assert EditorAssignment.objects.active().count() == 2


@pytest.mark.django_db
def test_bulk_assignment_needs_staff(student, editor):
    submission = SubmissionFactory(student=student)

    result = bulk_assign_editor([submission.pk], editor.pk, as_actor(student))

    assert result.kind == ErrorKind.FORBIDDEN


@pytest.mark.django_db
def test_workload_lightest_first(operations):
    now = timezone.now()
    busy = AccountFactory(username="busy", role=Roles.EDITOR, date_joined=now - timezone.timedelta(days=30))
    senior = AccountFactory(username="senior", role=Roles.EDITOR, date_joined=now - timezone.timedelta(days=20))
    junior = AccountFactory(username="junior", role=Roles.EDITOR, date_joined=now - timezone.timedelta(days=10))
    AccountFactory(username="away", role=Roles.EDITOR, is_active=False)
    SubmissionFactory.create_batch(2, assigned_editor=busy, stage=Stages.EDITOR_MEETING)
    # closed work does not count
    SubmissionFactory(assigned_editor=senior, stage=Stages.COMPLETED)
    SubmissionFactory(assigned_editor=junior, archived=True)

    result = get_workload(as_actor(operations))

    assert result.ok
    assert [(item.editor.username, item.active_count) for item in result.value] == [
        ("senior", 0),
        ("junior", 0),
        ("busy", 2),
    ]


@pytest.mark.django_db
def test_workload_is_for_staff(editor):
    assert get_workload(as_actor(editor)).kind == ErrorKind.FORBIDDEN


@pytest.mark.django_db
def test_list_unassigned(editor, admin, submission_in_stage):
    waiting = submission_in_stage(Stages.PLAGIARISM_REVIEW)
    submission_in_stage(Stages.EDITOR_MEETING, assigned_editor=editor)
    submission_in_stage(Stages.COMPLETED)
    submission_in_stage(Stages.ANALYSIS, archived=True)

    result = list_unassigned(as_actor(admin))

    assert result.value == [waiting]


@pytest.mark.django_db
def test_editor_sees_own_caseload_only(editor, other_editor, operations, submission_in_stage):
    mine = submission_in_stage(Stages.EDITOR_MEETING, assigned_editor=editor)
    submission_in_stage(Stages.EDITOR_MEETING, assigned_editor=other_editor)

    assert list_editor_submissions(as_actor(editor), editor.pk).value == [mine]
    assert list_editor_submissions(as_actor(operations), editor.pk).value == [mine]
    assert list_editor_submissions(as_actor(other_editor), editor.pk).kind == ErrorKind.FORBIDDEN


@pytest.mark.django_db
def test_bulk_assignment_within_one_student(student, editor, admin, submission_in_stage):
    first = submission_in_stage(Stages.EDITOR_MEETING)
    second = submission_in_stage(Stages.EDITOR_MEETING)

    bulk_assign_editor([first.pk, second.pk], editor.pk, as_actor(admin))

    for submission in (first, second):
        result = advance_stage(submission.pk, Stages.APPROVAL_PROCESS, as_actor(editor))
        assert result.ok, result
    assert EditorAssignment.objects.filter(student=student).count() == 2


@pytest.mark.django_db
def test_reassigning_one_submission_leaves_the_others_alone(
    student, editor, other_editor, operations, submission_in_stage
):
    moved = submission_in_stage(Stages.EDITOR_MEETING)
    kept = submission_in_stage(Stages.EDITOR_MEETING)
    assign_editor(student.pk, editor.pk, as_actor(operations))

    assign_editor(student.pk, other_editor.pk, as_actor(operations), submission_id=moved.pk)

    workload = {item.editor: item.active_count for item in get_workload(as_actor(operations)).value}
    assert workload == {editor: 1, other_editor: 1}
    assert advance_stage(kept.pk, Stages.APPROVAL_PROCESS, as_actor(editor)).ok
    assert advance_stage(moved.pk, Stages.APPROVAL_PROCESS, as_actor(editor)).kind == ErrorKind.FORBIDDEN
    assert advance_stage(moved.pk, Stages.APPROVAL_PROCESS, as_actor(other_editor)).ok


@pytest.mark.django_db
def test_editor_meeting_needs_an_assigned_editor(student, editor, admin, submission_in_stage):
    submission = submission_in_stage(Stages.EDITOR_MEETING)
    EditorAssignment.objects.create(student=student, editor=editor, assigned_by=admin)

    result = advance_stage(submission.pk, Stages.APPROVAL_PROCESS, as_actor(admin))

    assert result.kind == ErrorKind.INVALID_TRANSITION
    assert result.message == "No editor is assigned to this submission."
