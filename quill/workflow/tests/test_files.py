import pytest

from ..commands import advance_stage, approve_file, register_upload
from ..events import WorkflowEvent
from ..exceptions import ErrorKind
from ..factories import FileAssetFactory
from ..models import FileAsset, Submission
from .test_helpers import approved_file, as_actor

FileTypes = FileAsset.FileTypes
Stages = Submission.Stages


@pytest.mark.django_db
def test_uploads_are_versioned(student, submission, domain_events):
    first = register_upload(
        submission.pk, as_actor(student), FileTypes.SUBMISSION_CONTENT, 2048, "application/pdf", "story.pdf"
    )
    second = register_upload(
        submission.pk, as_actor(student), FileTypes.SUBMISSION_CONTENT, 4096, "application/pdf", "story-v2.pdf"
    )
    cover = register_upload(submission.pk, as_actor(student), FileTypes.COVER_DESIGN, 1024, "image/png", "cover.png")

    assert [first.value.version, second.value.version, cover.value.version] == [1, 2, 1]
    assert second.value.is_pending
    assert second.value.uploader == student
    assert FileAsset.objects.filter(submission=submission).count() == 3
    uploaded = [event for event in domain_events if event.name == WorkflowEvent.ON_FILE_UPLOADED]
    assert [event.payload["version"] for event in uploaded] == [1, 2, 1]


@pytest.mark.django_db
def test_mime_type_is_normalized(student, submission):
    result = register_upload(submission.pk, as_actor(student), FileTypes.PDF_SOFT_COPY, 10, " Application/PDF ")

    assert result.ok
    assert result.value.mime_type == "application/pdf"


@pytest.mark.django_db
def test_size_limit_is_inclusive(student, submission, settings):
    settings.QUILL_UPLOAD_SIZE_LIMITS = {**settings.QUILL_UPLOAD_SIZE_LIMITS, FileTypes.ATTACHMENT: 100}

    assert register_upload(submission.pk, as_actor(student), FileTypes.ATTACHMENT, 100, "text/plain").ok
    result = register_upload(submission.pk, as_actor(student), FileTypes.ATTACHMENT, 101, "text/plain")

    assert result.kind == ErrorKind.TOO_LARGE


@pytest.mark.django_db
@pytest.mark.parametrize(
    "file_type,mime_type,file_name",
    (
        (FileTypes.PDF_SOFT_COPY, "image/png", ""),
        (FileTypes.COVER_DESIGN, "text/plain", "cover.txt"),
        (FileTypes.COVER_DESIGN, "image/png", "cover.exe"),
    ),
)
def test_unsupported_types(student, submission, file_type, mime_type, file_name):
    result = register_upload(submission.pk, as_actor(student), file_type, 10, mime_type, file_name)

    assert result.kind == ErrorKind.UNSUPPORTED_TYPE


@pytest.mark.django_db
@pytest.mark.parametrize(
    "file_type,size",
    (
        ("MANUSCRIPT", 10),
        (FileTypes.ATTACHMENT, -1),
        (FileTypes.ATTACHMENT, True),
        (FileTypes.ATTACHMENT, "10"),
    ),
)
def test_invalid_upload_metadata(student, submission, file_type, size):
    result = register_upload(submission.pk, as_actor(student), file_type, size, "text/plain")

    assert result.kind == ErrorKind.VALIDATION_ERROR
    assert not FileAsset.objects.exists()


@pytest.mark.django_db
def test_upload_permissions(other_student, editor, assigned_submission):
    pdf = (FileTypes.PDF_SOFT_COPY, 10, "application/pdf")

    assert register_upload(assigned_submission.pk, as_actor(other_student), *pdf).kind == ErrorKind.FORBIDDEN
    assert register_upload(assigned_submission.pk, as_actor(editor), *pdf).ok


@pytest.mark.django_db
def test_no_uploads_on_archived_submissions(student, submission_in_stage):
    submission = submission_in_stage(Stages.PDF_REVIEW, archived=True)

    result = register_upload(submission.pk, as_actor(student), FileTypes.PDF_SOFT_COPY, 10, "application/pdf")

    assert result.kind == ErrorKind.ALREADY_ARCHIVED


@pytest.mark.django_db
def test_assigned_editor_approves_file(editor, assigned_submission, domain_events):
    asset = FileAssetFactory(submission=assigned_submission, file_type=FileTypes.SUBMISSION_CONTENT, version=1)

    result = approve_file(asset.pk, True, "Ready for layout.", as_actor(editor))

    assert result.ok
    asset.refresh_from_db()
    assert asset.is_approved is True
    assert asset.approved_by == editor
    assert asset.approval_notes == "Ready for layout."
    assert asset.decided_at is not None
    assigned_submission.refresh_from_db()
    assert assigned_submission.stage == Stages.EDITOR_MEETING
    (decided,) = [event for event in domain_events if event.name == WorkflowEvent.ON_FILE_DECIDED]
    assert decided.payload["approved"] is True


@pytest.mark.django_db
def test_decision_can_be_changed(operations, submission):
    asset = approved_file(submission, FileTypes.COVER_DESIGN)

    result = approve_file(asset.pk, False, "Title is unreadable.", as_actor(operations))

    assert result.ok
    asset.refresh_from_db()
    assert asset.is_approved is False
    assert asset.approved_by == operations


@pytest.mark.django_db
def test_approval_permissions_and_validation(student, other_editor, admin, assigned_submission):
    asset = FileAssetFactory(submission=assigned_submission, version=1)

    assert approve_file(asset.pk, True, "", as_actor(student)).kind == ErrorKind.FORBIDDEN
    assert approve_file(asset.pk, True, "", as_actor(other_editor)).kind == ErrorKind.FORBIDDEN
    assert approve_file(asset.pk, "yes", "", as_actor(admin)).kind == ErrorKind.VALIDATION_ERROR
    assert approve_file(999999, True, "", as_actor(admin)).kind == ErrorKind.NOT_FOUND
    asset.refresh_from_db()
    assert asset.is_pending


@pytest.mark.django_db
def test_new_version_needs_a_new_approval(student, admin, submission_in_stage):
    submission = submission_in_stage(Stages.APPROVAL_PROCESS)
    approved_file(submission, FileTypes.SUBMISSION_CONTENT)
    register_upload(submission.pk, as_actor(student), FileTypes.SUBMISSION_CONTENT, 10, "text/plain", "story.txt")

    result = advance_stage(submission.pk, Stages.PDF_REVIEW, as_actor(admin))

    assert result.kind == ErrorKind.INVALID_TRANSITION
    assert "version 2" in result.message
    assert "waiting for a decision" in result.message
