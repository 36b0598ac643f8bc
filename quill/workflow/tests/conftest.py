from typing import Callable, List

import pytest
import pytest_factoryboy

from quill.accounts.tests.conftest import *  # noqa

from ..events import DomainEvent
from ..events.dispatcher import domain_event
from ..factories import (
    EditorAssignmentFactory,
    EventFactory,
    FileAssetFactory,
    ReviewFactory,
    SubmissionFactory,
)
from ..models import EditorAssignment, Submission
from .test_helpers import FakeAnalysisClient, queue_analysis

Stages = Submission.Stages

# Only the "*_factory" fixtures are meant to be used: the model fixtures would share a single account
pytest_factoryboy.register(SubmissionFactory)
pytest_factoryboy.register(FileAssetFactory)
pytest_factoryboy.register(ReviewFactory)
pytest_factoryboy.register(EditorAssignmentFactory)
pytest_factoryboy.register(EventFactory)


@pytest.fixture(autouse=True)
def fake_analysis_service(settings):
    """Never reach the real analysis service from tests."""
    settings.QUILL_ANALYSIS_CLIENT = "quill.workflow.tests.test_helpers.FakeAnalysisClient"
    FakeAnalysisClient.calls.clear()
    yield FakeAnalysisClient
    FakeAnalysisClient.calls.clear()


@pytest.fixture
def failing_analysis_service(settings):
    settings.QUILL_ANALYSIS_CLIENT = "quill.workflow.tests.test_helpers.FailingAnalysisClient"


@pytest.fixture
def domain_events() -> List[DomainEvent]:
    """Collect the domain events emitted during the test."""
    events = []

    def collect(sender, event, **kwargs):
        events.append(event)

    domain_event.connect(collect, dispatch_uid="quill_tests_collect")
    yield events
    domain_event.disconnect(dispatch_uid="quill_tests_collect")


@pytest.fixture
def submission(student) -> Submission:
    """A fresh submission of the "student" fixture, waiting for its analysis."""
    return SubmissionFactory(student=student, title="The lighthouse keeper")


@pytest.fixture
def submission_in_stage(student) -> Callable[..., Submission]:
    def _make(stage: str, **kwargs) -> Submission:
        kwargs.setdefault("student", student)
        return SubmissionFactory(stage=stage, **kwargs)

    return _make


@pytest.fixture
def assigned_submission(student, editor, admin) -> Submission:
    """A submission in EDITOR_MEETING whose student is followed by the "editor" fixture."""
    submission = SubmissionFactory(
        student=student,
        stage=Stages.EDITOR_MEETING,
        assigned_editor=editor,
        analyzed=True,
        plagiarism_score=4,
    )
    EditorAssignment.objects.create(student=student, editor=editor, assigned_by=admin, submission=submission)
    return submission


@pytest.fixture
def queued_analyses(settings) -> List[int]:
    """Keep analysis requests in a list instead of running them."""
    settings.QUILL_ANALYSIS_DISPATCHER = "quill.workflow.tests.test_helpers.queue_analysis"
    queue_analysis.queue.clear()
    yield queue_analysis.queue
    queue_analysis.queue.clear()
