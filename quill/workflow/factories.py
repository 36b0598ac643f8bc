"""Utility factories.

Used in management commands and tests.
"""

import factory
from django.utils import timezone

from quill.accounts.factories import AccountFactory
from quill.accounts.models import Account

from .models import EditorAssignment, Event, FileAsset, Review, Submission
from .storage import DjangoBlobStorage


class SubmissionFactory(factory.django.DjangoModelFactory):
    """Submission still in the analysis stage, with no analysis requested."""

    class Meta:
        model = Submission

    student = factory.SubFactory(AccountFactory, role=Account.Roles.STUDENT)
    title = factory.Faker("sentence", nb_words=4)
    content_ref = factory.LazyAttribute(lambda o: DjangoBlobStorage().store(o.content.encode("utf-8")))
    stage = Submission.Stages.ANALYSIS

    class Params:
        content = factory.Faker("text", max_nb_chars=400)
        analyzed = factory.Trait(
            analysis_status=Submission.AnalysisStatus.COMPLETED,
            analysis_result={"overall_score": 0.87, "sub_scores": {"originality": 0.9}},
        )


class FileAssetFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = FileAsset

    submission = factory.SubFactory(SubmissionFactory)
    uploader = factory.SelfAttribute("submission.student")
    file_type = FileAsset.FileTypes.SUBMISSION_CONTENT
    file_name = "story.pdf"
    mime_type = "application/pdf"
    size = 1024
    version = factory.Sequence(lambda n: n + 1)

    class Params:
        approved = factory.Trait(is_approved=True, decided_at=factory.LazyFunction(timezone.now))


class ReviewFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Review

    submission = factory.SubFactory(SubmissionFactory, stage=Submission.Stages.PLAGIARISM_REVIEW)
    reviewer = factory.SubFactory(AccountFactory, role=Account.Roles.REVIEWER)
    score = 5
    notes = factory.Faker("sentence")
    passed = True


class EditorAssignmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = EditorAssignment

    student = factory.SubFactory(AccountFactory, role=Account.Roles.STUDENT)
    editor = factory.SubFactory(AccountFactory, role=Account.Roles.EDITOR)
    assigned_by = factory.SubFactory(AccountFactory, role=Account.Roles.ADMIN)


class EventFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Event

    title = factory.Faker("sentence", nb_words=3)
    event_date = factory.LazyFunction(lambda: timezone.now() + timezone.timedelta(days=14))
    location = factory.Faker("city")
    created_by = factory.SubFactory(AccountFactory, role=Account.Roles.SALES)
