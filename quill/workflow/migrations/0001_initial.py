import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
import model_utils.fields
from django.conf import settings
from django.db import migrations, models

STAGE_CHOICES = [
    ("ANALYSIS", "Analysis"),
    ("PLAGIARISM_REVIEW", "Plagiarism review"),
    ("EDITOR_MEETING", "Editor meeting"),
    ("APPROVAL_PROCESS", "Approval process"),
    ("PDF_REVIEW", "PDF review"),
    ("COVER_APPROVAL", "Cover approval"),
    ("EVENT_PLANNING", "Event planning"),
    ("COMPLETED", "Completed"),
]

SCORE_VALIDATORS = [
    django.core.validators.MinValueValidator(0),
    django.core.validators.MaxValueValidator(100),
]


def timestamp_fields():
    return [
        (
            "created",
            model_utils.fields.AutoCreatedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="created",
            ),
        ),
        (
            "modified",
            model_utils.fields.AutoLastModifiedField(
                default=django.utils.timezone.now,
                editable=False,
                verbose_name="modified",
            ),
        ),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *timestamp_fields(),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("content_ref", models.CharField(blank=True, max_length=255, verbose_name="Content reference")),
                (
                    "stage",
                    django_fsm.FSMField(
                        choices=STAGE_CHOICES,
                        default="ANALYSIS",
                        max_length=50,
                        verbose_name="Stage",
                    ),
                ),
                (
                    "plagiarism_score",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=SCORE_VALIDATORS,
                        verbose_name="Plagiarism score",
                    ),
                ),
                ("archived", models.BooleanField(default=False, verbose_name="Archived")),
                (
                    "analysis_status",
                    models.CharField(
                        choices=[
                            ("NOT_REQUESTED", "Not requested"),
                            ("PENDING", "Pending"),
                            ("COMPLETED", "Completed"),
                            ("FAILED", "Failed"),
                        ],
                        default="NOT_REQUESTED",
                        max_length=20,
                        verbose_name="Analysis status",
                    ),
                ),
                ("analysis_result", models.JSONField(blank=True, null=True, verbose_name="Analysis result")),
                ("analysis_error", models.TextField(blank=True, verbose_name="Analysis error")),
                (
                    "analysis_requested_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Analysis requested at"),
                ),
                ("analysis_attempts", models.PositiveSmallIntegerField(default=0, verbose_name="Analysis attempts")),
                ("latest_state_change", models.DateTimeField(blank=True, default=django.utils.timezone.now, null=True)),
                ("lock_version", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "assigned_editor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="edited_submissions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Assigned editor",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submissions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Student",
                    ),
                ),
            ],
            options={
                "verbose_name": "Submission",
                "verbose_name_plural": "Submissions",
                "ordering": ("created", "pk"),
            },
        ),
        migrations.CreateModel(
            name="WorkflowStageRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stage", models.CharField(choices=STAGE_CHOICES, max_length=30, verbose_name="Stage")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("in_progress", "In progress"), ("completed", "Completed")],
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Timestamp")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Actor",
                    ),
                ),
                (
                    "submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stage_records",
                        to="workflow.submission",
                        verbose_name="Submission",
                    ),
                ),
            ],
            options={
                "verbose_name": "Workflow stage record",
                "verbose_name_plural": "Workflow stage records",
                "ordering": ("timestamp", "id"),
            },
        ),
        migrations.CreateModel(
            name="FileAsset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *timestamp_fields(),
                (
                    "file_type",
                    models.CharField(
                        choices=[
                            ("SUBMISSION_CONTENT", "Submission content"),
                            ("PDF_SOFT_COPY", "PDF soft copy"),
                            ("COVER_DESIGN", "Cover design"),
                            ("ATTACHMENT", "Attachment"),
                        ],
                        max_length=30,
                        verbose_name="Type",
                    ),
                ),
                ("file_name", models.CharField(blank=True, max_length=255, verbose_name="File name")),
                ("mime_type", models.CharField(max_length=100, verbose_name="MIME type")),
                ("size", models.PositiveBigIntegerField(verbose_name="Size (bytes)")),
                ("asset_reference", models.CharField(blank=True, max_length=255, verbose_name="Blob reference")),
                ("is_approved", models.BooleanField(blank=True, null=True, verbose_name="Approved")),
                ("approval_notes", models.TextField(blank=True, verbose_name="Decision notes")),
                ("decided_at", models.DateTimeField(blank=True, null=True, verbose_name="Decided at")),
                ("version", models.PositiveIntegerField(verbose_name="Version")),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Decided by",
                    ),
                ),
                (
                    "submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="file_assets",
                        to="workflow.submission",
                        verbose_name="Submission",
                    ),
                ),
                (
                    "uploader",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="uploaded_files",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Uploader",
                    ),
                ),
            ],
            options={
                "verbose_name": "File asset",
                "verbose_name_plural": "File assets",
                "ordering": ("submission", "file_type", "version"),
            },
        ),
        migrations.AddConstraint(
            model_name="fileasset",
            constraint=models.UniqueConstraint(
                fields=("submission", "file_type", "version"),
                name="unique_file_asset_version",
            ),
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "score",
                    models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS, verbose_name="Plagiarism score"),
                ),
                ("notes", models.TextField(verbose_name="Notes")),
                ("passed", models.BooleanField(verbose_name="Passed")),
                ("superseded", models.BooleanField(default=False, verbose_name="Superseded")),
                ("reviewed_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Reviewed at")),
                (
                    "reviewer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Reviewer",
                    ),
                ),
                (
                    "submission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reviews",
                        to="workflow.submission",
                        verbose_name="Submission",
                    ),
                ),
            ],
            options={
                "verbose_name": "Review",
                "verbose_name_plural": "Reviews",
                "ordering": ("reviewed_at", "id"),
            },
        ),
        migrations.AddConstraint(
            model_name="review",
            constraint=models.UniqueConstraint(
                condition=models.Q(("superseded", False)),
                fields=("submission",),
                name="one_active_review_per_submission",
            ),
        ),
        migrations.CreateModel(
            name="EditorAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("assigned_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Assigned at")),
                (
                    "assigned_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Assigned by",
                    ),
                ),
                (
                    "editor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="editor_assignments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Editor",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="editor_assignments_as_student",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Student",
                    ),
                ),
                (
                    "submission",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="editor_assignments",
                        to="workflow.submission",
                        verbose_name="Submission",
                    ),
                ),
            ],
            options={
                "verbose_name": "Editor assignment",
                "verbose_name_plural": "Editor assignments",
                "ordering": ("assigned_at", "id"),
            },
        ),
        migrations.AddConstraint(
            model_name="editorassignment",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_active", True)),
                fields=("student",),
                name="one_active_assignment_per_student",
            ),
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *timestamp_fields(),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("event_date", models.DateTimeField(verbose_name="Date")),
                ("location", models.CharField(blank=True, max_length=255, verbose_name="Location")),
                ("is_virtual", models.BooleanField(default=False, verbose_name="Virtual")),
                ("meeting_link", models.URLField(blank=True, verbose_name="Meeting link")),
                ("max_attendees", models.PositiveIntegerField(blank=True, null=True, verbose_name="Max attendees")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="created_events",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Created by",
                    ),
                ),
                (
                    "submission",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="events",
                        to="workflow.submission",
                        verbose_name="Submission",
                    ),
                ),
            ],
            options={
                "verbose_name": "Event",
                "verbose_name_plural": "Events",
                "ordering": ("event_date", "pk"),
            },
        ),
        migrations.CreateModel(
            name="EventRSVP",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *timestamp_fields(),
                (
                    "status",
                    models.CharField(
                        choices=[("attending", "Attending"), ("maybe", "Maybe"), ("declined", "Declined")],
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("attendee_count", models.PositiveSmallIntegerField(default=1, verbose_name="Attendees")),
                ("dietary_requirements", models.TextField(blank=True, verbose_name="Dietary requirements")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rsvps",
                        to="workflow.event",
                        verbose_name="Event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rsvps",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Event RSVP",
                "verbose_name_plural": "Event RSVPs",
            },
        ),
        migrations.AddConstraint(
            model_name="eventrsvp",
            constraint=models.UniqueConstraint(fields=("event", "user"), name="unique_event_rsvp"),
        ),
    ]
