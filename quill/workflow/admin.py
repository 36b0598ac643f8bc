from django.contrib import admin

from .models import (
    EditorAssignment,
    Event,
    EventRSVP,
    FileAsset,
    Review,
    Submission,
    WorkflowStageRecord,
)


class WorkflowStageRecordInline(admin.TabularInline):
    model = WorkflowStageRecord
    extra = 0
    can_delete = False
    readonly_fields = ["stage", "status", "actor", "timestamp", "notes"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """Helper class to "admin" Submission.

    The stage is read-only: stage changes go through the workflow commands so that they are recorded.
    """

    list_display = ["id", "title", "student", "stage", "assigned_editor", "archived", "analysis_status"]
    list_filter = ["stage", "archived", "analysis_status"]
    search_fields = ["title", "student__username", "student__last_name"]
    readonly_fields = ["stage", "plagiarism_score", "lock_version", "latest_state_change"]
    raw_id_fields = ["student", "assigned_editor"]
    inlines = [WorkflowStageRecordInline]


@admin.register(FileAsset)
class FileAssetAdmin(admin.ModelAdmin):
    """Helper class to "admin" FileAsset."""

    list_display = ["id", "submission", "file_type", "version", "is_approved", "uploader"]
    list_filter = ["file_type", "is_approved"]
    raw_id_fields = ["submission", "uploader", "approved_by"]


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    """Helper class to "admin" Review."""

    list_display = ["id", "submission", "reviewer", "score", "passed", "superseded", "reviewed_at"]
    list_filter = ["passed", "superseded"]
    raw_id_fields = ["submission", "reviewer"]


@admin.register(EditorAssignment)
class EditorAssignmentAdmin(admin.ModelAdmin):
    """Helper class to "admin" EditorAssignment."""

    list_display = ["id", "student", "editor", "submission", "is_active", "assigned_at"]
    list_filter = ["is_active"]
    raw_id_fields = ["student", "editor", "assigned_by", "submission"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Helper class to "admin" Event."""

    list_display = ["title", "event_date", "is_virtual", "max_attendees", "is_active"]
    list_filter = ["is_active", "is_virtual"]
    search_fields = ["title"]


admin.site.register(EventRSVP)
