from django.apps import AppConfig


class WorkflowConfig(AppConfig):
    """Configuration for this django app."""

    name = "quill.workflow"
    label = "workflow"
    verbose_name = "Quill submission workflow"

    def ready(self):
        from . import signals  # noqa: F401

        self.register_events()

    def register_events(self):
        """Connect our handlers to the domain events."""
        from .events.dispatcher import domain_event
        from .events.handlers import log_domain_event

        domain_event.connect(log_domain_event, dispatch_uid="quill_log_domain_event")
