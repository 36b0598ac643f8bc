"""Request the analysis again for submissions stuck in the analysis stage.

Meant to be scheduled (cron or django-q2 schedule).
"""

import logging

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from ...commands import trigger_analysis
from ...custom_types import Actor
from ...repository import get_repository

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Request the analysis again for submissions stuck in the analysis stage."""

    help = __doc__  # noqa: A003

    def add_arguments(self, parser):
        parser.add_argument(
            "--stale-after",
            type=int,
            default=None,
            help="Seconds after which a pending analysis is considered lost. Defaults to QUILL_ANALYSIS_STALE_AFTER.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only list the submissions that would be retried.",
        )

    def handle(self, *args, **options):
        stale_after = options["stale_after"] or settings.QUILL_ANALYSIS_STALE_AFTER
        pending_before = timezone.now() - timezone.timedelta(seconds=stale_after)
        submissions = get_repository().list_stalled_analyses(pending_before)
        retried = 0
        for submission in submissions:
            if options["dry_run"]:
                self.stdout.write(f"Would retry {submission.pk} ({submission.analysis_status})")
                continue
            result = trigger_analysis(submission.pk, Actor.system())
            if result.ok:
                retried += 1
            else:
                logger.warning(f"Analysis of submission {submission.pk} not retried: {result.message}")
        self.stdout.write(f"Retried {retried} of {len(submissions)} stalled analyses.")
