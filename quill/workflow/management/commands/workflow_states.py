from django.core.management.base import BaseCommand

from ...models import Submission
from ...states import STAGE_GUARDS


class Command(BaseCommand):
    help = "List the pipeline stages with the exit guard of each one and how many submissions are there."  # noqa: A003

    def handle(self, *args, **options):
        for stage in Submission.Stages:
            count = Submission.objects.filter(archived=False).in_stage(stage).count()
            guard = STAGE_GUARDS.get(stage)
            if guard is None:
                self.stdout.write(f"{stage.value:<20} {count:>5}  (terminal)")
                continue
            self.stdout.write(
                f"{stage.value:<20} {count:>5}  exit: {guard.transition} "
                f"[{guard.permission.__name__}, {guard.precondition.__name__}]",
            )
