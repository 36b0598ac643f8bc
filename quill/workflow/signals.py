from django.dispatch import receiver
from django.utils import timezone
from django_fsm.signals import post_transition

from .models import Submission


@receiver(post_transition, sender=Submission)
def log_state_change(instance, **kwargs):
    # saved by the repository together with the new stage
    instance.latest_state_change = timezone.now()
