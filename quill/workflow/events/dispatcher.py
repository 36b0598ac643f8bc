"""Notification dispatchers.

Emission is fire-and-forget: nothing a listener does may fail the command that emitted the event.
"""

import abc
import logging

from django.conf import settings
from django.dispatch import Signal
from django.utils.module_loading import import_string

from . import DomainEvent

logger = logging.getLogger(__name__)

# Sent with ``event`` (a DomainEvent) as keyword argument
domain_event = Signal()


class BaseDispatcher(abc.ABC):
    @abc.abstractmethod
    def emit(self, event: DomainEvent) -> None:
        ...


class SignalDispatcher(BaseDispatcher):
    """Fan events out through the ``domain_event`` signal."""

    def emit(self, event: DomainEvent) -> None:
        responses = domain_event.send_robust(sender=self.__class__, event=event)
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    f"Receiver {getattr(receiver, '__qualname__', receiver)} failed on {event.name} "
                    f"for submission {event.submission_id}: {response!r}",
                    exc_info=response,
                )


def get_dispatcher() -> BaseDispatcher:
    return import_string(settings.QUILL_NOTIFICATION_DISPATCHER)()


def emit(event: DomainEvent) -> None:
    """Hand the event to the configured dispatcher; a delivery failure is logged and never reaches the caller."""
    try:
        get_dispatcher().emit(event)
    except Exception:
        logger.exception(f"Delivery of {event.name} for submission {event.submission_id} failed")
