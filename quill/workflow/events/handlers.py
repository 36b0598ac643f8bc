"""Handlers functions.

Registered onto the ``domain_event`` signal in the `apps` module.
"""

import logging

from . import DomainEvent

logger = logging.getLogger(__name__)


def log_domain_event(sender, event: DomainEvent, **kwargs) -> None:
    """Keep a trace of every emitted event in the application log."""
    logger.info(
        f"{event.name}: submission={event.submission_id} actor={event.actor_id} payload={event.payload}",
    )
