"""Event planning logic: launch events, readings and the RSVPs to them.

This module should be imported into logic.py
"""

import dataclasses
from datetime import datetime
from typing import Any, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.utils import timezone

from . import permissions
from .custom_types import Actor
from .events import WorkflowEvent
from .exceptions import Forbidden, ValidationError
from .models import Event, EventRSVP
from .repository import BaseRepository, get_repository
from .utils import emit_event


@dataclasses.dataclass
class CreateEvent:
    actor: Actor
    title: str
    event_date: datetime
    description: str = ""
    location: str = ""
    is_virtual: bool = False
    meeting_link: str = ""
    max_attendees: Optional[int] = None
    submission_id: Optional[int] = None
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self) -> None:
        if not permissions.can_organise_event(self.actor):
            raise Forbidden("Only admin, operations and sales can create events.")
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValidationError("Title is required.")
        if len(self.title.strip()) > 255:
            raise ValidationError("Title must be at most 255 characters long.")
        if not isinstance(self.event_date, datetime):
            raise ValidationError("Event date must be a date and time.")
        if self.max_attendees is not None and (
            isinstance(self.max_attendees, bool) or not isinstance(self.max_attendees, int) or self.max_attendees < 1
        ):
            raise ValidationError("Max attendees must be at least 1.")
        if self.meeting_link:
            try:
                URLValidator()(self.meeting_link)
            except DjangoValidationError:
                raise ValidationError(f'"{self.meeting_link}" is not a valid meeting link.')

    def run(self) -> Event:
        self.check_conditions()
        with self.repository.atomic():
            submission = None
            if self.submission_id is not None:
                submission = self.repository.get_submission(self.submission_id)
            event = self.repository.save_event(
                Event(
                    title=self.title.strip(),
                    description=self.description,
                    event_date=self.event_date,
                    location=self.location,
                    is_virtual=self.is_virtual,
                    meeting_link=self.meeting_link,
                    max_attendees=self.max_attendees,
                    created_by_id=self.actor.id,
                    submission=submission,
                ),
            )
        emit_event(WorkflowEvent.ON_EVENT_CREATED, self.submission_id, self.actor, event_id=event.pk)
        return event


@dataclasses.dataclass
class RsvpToEvent:
    """
    Answer an event invitation.

    A user has one answer per event: answering again updates it. Seats are counted on "attending" answers only.
    """

    actor: Actor
    event_id: int
    status: str
    attendee_count: Any = 1
    dietary_requirements: str = ""
    notes: str = ""
    repository: BaseRepository = dataclasses.field(default_factory=get_repository)

    def check_conditions(self, event: Event) -> None:
        if self.actor.id is None:
            raise Forbidden("Only users can answer events.")
        if not event.is_active:
            raise ValidationError("This event is no longer active.")
        if event.event_date < timezone.now():
            raise ValidationError("This event has already taken place.")
        if self.status not in EventRSVP.Status.values:
            raise ValidationError(f'"{self.status}" is not a valid answer.')
        if (
            isinstance(self.attendee_count, bool)
            or not isinstance(self.attendee_count, int)
            or self.attendee_count < 1
        ):
            raise ValidationError("Attendee count must be at least 1.")
        if self.status == EventRSVP.Status.ATTENDING and event.max_attendees:
            taken = self.repository.count_attendees(event.pk, exclude_user_id=self.actor.id)
            if taken + self.attendee_count > event.max_attendees:
                raise ValidationError(
                    f"Only {max(event.max_attendees - taken, 0)} seats left for this event.",
                )

    def run(self) -> EventRSVP:
        with self.repository.atomic():
            event = self.repository.get_event(self.event_id)
            self.check_conditions(event)
            rsvp = self.repository.get_rsvp(event.pk, self.actor.id) or EventRSVP(event=event, user_id=self.actor.id)
            rsvp.status = self.status
            rsvp.attendee_count = self.attendee_count
            rsvp.dietary_requirements = self.dietary_requirements
            rsvp.notes = self.notes
            self.repository.save_rsvp(rsvp)
        emit_event(
            WorkflowEvent.ON_RSVP_RECORDED,
            event.submission_id,
            self.actor,
            event_id=event.pk,
            status=rsvp.status,
            attendee_count=rsvp.attendee_count,
        )
        return rsvp
