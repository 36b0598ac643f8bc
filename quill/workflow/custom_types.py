import dataclasses
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, NamedTuple, Optional, TypeVar, Union

from .exceptions import ErrorKind

if TYPE_CHECKING:
    from quill.accounts.models import Account

    from .models import Review

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class Actor:
    """
    Who is issuing a command.

    The auth layer builds it and the engine trusts it: no credential is checked here.
    """

    id: Optional[int]  # noqa: A003
    role: Optional[str]
    is_system: bool = False

    @classmethod
    def system(cls) -> "Actor":
        """The actor for automated actions (analysis completion, scheduled retries)."""
        return cls(id=None, role=None, is_system=True)

    @classmethod
    def from_user(cls, user: "Account") -> "Actor":
        return cls(id=user.pk, role=user.role)

    def __str__(self):
        if self.is_system:
            return "system"
        return f"{self.role}#{self.id}"


@dataclasses.dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None
    ok: ClassVar[bool] = True


@dataclasses.dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""
    ok: ClassVar[bool] = False


Result = Union[Ok, Err]


class ReviewOutcome(NamedTuple):
    """
    Outcome of a review submission.

    The review is always saved when this is returned; ``advance`` tells separately whether the stage moved.
    """

    review: "Review"
    advance: Optional[Result]
    """None when the review did not pass and no advance was attempted."""


class BulkItemResult(NamedTuple):
    submission_id: Any
    result: Result


class EditorWorkload(NamedTuple):
    editor: "Account"
    active_count: int
    date_joined: datetime
