"""Business-rule failures of the workflow engine.

Logic classes raise these; :py:mod:`quill.workflow.commands` turns them into :py:class:`Err` values. Anything that is
not a :py:class:`WorkflowError` is an infrastructure fault and propagates.
"""

import enum


class ErrorKind(str, enum.Enum):
    VALIDATION_ERROR = "ValidationError"
    FORBIDDEN = "Forbidden"
    INVALID_TRANSITION = "InvalidTransition"
    NOT_FOUND = "NotFound"
    ALREADY_ARCHIVED = "AlreadyArchived"
    CONCURRENT_MODIFICATION = "ConcurrentModification"
    EDITOR_INACTIVE = "EditorInactive"
    TOO_LARGE = "TooLarge"
    UNSUPPORTED_TYPE = "UnsupportedType"


class WorkflowError(Exception):
    kind: ErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.kind.value

    def __str__(self):
        return self.message


class ValidationError(WorkflowError):
    """Bad input shape or range; the caller can fix it and retry."""

    kind = ErrorKind.VALIDATION_ERROR


class Forbidden(WorkflowError):
    kind = ErrorKind.FORBIDDEN


class InvalidTransition(WorkflowError):
    kind = ErrorKind.INVALID_TRANSITION


class NotFound(WorkflowError):
    kind = ErrorKind.NOT_FOUND


class AlreadyArchived(WorkflowError):
    kind = ErrorKind.ALREADY_ARCHIVED


class ConcurrentModification(WorkflowError):
    """Someone else changed the submission first; retry with fresh state."""

    kind = ErrorKind.CONCURRENT_MODIFICATION


class EditorInactive(WorkflowError):
    kind = ErrorKind.EDITOR_INACTIVE


class TooLarge(WorkflowError):
    kind = ErrorKind.TOO_LARGE


class UnsupportedType(WorkflowError):
    kind = ErrorKind.UNSUPPORTED_TYPE
