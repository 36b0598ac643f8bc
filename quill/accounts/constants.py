"""Role groupings used by the workflow guards.

Role values live in :py:class:`quill.accounts.models.Account.Roles`.
"""

from .models import Account

Roles = Account.Roles

# Roles allowed to set any stage directly, to unblock stuck submissions
OVERRIDE_ROLES = frozenset({Roles.ADMIN, Roles.OPERATIONS})

STAFF_ROLES = frozenset({Roles.ADMIN, Roles.OPERATIONS, Roles.SALES})

REVIEW_ROLES = frozenset({Roles.REVIEWER, Roles.ADMIN})

EVENT_ORGANISER_ROLES = frozenset({Roles.ADMIN, Roles.OPERATIONS, Roles.SALES})
