"""Role checks.

Every function accepts either an :py:class:`Account` or a workflow ``Actor``: both expose ``role``.
"""

from typing import Iterable

from .constants import OVERRIDE_ROLES, Roles


def has_any_role(user, roles: Iterable[str]) -> bool:
    """
    Check if the given user has one of the given roles.

    :param user: The user (or actor) to check for role.
    :type user: Account or Actor

    :param roles: The accepted roles.
    :type roles: Iterable[str]

    :return: True if the user role is one of the given roles, False otherwise.
    :rtype: bool
    """
    return getattr(user, "role", None) in set(roles)


def has_admin_role(user) -> bool:
    return has_any_role(user, [Roles.ADMIN])


def has_admin_or_operations_role(user) -> bool:
    """Admin and operations may correct any workflow, they share the override rights."""
    return has_any_role(user, OVERRIDE_ROLES)


def has_student_role(user) -> bool:
    return has_any_role(user, [Roles.STUDENT])


def has_editor_role(user) -> bool:
    return has_any_role(user, [Roles.EDITOR])


def has_reviewer_role(user) -> bool:
    return has_any_role(user, [Roles.REVIEWER])
