"""Quill accounts."""

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models
from django.db.models import QuerySet
from django.utils.translation import gettext_lazy as _


class AccountQuerySet(models.QuerySet):
    def with_role(self, role: str) -> QuerySet:
        return self.filter(role=role)

    def active(self) -> QuerySet:
        return self.filter(is_active=True)

    def editors(self) -> QuerySet:
        """Return editors in creation order, which is the workload tie-break order."""
        return self.with_role(Account.Roles.EDITOR).order_by("date_joined", "pk")

    def reviewers(self) -> QuerySet:
        return self.with_role(Account.Roles.REVIEWER)


class AccountManager(UserManager.from_queryset(AccountQuerySet)):
    pass


class Account(AbstractUser):
    """
    A user of the pipeline.

    The role is chosen when the account is created. Changing it is an administrative operation and no workflow
    operation ever touches it.
    """

    class Roles(models.TextChoices):
        STUDENT = "STUDENT", _("Student")
        ADMIN = "ADMIN", _("Admin")
        EDITOR = "EDITOR", _("Editor")
        REVIEWER = "REVIEWER", _("Reviewer")
        SALES = "SALES", _("Sales")
        OPERATIONS = "OPERATIONS", _("Operations")

    role = models.CharField(_("Role"), max_length=20, choices=Roles.choices, default=Roles.STUDENT)

    objects = AccountManager()

    class Meta:
        verbose_name = _("Account")
        verbose_name_plural = _("Accounts")
        ordering = ("date_joined", "pk")

    def __str__(self):
        return self.get_full_name() or self.username

    def has_role(self, *roles: str) -> bool:
        return self.role in roles
