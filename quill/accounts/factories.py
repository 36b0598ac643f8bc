"""Utility factories.

Used in management commands and tests.
"""

import factory

from .models import Account


class AccountFactory(factory.django.DjangoModelFactory):
    """Account with a role; students by default."""

    class Meta:
        model = Account
        django_get_or_create = ("username",)

    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    email = factory.Faker("email")
    username = factory.Sequence(lambda n: f"user-{n}")
    role = Account.Roles.STUDENT
    is_active = True
