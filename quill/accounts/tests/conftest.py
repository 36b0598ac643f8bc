"""pytest common stuff and fixtures."""

import pytest
import pytest_factoryboy

from quill.accounts.factories import AccountFactory
from quill.accounts.models import Account

Roles = Account.Roles


@pytest.fixture
def student() -> Account:
    return AccountFactory(username="student", role=Roles.STUDENT)


@pytest.fixture
def other_student() -> Account:
    return AccountFactory(username="other-student", role=Roles.STUDENT)


@pytest.fixture
def editor() -> Account:
    return AccountFactory(username="editor", role=Roles.EDITOR)


@pytest.fixture
def other_editor() -> Account:
    return AccountFactory(username="other-editor", role=Roles.EDITOR)


@pytest.fixture
def reviewer() -> Account:
    return AccountFactory(username="reviewer", role=Roles.REVIEWER)


@pytest.fixture
def admin() -> Account:
    return AccountFactory(username="admin", role=Roles.ADMIN)


@pytest.fixture
def operations() -> Account:
    return AccountFactory(username="operations", role=Roles.OPERATIONS)


@pytest.fixture
def sales() -> Account:
    return AccountFactory(username="sales", role=Roles.SALES)


# Produces "account_factory" and "account" fixtures
pytest_factoryboy.register(AccountFactory)
