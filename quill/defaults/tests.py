"""
Settings for pytest.

isort:skip_file
"""

from collections.abc import Mapping  # noqa

from .settings import *  # noqa

SECRET_KEY = "uxprsdhk^gzd-r=_287byolxn)$k6tsd8_cepl^s^tms2w1qrv"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    },
}

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "root": {
        "level": "DEBUG",
        "handlers": ["console"],
    },
    "handlers": {
        "console": {
            "level": "WARNING",
            "class": "logging.StreamHandler",
        },
    },
}

# The analysis task runs in-process so tests see its effects immediately
QUILL_ANALYSIS_DISPATCHER = "quill.workflow.analysis.dispatch_inline"
QUILL_ANALYSIS_URL = "http://analysis.invalid/analyze"

Q_CLUSTER = {
    "name": "quill-tests",
    "sync": True,
    "orm": "default",
}


class SkipMigrations(Mapping):
    """Build the test database straight from the models."""

    def __getitem__(self, key):
        return None

    def __contains__(self, key):
        return True

    def __iter__(self):
        return iter("")

    def __len__(self):
        return 1


MIGRATION_MODULES = SkipMigrations()
