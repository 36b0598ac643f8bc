"""Default Quill settings.

Deployments import these and override what they need (database, secret key, analysis endpoint).
"""

import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

SECRET_KEY = os.environ.get("QUILL_SECRET_KEY", "change-me")

DEBUG = os.environ.get("QUILL_DEBUG", "") == "1"

ALLOWED_HOSTS = os.environ.get("QUILL_ALLOWED_HOSTS", "localhost").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django_fsm",
    "model_utils",
    "django_q",
    "quill.accounts",
    "quill.workflow",
]

MIDDLEWARE = [
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "quill.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("QUILL_DB_NAME", "quill"),
        "USER": os.environ.get("QUILL_DB_USER", "quill"),
        "PASSWORD": os.environ.get("QUILL_DB_PASSWORD", "quill"),
        "HOST": os.environ.get("QUILL_DB_HOST", "db"),
        "PORT": os.environ.get("QUILL_DB_PORT", "5432"),
    },
}

AUTH_USER_MODEL = "accounts.Account"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en"
TIME_ZONE = "Europe/Rome"
USE_TZ = True

STATIC_URL = "/static/"
MEDIA_ROOT = os.path.join(BASE_DIR, "files")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "root": {
        "level": "DEBUG" if DEBUG else "INFO",
        "handlers": ["console", "log_file"],
    },
    "formatters": {
        "default": {
            "format": "%(levelname)s %(asctime)s %(module)s P:%(process)d T:%(thread)d %(message)s",
        },
        "coloured": {
            "()": "colorlog.ColoredFormatter",
            "format": "%(log_color)s%(levelname)s %(asctime)s M:%(module)s: %(message)s",
            "log_colors": {
                "DEBUG": "cyan",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "coloured",
            "stream": "ext://sys.stdout",
        },
        "log_file": {
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "maxBytes": 1024 * 1024 * 50,  # 50 MB
            "backupCount": 1,
            "filename": os.environ.get("QUILL_LOG_FILE", os.path.join(BASE_DIR, "quill.log")),
            "formatter": "default",
        },
    },
    "loggers": {
        "django.db.backends": {
            "level": "WARNING",
            "handlers": ["console", "log_file"],
            "propagate": False,
        },
        "urllib3": {
            "level": "WARNING",
        },
    },
}

# django-q2: the analysis service is called from a worker, never from the request cycle
Q_CLUSTER = {
    "name": "quill",
    "workers": 2,
    "timeout": 120,
    "retry": 180,
    "orm": "default",
}

# Pluggable collaborators, resolved with import_string
QUILL_REPOSITORY = "quill.workflow.repository.DjangoRepository"
QUILL_NOTIFICATION_DISPATCHER = "quill.workflow.events.dispatcher.SignalDispatcher"
QUILL_BLOB_STORAGE = "quill.workflow.storage.DjangoBlobStorage"
QUILL_ANALYSIS_CLIENT = "quill.workflow.analysis.HttpAnalysisClient"
QUILL_ANALYSIS_DISPATCHER = "quill.workflow.analysis.dispatch_with_django_q"

QUILL_ANALYSIS_URL = os.environ.get("QUILL_ANALYSIS_URL", "http://localhost:8100/analyze")
QUILL_ANALYSIS_API_KEY = os.environ.get("QUILL_ANALYSIS_API_KEY", "")
# Seconds
QUILL_ANALYSIS_TIMEOUT = 30
QUILL_ANALYSIS_STALE_AFTER = 15 * 60

QUILL_SUBMISSION_MIN_LENGTH = 50

QUILL_UPLOAD_SIZE_LIMITS = {
    "SUBMISSION_CONTENT": 10 * 1024 * 1024,
    "PDF_SOFT_COPY": 50 * 1024 * 1024,
    "COVER_DESIGN": 20 * 1024 * 1024,
    "ATTACHMENT": 10 * 1024 * 1024,
}

_DOCUMENT_TYPES = {
    "application/pdf": (".pdf",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (".docx",),
    "text/plain": (".txt",),
}
_IMAGE_TYPES = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/jpg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
}

# mime type -> accepted file name extensions
QUILL_UPLOAD_ALLOWED_TYPES = {
    "SUBMISSION_CONTENT": _DOCUMENT_TYPES,
    "PDF_SOFT_COPY": {"application/pdf": (".pdf",)},
    "COVER_DESIGN": {**_IMAGE_TYPES, "application/pdf": (".pdf",)},
    "ATTACHMENT": {**_DOCUMENT_TYPES, **_IMAGE_TYPES},
}
