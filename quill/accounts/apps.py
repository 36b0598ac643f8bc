"""Configure this application."""

# https://docs.djangoproject.com/en/4.2/ref/applications/
from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for this django app."""

    name = "quill.accounts"
    label = "accounts"
    verbose_name = "Quill accounts"
    default_auto_field = "django.db.models.BigAutoField"
