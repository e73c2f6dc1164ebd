"""Django app configuration for Tokenman."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TokenmanConfig(AppConfig):
    """Configuration for Tokenman app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tokenman"
    verbose_name = _("Tokens de Desconto")
