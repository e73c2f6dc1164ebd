"""
Tokenman configuration.

Usage in settings.py:
    TOKENMAN = {
        "QUOTA_DEBIT": "issue",
        "RELEASE_ON_REJECT": False,
        "CODE_GENERATOR": "tokenman.adapters.codes.RandomCodeGenerator",
        "CODE_LENGTH": 8,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings

QUOTA_DEBIT_ON_ISSUE = "issue"
QUOTA_DEBIT_ON_APPROVAL = "approval"


@dataclass
class TokenmanSettings:
    """Tokenman configuration settings."""

    # When the store quota is debited: "issue" (on submit) or "approval"
    QUOTA_DEBIT: str = QUOTA_DEBIT_ON_ISSUE

    # Give the unit back when a token that holds one is rejected
    RELEASE_ON_REJECT: bool = False

    # Token code generator (dotted path)
    CODE_GENERATOR: str = "tokenman.adapters.codes.RandomCodeGenerator"

    # Length of generated token codes
    CODE_LENGTH: int = 8

    # Attempts before giving up on a unique code
    CODE_MAX_ATTEMPTS: int = 5


def get_tokenman_settings() -> TokenmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "TOKENMAN", {})
    return TokenmanSettings(**{
        k: v for k, v in user_settings.items()
        if k in TokenmanSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_tokenman_settings(), name)


tokenman_settings = _LazySettings()
