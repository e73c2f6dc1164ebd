"""
Token services — modular organization of token operations.

    from tokenman.services import TokenQueries, TokenQuota, TokenLifecycle
"""

from tokenman.services.lifecycle import TokenLifecycle
from tokenman.services.queries import TokenQueries
from tokenman.services.quota import TokenQuota

__all__ = [
    'TokenQueries',
    'TokenQuota',
    'TokenLifecycle',
]
