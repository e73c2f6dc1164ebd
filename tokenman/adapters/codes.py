"""
Token code adapters.

RandomCodeGenerator is the default. get_code_generator() loads the
configured class once and caches the instance.

Settings:
    TOKENMAN = {
        "CODE_GENERATOR": "myproject.codes.SequenceCodeGenerator",
        "CODE_LENGTH": 8,
    }
"""

from __future__ import annotations

import logging
import secrets
import string
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from tokenman.conf import tokenman_settings
from tokenman.protocols.codes import TokenCodeGenerator

logger = logging.getLogger(__name__)

# No 0/O or 1/I: codes get read aloud at the counter
ALPHABET = ''.join(
    c for c in string.ascii_uppercase + string.digits if c not in '0O1I'
)


class RandomCodeGenerator:
    """Random uppercase alphanumeric codes of CODE_LENGTH characters."""

    def __init__(self, length: int | None = None):
        self.length = length or tokenman_settings.CODE_LENGTH

    def generate(self, store) -> str:
        return ''.join(secrets.choice(ALPHABET) for _ in range(self.length))


# Cached generator instance
_lock = threading.Lock()
_code_generator: TokenCodeGenerator | None = None


def get_code_generator() -> TokenCodeGenerator:
    """
    Return the configured token code generator.

    Raises:
        ImproperlyConfigured: If the import fails or the class does not
            implement TokenCodeGenerator
    """
    global _code_generator

    if _code_generator is None:
        with _lock:
            if _code_generator is None:  # double-checked
                path = tokenman_settings.CODE_GENERATOR
                try:
                    generator_class = import_string(path)
                except ImportError as e:
                    raise ImproperlyConfigured(
                        f"Failed to import token code generator '{path}': {e}"
                    ) from e

                generator = generator_class()
                if not isinstance(generator, TokenCodeGenerator):
                    raise ImproperlyConfigured(
                        f"'{path}' does not implement TokenCodeGenerator"
                    )
                _code_generator = generator
                logger.debug("Loaded token code generator: %s", path)

    return _code_generator


def reset_code_generator() -> None:
    """Reset the cached generator. Useful for testing."""
    global _code_generator
    _code_generator = None
