"""
Tokenman Adapters.

Implementations of protocols for external systems.
"""

from tokenman.adapters.codes import (
    RandomCodeGenerator,
    get_code_generator,
    reset_code_generator,
)

__all__ = [
    "RandomCodeGenerator",
    "get_code_generator",
    "reset_code_generator",
]
