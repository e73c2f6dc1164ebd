"""
Tokenman Protocols.

Defines interfaces for external system integration.
"""

from tokenman.protocols.codes import TokenCodeGenerator

__all__ = [
    "TokenCodeGenerator",
]
