"""
Token Code Protocol — Interface for generating token codes.

Tokenman defines this protocol; the host project may plug its own
implementation (e.g. a database sequence or a legacy code service).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenCodeGenerator(Protocol):
    """
    Protocol for token code generation.

    Codes are opaque strings. Uniqueness is enforced by the database;
    on collision the lifecycle asks for another code.
    """

    def generate(self, store) -> str:
        """
        Return a new candidate code.

        Args:
            store: Store the token is being issued to

        Returns:
            Short human-readable code
        """
        ...
