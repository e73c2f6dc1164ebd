"""
Token queries — read-only operations, no locking.
"""

from django.db.models import Count

from tokenman.exceptions import TokenError
from tokenman.models.enums import TokenStatus
from tokenman.models.token import Token


class TokenQueries:
    """Read-only token query methods."""

    @classmethod
    def get(cls, code: str) -> Token:
        """
        Token by code.

        Raises:
            TokenError('TOKEN_NOT_FOUND')
        """
        try:
            return Token.objects.select_related('store', 'item').get(code=code)
        except Token.DoesNotExist:
            raise TokenError('TOKEN_NOT_FOUND', token=code) from None

    @classmethod
    def pending(cls):
        """Tokens awaiting a decision, newest first."""
        return (
            Token.objects.pending()
            .select_related('store', 'item')
            .order_by('-created_at', '-pk')
        )

    @classmethod
    def for_store(cls, store, status: str | None = None):
        """Tokens of a store, optionally filtered by status."""
        qs = Token.objects.for_store(store).select_related('item')
        if status is not None:
            qs = qs.filter(status=status)
        return qs

    @classmethod
    def status_counts(cls, start=None, end=None) -> dict[str, int]:
        """
        Number of tokens per status, created within [start, end].

        Returns:
            {'pending': n, 'approved': n, 'rejected': n}
        """
        qs = Token.objects.all()
        if start is not None:
            qs = qs.filter(created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lte=end)

        counts = {status: 0 for status in TokenStatus.values}
        for row in qs.values('status').annotate(n=Count('pk')).order_by():
            counts[row['status']] = row['n']
        return counts
