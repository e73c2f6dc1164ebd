"""
Token quota — per-store budget of discount tokens.

Every change is a single UPDATE with F() expressions; reserve() adds the
"quota > 0" guard to the WHERE clause so the check and the decrement are
one statement. Never read-modify-save a Store to change its quota.
"""

import logging

from django.db import transaction
from django.db.models import F

from tokenman.exceptions import TokenError
from tokenman.models.store import Store

logger = logging.getLogger('tokenman')


class TokenQuota:
    """Quota ledger methods."""

    @classmethod
    def reserve(cls, store: Store) -> bool:
        """
        Take one unit of the store's quota.

        Returns:
            True if reserved, False if the quota is exhausted

        Concurrency:
            - Conditional UPDATE ... WHERE token_quota > 0
            - Two callers racing for the last unit: exactly one wins,
              even when both hold a stale Store instance
        """
        with transaction.atomic():
            updated = Store.objects.filter(
                pk=store.pk,
                token_quota__gt=0,
            ).update(token_quota=F('token_quota') - 1)
            store.refresh_from_db(fields=['token_quota'])

        if not updated:
            logger.warning(
                "token.quota.exhausted",
                extra={"store": store.code},
            )
            return False

        logger.info(
            "token.quota.reserved",
            extra={"store": store.code, "remaining": store.token_quota},
        )
        return True

    @classmethod
    def release(cls, store: Store) -> int:
        """
        Give one unit back to the store.

        Returns:
            Remaining quota after release
        """
        with transaction.atomic():
            Store.objects.filter(pk=store.pk).update(
                token_quota=F('token_quota') + 1
            )
            store.refresh_from_db(fields=['token_quota'])

        logger.info(
            "token.quota.released",
            extra={"store": store.code, "remaining": store.token_quota},
        )
        return store.token_quota

    @classmethod
    def set_quota(cls, store: Store, quantity: int) -> int:
        """
        Replace the store's quota (operator replenishment).

        Raises:
            TokenError('INVALID_QUANTITY'): If quantity is negative
        """
        if quantity is None or int(quantity) < 0:
            raise TokenError('INVALID_QUANTITY', requested=quantity)

        with transaction.atomic():
            Store.objects.filter(pk=store.pk).update(token_quota=int(quantity))
            store.refresh_from_db(fields=['token_quota'])

        logger.info(
            "token.quota.set",
            extra={"store": store.code, "quota": store.token_quota},
        )
        return store.token_quota

    @classmethod
    def remaining(cls, store: Store) -> int:
        """Current quota, read from the database."""
        return Store.objects.values_list('token_quota', flat=True).get(pk=store.pk)
