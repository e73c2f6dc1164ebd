"""
Token Service — The single public interface for discount tokens.

Usage:
    from tokenman import tokens, TokenRequest

    request = TokenRequest(product, store, requested_price=Decimal('19.90'))
    verdict = tokens.validate(request)     # preview, no writes
    result = tokens.submit(request)        # validate + reserve + create
    if result.issued:
        tokens.approve(result.code, user=request_user)
"""

import logging
from dataclasses import dataclass

from django.db import models, transaction
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from tokenman.conf import QUOTA_DEBIT_ON_APPROVAL, tokenman_settings
from tokenman.margins import as_day
from tokenman.models.enums import MarginScope
from tokenman.models.margin import ProductMargin, SubgroupMargin
from tokenman.models.token import Token
from tokenman.services.lifecycle import TokenLifecycle
from tokenman.services.queries import TokenQueries
from tokenman.services.quota import TokenQuota
from tokenman.validation import TokenRequest, Verdict, validate

logger = logging.getLogger('tokenman')


class SubmissionOutcome(models.TextChoices):
    """What happened to a submitted request."""
    ISSUED = 'issued', _('Solicitado')
    REJECTED = 'rejected', _('Reprovado')
    EXHAUSTED = 'exhausted', _('Sem Token Disponível')


@dataclass(frozen=True)
class Submission:
    """Result of Tokens.submit()."""

    outcome: SubmissionOutcome
    verdict: Verdict
    token: Token | None = None

    @property
    def issued(self) -> bool:
        return self.outcome == SubmissionOutcome.ISSUED

    @property
    def code(self) -> str | None:
        return self.token.code if self.token is not None else None


def load_margins(product, store, now=None):
    """
    Margin rows that may apply to a product at a store on a day.

    Subgroup rows come region-specific first, then newest first, so the
    price floor (first match) and the ceiling resolver agree.
    """
    day = as_day(now)

    product_margins = list(
        ProductMargin.objects.filter(product=product)
        .valid_on(day)
        .filter(
            Q(scope=MarginScope.REGION, region_id=store.region_id)
            | Q(scope=MarginScope.STORE, store=store)
        )
        .newest_first()
    )

    subgroup_margins = []
    if product.subgroup_code is not None:
        rows = (
            SubgroupMargin.objects.filter(subgroup_code=product.subgroup_code)
            .valid_on(day)
            .filter(Q(region_id=store.region_id) | Q(region__isnull=True))
            .newest_first()
        )
        subgroup_margins = sorted(rows, key=lambda s: s.region_id is None)

    return product_margins, subgroup_margins


class Tokens:
    """
    Single interface for token operations.

    validate() never writes. submit(), approve() and reject() run under
    transaction.atomic(); see tokenman.services for locking details.
    """

    # ══════════════════════════════════════════════════════════════
    # VALIDATION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def validate(cls, request: TokenRequest, now=None) -> Verdict:
        """
        Run the policy rules for a request (preview / what-if).

        Raises:
            DomainError: Calculation or reference-data problems
        """
        product_margins, subgroup_margins = load_margins(request.product, request.store, now)
        verdict = validate(
            request,
            product_margins=product_margins,
            subgroup_margins=subgroup_margins,
            now=now,
        )
        if not verdict.accepted:
            logger.info(
                "token.validate.rejected",
                extra={
                    "store": request.store.code,
                    "product": request.product.code,
                    "price": str(request.requested_price),
                    "reason": verdict.code.value,
                },
            )
        return verdict

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def submit(cls, request: TokenRequest, now=None) -> Submission:
        """
        Validate and, if accepted, issue a pending token.

        Quota debit depends on TOKENMAN["QUOTA_DEBIT"]:
        - "issue": one unit is reserved here, in the same transaction
          that creates the token
        - "approval": the remaining quota is only checked here

        Returns:
            Submission with outcome ISSUED, REJECTED or EXHAUSTED.
            Rejected and exhausted submissions write nothing.
        """
        verdict = cls.validate(request, now=now)
        if not verdict.accepted:
            return Submission(SubmissionOutcome.REJECTED, verdict)

        debit_on_issue = tokenman_settings.QUOTA_DEBIT != QUOTA_DEBIT_ON_APPROVAL

        try:
            with transaction.atomic():
                if debit_on_issue:
                    has_quota = TokenQuota.reserve(request.store)
                else:
                    has_quota = TokenQuota.remaining(request.store) > 0

                if not has_quota:
                    logger.warning(
                        "token.submit.exhausted",
                        extra={"store": request.store.code},
                    )
                    return Submission(SubmissionOutcome.EXHAUSTED, verdict)

                token = TokenLifecycle.create(request, verdict, quota_debited=debit_on_issue)
        except Exception:
            # The reservation was rolled back; drop the decremented value
            request.store.refresh_from_db(fields=['token_quota'])
            raise

        return Submission(SubmissionOutcome.ISSUED, verdict, token)

    @classmethod
    def approve(cls, token_ref, user=None, note: str = '') -> Token:
        """Approve a pending token (instance, pk or code)."""
        return TokenLifecycle.approve(token_ref, user=user, note=note)

    @classmethod
    def reject(cls, token_ref, user=None, note: str = '') -> Token:
        """Reject a pending token (instance, pk or code)."""
        return TokenLifecycle.reject(token_ref, user=user, note=note)

    # ══════════════════════════════════════════════════════════════
    # QUOTA
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def quota(cls, store) -> int:
        """Tokens the store may still receive."""
        return TokenQuota.remaining(store)

    @classmethod
    def set_quota(cls, store, quantity: int) -> int:
        """Replace the store's quota."""
        return TokenQuota.set_quota(store, quantity)

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get(cls, code: str) -> Token:
        return TokenQueries.get(code)

    @classmethod
    def pending(cls):
        return TokenQueries.pending()

    @classmethod
    def for_store(cls, store, status: str | None = None):
        return TokenQueries.for_store(store, status=status)

    @classmethod
    def status_counts(cls, start=None, end=None) -> dict[str, int]:
        return TokenQueries.status_counts(start=start, end=end)
