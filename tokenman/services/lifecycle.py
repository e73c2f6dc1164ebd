"""
Token lifecycle — issue, approve, reject.

All methods use transaction.atomic(); decisions lock the token row.
"""

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from tokenman.adapters.codes import get_code_generator
from tokenman.conf import tokenman_settings
from tokenman.exceptions import TokenError
from tokenman.models.enums import TokenStatus
from tokenman.models.token import Token, TokenItem
from tokenman.pricing import HUNDRED, money
from tokenman.services.quota import TokenQuota

logger = logging.getLogger('tokenman')

FOUR_PLACES = Decimal('0.0001')


def _get_token_for_update(token_ref) -> Token:
    """Lock a token given the instance, its pk or its code."""
    qs = Token.objects.select_for_update()
    try:
        if isinstance(token_ref, Token):
            return qs.get(pk=token_ref.pk)
        if isinstance(token_ref, int):
            return qs.get(pk=token_ref)
        return qs.get(code=str(token_ref).strip())
    except Token.DoesNotExist:
        raise TokenError('TOKEN_NOT_FOUND', token=str(token_ref)) from None


def _ensure_pending(token: Token, target: str) -> None:
    if token.status != TokenStatus.PENDING:
        raise TokenError(
            'INVALID_TRANSITION',
            token=token.code,
            current=token.status,
            target=target,
        )


class TokenLifecycle:
    """Token state machine methods."""

    @classmethod
    def create(cls, request, verdict, quota_debited: bool = False) -> Token:
        """
        Persist a pending token and its snapshot.

        Token and TokenItem are written in the same transaction; callers
        that also reserve quota wrap both in their own atomic block.

        Raises:
            TokenError('NOT_ACCEPTED'): If the verdict is a rejection
            TokenError('CODE_GENERATION_FAILED'): If no unique code was found
        """
        if not verdict.accepted:
            raise TokenError('NOT_ACCEPTED', reason=verdict.code)

        quote = verdict.quote
        ceiling = quote.ceiling

        with transaction.atomic():
            token = cls._insert_token(request, quota_debited)
            TokenItem.objects.create(
                token=token,
                product=request.product,
                product_label=request.product.label,
                quantity=request.quantity,
                regular_price=money(quote.regular_price),
                requested_price=money(quote.requested_price),
                discount=money(quote.discount),
                cost=quote.rates.cost.quantize(FOUR_PLACES),
                tax_rate=(quote.rates.tax_rate * HUNDRED).quantize(FOUR_PLACES),
                federal_tax_rate=(quote.rates.federal_rate * HUNDRED).quantize(FOUR_PLACES),
                minimum_price=money(quote.minimum_price),
                uf_margin=quote.uf_margin.quantize(FOUR_PLACES),
                ceiling_value=ceiling.value,
                ceiling_kind=ceiling.kind or '',
                ceiling_source=ceiling.source,
                authorization_label=quote.authorization_label,
                note=verdict.note,
            )

        logger.info(
            "token.created",
            extra={
                "token": token.code,
                "store": request.store.code,
                "product": request.product.code,
                "price": str(quote.requested_price),
                "quota_debited": quota_debited,
            },
        )
        return token

    @classmethod
    def _insert_token(cls, request, quota_debited: bool) -> Token:
        generator = get_code_generator()
        attempts = tokenman_settings.CODE_MAX_ATTEMPTS

        for _ in range(attempts):
            code = generator.generate(request.store)
            if Token.objects.filter(code=code).exists():
                continue
            try:
                with transaction.atomic():
                    return Token.objects.create(
                        store=request.store,
                        code=code,
                        status=TokenStatus.PENDING,
                        customer_identified=request.customer_identified,
                        quota_debited=quota_debited,
                    )
            except IntegrityError:
                # Lost a race for the same code; anything else is real
                if not Token.objects.filter(code=code).exists():
                    raise
            logger.warning("token.code.collision", extra={"code": code})

        raise TokenError('CODE_GENERATION_FAILED', attempts=attempts)

    @classmethod
    def approve(cls, token_ref, user=None, note: str = '') -> Token:
        """
        Approve a pending token.

        Transition: PENDING -> APPROVED

        A token that holds no unit yet (issued under QUOTA_DEBIT="approval")
        debits the store here, whatever the current policy.

        Raises:
            TokenError('INVALID_TRANSITION'): If the token is not pending
            TokenError('QUOTA_EXHAUSTED'): Debit on approval with no quota left
        """
        with transaction.atomic():
            token = _get_token_for_update(token_ref)
            _ensure_pending(token, TokenStatus.APPROVED)

            if not token.quota_debited:
                if not TokenQuota.reserve(token.store):
                    raise TokenError('QUOTA_EXHAUSTED', store=token.store.code)
                token.quota_debited = True

            token.status = TokenStatus.APPROVED
            token.validated_at = timezone.now()
            token.validated_by = user
            token.decision_note = note
            token.save(update_fields=[
                'status', 'validated_at', 'validated_by', 'decision_note', 'quota_debited',
            ])

        logger.info(
            "token.approved",
            extra={"token": token.code, "store": token.store_id},
        )
        return token

    @classmethod
    def reject(cls, token_ref, user=None, note: str = '') -> Token:
        """
        Reject a pending token.

        Transition: PENDING -> REJECTED

        The unit debited at issue stays consumed unless RELEASE_ON_REJECT.

        Raises:
            TokenError('INVALID_TRANSITION'): If the token is not pending
        """
        with transaction.atomic():
            token = _get_token_for_update(token_ref)
            _ensure_pending(token, TokenStatus.REJECTED)

            if token.quota_debited and tokenman_settings.RELEASE_ON_REJECT:
                TokenQuota.release(token.store)
                token.quota_debited = False

            token.status = TokenStatus.REJECTED
            token.validated_at = timezone.now()
            token.validated_by = user
            token.decision_note = note
            token.save(update_fields=[
                'status', 'validated_at', 'validated_by', 'decision_note', 'quota_debited',
            ])

        logger.info(
            "token.rejected",
            extra={"token": token.code, "store": token.store_id, "note": note},
        )
        return token
