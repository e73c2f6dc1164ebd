"""
Policy validator — ordered accept/reject rules for a token request.

Rules run in a fixed order and the first failure wins; later rules rely
on what earlier ones established (e.g. the margin rule needs a positive
price). A failing rule is a normal Verdict, never an exception. Only
DomainError from the pricing/margin layers propagates.

Usage:
    verdict = validate(request, product_margins=..., subgroup_margins=...)
    if not verdict.accepted:
        print(verdict.code, verdict.message, verdict.note)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.db import models

from tokenman.exceptions import DomainError
from tokenman.margins import MarginCeiling, resolve_ceiling
from tokenman.pricing import (
    ZERO,
    Rates,
    discount_percent,
    floor_price,
    realized_margin,
    regular_price,
    resolve_rates,
    to_decimal,
)

AUTHORIZATION_FREE = 'SEM ALÇADA'
AUTHORIZATION_REQUIRED = 'COM ALÇADA'
ACCEPTED_MESSAGE = 'Solicitado'


class RejectionCode(models.TextChoices):
    """Why a request was rejected. Order matches rule evaluation."""
    INVALID_PRICE = 'INVALID_PRICE', 'Preço solicitado inválido.'
    BELOW_FLOOR = 'BELOW_FLOOR', (
        'Desconto reprovado, devido ao preço ser inferior ao Preço Mínimo (R$ {minimum_price:.2f}).'
    )
    NOT_A_DISCOUNT = 'NOT_A_DISCOUNT', 'Desconto é inválido, preço maior que Valor Regular.'
    REQUIRES_AUTHORIZATION = 'REQUIRES_AUTHORIZATION', (
        'Possui outras Alçadas para realização de Desconto.'
    )
    BELOW_MARGIN_CEILING = 'BELOW_MARGIN_CEILING', (
        'Desconto token reprovado, devido a margem UF abaixo da margem ZVDC ({ceiling}).'
    )
    STORE_TARGET_NON_COMPLIANT = 'STORE_TARGET_NON_COMPLIANT', (
        'Bloqueado devido a Meta de Desconto estar irregular.'
    )
    STORE_EARNINGS_NON_COMPLIANT = 'STORE_EARNINGS_NON_COMPLIANT', (
        'Bloqueado devido a DRE estar irregular.'
    )
    REGION_INACTIVE = 'REGION_INACTIVE', 'Estado não disponível para solicitação de token.'
    PRODUCT_STOCKED_OUT = 'PRODUCT_STOCKED_OUT', 'Produto possui Ruptura de Estoque.'
    PRODUCT_PRICING_BLOCKED = 'PRODUCT_PRICING_BLOCKED', (
        'Produto Bloqueado para solicitar Token.'
    )
    STORE_TOKENS_DISABLED = 'STORE_TOKENS_DISABLED', 'Loja com status de token inativo.'


@dataclass(frozen=True)
class TokenRequest:
    """A store asking for a price exception on one product."""

    product: Any
    store: Any
    requested_price: Any
    regular_price: Any = None  # None = regional consumer price (PMC)
    quantity: int = 1
    customer_identified: bool = False


@dataclass
class PriceQuote:
    """Figures computed while validating. Fields stay None past a failed rule."""

    requested_price: Decimal | None = None
    regular_price: Decimal | None = None
    rates: Rates | None = None
    minimum_price: Decimal | None = None
    uf_margin: Decimal | None = None
    ceiling: MarginCeiling = field(default_factory=MarginCeiling.none)
    authorization_label: str = AUTHORIZATION_FREE

    @property
    def discount(self) -> Decimal | None:
        if self.regular_price is None or self.requested_price is None:
            return None
        return discount_percent(self.regular_price, self.requested_price)


@dataclass(frozen=True)
class Verdict:
    """Outcome of validate()."""

    accepted: bool
    code: RejectionCode | None
    message: str
    note: str = ''
    quote: PriceQuote = field(default_factory=PriceQuote)

    def as_dict(self) -> dict[str, Any]:
        quote = self.quote
        return {
            'accepted': self.accepted,
            'code': self.code.value if self.code else None,
            'message': self.message,
            'note': self.note,
            'minimum_price': _str(quote.minimum_price),
            'uf_margin': _str(quote.uf_margin),
            'ceiling': quote.ceiling.label(),
            'discount': _str(quote.discount),
            'authorization': quote.authorization_label,
        }


def _str(value):
    return None if value is None else str(value)


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise DomainError('INVALID_NUMBER', quantity=quantity)
    if quantity < 1:
        raise DomainError('INVALID_QUANTITY', quantity=quantity)


def _reject(code: RejectionCode, quote: PriceQuote, note: str = '', **fmt) -> Verdict:
    return Verdict(
        accepted=False,
        code=code,
        message=code.label.format(**fmt),
        note=note or '',
        quote=quote,
    )


def validate(request: TokenRequest, *, product_margins=(), subgroup_margins=(),
             now=None) -> Verdict:
    """
    Run the ordered rule chain over a request.

    Args:
        request: TokenRequest
        product_margins: candidate ProductMargin rows for the product
        subgroup_margins: candidate SubgroupMargin rows; the first row
            matching the product's subgroup sets the price floor
        now: datetime/date for validity windows (None = today)

    Returns:
        Verdict (accepted or carrying a RejectionCode)

    Raises:
        DomainError: degenerate rates/margins, malformed numbers or
            missing regional rates, invalid regular price or quantity
    """
    product = request.product
    store = request.store
    region = store.region

    _check_quantity(request.quantity)

    price = to_decimal(request.requested_price)
    quote = PriceQuote(
        requested_price=price,
        authorization_label=(
            AUTHORIZATION_REQUIRED if product.requires_authorization else AUTHORIZATION_FREE
        ),
    )

    # 1. Price must be a positive number
    if not price.is_finite() or price <= ZERO:
        return _reject(RejectionCode.INVALID_PRICE, quote)

    # 2. Price floor
    quote.rates = resolve_rates(product, region)
    quote.minimum_price = floor_price(product, region, subgroup_margins)
    if price < quote.minimum_price:
        return _reject(RejectionCode.BELOW_FLOOR, quote, minimum_price=quote.minimum_price)

    # 3. Must actually be a discount
    if request.regular_price is None:
        quote.regular_price = regular_price(product, region)
    else:
        quote.regular_price = to_decimal(request.regular_price)
    if not quote.regular_price.is_finite() or quote.regular_price <= ZERO:
        raise DomainError('INVALID_NUMBER', regular_price=quote.regular_price)
    if price >= quote.regular_price:
        return _reject(RejectionCode.NOT_A_DISCOUNT, quote)

    # 4. Discounts under an external authorization ceiling are not ours
    if product.requires_authorization:
        return _reject(RejectionCode.REQUIRES_AUTHORIZATION, quote)

    # 5. Realized margin against the effective ceiling
    quote.uf_margin = realized_margin(price, quote.rates)
    quote.ceiling = resolve_ceiling(
        product, region, now,
        product_margins=product_margins,
        subgroup_margins=subgroup_margins,
        store=store,
    )
    if quote.ceiling.exists:
        if quote.ceiling.is_percentage:
            below = quote.uf_margin < quote.ceiling.value
        else:
            below = price < quote.ceiling.value
        if below:
            return _reject(
                RejectionCode.BELOW_MARGIN_CEILING, quote,
                note=quote.ceiling.note,
                ceiling=quote.ceiling.label(),
            )

    # 6-7. Store compliance
    if not store.meets_discount_target:
        return _reject(RejectionCode.STORE_TARGET_NON_COMPLIANT, quote)
    if not store.earnings_compliant:
        return _reject(RejectionCode.STORE_EARNINGS_NON_COMPLIANT, quote)

    # 8. Region gate
    if region is None or not region.is_active:
        return _reject(RejectionCode.REGION_INACTIVE, quote)

    # 9-10. Product blocks
    if product.stocked_out:
        return _reject(RejectionCode.PRODUCT_STOCKED_OUT, quote)
    if product.pricing_blocked:
        return _reject(RejectionCode.PRODUCT_PRICING_BLOCKED, quote)

    # 11. Store switched off for tokens
    if not store.tokens_enabled:
        return _reject(RejectionCode.STORE_TOKENS_DISABLED, quote)

    return Verdict(accepted=True, code=None, message=ACCEPTED_MESSAGE, quote=quote)
