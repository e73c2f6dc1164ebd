"""
Price floor and margin arithmetic — isolated, testable, reusable.

Given a product's regional cost and tax rates, derives:
- the minimum legal sale price for a target margin
- the margin realized ("margem UF") at a candidate price

Examples (cost 10.00, ICMS 17%, PIS/COFINS 9.25%, margin 28%):
    minimum_price(rates, Decimal('28'))       # ~18.83
    realized_margin(Decimal('18.83'), rates)  # ~28%

Nothing here catches its own errors: degenerate inputs raise DomainError.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from tokenman.exceptions import DomainError

HUNDRED = Decimal('100')
ONE = Decimal('1')
ZERO = Decimal('0')
CENTS = Decimal('0.01')


@dataclass(frozen=True)
class Rates:
    """Regional cost basis. Rates are fractions (0.17 = 17%)."""

    cost: Decimal
    tax_rate: Decimal
    federal_rate: Decimal

    @property
    def deduction(self) -> Decimal:
        """Share of the sale price taken by taxes."""
        return self.tax_rate + self.federal_rate


def to_decimal(value) -> Decimal:
    """
    Convert user input to Decimal.

    NaN and Infinity are returned as-is (the validator rejects them);
    anything that is not a number at all raises DomainError.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise DomainError('INVALID_NUMBER', value=value)
    try:
        return Decimal(str(value).strip().replace(',', '.'))
    except (InvalidOperation, ValueError):
        raise DomainError('INVALID_NUMBER', value=value) from None


def percent(value) -> Decimal:
    """Percent figure (17.5) to fraction (0.175)."""
    return to_decimal(value or ZERO) / HUNDRED


def _region_price(product, region):
    """Return the ProductRegionPrice row of the product for the region."""
    if region is None:
        raise DomainError('MISSING_REGION', product=str(product))
    # .all() honours prefetch_related('region_prices')
    for row in product.region_prices.all():
        if row.region_id == region.pk:
            return row
    raise DomainError('MISSING_RATES', product=str(product), region=str(region))


def resolve_rates(product, region) -> Rates:
    """Select the cost, tax rate and PIS/COFINS that apply in a region."""
    row = _region_price(product, region)
    return Rates(
        cost=to_decimal(row.cost),
        tax_rate=percent(row.tax_rate),
        federal_rate=percent(product.federal_tax_rate),
    )


def regular_price(product, region) -> Decimal:
    """Consumer price (PMC) of the product in the region."""
    return to_decimal(_region_price(product, region).consumer_price)


def find_subgroup_margin(product, subgroup_margins):
    """
    First subgroup margin matching the product's subgroup.

    No validity-window filter: this is the raw lookup used for the
    price floor. The margin resolver applies windows on its own.
    """
    if product.subgroup_code is None:
        return None
    for record in subgroup_margins:
        if record.subgroup_code == product.subgroup_code:
            return record
    return None


def minimum_price(rates: Rates, margin_pct: Decimal | None = None) -> Decimal:
    """
    Lowest price that keeps the target margin after taxes.

        min = (cost / (1 - (aliq + piscofins))) / (1 - margin)

    margin_pct=None means no margin is configured: the floor degenerates
    to the tax-inclusive break-even price.

    Raises:
        DomainError('DEGENERATE_TAX_RATE'): taxes take 100% or more
        DomainError('DEGENERATE_MARGIN'): margin is 100% or more
    """
    tax_base = ONE - rates.deduction
    if tax_base <= ZERO:
        raise DomainError('DEGENERATE_TAX_RATE', deduction=rates.deduction)

    margin = percent(margin_pct) if margin_pct is not None else ZERO
    margin_base = ONE - margin
    if margin_base <= ZERO:
        raise DomainError('DEGENERATE_MARGIN', margin=margin_pct)

    return (rates.cost / tax_base) / margin_base


def floor_price(product, region, subgroup_margins) -> Decimal:
    """Minimum price of a product in a region under its subgroup margin."""
    rates = resolve_rates(product, region)
    record = find_subgroup_margin(product, subgroup_margins)
    return minimum_price(rates, record.margin if record is not None else None)


def realized_margin(price: Decimal, rates: Rates) -> Decimal:
    """
    Margin (percentage) left at a price after regional taxes.

        net = price * (1 - (aliq + piscofins))
        margin = (net - cost) / net * 100
    """
    price = to_decimal(price)
    if not price.is_finite() or price <= ZERO:
        raise DomainError('INVALID_PRICE_FOR_MARGIN', price=price)

    net = price * (ONE - rates.deduction)
    if net <= ZERO:
        raise DomainError('DEGENERATE_TAX_RATE', deduction=rates.deduction)

    return (net - rates.cost) / net * HUNDRED


def discount_percent(regular: Decimal, requested: Decimal) -> Decimal:
    """Discount of the requested price over the regular one, in percent."""
    if regular <= ZERO:
        return ZERO
    return (regular - requested) / regular * HUNDRED


def money(value: Decimal) -> Decimal:
    """Round to cents for display and snapshots."""
    return value.quantize(CENTS)
