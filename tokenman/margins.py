"""
Margin hierarchy — which margin ceiling ("margem ZVDC") applies.

Precedence, most specific first:
1. Product override scoped to the store
2. Product override scoped to the store's region
3. Subgroup margin of the product for the region
4. Subgroup margin of the product for every region
5. None

When several records of the same tier are active, the most recently
created one wins (created_at, then pk).
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from django.utils import timezone

from tokenman.models.enums import CeilingSource, MarginKind, MarginScope


@dataclass(frozen=True)
class MarginCeiling:
    """Effective margin ceiling and where it came from."""

    kind: MarginKind | None
    value: Decimal | None
    source: CeilingSource
    note: str = ''
    record_id: int | None = None

    @classmethod
    def none(cls) -> 'MarginCeiling':
        return cls(kind=None, value=None, source=CeilingSource.NONE)

    @property
    def exists(self) -> bool:
        return self.source != CeilingSource.NONE

    @property
    def is_percentage(self) -> bool:
        return self.kind == MarginKind.PERCENTAGE

    def label(self) -> str:
        """Display form: '15.00%', 'R$ 12.50' or 'N/A'."""
        if not self.exists:
            return 'N/A'
        if self.is_percentage:
            return f"{self.value:.2f}%"
        return f"R$ {self.value:.2f}"


def as_day(now) -> date:
    """Date used for validity windows (None = today, local time)."""
    if now is None:
        return timezone.localdate()
    if isinstance(now, datetime):
        if timezone.is_aware(now):
            return timezone.localdate(now)
        return now.date()
    return now


def _newest(records):
    return max(records, key=lambda r: (r.created_at, r.pk or 0))


def resolve_ceiling(product, region, now=None, product_margins=(),
                    subgroup_margins=(), store=None) -> MarginCeiling:
    """
    Resolve the margin ceiling for a product in a region (and store).

    Args:
        product: Product
        region: Region of the store
        now: datetime or date (None = today)
        product_margins: candidate ProductMargin rows
        subgroup_margins: candidate SubgroupMargin rows
        store: Store, enables store-scoped overrides

    Returns:
        MarginCeiling (source NONE when nothing applies)
    """
    day = as_day(now)

    overrides = [
        m for m in product_margins
        if m.product_id == product.pk and m.is_valid_on(day)
    ]
    for scope in (MarginScope.STORE, MarginScope.REGION):
        matching = [
            m for m in overrides
            if m.scope == scope and m.applies_to(region=region, store=store)
        ]
        if matching:
            chosen = _newest(matching)
            return MarginCeiling(
                kind=MarginKind(chosen.kind),
                value=chosen.margin,
                source=CeilingSource.PRODUCT,
                note=chosen.note,
                record_id=chosen.pk,
            )

    if product.subgroup_code is not None:
        matching = [
            s for s in subgroup_margins
            if s.subgroup_code == product.subgroup_code
            and s.is_valid_on(day)
            and s.applies_to(region=region)
        ]
        # Region-specific rows beat rows valid for every region
        regional = [s for s in matching if s.region_id is not None]
        if matching:
            chosen = _newest(regional or matching)
            return MarginCeiling(
                kind=MarginKind.PERCENTAGE,
                value=chosen.margin,
                source=CeilingSource.SUBGROUP,
                note=chosen.note,
                record_id=chosen.pk,
            )

    return MarginCeiling.none()
