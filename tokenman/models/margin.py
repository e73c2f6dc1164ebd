"""
Margin models — product overrides and subgroup defaults.

Both carry a validity window (inclusive dates). The margin resolver
filters in memory with is_valid_on(); the querysets narrow the rows
loaded from the database.
"""

from datetime import date

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tokenman.models.enums import MarginKind, MarginScope


def _window_contains(starts_on, ends_on, day: date) -> bool:
    if starts_on is not None and starts_on > day:
        return False
    if ends_on is not None and ends_on < day:
        return False
    return True


class MarginQuerySet(models.QuerySet):
    """Shared filters for margin records."""

    def valid_on(self, day: date):
        """Active records whose window contains the day."""
        return self.filter(is_active=True).filter(
            Q(starts_on__isnull=True) | Q(starts_on__lte=day),
            Q(ends_on__isnull=True) | Q(ends_on__gte=day),
        )

    def newest_first(self):
        return self.order_by('-created_at', '-pk')


class ProductMargin(models.Model):
    """
    Product-specific margin override.

    Scoped to one region or one store. When active, it takes precedence
    over the subgroup margin of the product.
    """

    product = models.ForeignKey(
        'tokenman.Product',
        on_delete=models.CASCADE,
        related_name='margins',
        verbose_name=_('Produto'),
    )
    scope = models.CharField(
        max_length=10,
        choices=MarginScope.choices,
        default=MarginScope.REGION,
        verbose_name=_('Tipo de Aplicação'),
    )
    region = models.ForeignKey(
        'tokenman.Region',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='product_margins',
        verbose_name=_('Estado'),
    )
    store = models.ForeignKey(
        'tokenman.Store',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='product_margins',
        verbose_name=_('Loja'),
    )

    kind = models.CharField(
        max_length=10,
        choices=MarginKind.choices,
        default=MarginKind.PERCENTAGE,
        verbose_name=_('Tipo de Margem'),
    )
    margin = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        verbose_name=_('Margem'),
        help_text=_('Percentual mínimo de margem UF, ou preço mínimo (R$) se valor fixo.'),
    )
    additional_margin = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Margem Adicional'),
    )
    discount = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Desconto'),
    )

    starts_on = models.DateField(default=date.today, verbose_name=_('Data Início'))
    ends_on = models.DateField(verbose_name=_('Data Fim'))
    is_active = models.BooleanField(default=True, verbose_name=_('Ativo'))
    note = models.TextField(blank=True, default='', verbose_name=_('Observação'))

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MarginQuerySet.as_manager()

    class Meta:
        verbose_name = _('Margem do Produto')
        verbose_name_plural = _('Margens do Produto')
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(scope=MarginScope.REGION, region__isnull=False, store__isnull=True)
                    | Q(scope=MarginScope.STORE, store__isnull=False, region__isnull=True)
                ),
                name='product_margin_scope_target',
            ),
        ]
        indexes = [
            models.Index(fields=['product', 'scope'], name='tokenman_pm_product_scope_idx'),
        ]

    def is_valid_on(self, day: date) -> bool:
        return self.is_active and _window_contains(self.starts_on, self.ends_on, day)

    def applies_to(self, region=None, store=None) -> bool:
        """Does this override target the given region or store?"""
        if self.scope == MarginScope.STORE:
            return store is not None and self.store_id == store.pk
        return region is not None and self.region_id == region.pk

    def __str__(self) -> str:
        target = self.store if self.scope == MarginScope.STORE else self.region
        unit = '%' if self.kind == MarginKind.PERCENTAGE else ' R$'
        return f"{self.product} @ {target}: {self.margin}{unit}"


class SubgroupMargin(models.Model):
    """
    Default margin of a product subgroup.

    Fallback when no product override applies. Always a percentage.
    """

    subgroup_code = models.PositiveIntegerField(
        db_index=True,
        verbose_name=_('Código do Subgrupo'),
    )
    subgroup_name = models.CharField(max_length=150, verbose_name=_('Subgrupo'))
    region = models.ForeignKey(
        'tokenman.Region',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='subgroup_margins',
        verbose_name=_('Estado'),
        help_text=_('Vazio = todos os estados'),
    )
    margin = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        verbose_name=_('Margem (%)'),
    )
    additional_margin = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Margem Adicional'),
    )
    discount = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Desconto'),
    )

    starts_on = models.DateField(null=True, blank=True, verbose_name=_('Data Início'))
    ends_on = models.DateField(null=True, blank=True, verbose_name=_('Data Fim'))
    is_active = models.BooleanField(default=True, verbose_name=_('Ativo'))
    note = models.TextField(blank=True, default='', verbose_name=_('Observação'))

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MarginQuerySet.as_manager()

    class Meta:
        verbose_name = _('Margem do Subgrupo')
        verbose_name_plural = _('Margens do Subgrupo')
        ordering = ['subgroup_code']

    def is_valid_on(self, day: date) -> bool:
        return self.is_active and _window_contains(self.starts_on, self.ends_on, day)

    def applies_to(self, region=None) -> bool:
        if self.region_id is None:
            return True
        return region is not None and self.region_id == region.pk

    def __str__(self) -> str:
        return f"{self.subgroup_code} - {self.subgroup_name}: {self.margin}%"

