"""
Product models — catalog reference data consumed by the engine.
"""

from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class Product(models.Model):
    """
    Catalog product.

    Region-dependent figures (cost, consumer price, tax rate) live in
    ProductRegionPrice; federal tax (PIS/COFINS) is a single rate.
    """

    code = models.PositiveIntegerField(
        unique=True,
        verbose_name=_('Código do Produto'),
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_('Produto'),
    )
    ncm = models.CharField(max_length=10, blank=True, default='', verbose_name=_('NCM'))
    subgroup_code = models.PositiveIntegerField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Subgrupo'),
    )
    federal_tax_rate = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('PIS/COFINS (%)'),
    )

    # Blocking flags
    requires_authorization = models.BooleanField(
        default=False,
        verbose_name=_('Possui Alçada'),
        help_text=_('Desconto depende de aprovação fora do sistema.'),
    )
    stocked_out = models.BooleanField(default=False, verbose_name=_('Ruptura'))
    pricing_blocked = models.BooleanField(default=False, verbose_name=_('Bloqueado pelo Pricing'))

    note = models.TextField(blank=True, default='', verbose_name=_('Observação'))

    class Meta:
        verbose_name = _('Produto')
        verbose_name_plural = _('Produtos')
        ordering = ['code']

    @property
    def label(self) -> str:
        """Label stored on token snapshots."""
        return f"{self.code} - {self.name}"

    def __str__(self) -> str:
        return self.label


class ProductRegionPrice(models.Model):
    """Cost, consumer price and tax rate of a product in one region."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='region_prices',
        verbose_name=_('Produto'),
    )
    region = models.ForeignKey(
        'tokenman.Region',
        on_delete=models.CASCADE,
        related_name='product_prices',
        verbose_name=_('Estado'),
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        verbose_name=_('CMG'),
    )
    consumer_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        verbose_name=_('PMC'),
    )
    tax_rate = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        default=Decimal('0'),
        verbose_name=_('Alíquota (%)'),
    )

    class Meta:
        verbose_name = _('Preço Regional')
        verbose_name_plural = _('Preços Regionais')
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'region'],
                name='unique_product_region_price',
            )
        ]

    def __str__(self) -> str:
        return f"{self.product} [{self.region}]: CMG {self.cost}"
