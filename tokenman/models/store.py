"""
Store model — Point of sale holding a token quota.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Store(models.Model):
    """
    Retail store.

    token_quota is the only field the engine changes, and only through
    TokenQuota (conditional UPDATE), never via save() on a loaded instance.
    """

    code = models.PositiveIntegerField(
        unique=True,
        verbose_name=_('Código da Loja'),
    )
    name = models.CharField(
        max_length=150,
        verbose_name=_('Loja'),
    )
    region = models.ForeignKey(
        'tokenman.Region',
        on_delete=models.PROTECT,
        related_name='stores',
        verbose_name=_('Estado'),
    )
    city = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Cidade'))
    microregion = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Microrregião'))

    # Compliance flags
    meets_discount_target = models.BooleanField(
        default=True,
        verbose_name=_('Meta de Desconto Regular'),
    )
    earnings_compliant = models.BooleanField(
        default=True,
        verbose_name=_('DRE Regular'),
    )
    tokens_enabled = models.BooleanField(
        default=True,
        verbose_name=_('Token Ativo'),
    )

    token_quota = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Tokens Disponíveis'),
    )

    class Meta:
        verbose_name = _('Loja')
        verbose_name_plural = _('Lojas')
        ordering = ['code']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"
