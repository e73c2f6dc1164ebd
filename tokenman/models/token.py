"""
Token models — issued price exceptions and their point-in-time snapshot.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tokenman.models.enums import CeilingSource, MarginKind, TokenStatus


class TokenQuerySet(models.QuerySet):
    """Custom QuerySet for Token with convenience filters."""

    def pending(self):
        return self.filter(status=TokenStatus.PENDING)

    def decided(self):
        """Approved or rejected tokens."""
        return self.exclude(status=TokenStatus.PENDING)

    def for_store(self, store):
        return self.filter(store=store)


class Token(models.Model):
    """
    Discount token issued to a store.

    LIFECYCLE:

        ┌─────────┐   approve()   ┌──────────┐
        │ PENDING │ ────────────► │ APPROVED │
        └─────────┘               └──────────┘
             │
             │ reject()           ┌──────────┐
             └──────────────────► │ REJECTED │
                                  └──────────┘

    Terminal states never change again. Tokens are never deleted.

    quota_debited tells whether this token currently holds one unit of
    its store's quota. It is what makes quota reconciliation safe when
    the debit policy changes between issue and decision.
    """

    store = models.ForeignKey(
        'tokenman.Store',
        on_delete=models.PROTECT,
        related_name='tokens',
        verbose_name=_('Loja'),
    )
    code = models.CharField(
        max_length=32,
        unique=True,
        verbose_name=_('Código do Token'),
    )
    status = models.CharField(
        max_length=10,
        choices=TokenStatus.choices,
        default=TokenStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )
    customer_identified = models.BooleanField(
        default=False,
        verbose_name=_('Cliente Identificado'),
    )
    quota_debited = models.BooleanField(
        default=False,
        verbose_name=_('Token Debitado'),
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Data Criação'))
    validated_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Data Validação'),
    )
    validated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Validado por'),
    )
    decision_note = models.TextField(blank=True, default='', verbose_name=_('Observação da Validação'))

    objects = TokenQuerySet.as_manager()

    class Meta:
        verbose_name = _('Token')
        verbose_name_plural = _('Tokens')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['store', 'status'], name='tokenman_token_store_st_idx'),
            models.Index(fields=['status', 'validated_at'], name='tokenman_token_st_valid_idx'),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == TokenStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status != TokenStatus.PENDING

    def __str__(self) -> str:
        return f"{self.code} ({self.get_status_display()})"


class TokenItem(models.Model):
    """
    Snapshot of the request and every computed figure at issue time.

    Never recomputed: later changes to products or margins do not
    touch existing snapshots.
    """

    token = models.OneToOneField(
        Token,
        on_delete=models.PROTECT,
        related_name='item',
        verbose_name=_('Token'),
    )
    product = models.ForeignKey(
        'tokenman.Product',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='token_items',
        verbose_name=_('Produto'),
    )
    product_label = models.CharField(max_length=255, verbose_name=_('Produto'))

    quantity = models.PositiveIntegerField(default=1, verbose_name=_('Qtde Solicitada'))
    regular_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Preço Regular'))
    requested_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Valor Solicitado'))
    discount = models.DecimalField(max_digits=7, decimal_places=2, verbose_name=_('Desconto (%)'))

    cost = models.DecimalField(max_digits=12, decimal_places=4, verbose_name=_('CMG'))
    tax_rate = models.DecimalField(max_digits=7, decimal_places=4, verbose_name=_('Alíquota UF (%)'))
    federal_tax_rate = models.DecimalField(max_digits=7, decimal_places=4, verbose_name=_('PIS/COFINS (%)'))
    minimum_price = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_('Preço Mínimo'))
    uf_margin = models.DecimalField(max_digits=9, decimal_places=4, verbose_name=_('Margem UF (%)'))

    ceiling_value = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Margem ZVDC'),
    )
    ceiling_kind = models.CharField(
        max_length=10,
        choices=MarginKind.choices,
        blank=True,
        default='',
        verbose_name=_('Tipo da Margem ZVDC'),
    )
    ceiling_source = models.CharField(
        max_length=10,
        choices=CeilingSource.choices,
        default=CeilingSource.NONE,
        verbose_name=_('Origem da Margem ZVDC'),
    )
    authorization_label = models.CharField(max_length=20, verbose_name=_('Desconto Alçada'))
    note = models.TextField(blank=True, default='', verbose_name=_('Observação'))

    class Meta:
        verbose_name = _('Detalhe do Token')
        verbose_name_plural = _('Detalhes do Token')

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product_label} @ {self.requested_price}"
