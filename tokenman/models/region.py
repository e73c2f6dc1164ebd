"""
Region model — State that may receive tokens.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Region(models.Model):
    """
    State configuration.

    Regions are stable entities. Deactivating one blocks every token
    request from its stores.
    """

    code = models.CharField(
        unique=True,
        max_length=2,
        verbose_name=_('UF'),
        help_text=_('Sigla do estado (ex: RS, SC, PR)'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Nome'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Ativo'),
        help_text=_('Se False, nenhuma loja do estado pode solicitar token.'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Estado')
        verbose_name_plural = _('Estados')
        ordering = ['code']

    def save(self, *args, **kwargs):
        self.code = self.code.upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.code
