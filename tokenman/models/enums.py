"""
Enums for Tokenman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TokenStatus(models.TextChoices):
    """Token lifecycle status."""
    PENDING = 'pending', _('Pendente')       # Issued, awaiting decision
    APPROVED = 'approved', _('Aprovado')     # Terminal
    REJECTED = 'rejected', _('Rejeitado')    # Terminal


class MarginKind(models.TextChoices):
    """How a margin ceiling is expressed."""
    PERCENTAGE = 'percentage', _('Percentual')  # Minimum realized margin (%)
    ABSOLUTE = 'absolute', _('Valor Fixo')      # Minimum sale price (R$)


class MarginScope(models.TextChoices):
    """What a product margin override applies to."""
    REGION = 'region', _('Estado')
    STORE = 'store', _('Loja')


class CeilingSource(models.TextChoices):
    """Where the effective margin ceiling came from."""
    PRODUCT = 'product', _('Margem do Produto')
    SUBGROUP = 'subgroup', _('Margem do Subgrupo')
    NONE = 'none', _('Sem Margem')
