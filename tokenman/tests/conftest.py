"""
Pytest fixtures for Tokenman tests.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from tokenman.adapters.codes import reset_code_generator
from tokenman.models import (
    Product,
    ProductMargin,
    ProductRegionPrice,
    Region,
    Store,
    SubgroupMargin,
)
from tokenman.models.enums import MarginKind, MarginScope


User = get_user_model()


@pytest.fixture(autouse=True)
def fresh_code_generator():
    """Generators are cached per process; tests swap them via settings."""
    reset_code_generator()
    yield
    reset_code_generator()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='validador',
        password='testpass123'
    )


@pytest.fixture
def today():
    """Return today's date in the project time zone."""
    return timezone.localdate()


@pytest.fixture
def region(db):
    """Create an active region (RS)."""
    return Region.objects.create(code='RS', name='Rio Grande do Sul')


@pytest.fixture
def other_region(db):
    """Create a second region (SC)."""
    return Region.objects.create(code='SC', name='Santa Catarina')


@pytest.fixture
def store(db, region):
    """Create a compliant store with 5 tokens."""
    return Store.objects.create(
        code=101,
        name='Loja Centro',
        region=region,
        city='Porto Alegre',
        token_quota=5,
    )


@pytest.fixture
def product(db, region):
    """
    Create a product priced in RS.

    Cost 10.00, ICMS 17%, PIS/COFINS 9.25%, PMC 25.00.
    Under the 28% subgroup margin the floor is ~18.83.
    """
    product = Product.objects.create(
        code=1001,
        name='Dipirona 500mg',
        subgroup_code=10,
        federal_tax_rate=Decimal('9.25'),
    )
    ProductRegionPrice.objects.create(
        product=product,
        region=region,
        cost=Decimal('10.00'),
        consumer_price=Decimal('25.00'),
        tax_rate=Decimal('17'),
    )
    return product


@pytest.fixture
def subgroup_margin(db, product):
    """Create the 28% subgroup margin valid for every region."""
    return SubgroupMargin.objects.create(
        subgroup_code=product.subgroup_code,
        subgroup_name='Analgésicos',
        margin=Decimal('28'),
    )


@pytest.fixture
def make_override(db, product, today):
    """Factory for product margin overrides valid today."""

    def _make(margin, region=None, store=None, kind=MarginKind.PERCENTAGE, **kwargs):
        kwargs.setdefault('product', product)
        kwargs.setdefault('starts_on', today - timedelta(days=1))
        kwargs.setdefault('ends_on', today + timedelta(days=30))
        return ProductMargin.objects.create(
            scope=MarginScope.STORE if store is not None else MarginScope.REGION,
            region=region if store is None else None,
            store=store,
            kind=kind,
            margin=Decimal(margin),
            **kwargs,
        )

    return _make
