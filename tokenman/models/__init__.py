"""
Tokenman Models.

- Region: state configuration (may receive tokens?)
- Store: point of sale with a token quota
- Product / ProductRegionPrice: catalog and per-region cost/tax
- ProductMargin / SubgroupMargin: margin policy hierarchy
- Token / TokenItem: issued exceptions and their snapshot
"""

from tokenman.models.enums import CeilingSource, MarginKind, MarginScope, TokenStatus
from tokenman.models.margin import ProductMargin, SubgroupMargin
from tokenman.models.product import Product, ProductRegionPrice
from tokenman.models.region import Region
from tokenman.models.store import Store
from tokenman.models.token import Token, TokenItem

__all__ = [
    'CeilingSource',
    'MarginKind',
    'MarginScope',
    'TokenStatus',
    'Region',
    'Store',
    'Product',
    'ProductRegionPrice',
    'ProductMargin',
    'SubgroupMargin',
    'Token',
    'TokenItem',
]
