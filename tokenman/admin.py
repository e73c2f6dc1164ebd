"""
Tokenman Admin.

- Region, Store, Product, margins: editable configuration
- Token: read-only, with approve/reject actions routed through the service
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from tokenman.exceptions import TokenError
from tokenman.models import (
    Product,
    ProductMargin,
    ProductRegionPrice,
    Region,
    Store,
    SubgroupMargin,
    Token,
    TokenItem,
    TokenStatus,
)

logger = logging.getLogger(__name__)


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    """Store admin. Quota is read-only here: use set_token_quota."""

    list_display = ['code', 'name', 'region', 'token_quota', 'tokens_enabled',
                    'meets_discount_target', 'earnings_compliant']
    list_filter = ['region', 'tokens_enabled', 'meets_discount_target', 'earnings_compliant']
    search_fields = ['code', 'name', 'city']
    readonly_fields = ['token_quota']


class ProductRegionPriceInline(admin.TabularInline):
    model = ProductRegionPrice
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'subgroup_code', 'requires_authorization',
                    'stocked_out', 'pricing_blocked']
    list_filter = ['requires_authorization', 'stocked_out', 'pricing_blocked']
    search_fields = ['code', 'name', 'ncm']
    inlines = [ProductRegionPriceInline]


@admin.register(ProductMargin)
class ProductMarginAdmin(admin.ModelAdmin):
    list_display = ['product', 'scope', 'region', 'store', 'kind', 'margin',
                    'starts_on', 'ends_on', 'is_active']
    list_filter = ['scope', 'kind', 'is_active', 'region']
    search_fields = ['product__name', 'product__code']
    autocomplete_fields = ['product', 'store']


@admin.register(SubgroupMargin)
class SubgroupMarginAdmin(admin.ModelAdmin):
    list_display = ['subgroup_code', 'subgroup_name', 'region', 'margin',
                    'starts_on', 'ends_on', 'is_active']
    list_filter = ['is_active', 'region']
    search_fields = ['subgroup_code', 'subgroup_name']


class TokenItemInline(admin.StackedInline):
    model = TokenItem
    can_delete = False
    extra = 0

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in TokenItem._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Token)
class TokenAdmin(admin.ModelAdmin):
    """Token admin — read-only. Status only changes via the service."""

    list_display = ['code', 'store', 'status', 'created_at', 'validated_at', 'validated_by']
    list_filter = ['status', 'store__region']
    search_fields = ['code', 'store__name', 'item__product_label']
    readonly_fields = ['store', 'code', 'status', 'customer_identified', 'quota_debited',
                       'created_at', 'validated_at', 'validated_by', 'decision_note']
    date_hierarchy = 'created_at'
    inlines = [TokenItemInline]
    actions = ['approve_tokens', 'reject_tokens']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def _decide(self, request, queryset, decision):
        count = 0
        for token in queryset.filter(status=TokenStatus.PENDING):
            try:
                decision(token, user=request.user, note='Via admin')
                count += 1
            except TokenError as exc:
                logger.warning("token admin action failed for %s: %s", token.code, exc)
        return count

    @admin.action(description=_('Aprovar tokens selecionados'))
    def approve_tokens(self, request, queryset):
        from tokenman import tokens

        count = self._decide(request, queryset, tokens.approve)
        self.message_user(request, _('{count} token(s) aprovado(s).').format(count=count))

    @admin.action(description=_('Rejeitar tokens selecionados'))
    def reject_tokens(self, request, queryset):
        from tokenman import tokens

        count = self._decide(request, queryset, tokens.reject)
        self.message_user(request, _('{count} token(s) rejeitado(s).').format(count=count))
