"""
Tests for the Tokens service API.
"""

import logging
from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from tokenman import tokens, TokenRequest, TokenError, DomainError, SubmissionOutcome
from tokenman.adapters.codes import ALPHABET, RandomCodeGenerator, get_code_generator
from tokenman.models import Store, SubgroupMargin, Token, TokenStatus
from tokenman.models.enums import CeilingSource, MarginKind
from tokenman.validation import RejectionCode


pytestmark = pytest.mark.django_db


class FixedCodeGenerator:
    """Hands out codes from a list, for collision tests."""

    codes: list[str] = []

    def generate(self, store) -> str:
        return FixedCodeGenerator.codes.pop(0)


@pytest.fixture
def fixed_codes(settings):
    settings.TOKENMAN = {
        'CODE_GENERATOR': 'tokenman.tests.test_service.FixedCodeGenerator',
    }
    FixedCodeGenerator.codes = []
    return FixedCodeGenerator.codes


@pytest.fixture
def approval_mode(settings):
    settings.TOKENMAN = {'QUOTA_DEBIT': 'approval'}


@pytest.fixture
def issued(product, store, subgroup_margin):
    """A pending token for 20.00 (regular 25.00)."""
    return tokens.submit(TokenRequest(product, store, Decimal('20.00'), quantity=2)).token


class TestValidate:
    """Tests for tokens.validate()."""

    def test_preview_writes_nothing(self, product, store, subgroup_margin):
        verdict = tokens.validate(TokenRequest(product, store, Decimal('20.00')))

        assert verdict.accepted
        assert Token.objects.count() == 0
        assert tokens.quota(store) == 5

    def test_loads_store_override(self, product, store, subgroup_margin, make_override):
        make_override('21.00', store=store, kind=MarginKind.ABSOLUTE)

        verdict = tokens.validate(TokenRequest(product, store, Decimal('20.00')))

        assert verdict.code == RejectionCode.BELOW_MARGIN_CEILING
        assert verdict.quote.ceiling.source == CeilingSource.PRODUCT

    def test_region_override_beats_subgroup(self, product, store, region,
                                            subgroup_margin, make_override):
        """Override 15% with subgroup 28%: the validator uses 15%."""
        make_override('15', region=region)

        verdict = tokens.validate(TokenRequest(product, store, Decimal('19.00')))

        assert verdict.accepted
        assert verdict.quote.ceiling.value == Decimal('15')

    def test_ignores_expired_override(self, product, store, region, subgroup_margin,
                                      make_override, today):
        make_override(
            '5', region=region,
            starts_on=today - timedelta(days=10),
            ends_on=today - timedelta(days=1),
        )

        verdict = tokens.validate(TokenRequest(product, store, Decimal('20.00')))

        assert verdict.quote.ceiling.source == CeilingSource.SUBGROUP

    def test_regional_subgroup_sets_floor(self, product, store, region, subgroup_margin):
        SubgroupMargin.objects.create(
            subgroup_code=product.subgroup_code,
            subgroup_name='Analgésicos RS',
            region=region,
            margin=Decimal('10'),
        )

        verdict = tokens.validate(TokenRequest(product, store, Decimal('16.00')))

        # 10 / 0.7375 / 0.90 = 15.07
        assert verdict.accepted
        assert verdict.quote.minimum_price.quantize(Decimal('0.01')) == Decimal('15.07')

    def test_logs_rejection(self, product, store, subgroup_margin, caplog):
        caplog.set_level(logging.INFO, logger='tokenman')

        tokens.validate(TokenRequest(product, store, Decimal('15.00')))

        assert any(r.getMessage() == 'token.validate.rejected' for r in caplog.records)


class TestSubmit:
    """Tests for tokens.submit()."""

    def test_issues_pending_token(self, product, store, subgroup_margin):
        result = tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert result.outcome == SubmissionOutcome.ISSUED
        assert result.issued
        assert result.token.status == TokenStatus.PENDING
        assert result.token.quota_debited
        assert result.code == result.token.code
        assert tokens.quota(store) == 4

    def test_snapshot(self, issued):
        item = Token.objects.get(pk=issued.pk).item

        assert item.product_label == '1001 - Dipirona 500mg'
        assert item.quantity == 2
        assert item.regular_price == Decimal('25.00')
        assert item.requested_price == Decimal('20.00')
        assert item.discount == Decimal('20.00')
        assert item.cost == Decimal('10.0000')
        assert item.tax_rate == Decimal('17.0000')
        assert item.federal_tax_rate == Decimal('9.2500')
        assert item.minimum_price == Decimal('18.83')
        assert item.ceiling_value == Decimal('28')
        assert item.ceiling_kind == MarginKind.PERCENTAGE
        assert item.ceiling_source == CeilingSource.SUBGROUP
        assert item.authorization_label == 'SEM ALÇADA'

    def test_snapshot_survives_margin_changes(self, issued, subgroup_margin):
        subgroup_margin.margin = Decimal('40')
        subgroup_margin.save()

        item = Token.objects.get(pk=issued.pk).item

        assert item.ceiling_value == Decimal('28')
        assert item.minimum_price == Decimal('18.83')

    def test_below_floor_writes_nothing(self, product, store, subgroup_margin):
        """Price below the floor: rejected, no token, quota unchanged."""
        result = tokens.submit(TokenRequest(product, store, Decimal('15.00')))

        assert result.outcome == SubmissionOutcome.REJECTED
        assert result.verdict.code == RejectionCode.BELOW_FLOOR
        assert result.token is None
        assert result.code is None
        assert Token.objects.count() == 0
        assert tokens.quota(store) == 5

    def test_last_unit_goes_to_one_request(self, product, store, subgroup_margin):
        """Quota 1, two accepted requests: one token, one exhausted."""
        tokens.set_quota(store, 1)
        first_view = Store.objects.get(pk=store.pk)
        second_view = Store.objects.get(pk=store.pk)

        first = tokens.submit(TokenRequest(product, first_view, Decimal('20.00')))
        second = tokens.submit(TokenRequest(product, second_view, Decimal('20.00')))

        assert first.outcome == SubmissionOutcome.ISSUED
        assert second.outcome == SubmissionOutcome.EXHAUSTED
        assert second.verdict.accepted
        assert second.token is None
        assert Token.objects.count() == 1
        assert tokens.quota(store) == 0

    def test_exhausted_is_logged(self, product, store, subgroup_margin, caplog):
        tokens.set_quota(store, 0)
        caplog.set_level(logging.INFO, logger='tokenman')

        result = tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert result.outcome == SubmissionOutcome.EXHAUSTED
        assert any(r.getMessage() == 'token.submit.exhausted' for r in caplog.records)

    def test_customer_identified(self, product, store, subgroup_margin):
        result = tokens.submit(
            TokenRequest(product, store, Decimal('20.00'), customer_identified=True)
        )

        assert result.token.customer_identified

    @pytest.mark.parametrize('quantity', [0, -2])
    def test_invalid_quantity_takes_no_quota(self, product, store, subgroup_margin, quantity):
        with pytest.raises(DomainError) as exc:
            tokens.submit(TokenRequest(product, store, Decimal('20.00'), quantity=quantity))

        assert exc.value.code == 'INVALID_QUANTITY'
        assert Token.objects.count() == 0
        assert tokens.quota(store) == 5


class TestApproveReject:
    """Tests for tokens.approve() and tokens.reject()."""

    def test_approve(self, issued, user):
        token = tokens.approve(issued, user=user, note='Ok')

        token.refresh_from_db()
        assert token.status == TokenStatus.APPROVED
        assert token.validated_by == user
        assert token.validated_at is not None
        assert token.decision_note == 'Ok'

    def test_approve_by_code(self, issued):
        token = tokens.approve(f'  {issued.code} ')

        assert token.status == TokenStatus.APPROVED

    def test_reject_by_pk(self, issued):
        token = tokens.reject(issued.pk, note='Preço fora da campanha')

        assert token.status == TokenStatus.REJECTED
        assert token.decision_note == 'Preço fora da campanha'

    def test_unknown_token(self, db):
        with pytest.raises(TokenError) as exc:
            tokens.approve('NAOEXISTE')

        assert exc.value.code == 'TOKEN_NOT_FOUND'

    @pytest.mark.parametrize('first,second', [
        ('approve', 'approve'),
        ('approve', 'reject'),
        ('reject', 'approve'),
        ('reject', 'reject'),
    ])
    def test_terminal_states(self, issued, first, second):
        getattr(tokens, first)(issued)
        status = Token.objects.get(pk=issued.pk).status

        with pytest.raises(TokenError) as exc:
            getattr(tokens, second)(issued)

        assert exc.value.code == 'INVALID_TRANSITION'
        assert exc.value.current == status
        assert Token.objects.get(pk=issued.pk).status == status

    def test_reject_keeps_quota_consumed(self, issued, store):
        tokens.reject(issued)

        assert tokens.quota(store) == 4
        assert Token.objects.get(pk=issued.pk).quota_debited

    def test_release_on_reject(self, issued, store, settings):
        settings.TOKENMAN = {'RELEASE_ON_REJECT': True}

        tokens.reject(issued)

        assert tokens.quota(store) == 5
        assert not Token.objects.get(pk=issued.pk).quota_debited

    def test_approve_does_not_debit_twice(self, issued, store):
        tokens.approve(issued)

        assert tokens.quota(store) == 4


class TestApprovalMode:
    """QUOTA_DEBIT = "approval"."""

    def test_submit_does_not_debit(self, approval_mode, product, store, subgroup_margin):
        result = tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert result.issued
        assert not result.token.quota_debited
        assert tokens.quota(store) == 5

    def test_submit_without_quota_is_exhausted(self, approval_mode, product, store,
                                               subgroup_margin):
        tokens.set_quota(store, 0)

        result = tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert result.outcome == SubmissionOutcome.EXHAUSTED

    def test_approve_debits(self, approval_mode, product, store, subgroup_margin):
        token = tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token

        token = tokens.approve(token)

        assert token.quota_debited
        assert tokens.quota(store) == 4

    def test_approve_without_quota(self, approval_mode, product, store, subgroup_margin):
        token = tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token
        tokens.set_quota(store, 0)

        with pytest.raises(TokenError) as exc:
            tokens.approve(token)

        assert exc.value.code == 'QUOTA_EXHAUSTED'
        assert Token.objects.get(pk=token.pk).status == TokenStatus.PENDING

    def test_reject_never_releases_undebited(self, approval_mode, product, store,
                                            subgroup_margin, settings):
        token = tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token
        settings.TOKENMAN = {'QUOTA_DEBIT': 'approval', 'RELEASE_ON_REJECT': True}

        tokens.reject(token)

        assert tokens.quota(store) == 5

    def test_token_debited_at_issue_not_debited_again(self, product, store,
                                                      subgroup_margin, settings):
        token = tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token
        settings.TOKENMAN = {'QUOTA_DEBIT': 'approval'}

        tokens.approve(token)

        assert tokens.quota(store) == 4

    def test_token_issued_undebited_is_debited_on_approval(self, approval_mode, product,
                                                           store, subgroup_margin, settings):
        token = tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token
        settings.TOKENMAN = {'QUOTA_DEBIT': 'issue'}

        token = tokens.approve(token)

        assert token.quota_debited
        assert tokens.quota(store) == 4


class TestCodes:
    """Token code generation."""

    def test_default_codes(self, issued):
        assert len(issued.code) == 8
        assert all(c in ALPHABET for c in issued.code)

    def test_code_length_setting(self, settings):
        settings.TOKENMAN = {'CODE_LENGTH': 12}

        assert len(RandomCodeGenerator().generate(None)) == 12

    def test_collision_retries(self, fixed_codes, product, store, subgroup_margin):
        fixed_codes.extend(['AAAA2222', 'AAAA2222', 'BBBB3333'])

        first = tokens.submit(TokenRequest(product, store, Decimal('20.00')))
        second = tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert first.code == 'AAAA2222'
        assert second.code == 'BBBB3333'

    def test_collision_exhausts_attempts(self, fixed_codes, product, store, subgroup_margin):
        fixed_codes.extend(['AAAA2222'] * 10)
        tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        with pytest.raises(TokenError) as exc:
            tokens.submit(TokenRequest(product, store, Decimal('20.00')))

        assert exc.value.code == 'CODE_GENERATION_FAILED'
        # The reservation rolled back with the failed insert
        assert tokens.quota(store) == 4
        assert Token.objects.count() == 1
        assert store.token_quota == 4

    def test_unknown_generator(self, settings):
        settings.TOKENMAN = {'CODE_GENERATOR': 'tokenman.tests.missing.Generator'}

        with pytest.raises(ImproperlyConfigured):
            get_code_generator()

    def test_generator_without_generate(self, settings):
        settings.TOKENMAN = {'CODE_GENERATOR': 'decimal.Decimal'}

        with pytest.raises(ImproperlyConfigured):
            get_code_generator()


class TestQueries:
    """Tests for read-only token queries."""

    def _submit(self, product, store, n):
        return [
            tokens.submit(TokenRequest(product, store, Decimal('20.00'))).token
            for _ in range(n)
        ]

    def test_get(self, issued):
        assert tokens.get(issued.code) == issued

    def test_get_unknown(self, db):
        with pytest.raises(TokenError) as exc:
            tokens.get('NAOEXISTE')

        assert exc.value.code == 'TOKEN_NOT_FOUND'

    def test_pending(self, product, store, subgroup_margin):
        first, second, third = self._submit(product, store, 3)
        tokens.approve(first)

        assert list(tokens.pending()) == [third, second]

    def test_for_store(self, product, store, region, subgroup_margin):
        other = Store.objects.create(code=202, name='Loja Norte', region=region, token_quota=1)
        mine = self._submit(product, store, 2)
        self._submit(product, other, 1)
        tokens.reject(mine[0])

        assert set(tokens.for_store(store)) == set(mine)
        assert list(tokens.for_store(store, status=TokenStatus.REJECTED)) == [mine[0]]

    def test_status_counts(self, product, store, subgroup_margin):
        first, second, _ = self._submit(product, store, 3)
        tokens.approve(first)
        tokens.reject(second)

        assert tokens.status_counts() == {'pending': 1, 'approved': 1, 'rejected': 1}

    def test_status_counts_period(self, product, store, subgroup_margin):
        self._submit(product, store, 2)
        tomorrow = timezone.now() + timedelta(days=1)

        assert tokens.status_counts(start=tomorrow) == {'pending': 0, 'approved': 0, 'rejected': 0}
        assert tokens.status_counts(end=tomorrow)['pending'] == 2
