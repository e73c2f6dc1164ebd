"""
Management command to show or replace a store's token quota.

Usage:
    python manage.py set_token_quota 101 20
    python manage.py set_token_quota 101 --show
"""

from django.core.management.base import BaseCommand, CommandError

from tokenman import tokens, TokenError
from tokenman.models import Store


class Command(BaseCommand):
    """Set token quota command."""

    help = 'Define a quantidade de tokens disponíveis de uma loja'

    def add_arguments(self, parser):
        parser.add_argument('store_code', type=int, help='Código da loja')
        parser.add_argument('quantity', type=int, nargs='?', help='Nova quantidade de tokens')
        parser.add_argument(
            '--show',
            action='store_true',
            help='Mostra a quantidade atual sem alterar'
        )

    def handle(self, *args, **options):
        try:
            store = Store.objects.get(code=options['store_code'])
        except Store.DoesNotExist:
            raise CommandError(f"Loja {options['store_code']} não encontrada") from None

        if options['show'] or options['quantity'] is None:
            self.stdout.write(f'{store}: {tokens.quota(store)} token(s) disponível(is)')
            return

        try:
            quota = tokens.set_quota(store, options['quantity'])
        except TokenError as e:
            raise CommandError(e.message) from e

        self.stdout.write(
            self.style.SUCCESS(f'{store}: {quota} token(s) disponível(is)')
        )
