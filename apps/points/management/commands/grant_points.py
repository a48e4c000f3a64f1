"""
Management command to credit points to an account.

Used for promotional rewards and support corrections. Credits are
additive only; use a transfer to move existing points.

Usage:
    python manage.py grant_points <account_id> <restaurant_id> <amount>
    python manage.py grant_points <account_id> <restaurant_id> <amount> --dry-run
"""

from django.core.management.base import BaseCommand, CommandError
from apps.points.services import (
    LedgerError,
    credit,
    get_balance,
    normalize_amount,
)
from apps.restaurants.services import get_restaurant


class Command(BaseCommand):
    help = 'Credit points to an account at one restaurant'

    def add_arguments(self, parser):
        parser.add_argument('account_id', help='User id (or restaurant id) to credit')
        parser.add_argument('restaurant_id', help='Restaurant whose points are granted')
        parser.add_argument('amount', help='Points to add, e.g. 25 or 12.50')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be credited without making changes',
        )

    def handle(self, *args, **options):
        account_id = options['account_id']
        restaurant_id = options['restaurant_id']

        try:
            amount = normalize_amount(options['amount'])
        except LedgerError as e:
            raise CommandError(str(e))

        restaurant = get_restaurant(restaurant_id)
        if restaurant is None:
            raise CommandError(f'Restaurant {restaurant_id} not found')

        current = get_balance(account_id, restaurant.id)
        self.stdout.write(
            f'{account_id} @ {restaurant.name}: {current} -> {current + amount}'
        )

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('--dry-run mode: No changes made.'))
            return

        try:
            new_balance = credit(account_id, restaurant.id, amount)
        except LedgerError as e:
            raise CommandError(str(e))

        self.stdout.write(
            self.style.SUCCESS(f'Granted {amount} points. New balance: {new_balance}')
        )
