"""
Management command to seed the default marketplace categories and commission
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from gastro.catalog.models import Category
from gastro.commissions.models import CommissionSetting
from gastro.core.models import User

DEFAULT_CATEGORIES = [
    # (name, slug, icon)
    ('Utensílios', 'utensilios', 'utensils'),
    ('Refrigeração', 'refrigeracao', 'temperature-low'),
    ('Cocção', 'coccao', 'fire'),
    ('Preparação', 'preparacao', 'blender'),
    ('Bar', 'bar', 'wine-glass-alt'),
    ('Lavagem', 'lavagem', 'sink'),
    ('Mobiliário', 'mobiliario', 'chair'),
]

DEFAULT_GLOBAL_RATE = Decimal('5.00')


class Command(BaseCommand):
    help = "Seeds the default equipment categories and the global commission rate"

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin-username',
            help='Also create an admin account with this username',
        )
        parser.add_argument('--admin-email', default=None)
        parser.add_argument('--admin-password', default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING MARKETPLACE"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        created_count = 0
        for name, slug, icon in DEFAULT_CATEGORIES:
            category, created = Category.objects.get_or_create(
                slug=slug,
                defaults={'name': name, 'icon': icon, 'is_active': True},
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  Created category: {name}"))
            else:
                self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {category.name}"))

        global_setting = CommissionSetting.objects.filter(
            category__isnull=True, supplier__isnull=True, active=True
        ).first()
        if global_setting is None:
            CommissionSetting.objects.create(rate=DEFAULT_GLOBAL_RATE, active=True)
            self.stdout.write(self.style.SUCCESS(f"  Created global commission: {DEFAULT_GLOBAL_RATE}%"))
        else:
            self.stdout.write(self.style.WARNING(f"  Global commission already set: {global_setting.rate}%"))

        username = options.get('admin_username')
        if username:
            if User.objects.filter(username=username).exists():
                self.stdout.write(self.style.WARNING(f"  Admin '{username}' already exists"))
            elif not options.get('admin_password'):
                self.stdout.write(self.style.ERROR("  --admin-password is required to create an admin"))
            else:
                User.objects.create_user(
                    username=username,
                    email=options.get('admin_email') or f'{username}@gastrocompare.local',
                    password=options['admin_password'],
                    role=User.ROLE_ADMIN,
                    is_staff=True,
                )
                self.stdout.write(self.style.SUCCESS(f"  Created admin: {username}"))

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Categories Created: {created_count}")
        self.stdout.write(f"Total Categories in Database: {Category.objects.count()}")
        self.stdout.write(self.style.SUCCESS("=" * 80))
