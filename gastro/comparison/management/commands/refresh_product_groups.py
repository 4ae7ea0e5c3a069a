"""
Management command to recompute price statistics for product groups
"""
from django.core.management.base import BaseCommand

from gastro.comparison.models import ProductGroup
from gastro.comparison.services import refresh_group_stats
from gastro.core.cache_signals import suspend_cache_signals
from gastro.core.cache_utils import invalidate_comparison_cache


class Command(BaseCommand):
    help = "Recomputes min/max/avg prices and the highlighted offer of product groups"

    def add_arguments(self, parser):
        parser.add_argument('--group', type=int, help='Only refresh this group id')
        parser.add_argument('--include-inactive', action='store_true',
                            help='Also refresh inactive groups')

    def handle(self, *args, **options):
        groups = ProductGroup.objects.all()
        if options.get('group'):
            groups = groups.filter(pk=options['group'])
        elif not options['include_inactive']:
            groups = groups.filter(is_active=True)

        refreshed = 0
        with suspend_cache_signals():
            for group in groups.iterator():
                refresh_group_stats(group)
                refreshed += 1
                self.stdout.write(f"  {group.name}: {group.products_count} products, "
                                  f"min {group.min_price}, max {group.max_price}")
        invalidate_comparison_cache()

        self.stdout.write(self.style.SUCCESS(f"Refreshed {refreshed} product group(s)"))
