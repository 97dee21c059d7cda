from django.core.management.base import BaseCommand

from core_backend.container import get_container
from core_backend.demo import seed_demo_data


class Command(BaseCommand):
    help = 'Load the sandbox cafeterias, tables, staff and menu'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Empty every store before seeding (requires ORDERING_ALLOW_RESET)',
        )

    def handle(self, *args, **options):
        container = get_container()

        if options['reset']:
            container.reset(reseed=False)
            self.stdout.write(self.style.WARNING('Store emptied'))

        if seed_demo_data(container):
            self.stdout.write(self.style.SUCCESS('Demo data loaded'))
        else:
            self.stdout.write('Demo data already present, nothing to do')
