import logging

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError

from Orders.exceptions import TransactionFailure

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Reset every inventory row to the baseline stock. Meant to run daily from cron (0 0 * * *)."

    def handle(self, *args, **options):
        coordinator = apps.get_app_config("Orders").coordinator
        logger.info("Daily inventory reset starting")
        try:
            count = coordinator.reset_all_inventory()
        except TransactionFailure as exc:
            raise CommandError(f"Inventory reset failed: {exc}") from exc
        self.stdout.write(self.style.SUCCESS(
            f"Reset {count} inventory rows to {coordinator.baseline} units."
        ))
