import logging
from dataclasses import dataclass

from django.db import DEFAULT_DB_ALIAS
from django.db.models import F
from django.utils import timezone

from .models import Inventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecrementResult:
    applied: bool
    stock: int   # stock after the attempt (unchanged when not applied)


class InventoryStore:
    """
    Stock rows keyed by product. Every mutation is a single UPDATE with an
    F() expression, so concurrent writers serialize on the row lock instead
    of overwriting each other.
    Callers own the transaction; nothing here opens one.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _rows(self):
        return Inventory.objects.using(self.using)

    def get_stock(self, product_id):
        """Current stock for a product; 0 when no inventory row exists."""
        stock = self._rows().filter(product_id=product_id).values_list("stock_quantity", flat=True).first()
        return stock or 0

    def conditional_decrement(self, product_id, amount):
        """
        Take ``amount`` units only if at least that many are in stock.
        The check and the write are one statement: the WHERE clause is
        re-evaluated after the row lock is acquired.
        """
        updated = self._rows().filter(product_id=product_id, stock_quantity__gte=amount).update(
            stock_quantity=F("stock_quantity") - amount,
            updated_at=timezone.now(),
        )
        return DecrementResult(applied=bool(updated), stock=self.get_stock(product_id))

    def increment(self, product_id, amount):
        """Add ``amount`` units, creating the row when missing. Returns the new stock."""
        updated = self._rows().filter(product_id=product_id).update(
            stock_quantity=F("stock_quantity") + amount,
            updated_at=timezone.now(),
        )
        if not updated:
            _, created = self._rows().get_or_create(product_id=product_id, defaults={"stock_quantity": amount})
            if not created:
                # another writer created the row between our UPDATE and INSERT
                self._rows().filter(product_id=product_id).update(
                    stock_quantity=F("stock_quantity") + amount,
                    updated_at=timezone.now(),
                )
        return self.get_stock(product_id)

    def upsert_baseline(self, product_id, amount):
        """Set the product's stock to ``amount`` regardless of its current value."""
        self._rows().update_or_create(
            product_id=product_id,
            defaults={"stock_quantity": amount, "reserved_quantity": 0},
        )

    def reset_all(self, baseline, reserved=0):
        count = self._rows().update(
            stock_quantity=baseline,
            reserved_quantity=reserved,
            updated_at=timezone.now(),
        )
        logger.info("Inventory reset: %s rows set to %s", count, baseline)
        return count
