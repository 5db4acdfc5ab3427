from django.db import DEFAULT_DB_ALIAS

from .exceptions import NotFoundError
from .models import Order


class OrderLedger:
    """Append/remove store of completed orders. Runs inside the caller's transaction."""

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _orders(self):
        return Order.objects.using(self.using)

    def append(self, customer_name, product, quantity, unit_price):
        return self._orders().create(
            customer_name=customer_name,
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )

    def lock(self, order_id):
        """Fetch an order and hold its row lock until the transaction ends."""
        order = self._orders().select_for_update().filter(pk=order_id).first()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found.")
        return order

    def remove(self, order):
        order_id = order.pk
        deleted, _ = self._orders().filter(pk=order_id).delete()
        if not deleted:
            raise NotFoundError(f"Order {order_id} not found.")
        return order

    def list_recent(self, limit=100):
        return self._orders().select_related("product").order_by("-order_date", "-id")[:limit]

    def list_by_customer(self, customer_name):
        return (
            self._orders()
            .select_related("product")
            .filter(customer_name=customer_name)
            .order_by("-order_date", "-id")
        )
