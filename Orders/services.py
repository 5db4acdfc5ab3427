"""
Order transaction coordinator.

Placing an order is "check stock, decrement, record" and deleting one is
"restore stock, remove record". Each runs as a single atomic unit against
the inventory store and the order ledger: both writes commit or neither
does. The stock check is the guarded UPDATE itself, never a separate read.
"""
import logging
import numbers
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections, transaction

from .exceptions import InsufficientStockError, NotFoundError, TransactionFailure, ValidationError
from .inventory import InventoryStore
from .ledger import OrderLedger
from .models import Order, Product

logger = logging.getLogger(__name__)

DEFAULT_BASELINE_STOCK = 100
DEFAULT_LOCK_TIMEOUT_MS = 5000
CUSTOMER_NAME_MAX_LENGTH = Order._meta.get_field("customer_name").max_length


@dataclass(frozen=True)
class PlacedOrder:
    order_id: int
    customer_name: str
    product_id: int
    product_title: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    order_date: datetime
    remaining_stock: int


@dataclass(frozen=True)
class CancelledOrder:
    order_id: int
    product_id: int
    quantity: int
    restored_stock: int


def _positive_int(value, field):
    message = f"{field} must be a positive integer."
    # bool is an int subclass; True must not read as quantity 1
    if isinstance(value, bool):
        raise ValidationError(message)
    if isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            raise ValidationError(message)
    elif isinstance(value, numbers.Number):
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(message)
        # 1.5 or Decimal("1.5") must not truncate to 1
        if number != value:
            raise ValidationError(message)
    else:
        raise ValidationError(message)
    if number <= 0:
        raise ValidationError(message)
    return number


class OrderCoordinator:
    def __init__(self, inventory=None, ledger=None, baseline=DEFAULT_BASELINE_STOCK,
                 lock_timeout_ms=DEFAULT_LOCK_TIMEOUT_MS, using=DEFAULT_DB_ALIAS):
        self.using = using
        self.inventory = inventory or InventoryStore(using=using)
        self.ledger = ledger or OrderLedger(using=using)
        self.baseline = baseline
        self.lock_timeout_ms = lock_timeout_ms

    @classmethod
    def from_settings(cls):
        return cls(
            baseline=getattr(settings, "ORDERS_BASELINE_STOCK", DEFAULT_BASELINE_STOCK),
            lock_timeout_ms=getattr(settings, "ORDERS_LOCK_TIMEOUT_MS", DEFAULT_LOCK_TIMEOUT_MS),
        )

    @contextmanager
    def atomic_unit(self):
        """
        One database transaction. Domain errors raised inside roll it back and
        propagate unchanged; database errors roll it back and surface as
        TransactionFailure.
        """
        try:
            with transaction.atomic(using=self.using):
                self._bound_lock_wait()
                yield
        except DatabaseError as exc:
            logger.warning("Order transaction rolled back: %s", exc)
            raise TransactionFailure() from exc

    def _bound_lock_wait(self):
        connection = connections[self.using]
        if connection.vendor != "postgresql" or not self.lock_timeout_ms:
            return
        with connection.cursor() as cursor:
            cursor.execute("SELECT set_config('lock_timeout', %s, true)", [f"{int(self.lock_timeout_ms)}ms"])

    def _get_product(self, product_id):
        product = Product.objects.using(self.using).filter(pk=product_id).first()
        if product is None:
            raise NotFoundError(f"Product {product_id} not found.")
        return product

    def create_order(self, customer_name, product_id, quantity):
        if not isinstance(customer_name, str) or not customer_name.strip():
            raise ValidationError("customerName is required.")
        customer_name = customer_name.strip()
        if len(customer_name) > CUSTOMER_NAME_MAX_LENGTH:
            raise ValidationError(f"customerName must be at most {CUSTOMER_NAME_MAX_LENGTH} characters.")
        product_id = _positive_int(product_id, "productId")
        quantity = _positive_int(quantity, "quantity")

        with self.atomic_unit():
            product = self._get_product(product_id)
            result = self.inventory.conditional_decrement(product_id, quantity)
            if not result.applied:
                logger.info("Order rejected for product %s: requested %s, available %s",
                            product_id, quantity, result.stock)
                raise InsufficientStockError(available=result.stock, requested=quantity)
            order = self.ledger.append(
                customer_name=customer_name,
                product=product,
                quantity=quantity,
                unit_price=product.price,
            )

        logger.info("Order %s placed: %s x%s of product %s, %s left",
                    order.pk, customer_name, quantity, product_id, result.stock)
        return PlacedOrder(
            order_id=order.pk,
            customer_name=customer_name,
            product_id=product_id,
            product_title=product.title,
            quantity=quantity,
            unit_price=order.unit_price,
            total_price=order.total_price,
            order_date=order.order_date,
            remaining_stock=result.stock,
        )

    def delete_order(self, order_id):
        order_id = _positive_int(order_id, "orderId")
        with self.atomic_unit():
            order = self.ledger.lock(order_id)
            restored = self.inventory.increment(order.product_id, order.quantity)
            self.ledger.remove(order)

        logger.info("Order %s deleted, %s units returned to product %s",
                    order_id, order.quantity, order.product_id)
        return CancelledOrder(
            order_id=order_id,
            product_id=order.product_id,
            quantity=order.quantity,
            restored_stock=restored,
        )

    def add_inventory(self, product_id, quantity):
        product_id = _positive_int(product_id, "productId")
        quantity = _positive_int(quantity, "quantity")
        with self.atomic_unit():
            self._get_product(product_id)
            stock = self.inventory.increment(product_id, quantity)
        logger.info("Added %s units to product %s, stock now %s", quantity, product_id, stock)
        return stock

    def reset_all_inventory(self):
        """
        Administrative override: every row back to the baseline. Not
        serialized against in-flight orders; a racing order sees either the
        old or the new value.
        """
        try:
            return self.inventory.reset_all(self.baseline)
        except DatabaseError as exc:
            logger.error("Inventory reset failed: %s", exc)
            raise TransactionFailure() from exc
