import random
import threading

import pytest
from django.db import DatabaseError, connections

from Orders.exceptions import InsufficientStockError, TransactionFailure
from Orders.ledger import OrderLedger
from Orders.models import Order
from Orders.services import OrderCoordinator

from .helpers import stock_of


class FailingLedger(OrderLedger):
    def append(self, **kwargs):
        raise DatabaseError("ledger unavailable")


class FailingRemoveLedger(OrderLedger):
    def remove(self, order):
        raise DatabaseError("ledger unavailable")


@pytest.mark.django_db
def test_stock_is_conserved_over_random_sequence(make_product, coordinator):
    product = make_product(stock=20)
    rng = random.Random(7)
    expected = 20
    live = {}

    for _ in range(80):
        op = rng.choice(["create", "create", "create", "delete", "add", "reset"])
        if op == "create":
            quantity = rng.randint(1, 8)
            try:
                placed = coordinator.create_order("Replay", product.pk, quantity)
            except InsufficientStockError as exc:
                assert quantity > expected
                assert exc.available == expected
            else:
                live[placed.order_id] = quantity
                expected -= quantity
        elif op == "delete" and live:
            order_id = rng.choice(sorted(live))
            coordinator.delete_order(order_id)
            expected += live.pop(order_id)
        elif op == "add":
            quantity = rng.randint(1, 5)
            coordinator.add_inventory(product.pk, quantity)
            expected += quantity
        elif op == "reset":
            coordinator.reset_all_inventory()
            expected = coordinator.baseline

        assert stock_of(product) == expected
        assert Order.objects.count() == len(live)


@pytest.mark.django_db
def test_delete_is_the_inverse_of_create(make_product, coordinator):
    product = make_product(stock=17)
    placed = coordinator.create_order("Alice", product.pk, 9)
    assert stock_of(product) == 8
    coordinator.delete_order(placed.order_id)
    assert stock_of(product) == 17


@pytest.mark.django_db
def test_ledger_failure_leaves_stock_untouched(make_product):
    product = make_product(stock=5)
    coordinator = OrderCoordinator(ledger=FailingLedger())

    with pytest.raises(TransactionFailure) as excinfo:
        coordinator.create_order("Alice", product.pk, 2)

    assert excinfo.value.retryable
    assert isinstance(excinfo.value.__cause__, DatabaseError)
    assert stock_of(product) == 5
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_failed_delete_keeps_order_and_stock(make_product, coordinator):
    product = make_product(stock=5)
    placed = coordinator.create_order("Alice", product.pk, 2)

    with pytest.raises(TransactionFailure):
        OrderCoordinator(ledger=FailingRemoveLedger()).delete_order(placed.order_id)

    assert stock_of(product) == 3
    assert Order.objects.filter(pk=placed.order_id).exists()


@pytest.mark.django_db(transaction=True)
def test_concurrent_orders_never_oversell(make_product):
    product = make_product(stock=5)
    coordinator = OrderCoordinator()
    workers = 12
    barrier = threading.Barrier(workers)
    outcomes = []
    outcomes_lock = threading.Lock()

    def place(i):
        barrier.wait()
        try:
            coordinator.create_order(f"customer-{i}", product.pk, 1)
            outcome = "placed"
        except InsufficientStockError:
            outcome = "rejected"
        except Exception as exc:
            outcome = repr(exc)
        finally:
            connections.close_all()
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=place, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(outcomes) == ["placed"] * 5 + ["rejected"] * 7
    assert stock_of(product) == 0
    assert Order.objects.filter(product=product).count() == 5
