from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from Orders.models import Inventory, Product
from Orders.services import OrderCoordinator


@pytest.fixture
def make_product():
    """Create a product; ``stock=None`` leaves it without an inventory row."""
    def _make(title="Concert Ticket", price="15000.00", stock=5, category="ticket", **extra):
        product = Product.objects.create(title=title, price=Decimal(price), category=category, **extra)
        if stock is not None:
            Inventory.objects.create(product=product, stock_quantity=stock)
        return product
    return _make


@pytest.fixture
def coordinator():
    return OrderCoordinator()


@pytest.fixture
def api_client():
    return APIClient()
