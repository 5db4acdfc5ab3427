import pytest

from Orders.models import Inventory, Order, Product

from .helpers import stock_of

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin_token(settings):
    settings.ORDERS_ADMIN_TOKEN = "s3cret"
    return "s3cret"


def test_create_product_opens_inventory_at_baseline(api_client):
    response = api_client.post("/api/orders/admin/products", {
        "title": "Tour T-Shirt",
        "subtitle": "Black, L",
        "price": "35000.00",
        "price_display": "₩35,000",
        "category": "goods",
        "badge": "NEW",
    }, format="json")

    assert response.status_code == 201
    body = response.json()
    product = Product.objects.get(pk=body["productId"])
    assert product.title == "Tour T-Shirt"
    assert stock_of(product) == 100
    assert Inventory.objects.get(product=product).reserved_quantity == 0


def test_create_product_requires_title_price_category(api_client):
    response = api_client.post("/api/orders/admin/products", {"subtitle": "no title"}, format="json")
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {"title", "price", "category"} <= set(errors)
    assert not Product.objects.exists()


def test_create_product_rejects_negative_price(api_client):
    response = api_client.post("/api/orders/admin/products",
                               {"title": "X", "price": "-1.00", "category": "goods"}, format="json")
    assert response.status_code == 400
    assert "price" in response.json()["errors"]


def test_update_product_keeps_past_order_prices(api_client, make_product, coordinator):
    product = make_product(stock=5, price="10.00")
    placed = coordinator.create_order("Alice", product.pk, 2)

    response = api_client.patch(f"/api/orders/admin/products/{product.pk}", {"price": "20.00"}, format="json")
    assert response.status_code == 200
    assert response.json()["product"]["price"] == "20.00"

    order = Order.objects.get(pk=placed.order_id)
    assert str(order.unit_price) == "10.00"
    assert str(order.total_price) == "20.00"
    assert stock_of(product) == 3


def test_update_missing_product(api_client):
    response = api_client.put("/api/orders/admin/products/999",
                              {"title": "X", "price": "1.00", "category": "goods"}, format="json")
    assert response.status_code == 404


def test_delete_product_without_orders(api_client, make_product):
    product = make_product(stock=5)

    response = api_client.delete(f"/api/orders/admin/products/{product.pk}")
    assert response.status_code == 200
    assert not Product.objects.filter(pk=product.pk).exists()
    assert not Inventory.objects.filter(product_id=product.pk).exists()


def test_delete_product_with_orders_is_refused(api_client, make_product, coordinator):
    product = make_product(stock=5)
    coordinator.create_order("Alice", product.pk, 1)

    response = api_client.delete(f"/api/orders/admin/products/{product.pk}")
    assert response.status_code == 400
    assert response.json()["message"] == "Products with existing orders cannot be deleted."
    assert Product.objects.filter(pk=product.pk).exists()
    assert stock_of(product) == 4


def test_inventory_overview(api_client, make_product):
    first = make_product(title="A", stock=3)
    second = make_product(title="B", stock=None)

    response = api_client.get("/api/orders/admin/inventory")
    assert response.status_code == 200
    assert response.json()["inventory"] == [
        {"product_id": first.pk, "product_title": "A", "stock_quantity": 3, "reserved_quantity": 0},
        {"product_id": second.pk, "product_title": "B", "stock_quantity": 0, "reserved_quantity": 0},
    ]


def test_add_inventory(api_client, make_product):
    product = make_product(stock=5)

    response = api_client.post(f"/api/orders/admin/inventory/{product.pk}/add", {"quantity": 10}, format="json")
    assert response.status_code == 200
    assert response.json()["newStock"] == 15
    assert stock_of(product) == 15


def test_add_inventory_validation(api_client, make_product):
    product = make_product(stock=5)

    bad = api_client.post(f"/api/orders/admin/inventory/{product.pk}/add", {"quantity": 0}, format="json")
    assert bad.status_code == 400
    missing = api_client.post("/api/orders/admin/inventory/999/add", {"quantity": 1}, format="json")
    assert missing.status_code == 404
    assert stock_of(product) == 5


def test_delete_order_restores_stock(api_client, make_product, coordinator):
    product = make_product(stock=5)
    placed = coordinator.create_order("Alice", product.pk, 3)

    response = api_client.delete(f"/api/orders/admin/orders/{placed.order_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["restoredStock"] == 5
    assert body["productId"] == product.pk
    assert stock_of(product) == 5

    again = api_client.delete(f"/api/orders/admin/orders/{placed.order_id}")
    assert again.status_code == 404
    assert stock_of(product) == 5


def test_reset_inventory(api_client, make_product):
    first = make_product(title="A", stock=3)
    second = make_product(title="B", stock=0)

    response = api_client.post("/api/orders/admin/reset-inventory")
    assert response.status_code == 200
    assert response.json()["affectedRows"] == 2
    assert stock_of(first) == 100
    assert stock_of(second) == 100


def test_admin_routes_require_token_when_configured(api_client, make_product, admin_token):
    product = make_product(stock=5)

    assert api_client.get("/api/orders/admin/inventory").status_code == 403
    denied = api_client.post("/api/orders/admin/reset-inventory", HTTP_X_ADMIN_TOKEN="wrong")
    assert denied.status_code == 403
    assert denied.json() == {"success": False, "message": "Admin token missing or invalid."}
    assert stock_of(product) == 5

    allowed = api_client.post("/api/orders/admin/reset-inventory", HTTP_X_ADMIN_TOKEN=admin_token)
    assert allowed.status_code == 200
    assert stock_of(product) == 100


def test_public_routes_ignore_admin_token(api_client, make_product, admin_token):
    product = make_product(stock=5)

    assert api_client.get("/api/orders/products").status_code == 200
    response = api_client.post("/api/orders/create",
                               {"customerName": "Alice", "productId": product.pk, "quantity": 1}, format="json")
    assert response.status_code == 201
