import logging
import socket

from django.apps import apps
from django.conf import settings
from django.db import DatabaseError, connection, transaction
from django.db.models import IntegerField, ProtectedError
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import ValidationError
from .models import Product
from .permissions import HasAdminToken
from .serializers import (
    CatalogProductSerializer,
    InventoryAddSerializer,
    InventoryRowSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    PlacedOrderSerializer,
    ProductSerializer,
)

logger = logging.getLogger(__name__)


def get_coordinator():
    return apps.get_app_config("Orders").coordinator


def ok(status_code=status.HTTP_200_OK, **payload):
    return Response({"success": True, **payload}, status=status_code)


def products_with_stock():
    """Products left-joined with their inventory row; missing rows count as 0."""
    return Product.objects.annotate(
        stock=Coalesce("inventory__stock_quantity", 0, output_field=IntegerField()),
        reserved=Coalesce("inventory__reserved_quantity", 0, output_field=IntegerField()),
    ).order_by("id")


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public catalog:
      - list: every product with its stock, optional ?category=
      - retrieve / inventory: one product with its stock
    """
    serializer_class = CatalogProductSerializer
    permission_classes = [AllowAny]

    def get_queryset(self):
        qs = products_with_stock()
        category = self.request.query_params.get("category")
        if category:
            qs = qs.filter(category=category)
        return qs

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return ok(products=serializer.data)

    def retrieve(self, request, *args, **kwargs):
        return ok(product=self.get_serializer(self.get_object()).data)

    @action(detail=True, methods=["get"], url_path="inventory")
    def inventory(self, request, pk=None):
        return self.retrieve(request, pk=pk)


class OrderViewSet(viewsets.GenericViewSet):
    """
    Customer-facing order endpoints:
      - create: place an order, body {"customerName", "productId", "quantity"}
      - list: most recent orders
      - customer/<name>: one customer's orders
    """
    permission_classes = [AllowAny]

    @action(detail=False, methods=["post"], url_path="create")
    def place(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        placed = get_coordinator().create_order(**serializer.validated_data)
        return ok(
            status.HTTP_201_CREATED,
            message="Order placed.",
            order=PlacedOrderSerializer(placed).data,
        )

    @action(detail=False, methods=["get"], url_path="list")
    def recent(self, request):
        limit = getattr(settings, "ORDERS_RECENT_LIMIT", 100)
        orders = get_coordinator().ledger.list_recent(limit)
        return ok(orders=OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"customer/(?P<customer_name>[^/]+)")
    def by_customer(self, request, customer_name=None):
        orders = get_coordinator().ledger.list_by_customer(customer_name)
        return ok(orders=OrderSerializer(orders, many=True).data)


# ---- admin endpoints ----

class AdminProductViewSet(viewsets.ModelViewSet):
    """
    Product management. Creating a product also opens its inventory row at
    the baseline quantity; products referenced by orders cannot be deleted.
    """
    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    permission_classes = [HasAdminToken]

    def list(self, request, *args, **kwargs):
        return ok(products=self.get_serializer(self.get_queryset(), many=True).data)

    def retrieve(self, request, *args, **kwargs):
        return ok(product=self.get_serializer(self.get_object()).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        coordinator = get_coordinator()
        with transaction.atomic():
            product = serializer.save()
            coordinator.inventory.upsert_baseline(product.pk, coordinator.baseline)
        logger.info("Product %s created with %s units", product.pk, coordinator.baseline)
        return ok(
            status.HTTP_201_CREATED,
            message="Product created.",
            productId=product.pk,
            product=serializer.data,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        product = self.get_object()
        serializer = self.get_serializer(product, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return ok(message="Product updated.", product=serializer.data)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        product_id = product.pk
        try:
            with transaction.atomic():
                product.delete()
        except ProtectedError:
            raise ValidationError("Products with existing orders cannot be deleted.")
        logger.info("Product %s deleted", product_id)
        return ok(message="Product deleted.")


class AdminInventoryViewSet(viewsets.GenericViewSet):
    """
    Stock overview and manual adjustment, keyed by product id:
      - list: every product with its stock
      - <productId>/add: body {"quantity": n}
    """
    serializer_class = InventoryRowSerializer
    permission_classes = [HasAdminToken]

    def get_queryset(self):
        return products_with_stock()

    def list(self, request):
        return ok(inventory=self.get_serializer(self.get_queryset(), many=True).data)

    @action(detail=True, methods=["post"], url_path="add")
    def add(self, request, pk=None):
        serializer = InventoryAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        stock = get_coordinator().add_inventory(pk, quantity)
        return ok(message=f"Added {quantity} units.", newStock=stock)


class AdminOrderViewSet(viewsets.GenericViewSet):
    permission_classes = [HasAdminToken]

    def destroy(self, request, pk=None):
        cancelled = get_coordinator().delete_order(pk)
        return ok(
            message="Order deleted and stock restored.",
            orderId=cancelled.order_id,
            productId=cancelled.product_id,
            restoredStock=cancelled.restored_stock,
        )


@api_view(["POST"])
@permission_classes([HasAdminToken])
def reset_inventory(request):
    coordinator = get_coordinator()
    count = coordinator.reset_all_inventory()
    return ok(
        message=f"All inventory reset to {coordinator.baseline} units.",
        affectedRows=count,
    )


# ---- service endpoints ----

@api_view(["GET"])
@permission_classes([AllowAny])
def index(request):
    return ok(message="Order Service API", timestamp=timezone.now().isoformat())


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    hostname = socket.gethostname()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        logger.error("Health check failed: %s", exc)
        return Response(
            {"success": False, "message": "Database connection failed", "hostname": hostname,
             "timestamp": timezone.now().isoformat()},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return ok(
        message="Server is healthy",
        database="connected",
        hostname=hostname,
        timestamp=timezone.now().isoformat(),
    )
