from rest_framework import serializers

from .models import Order, Product

SOLD_OUT = "Sold out"


class CatalogProductSerializer(serializers.ModelSerializer):
    """Product as the shop sees it. Expects a queryset annotated with ``stock``."""
    stock_quantity = serializers.IntegerField(source="stock", read_only=True)
    stock_display = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Product
        fields = ("id", "title", "subtitle", "price", "price_display", "image", "category", "type", "badge",
                  "stock_quantity", "stock_display")

    def get_stock_display(self, obj):
        return str(obj.stock) if obj.stock else SOLD_OUT


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ("id", "title", "subtitle", "price", "price_display", "image", "category", "type", "badge",
                  "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("price cannot be negative")
        return value


class InventoryRowSerializer(serializers.ModelSerializer):
    """One line of the admin stock overview, built from an annotated Product queryset."""
    product_id = serializers.IntegerField(source="id", read_only=True)
    product_title = serializers.CharField(source="title", read_only=True)
    stock_quantity = serializers.IntegerField(source="stock", read_only=True)
    reserved_quantity = serializers.IntegerField(source="reserved", read_only=True)

    class Meta:
        model = Product
        fields = ("product_id", "product_title", "stock_quantity", "reserved_quantity")


class InventoryAddSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    # request keys are camelCase: {"customerName", "productId", "quantity"}
    customerName = serializers.CharField(source="customer_name", max_length=100)
    productId = serializers.IntegerField(source="product_id", min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class PlacedOrderSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="order_id")
    customerName = serializers.CharField(source="customer_name")
    productId = serializers.IntegerField(source="product_id")
    productTitle = serializers.CharField(source="product_title")
    quantity = serializers.IntegerField()
    unitPrice = serializers.DecimalField(source="unit_price", max_digits=12, decimal_places=2)
    totalPrice = serializers.DecimalField(source="total_price", max_digits=14, decimal_places=2)
    orderDate = serializers.DateTimeField(source="order_date")
    remainingStock = serializers.IntegerField(source="remaining_stock")


class OrderSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    product_title = serializers.CharField(source="product.title", read_only=True)
    product_subtitle = serializers.CharField(source="product.subtitle", read_only=True)

    class Meta:
        model = Order
        fields = ("id", "customer_name", "product_id", "product_title", "product_subtitle", "quantity",
                  "unit_price", "total_price", "order_date", "status")
        read_only_fields = ("id", "customer_name", "quantity", "unit_price", "total_price", "order_date", "status")
