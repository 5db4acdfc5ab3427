from django.db import models


class Product(models.Model):
    title = models.CharField(max_length=200)
    subtitle = models.CharField(max_length=200, blank=True, default="")
    price = models.DecimalField(max_digits=12, decimal_places=2)   # unit price used for orders
    price_display = models.CharField(max_length=50, blank=True, default="")  # label shown in the shop
    category = models.CharField(max_length=50, db_index=True)
    type = models.CharField(max_length=50, blank=True, default="")
    badge = models.CharField(max_length=50, blank=True, default="")
    image = models.CharField(max_length=500, blank=True, default="")  # opaque path or URL
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"Product {self.pk} {self.title}"


class Inventory(models.Model):
    product = models.OneToOneField(
        Product, primary_key=True, on_delete=models.CASCADE, related_name="inventory"
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    reserved_quantity = models.PositiveIntegerField(default=0)  # only ever reset to 0
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "inventory"
        ordering = ["product_id"]

    def __str__(self):
        return f"Inventory product={self.product_id} stock={self.stock_quantity} reserved={self.reserved_quantity}"


class Order(models.Model):
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES = [(STATUS_COMPLETED, "Completed")]

    customer_name = models.CharField(max_length=100, db_index=True)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="orders")
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)   # snapshot at order time
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    order_date = models.DateTimeField(auto_now_add=True, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_COMPLETED)

    class Meta:
        ordering = ["-order_date", "-id"]

    def __str__(self):
        return f"Order {self.pk} {self.customer_name} product={self.product_id} qty={self.quantity}"
