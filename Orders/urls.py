from django.urls import path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter(trailing_slash=False)
router.register(r"products", views.ProductViewSet, basename="product")
router.register(r"admin/products", views.AdminProductViewSet, basename="admin-product")
router.register(r"admin/inventory", views.AdminInventoryViewSet, basename="admin-inventory")
router.register(r"admin/orders", views.AdminOrderViewSet, basename="admin-order")
# create, list and customer/<name> sit directly under the mount point
router.register(r"", views.OrderViewSet, basename="order")

urlpatterns = [
    path("admin/reset-inventory", views.reset_inventory, name="reset-inventory"),
] + router.urls
