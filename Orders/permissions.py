import hmac

from django.conf import settings
from rest_framework import permissions

ADMIN_TOKEN_HEADER = "HTTP_X_ADMIN_TOKEN"


class HasAdminToken(permissions.BasePermission):
    """
    Guard for the admin endpoints (product CRUD, stock adjustment, order deletion).
    When ORDERS_ADMIN_TOKEN is configured the request must carry it in the
    X-Admin-Token header. Without a configured token the admin API is open,
    which is only meant for local development.
    """
    message = "Admin token missing or invalid."

    def has_permission(self, request, view):
        expected = getattr(settings, "ORDERS_ADMIN_TOKEN", None)
        if not expected:
            return True
        supplied = request.META.get(ADMIN_TOKEN_HEADER, "")
        return hmac.compare_digest(supplied.encode(), expected.encode())
