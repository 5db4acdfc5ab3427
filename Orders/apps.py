from django.apps import AppConfig


class OrdersConfig(AppConfig):
    name = "Orders"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from .services import OrderCoordinator

        # one coordinator per process, views reach it through the app registry
        self.coordinator = OrderCoordinator.from_settings()
