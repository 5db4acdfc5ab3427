from django.urls import include, path

from Orders import views

urlpatterns = [
    path("", views.index, name="index"),
    path("health", views.health, name="health"),
    path("api/orders/", include("Orders.urls")),
]
