from Orders.models import Inventory


def stock_of(product):
    return Inventory.objects.get(product=product).stock_quantity
