"""
catalog/seed.py -- Demo records loaded at startup when SEED_DEMO_DATA=true.

One bulb and one pending order for two of them, so a fresh admin UI has
something to show. Tests build empty stores and never call this.
"""

from catalog.models import Order, OrderItem, OrderStatus, Product
from catalog.store import OrderStore, ProductStore

DEMO_PRODUCTS = (
    Product(
        id=1,
        sku="BULB-007",
        name="EcoBright 7W",
        description="Энергоэффективная лампочка для дома.",
        category_id="bulb",
        is_active=True,
        image_url=(
            "https://santhimetaleshop.in/cdn/shop/files/"
            "Untitleddesign_26a5d7f4-82b7-4e7a-ac43-068a31086beb.png?v=1694498000&width=1445"
        ),
        price=500,
        stock_qty=20,
        attributes={
            "power": 7,
            "color": "Тёплый белый",
            "temperature": 2700,
            "socketType": "E27",
        },
    ),
)

DEMO_ORDERS = (
    Order(
        id=1,
        customer_name="Иван Иванов",
        items=[OrderItem(product_id=1, quantity=2)],
        total_price=1000,
        status=OrderStatus.pending,
    ),
)


def seed_demo_data(products: ProductStore, orders: OrderStore) -> None:
    products.seed(DEMO_PRODUCTS)
    orders.seed(DEMO_ORDERS)
