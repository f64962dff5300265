# products/tests/factories.py

"""
Shared test helpers for building catalogue products.
"""

from __future__ import annotations

from decimal import Decimal

from products.models import Product
from products.models.product import CATEGORY_FERTILIZERS

_counter = {"n": 0}


def make_product(**overrides) -> Product:
    _counter["n"] += 1
    n = _counter["n"]

    data = {
        "sku": f"SKU-{n:04d}",
        "name_en": f"Product {n}",
        "name_mr": f"उत्पादन {n}",
        "description_en": "Test description",
        "description_mr": "चाचणी वर्णन",
        "benefits": [{"en": "Better yield", "mr": "जास्त उत्पादन"}],
        "price": Decimal("120.00"),
        "discounted_price": Decimal("100.00"),
        "category": CATEGORY_FERTILIZERS,
        "image": "https://cdn.example.com/p.jpg",
        "is_active": True,
    }
    data.update(overrides)
    return Product.objects.create(**data)
