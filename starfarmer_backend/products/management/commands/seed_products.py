from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product
from products.models.product import (
    CATEGORY_EQUIPMENT,
    CATEGORY_FERTILIZERS,
    CATEGORY_SEEDS,
)


PRODUCTS_DATA = [
    {
        "sku": "FERT-NPK-1919",
        "name_en": "NPK 19:19:19 Water Soluble Fertilizer",
        "name_mr": "एनपीके १९:१९:१९ पाण्यात विरघळणारे खत",
        "description_en": "Balanced nutrition for all crops during vegetative growth.",
        "description_mr": "वाढीच्या अवस्थेत सर्व पिकांसाठी संतुलित पोषण.",
        "benefits": [
            {"en": "Faster vegetative growth", "mr": "जलद वाढ"},
            {"en": "Fully water soluble", "mr": "पूर्णपणे पाण्यात विरघळणारे"},
        ],
        "price": Decimal("450.00"),
        "discounted_price": Decimal("399.00"),
        "category": CATEGORY_FERTILIZERS,
        "image": "https://cdn.starfarmer.in/products/npk-191919.jpg",
    },
    {
        "sku": "SEED-TOM-HY",
        "name_en": "Hybrid Tomato Seeds",
        "name_mr": "संकरित टोमॅटो बियाणे",
        "description_en": "High-yield hybrid tomato seeds with disease tolerance.",
        "description_mr": "रोग सहनशील, जास्त उत्पादन देणारे संकरित टोमॅटो बियाणे.",
        "benefits": [
            {"en": "High germination rate", "mr": "उच्च उगवण क्षमता"},
        ],
        "price": Decimal("250.00"),
        "discounted_price": Decimal("220.00"),
        "category": CATEGORY_SEEDS,
        "image": "https://cdn.starfarmer.in/products/tomato-seeds.jpg",
    },
    {
        "sku": "EQP-SPRAY-16L",
        "name_en": "Knapsack Sprayer 16L",
        "name_mr": "नॅपसॅक फवारणी पंप १६ लि.",
        "description_en": "Manual knapsack sprayer with adjustable nozzle.",
        "description_mr": "समायोज्य नोजलसह हाताने चालणारा फवारणी पंप.",
        "benefits": [
            {"en": "Comfortable padded straps", "mr": "आरामदायक पट्टे"},
            {"en": "Leak-proof tank", "mr": "गळतीरहित टाकी"},
        ],
        "price": Decimal("1800.00"),
        "discounted_price": Decimal("1499.00"),
        "category": CATEGORY_EQUIPMENT,
        "image": "https://cdn.starfarmer.in/products/sprayer-16l.jpg",
    },
]


class Command(BaseCommand):
    help = "Seed a small bilingual product catalogue (idempotent by sku)"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        created_count = 0
        for data in PRODUCTS_DATA:
            defaults = {k: v for k, v in data.items() if k != "sku"}
            _, created = Product.objects.get_or_create(sku=data["sku"], defaults=defaults)
            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded ({created_count} created).")
        )
