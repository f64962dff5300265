# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product
from products.models.product import CATEGORY_SEEDS
from products.tests.factories import make_product

User = get_user_model()


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced
    - Pricing is sane (discounted_price <= price, both > 0)
    - Benefits are bilingual and non-empty
    """

    def test_sku_must_be_unique(self):
        make_product(sku="NPK-1")

        with self.assertRaises(IntegrityError):
            make_product(sku="NPK-1")

    def test_discounted_price_cannot_exceed_price(self):
        product = make_product(price=Decimal("100.00"), discounted_price=Decimal("150.00"))

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_benefits_cannot_be_empty(self):
        product = make_product(benefits=[])

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_benefit_requires_both_languages(self):
        product = make_product(benefits=[{"en": "Only english"}])

        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_selling_price_is_discounted_price(self):
        product = make_product(price=Decimal("200.00"), discounted_price=Decimal("180.00"))
        self.assertEqual(product.selling_price, Decimal("180.00"))

    def test_product_string_representation(self):
        product = make_product(name_en="Urea", sku="UREA-45")
        self.assertIn("Urea", str(product))


class ProductPublicApiTests(TestCase):
    """
    Public catalogue browsing: AllowAny, active products only.
    """

    def setUp(self):
        self.client = APIClient()
        self.list_url = reverse("products:products-list")

        self.cheap = make_product(
            name_en="Tomato Seeds",
            category=CATEGORY_SEEDS,
            price=Decimal("60.00"),
            discounted_price=Decimal("50.00"),
        )
        self.pricey = make_product(
            name_en="Potash Fertilizer",
            price=Decimal("900.00"),
            discounted_price=Decimal("850.00"),
        )
        self.hidden = make_product(name_en="Old Sprayer", is_active=False)

    def _ids(self, response):
        return [row["id"] for row in response.data["results"]]

    def test_anonymous_can_list_active_products_only(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertNotIn(str(self.hidden.id), self._ids(response))

    def test_search_matches_marathi_name(self):
        make_product(name_en="Neem Oil", name_mr="कडुनिंब तेल")

        response = self.client.get(self.list_url, {"search": "कडुनिंब"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["name_en"], "Neem Oil")

    def test_category_filter(self):
        response = self.client.get(self.list_url, {"category": "seeds"})

        self.assertEqual(self._ids(response), [str(self.cheap.id)])

    def test_sort_by_discounted_price_ascending(self):
        response = self.client.get(
            self.list_url, {"sort_by": "discounted_price", "sort_order": "asc"}
        )

        self.assertEqual(self._ids(response), [str(self.cheap.id), str(self.pricey.id)])

    def test_invalid_sort_field_is_rejected(self):
        response = self.client.get(self.list_url, {"sort_by": "password"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_page_size_param(self):
        response = self.client.get(self.list_url, {"page_size": 1})

        self.assertEqual(response.data["count"], 2)
        self.assertEqual(len(response.data["results"]), 1)
        self.assertIsNotNone(response.data["next"])

    def test_inactive_product_detail_is_404_for_public(self):
        url = reverse("products:products-detail", args=[self.hidden.id])
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ProductAdminApiTests(TestCase):
    """
    Admin-only product management.
    """

    def setUp(self):
        self.client = APIClient()
        self.list_url = reverse("products:products-list")

        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass", role="admin"
        )
        self.customer = User.objects.create_user(
            email="farmer@example.com", password="pass", role="customer"
        )

        self.payload = {
            "sku": "DAP-50",
            "name_en": "DAP 50kg",
            "name_mr": "डीएपी ५० किलो",
            "description_en": "Di-ammonium phosphate",
            "description_mr": "डाय-अमोनियम फॉस्फेट",
            "benefits": [{"en": "Root growth", "mr": "मुळांची वाढ"}],
            "price": "1500.00",
            "discounted_price": "1350.00",
            "category": "fertilizers",
            "image": "https://cdn.example.com/dap.jpg",
        }

    def test_admin_can_create_product(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Product.objects.filter(sku="DAP-50").exists())

    def test_customer_cannot_create_product(self):
        self.client.force_authenticate(self.customer)

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_cannot_create_product(self):
        response = self.client.post(self.list_url, self.payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_rejects_discount_above_price(self):
        self.client.force_authenticate(self.admin)
        self.payload["discounted_price"] = "1600.00"

        response = self.client.post(self.list_url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("discounted_price", response.data)

    def test_partial_update_validates_against_stored_price(self):
        product = make_product(price=Decimal("100.00"), discounted_price=Decimal("90.00"))
        self.client.force_authenticate(self.admin)

        url = reverse("products:products-detail", args=[product.id])
        response = self.client.patch(url, {"discounted_price": "101.00"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_deactivates_instead_of_removing(self):
        product = make_product()
        self.client.force_authenticate(self.admin)

        url = reverse("products:products-detail", args=[product.id])
        response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertFalse(product.is_active)

    def test_admin_sees_inactive_products(self):
        make_product(is_active=False)
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.list_url)

        self.assertEqual(response.data["count"], 1)
