# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product routes under /api/products/
    /api/products/        list (AllowAny) / create (admin)
    /api/products/<id>/   retrieve (AllowAny) / update + deactivate (admin)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import ProductViewSet

app_name = "products"

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
