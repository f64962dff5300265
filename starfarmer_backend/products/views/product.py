# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Public catalogue browsing (AllowAny): list + retrieve, active products only.
- Admin product management (create / update / deactivate).

Query params (list):
- search=<text>        matches name_en, name_mr, description_en, description_mr
- category=<slug>      fertilizers | seeds | equipment
- sort_by=<field>      created_at | price | discounted_price | name_en
- sort_order=asc|desc  default desc
- page, page_size      page number pagination
"""

import logging

from django.db.models import Q
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.models.product import CATEGORY_CHOICES
from products.serializers.product import ProductSerializer
from users.permissions import IsAdmin

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"created_at", "price", "discounted_price", "name_en"}
CATEGORY_VALUES = {value for value, _ in CATEGORY_CHOICES}


class ProductPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100


@extend_schema_view(
    list=extend_schema(
        tags=["Products"],
        parameters=[
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                "category",
                str,
                OpenApiParameter.QUERY,
                required=False,
                enum=sorted(CATEGORY_VALUES),
            ),
            OpenApiParameter(
                "sort_by",
                str,
                OpenApiParameter.QUERY,
                required=False,
                enum=sorted(SORTABLE_FIELDS),
            ),
            OpenApiParameter(
                "sort_order",
                str,
                OpenApiParameter.QUERY,
                required=False,
                enum=["asc", "desc"],
            ),
        ],
        responses={
            200: ProductSerializer(many=True),
            400: OpenApiResponse(description="Invalid sort or category"),
        },
        description="Public catalogue browsing (AllowAny).",
    ),
    retrieve=extend_schema(tags=["Products"]),
    create=extend_schema(tags=["Products"]),
    update=extend_schema(tags=["Products"]),
    partial_update=extend_schema(tags=["Products"]),
    destroy=extend_schema(
        tags=["Products"],
        description="Deactivates the product. Order history keeps referencing it.",
    ),
)
class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    Public:
    - GET /api/products/
    - GET /api/products/<id>/

    Admin:
    - POST / PUT / PATCH / DELETE
    """

    serializer_class = ProductSerializer
    pagination_class = ProductPagination

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [AllowAny()]
        return [IsAuthenticated(), IsAdmin()]

    def _is_admin(self) -> bool:
        user = self.request.user
        return bool(user and user.is_authenticated and getattr(user, "is_admin", False))

    def get_queryset(self):
        qs = Product.objects.all()

        # Inactive products stay visible to admins only.
        if not self._is_admin():
            qs = qs.filter(is_active=True)

        if self.action != "list":
            return qs

        params = self.request.query_params

        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(name_en__icontains=search)
                | Q(name_mr__icontains=search)
                | Q(description_en__icontains=search)
                | Q(description_mr__icontains=search)
            )

        category = (params.get("category") or "").strip().lower()
        if category:
            if category not in CATEGORY_VALUES:
                raise ValidationError(
                    {"category": f"category must be one of: {', '.join(sorted(CATEGORY_VALUES))}"}
                )
            qs = qs.filter(category=category)

        sort_by = (params.get("sort_by") or "created_at").strip()
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                {"sort_by": f"sort_by must be one of: {', '.join(sorted(SORTABLE_FIELDS))}"}
            )

        sort_order = (params.get("sort_order") or "desc").strip().lower()
        if sort_order not in ("asc", "desc"):
            raise ValidationError({"sort_order": "sort_order must be asc or desc"})

        prefix = "" if sort_order == "asc" else "-"
        # id as tie-breaker keeps pagination stable
        return qs.order_by(f"{prefix}{sort_by}", "id")

    def perform_create(self, serializer):
        product = serializer.save()
        logger.info(
            "Product created",
            extra={"product_id": str(product.id), "sku": product.sku},
        )

    def destroy(self, request, *args, **kwargs):
        """
        Soft delete: order lines keep a valid product reference.
        """
        product = self.get_object()
        if product.is_active:
            product.is_active = False
            product.save(update_fields=["is_active", "updated_at"])
            logger.info(
                "Product deactivated",
                extra={"product_id": str(product.id), "sku": product.sku},
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
