# products/views/category.py

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_INVENTORY_EDIT, HasCapability
from products.models import Category
from products.serializers.category import CategorySerializer


@extend_schema(tags=["Products"])
class CategoryViewSet(viewsets.ModelViewSet):
    """
    Any authenticated operator can read categories (product forms need them);
    writes require inventory.edit.
    """

    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [IsAuthenticated()]

        self.required_capability = CAP_INVENTORY_EDIT
        return [IsAuthenticated(), HasCapability()]
