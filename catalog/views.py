"""
CATALOG App - Product API for the admin dashboard
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsAdmin
from core.views import no_store

from .serializers import ProductListQuerySerializer, ProductSerializer
from .services import CatalogService


class ProductListView(APIView):
    """
    GET    /api/products/?search=doritos&category=Papas
    POST   /api/products/
    PUT    /api/products/          (id in body)
    DELETE /api/products/?id=<id>
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        query = ProductListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        products = CatalogService().list_products(
            search=query.validated_data.get('search'),
            category=query.validated_data.get('category'),
        )
        return no_store(Response(products))

    def post(self, request):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = CatalogService().create_product(serializer.validated_data)
        return Response(product, status=status.HTTP_201_CREATED)

    def put(self, request):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product_id = serializer.validated_data.get('id', '')
        return Response(CatalogService().update_product(product_id, serializer.validated_data))

    def delete(self, request):
        CatalogService().delete_product(request.query_params.get('id', ''))
        return Response({'message': 'Producto eliminado'})


class ProductCategoriesView(APIView):
    """GET /api/products/categories/"""
    permission_classes = [IsAdmin]

    def get(self, request):
        return no_store(Response({'categories': CatalogService().list_categories()}))


class LowStockProductsView(APIView):
    """
    Products under the low-stock threshold.

    GET /api/products/low-stock/
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        products = CatalogService().low_stock()
        return no_store(Response({'count': len(products), 'products': products}))


class ProductDetailView(APIView):
    """
    GET    /api/products/<id>/
    PATCH  /api/products/<id>/
    DELETE /api/products/<id>/
    """
    permission_classes = [IsAdmin]

    def get(self, request, product_id):
        return Response(CatalogService().get_product(str(product_id)))

    def patch(self, request, product_id):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(CatalogService().update_product(str(product_id), serializer.validated_data))

    put = patch

    def delete(self, request, product_id):
        CatalogService().delete_product(str(product_id))
        return Response({'message': 'Producto eliminado'})
