"""
CATALOG App Serializers - Products
"""

from rest_framework import serializers


class ProductListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)


class ProductSerializer(serializers.Serializer):
    """
    Product payload sent by the dashboard form.

    Every field is optional here: name and price rules differ between
    create and update and are applied by CatalogService.
    """

    id = serializers.CharField(required=False)
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    brand = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    wholesale_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    stock = serializers.IntegerField(min_value=0, required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    weight = serializers.CharField(max_length=50, required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True)
    is_available = serializers.BooleanField(required=False)
    min_order_quantity = serializers.IntegerField(min_value=1, required=False)
    max_order_quantity = serializers.IntegerField(min_value=1, required=False)
    tags = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    def validate(self, data):
        minimum = data.get('min_order_quantity')
        maximum = data.get('max_order_quantity')
        if minimum is not None and maximum is not None and minimum > maximum:
            raise serializers.ValidationError(
                'La cantidad mínima no puede superar la cantidad máxima'
            )
        return data
