"""
API Serializers for Request/Response handling
"""
from decimal import Decimal

from rest_framework import serializers
from rest_framework.utils import html

from apps.accounts.models import User
from apps.catalog.models import Category, Product
from apps.core.utils import parse_array_field
from apps.orders.models import Order, OrderItem


class FlexibleListField(serializers.Field):
    """
    List input that accepts a JSON array, a comma separated string, or the
    same multipart key repeated.
    """

    def get_value(self, dictionary):
        if html.is_html_input(dictionary):
            values = dictionary.getlist(self.field_name)
            return values if values else serializers.empty
        return dictionary.get(self.field_name, serializers.empty)

    def to_internal_value(self, data):
        return parse_array_field(data)

    def to_representation(self, value):
        return list(value or [])


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class CategorySerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'createdAt', 'updatedAt']


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, error_messages={'required': 'Name is required'})


class CategoryRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name']


class ProductSerializer(serializers.ModelSerializer):
    """
    Response serializer for products.
    """
    category = CategoryRefSerializer(read_only=True)
    currentPrice = serializers.DecimalField(source='current_price', max_digits=12, decimal_places=2)
    originalPrice = serializers.DecimalField(
        source='original_price', max_digits=12, decimal_places=2, allow_null=True
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'images', 'stock', 'category', 'rating',
            'currentPrice', 'originalPrice', 'colors', 'sizes', 'description',
            'createdAt', 'updatedAt',
        ]


class ProductWriteSerializer(serializers.Serializer):
    """
    Request serializer for creating and updating products.
    Used with ``partial=True`` for updates.
    """
    name = serializers.CharField(max_length=255)
    category = serializers.CharField()
    currentPrice = serializers.DecimalField(
        source='current_price', max_digits=12, decimal_places=2, min_value=Decimal('0.01')
    )
    originalPrice = serializers.DecimalField(
        source='original_price', max_digits=12, decimal_places=2,
        required=False, allow_null=True, min_value=Decimal('0')
    )
    stock = serializers.IntegerField(required=False, min_value=0)
    rating = serializers.DecimalField(
        max_digits=3, decimal_places=2, required=False,
        min_value=Decimal('0'), max_value=Decimal('5')
    )
    sku = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    colors = FlexibleListField(required=False)
    sizes = FlexibleListField(required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    removeImages = FlexibleListField(source='remove_images', required=False)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class UserSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone', 'createdAt']


class UserRefSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone']


class AdminSignupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)


class CustomerSignupSerializer(AdminSignupSerializer):
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)


class SigninSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={'required': 'Email is required'})


class ResetPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(min_length=6, write_only=True)


class ContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    message = serializers.CharField(max_length=5000)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class OrderCreateSerializer(serializers.Serializer):
    """
    Request serializer for checkout.

    ``items`` may be a JSON encoded string (multipart) or a list (JSON body).
    ``totalAmount`` and ``discountApplied`` are accepted for compatibility and
    ignored: totals are always computed server side.
    """
    userId = serializers.CharField()
    items = serializers.JSONField()
    paymentMethod = serializers.ChoiceField(
        choices=[value for value, _ in Order.PAYMENT_METHOD_CHOICES],
        error_messages={'invalid_choice': 'Invalid payment method'}
    )
    totalAmount = serializers.CharField(required=False, allow_blank=True)
    discountApplied = serializers.CharField(required=False, allow_blank=True)


class OrderStatusSerializer(serializers.Serializer):
    orderStatus = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        attrs['new_status'] = attrs.get('orderStatus') or attrs.get('status')
        return attrs


class OrderItemSerializer(serializers.ModelSerializer):
    productId = serializers.UUIDField(source='product_id')
    product = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['productId', 'product', 'name', 'sku', 'quantity', 'price']

    def get_product(self, item):
        product = getattr(item, 'catalog_product', None)
        if product is None:
            return None
        return {
            'id': str(product.id),
            'name': product.name,
            'sku': product.sku,
            'currentPrice': product.current_price,
        }


class OrderSerializer(serializers.ModelSerializer):
    """
    Response serializer for orders, joined with the user and the live
    catalog product of each line (null once the product is deleted).
    """
    orderId = serializers.CharField(source='order_id')
    user = UserRefSerializer(read_only=True)
    userId = serializers.UUIDField(source='user_id')
    items = OrderItemSerializer(source='line_items', many=True)
    discountAmount = serializers.DecimalField(source='discount_amount', max_digits=12, decimal_places=2)
    totalAmount = serializers.DecimalField(source='total_amount', max_digits=12, decimal_places=2)
    discountApplied = serializers.CharField(source='discount_applied')
    shippingAddress = serializers.DictField(source='shipping_address')
    paymentMethod = serializers.CharField(source='payment_method')
    paymentStatus = serializers.CharField(source='payment_status')
    orderStatus = serializers.CharField(source='order_status')
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta:
        model = Order
        fields = [
            'id', 'orderId', 'userId', 'user', 'items', 'subtotal', 'discountAmount',
            'totalAmount', 'discountApplied', 'shippingAddress', 'paymentMethod',
            'paymentStatus', 'orderStatus', 'files', 'createdAt', 'updatedAt',
        ]


class HealthCheckSerializer(serializers.Serializer):
    """
    Response serializer for health check.
    """
    status = serializers.CharField()
    version = serializers.CharField()
    database = serializers.CharField()
