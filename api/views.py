"""
API Views for the Storefront platform

This module provides REST API endpoints for:
- Catalog: categories and products (with image uploads)
- Orders: checkout, order management and status changes
- Customers: per-order customer views for the admin console
- Auth: admin and storefront customer sign up / sign in, admin password reset
- Contact: contact form relay
- Health Check: system health and status
"""
import logging
from datetime import datetime, timezone

from django.db import connection
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.authentication import AdminTokenAuthentication
from apps.accounts.services import RESET_MESSAGE, AdminAuthService, CustomerAuthService
from apps.catalog.filters import ProductFilter
from apps.catalog.services import CategoryService, ProductService
from apps.core.notifications import send_contact_message
from apps.orders.cart import Cart
from apps.orders.customers import get_customer, list_customers
from apps.orders.services import OrderService, ShippingAddress

from .serializers import (
    AdminSignupSerializer,
    CategorySerializer,
    CategoryWriteSerializer,
    ContactSerializer,
    CustomerSignupSerializer,
    ForgotPasswordSerializer,
    HealthCheckSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    ResetPasswordSerializer,
    SigninSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ('street', 'city', 'state', 'postalCode', 'country')


def extract_shipping_address(data) -> ShippingAddress:
    """
    Read the address from either a nested ``shippingAddress`` object (JSON)
    or flat ``shippingAddress[field]`` keys (multipart form).
    """
    nested = data.get('shippingAddress')
    if isinstance(nested, dict):
        return ShippingAddress.from_dict(nested)
    flat = {name: data.get(f'shippingAddress[{name}]') for name in SHIPPING_FIELDS}
    return ShippingAddress.from_dict(flat)


def uploaded_files(request, *names):
    files = []
    for name in names:
        files.extend(request.FILES.getlist(name))
    return files


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class CategoryListView(APIView):
    """
    List and create categories.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses={200: CategorySerializer(many=True)})
    def get(self, request):
        categories = CategoryService().list()
        return Response(CategorySerializer(categories, many=True).data)

    @extend_schema(request=CategoryWriteSerializer, responses={201: CategorySerializer})
    def post(self, request):
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = CategoryService().create(serializer.validated_data['name'])
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


class CategoryDetailView(APIView):
    """
    Rename or delete a category. Deleting does not check for products.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=CategoryWriteSerializer, responses={200: CategorySerializer})
    def put(self, request, pk):
        category = CategoryService().update(pk, request.data.get('name'))
        return Response(CategorySerializer(category).data)

    def delete(self, request, pk):
        CategoryService().delete(pk)
        return Response({"success": True, "message": "Category deleted"})


class ProductListView(APIView):
    """
    List products, newest first.

    Query parameters (all optional, combined with AND): ``category`` (name),
    ``categoryId``, ``name`` (substring), ``color``, ``size``, ``minStock``,
    ``maxStock``, ``minPrice``, ``maxPrice``, ``createdFrom``, ``createdTo``.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses={200: ProductSerializer(many=True)})
    def get(self, request):
        product_filter = ProductFilter.from_query(request.query_params)
        products = ProductService().list(product_filter)
        return Response(ProductSerializer(products, many=True).data)


class ProductCreateView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=ProductWriteSerializer, responses={201: ProductSerializer})
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('remove_images', None)

        product = ProductService().create(data, images=uploaded_files(request, 'images'))
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class ProductDetailView(APIView):
    """
    Fetch, update (multipart, partial) or delete a product.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses={200: ProductSerializer})
    def get(self, request, pk):
        return Response(ProductSerializer(ProductService().get(pk)).data)

    @extend_schema(request=ProductWriteSerializer, responses={200: ProductSerializer})
    def put(self, request, pk):
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        remove_images = data.pop('remove_images', [])

        product = ProductService().update(
            pk,
            data,
            images=uploaded_files(request, 'images'),
            remove_images=remove_images,
        )
        return Response(ProductSerializer(product).data)

    def delete(self, request, pk):
        ProductService().delete(pk)
        return Response({
            "success": True,
            "message": "Product deleted successfully",
            "data": {"id": str(pk)},
        })


class ProductsByCategoryView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: ProductSerializer(many=True)})
    def get(self, request, category):
        products = ProductService().list_by_category_name(category)
        return Response(ProductSerializer(products, many=True).data)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class OrderListView(APIView):
    """
    Checkout and order listing.

    POST accepts multipart form data (``items`` as a JSON string, flat
    ``shippingAddress[...]`` keys, ``files`` uploads) or a JSON body.
    Totals are computed server side.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses={200: OrderSerializer(many=True)})
    def get(self, request):
        orders = OrderService().list(
            order_status=request.query_params.get('orderStatus'),
            payment_status=request.query_params.get('paymentStatus'),
            payment_method=request.query_params.get('paymentMethod'),
        )
        return Response({
            "success": True,
            "count": len(orders),
            "orders": OrderSerializer(orders, many=True).data,
        })

    @extend_schema(
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        description="Place an order from a cart snapshot",
        examples=[
            OpenApiExample(
                "Cash on delivery",
                value={
                    "userId": "0b7c2f0e-4b43-4f7e-9a55-5b0f0f7c1d11",
                    "items": [{"productId": "6f1e7c1a-3d7b-4d84-8a8e-0c52d1a3b9f2", "quantity": 2}],
                    "paymentMethod": "cash_on_delivery",
                    "shippingAddress": {
                        "street": "12 Mall Road",
                        "city": "Lahore",
                        "state": "Punjab",
                        "postalCode": "54000",
                        "country": "PK",
                    },
                },
                request_only=True
            ),
        ]
    )
    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart = Cart.from_payload(data['items'])
        address = extract_shipping_address(request.data)

        logger.info(f"Checkout request - User: {data['userId']}, Items: {len(cart)}, Method: {data['paymentMethod']}")

        order = OrderService().create(
            cart=cart,
            shipping_address=address,
            payment_method=data['paymentMethod'],
            user_id=data['userId'],
            proof_files=uploaded_files(request, 'files', 'files[]'),
        )
        return Response(
            {
                "success": True,
                "message": "Order created successfully",
                "order": OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED
        )


class OrderDetailView(APIView):
    """
    Fetch, change the status of, or delete an order.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses={200: OrderSerializer})
    def get(self, request, pk):
        order = OrderService().get(pk)
        return Response({"success": True, "order": OrderSerializer(order).data})

    @extend_schema(request=OrderStatusSerializer, responses={200: OrderSerializer})
    def patch(self, request, pk):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderService().set_status(pk, serializer.validated_data['new_status'])
        return Response({
            "success": True,
            "message": "Order status updated",
            "order": OrderSerializer(order).data,
        })

    def delete(self, request, pk):
        OrderService().delete(pk)
        return Response({"success": True, "message": "Order deleted successfully"})


class UserOrdersView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: OrderSerializer(many=True)})
    def get(self, request, user_id):
        orders = OrderService().list_by_user(user_id)
        return Response({
            "success": True,
            "count": len(orders),
            "orders": OrderSerializer(orders, many=True).data,
        })


class CustomerListView(APIView):
    """
    One row per order, joined with the ordering user.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(list_customers())


class CustomerDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, pk):
        return Response(get_customer(pk))


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AdminSignupView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=AdminSignupSerializer)
    def post(self, request):
        serializer = AdminSignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AdminAuthService().signup(**serializer.validated_data)
        return Response(
            {"success": True, "message": "Admin registered successfully"},
            status=status.HTTP_201_CREATED
        )


class AdminSigninView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=SigninSerializer)
    def post(self, request):
        serializer = SigninSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        admin, token = AdminAuthService().signin(**serializer.validated_data)
        return Response({
            "success": True,
            "message": "Login successful",
            "token": token,
            "admin": {"id": str(admin.id), "name": admin.name, "email": admin.email},
        })


class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=ForgotPasswordSerializer)
    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AdminAuthService().forgot_password(serializer.validated_data['email'])
        return Response({"success": True, "message": RESET_MESSAGE})


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=ResetPasswordSerializer)
    def post(self, request, token):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AdminAuthService().reset_password(token, serializer.validated_data['password'])
        return Response({"success": True, "message": "Password reset successfully"})


class AdminHomeView(APIView):
    """
    Token-protected back-office landing endpoint.
    """
    authentication_classes = [AdminTokenAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"success": True, "message": f"Welcome Admin {request.user.email}"})


class CustomerSignupView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=CustomerSignupSerializer, responses={201: UserSerializer})
    def post(self, request):
        serializer = CustomerSignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = CustomerAuthService().signup(**serializer.validated_data)
        return Response(
            {"success": True, "message": "User registered successfully", "token": token,
             "user": UserSerializer(user).data},
            status=status.HTTP_201_CREATED
        )


class CustomerSigninView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=SigninSerializer, responses={200: UserSerializer})
    def post(self, request):
        serializer = SigninSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, token = CustomerAuthService().signin(**serializer.validated_data)
        return Response({
            "success": True,
            "message": "Login successful",
            "token": token,
            "user": UserSerializer(user).data,
        })


# ---------------------------------------------------------------------------
# Contact & health
# ---------------------------------------------------------------------------

class ContactView(APIView):
    """
    Relay a storefront contact-form message to the shop owner by email.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=ContactSerializer)
    def post(self, request):
        serializer = ContactSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"success": False, "message": "Please fill all required fields.", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            send_contact_message(**serializer.validated_data)
        except Exception as e:
            logger.error(f"Error sending contact email: {e}")
            return Response(
                {"success": False, "message": "Error sending email."},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response({"success": True, "message": "Email sent successfully!"})


class HealthCheckView(APIView):
    """
    System health check endpoint.

    Returns the status of the API and database connectivity.
    """
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: HealthCheckSerializer},
        description="Check system health status"
    )
    def get(self, request):
        db_status = "healthy"
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            db_status = "unhealthy"

        response_data = {
            "status": "healthy" if db_status == "healthy" else "degraded",
            "version": "1.0.0",
            "database": db_status,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return Response(response_data, status=status.HTTP_200_OK)
