"""
API URL Configuration
"""
from django.urls import path
from .views import (
    AdminHomeView,
    AdminSigninView,
    AdminSignupView,
    CategoryDetailView,
    CategoryListView,
    ContactView,
    CustomerDetailView,
    CustomerListView,
    CustomerSigninView,
    CustomerSignupView,
    ForgotPasswordView,
    HealthCheckView,
    OrderDetailView,
    OrderListView,
    ProductCreateView,
    ProductDetailView,
    ProductListView,
    ProductsByCategoryView,
    ResetPasswordView,
    UserOrdersView,
)

app_name = 'api'

urlpatterns = [
    # Catalog
    path('categories/', CategoryListView.as_view(), name='category-list'),
    path('categories/<str:pk>/', CategoryDetailView.as_view(), name='category-detail'),
    path('products/', ProductListView.as_view(), name='product-list'),
    path('products/addproducts/', ProductCreateView.as_view(), name='product-create'),
    path('products/updateproducts/<str:pk>/', ProductDetailView.as_view(), name='product-update'),
    path('products/category/<str:category>/', ProductsByCategoryView.as_view(), name='product-by-category'),
    path('products/<str:pk>/', ProductDetailView.as_view(), name='product-detail'),

    # Orders
    path('orders/', OrderListView.as_view(), name='order-list'),
    path('orders/user/<str:user_id>/', UserOrdersView.as_view(), name='order-by-user'),
    path('orders/<str:pk>/', OrderDetailView.as_view(), name='order-detail'),

    # Customer views over orders
    path('customers/', CustomerListView.as_view(), name='customer-list'),
    path('customers/<str:pk>/', CustomerDetailView.as_view(), name='customer-detail'),

    # Back-office auth
    path('auth/signup/', AdminSignupView.as_view(), name='admin-signup'),
    path('auth/signin/', AdminSigninView.as_view(), name='admin-signin'),
    path('auth/forgot-password/', ForgotPasswordView.as_view(), name='forgot-password'),
    path('auth/reset-password/<str:token>/', ResetPasswordView.as_view(), name='reset-password'),
    path('admin/', AdminHomeView.as_view(), name='admin-home'),

    # Storefront customer auth
    path('userAuth/signup/', CustomerSignupView.as_view(), name='user-signup'),
    path('userAuth/signin/', CustomerSigninView.as_view(), name='user-signin'),

    # Contact form
    path('send-email/', ContactView.as_view(), name='send-email'),

    # Health check
    path('health/', HealthCheckView.as_view(), name='health'),
]
