"""
Order Models
Tables: Orders, OrderItems

Line items are snapshots: name, sku and unit price are copied at checkout and
``product_id`` is kept for traceability only, so later catalog edits or
deletions never change a placed order.
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from apps.core.models import BaseModel
from apps.accounts.models import User


class Order(BaseModel):
    """
    Customer order created at checkout.
    ``order_status`` is the only field that changes after creation.
    """
    CASH_ON_DELIVERY = 'cash_on_delivery'
    EASYPAISA_JAZZCASH = 'easypaisa_jazzcash'

    PAYMENT_METHOD_CHOICES = [
        (CASH_ON_DELIVERY, 'Cash on Delivery'),
        (EASYPAISA_JAZZCASH, 'EasyPaisa / JazzCash'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('pending_verification', 'Pending Verification'),
        ('pending_delivery', 'Pending Delivery'),
        ('paid', 'Paid'),
        ('failed', 'Failed'),
    ]

    STATUS_CHOICES = [
        ('processing', 'Processing'),
        ('shipped', 'Shipped'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    order_id = models.CharField(max_length=32, unique=True, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='orders')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    discount_applied = models.CharField(max_length=8, default='0%')
    shipping_street = models.CharField(max_length=255)
    shipping_city = models.CharField(max_length=100)
    shipping_state = models.CharField(max_length=100)
    shipping_postal_code = models.CharField(max_length=20)
    shipping_country = models.CharField(max_length=100)
    payment_method = models.CharField(max_length=32, choices=PAYMENT_METHOD_CHOICES)
    payment_status = models.CharField(
        max_length=32,
        choices=PAYMENT_STATUS_CHOICES,
        default='pending_verification'
    )
    order_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='processing')
    files = models.JSONField(default=list, blank=True, help_text="Payment proof upload paths")

    class Meta:
        db_table = 'orders_orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_id} - {self.user_id} - {self.total_amount}"

    @property
    def shipping_address(self):
        return {
            'street': self.shipping_street,
            'city': self.shipping_city,
            'state': self.shipping_state,
            'postalCode': self.shipping_postal_code,
            'country': self.shipping_country,
        }


class OrderItem(BaseModel):
    """
    One line of an order, frozen at checkout.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    position = models.PositiveSmallIntegerField(default=0)
    product_id = models.UUIDField(help_text="Catalog product at checkout time (not enforced)")
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=50)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )

    class Meta:
        db_table = 'orders_order_items'
        verbose_name = 'Order Item'
        verbose_name_plural = 'Order Items'
        ordering = ['position']

    def __str__(self):
        return f"{self.quantity} x {self.name} @ {self.price}"

    @property
    def line_total(self):
        return self.price * self.quantity
