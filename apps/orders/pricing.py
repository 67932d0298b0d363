"""
Order pricing: subtotal, payment-method discount and total.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

from apps.core.exceptions import ValidationException
from apps.core.utils import quantize_money
from .cart import Cart

# Largest amount a DecimalField(max_digits=12, decimal_places=2) holds
MAX_ORDER_AMOUNT = Decimal('9999999999.99')


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    discount_applied: str


def discount_rate_for(payment_method: str) -> Decimal:
    """Rate applied for the given payment method (0 for everything but the discounted one)."""
    config = settings.STOREFRONT
    if payment_method == config['DISCOUNTED_PAYMENT_METHOD']:
        return Decimal(str(config['DISCOUNT_RATE']))
    return Decimal('0')


def discount_label(rate: Decimal) -> str:
    percent = (rate * 100).normalize()
    return f"{percent:f}%"


def compute_totals(cart: Cart, payment_method: str, rate: Optional[Decimal] = None) -> OrderTotals:
    """
    Price a cart.

    subtotal = sum(price * quantity); discount = subtotal * rate;
    total = subtotal - discount. Amounts are rounded to cents.
    """
    if rate is None:
        rate = discount_rate_for(payment_method)

    if cart.subtotal > MAX_ORDER_AMOUNT:
        raise ValidationException("Order total is too large", field="items")
    subtotal = quantize_money(cart.subtotal)
    discount_amount = quantize_money(subtotal * rate)
    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        total_amount=subtotal - discount_amount,
        discount_applied=discount_label(rate),
    )


def initial_payment_status(payment_method: str) -> str:
    if payment_method == 'cash_on_delivery':
        return 'pending_delivery'
    return 'pending_verification'
