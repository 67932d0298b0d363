"""
Customer views for the admin console.

There is no Customer table: a "customer" row is an order joined with the
user who placed it. Rows are per order, so a user with three orders shows up
three times, each row describing one order.
"""
from typing import Any, Dict, List

from apps.core.exceptions import NotFoundException
from apps.core.utils import iso_date
from .models import Order
from .services import OrderService


def _summary(order: Order) -> Dict[str, Any]:
    user = order.user
    return {
        "id": str(order.pk),
        "name": user.name if user else "",
        "email": user.email if user else "",
        "phone": user.phone if user else "",
        "status": order.order_status,
        "lastOrder": iso_date(order.created_at),
        "orderId": order.order_id,
        "totalAmount": order.total_amount,
        "paymentStatus": order.payment_status,
    }


def customer_row(order: Order) -> Dict[str, Any]:
    row = _summary(order)
    row["location"] = f"{order.shipping_city}, {order.shipping_country}"
    row["orders"] = len(order.line_items)
    return row


def customer_detail(order: Order) -> Dict[str, Any]:
    detail = _summary(order)
    detail.update({
        "street": order.shipping_street,
        "city": order.shipping_city,
        "state": order.shipping_state,
        "postalCode": order.shipping_postal_code,
        "country": order.shipping_country,
        "joiningDate": iso_date(order.user.created_at) if order.user else "",
        "orders": [
            {
                "productId": str(item.product_id),
                "name": item.name,
                "sku": item.sku,
                "quantity": item.quantity,
                "price": item.price,
            }
            for item in order.line_items
        ],
    })
    return detail


def list_customers(service: OrderService = None) -> List[Dict[str, Any]]:
    service = service or OrderService()
    return [customer_row(order) for order in service.list()]


def get_customer(order_pk, service: OrderService = None) -> Dict[str, Any]:
    service = service or OrderService()
    try:
        order = service.get(order_pk)
    except NotFoundException:
        raise NotFoundException("Customer", order_pk)
    return customer_detail(order)
