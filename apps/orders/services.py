"""
Order service - checkout, order queries and status changes

Checkout flow:
1. Validate payment method, cart and user.
2. Re-price the cart from the catalog (unless configured to trust the client).
3. Compute totals and the initial payment status.
4. Save payment proof files (discounted payment method only).
5. Persist order + items under a unique order number, retrying on collision.
   If persistence fails, the saved proof files are removed.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models.functions import Length

from apps.accounts.models import User
from apps.catalog.models import Product
from apps.core.exceptions import ConflictException, NotFoundException, ValidationException
from apps.core.storage import delete_uploads, save_uploads
from .cart import Cart
from .models import Order, OrderItem
from .numbering import OrderNumberAllocator
from .pricing import compute_totals, initial_payment_status
from .status import StatusPolicy, get_status_policy

logger = logging.getLogger(__name__)

PAYMENT_METHODS = tuple(value for value, _ in Order.PAYMENT_METHOD_CHOICES)


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    postal_code: str
    country: str = 'US'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippingAddress":
        def value(*keys):
            for key in keys:
                if data.get(key):
                    return str(data[key]).strip()
            return ''

        address = cls(
            street=value('street'),
            city=value('city'),
            state=value('state'),
            postal_code=value('postalCode', 'postal_code'),
            country=value('country') or 'US',
        )
        missing = [name for name in ('street', 'city', 'state', 'postal_code') if not getattr(address, name)]
        if missing:
            raise ValidationException(
                f"Missing shipping address fields: {', '.join(missing)}",
                field="shippingAddress"
            )
        return address


class OrderService:
    """
    Order engine entry point.

    Usage:
        service = OrderService()
        order = service.create(cart, address, "cash_on_delivery", user_id)
    """

    def __init__(self, allocator: Optional[OrderNumberAllocator] = None, policy: Optional[StatusPolicy] = None):
        self.allocator = allocator
        self.policy = policy or get_status_policy()
        self.config = settings.STOREFRONT

    def create(
        self,
        cart: Cart,
        shipping_address: ShippingAddress,
        payment_method: str,
        user_id,
        proof_files: Iterable = ()
    ) -> Order:
        """
        Place an order.

        Args:
            cart: Snapshot of the client cart
            shipping_address: Delivery address
            payment_method: ``cash_on_delivery`` or ``easypaisa_jazzcash``
            user_id: Storefront user placing the order
            proof_files: Uploaded payment screenshots

        Returns:
            The persisted order, hydrated for display

        Raises:
            ValidationException: bad payment method, empty cart, too many files
            NotFoundException: unknown user or (when re-pricing) product
            ConflictException: no free order number after the allowed attempts
        """
        if payment_method not in PAYMENT_METHODS:
            raise ValidationException("Invalid payment method", field="paymentMethod")
        if not len(cart):
            raise ValidationException("Items must be a non-empty array", field="items")

        user = self._get_user(user_id)

        if self.config['REPRICE_FROM_CATALOG']:
            cart = self.reprice(cart)

        totals = compute_totals(cart, payment_method)

        proof_files = list(proof_files or [])
        if payment_method != self.config['DISCOUNTED_PAYMENT_METHOD']:
            proof_files = []
        if len(proof_files) > self.config['MAX_UPLOAD_FILES']:
            raise ValidationException(
                f"At most {self.config['MAX_UPLOAD_FILES']} files may be uploaded",
                field="files"
            )

        paths = save_uploads(proof_files)
        try:
            order = self._persist(
                user=user,
                cart=cart,
                totals=totals,
                shipping_address=shipping_address,
                payment_method=payment_method,
                files=paths,
            )
        except Exception:
            removed = delete_uploads(paths)
            if paths:
                logger.warning(f"[ORDERS] Order creation failed, removed {removed}/{len(paths)} uploaded files")
            raise

        logger.info(
            f"[ORDERS] Created {order.order_id} for user {user.id}: "
            f"subtotal={totals.subtotal} discount={totals.discount_applied} total={totals.total_amount}"
        )
        return self.get(order.pk)

    def reprice(self, cart: Cart) -> Cart:
        """Replace client-sent name/price/sku with current catalog values."""
        ids = {line.product_id for line in cart}
        products = Product.objects.in_bulk(list(ids))
        lines = []
        for line in cart:
            product = products.get(line.product_id)
            if product is None:
                raise NotFoundException("Product", line.product_id)
            lines.append(line.with_catalog(product.name, product.current_price, product.sku))
        return Cart.of(lines)

    def list(self, **filters) -> List[Order]:
        """All orders, newest first. Optional filters: user_id, order_status, payment_status, payment_method."""
        queryset = self._queryset()
        lookups = {k: v for k, v in filters.items() if v}
        if lookups:
            queryset = queryset.filter(**lookups)
        return self.hydrate(queryset)

    def list_by_user(self, user_id) -> List[Order]:
        user = self._get_user(user_id)
        return self.list(user_id=user.pk)

    def get(self, order_pk) -> Order:
        try:
            order = self._queryset().get(pk=order_pk)
        except (Order.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundException("Order", order_pk)
        return self.hydrate([order])[0]

    def set_status(self, order_pk, new_status: Optional[str]) -> Order:
        """
        Change ``order_status``. The status policy decides what is valid;
        by default any valid status may follow any other.
        """
        status = self.policy.normalize(new_status)
        order = self.get(order_pk)
        status = self.policy.check(order, status)

        previous = order.order_status
        order.order_status = status
        order.save(update_fields=['order_status', 'updated_at'])
        logger.info(f"[ORDERS] {order.order_id} status {previous} -> {status}")
        return self.get(order.pk)

    def delete(self, order_pk) -> None:
        """Hard delete. Proof files stay in storage."""
        order = self.get(order_pk)
        order_id = order.order_id
        order.delete()
        logger.info(f"[ORDERS] Deleted {order_id}")

    def hydrate(self, orders) -> List[Order]:
        """
        Materialize line items and attach the live catalog product (or None)
        to each one as ``catalog_product`` for display.
        """
        orders = list(orders)
        for order in orders:
            order.line_items = list(order.items.all())

        product_ids = {item.product_id for order in orders for item in order.line_items}
        products = Product.objects.in_bulk(list(product_ids)) if product_ids else {}
        for order in orders:
            for item in order.line_items:
                item.catalog_product = products.get(item.product_id)
        return orders

    def _queryset(self):
        # Longer order numbers carry larger sequences, so length then text sorts numerically
        return (
            Order.objects.select_related('user').prefetch_related('items')
            .order_by('-created_at', Length('order_id').desc(), '-order_id')
        )

    def _get_user(self, user_id) -> User:
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundException("User", user_id)

    def _persist(self, user, cart, totals, shipping_address, payment_method, files) -> Order:
        allocator = self.allocator or OrderNumberAllocator()
        attempts = self.config['ORDER_NUMBER_ATTEMPTS']

        with transaction.atomic():
            for attempt in range(attempts):
                order_id = allocator.candidate(attempt)
                try:
                    with transaction.atomic():
                        order = Order.objects.create(
                            order_id=order_id,
                            user=user,
                            subtotal=totals.subtotal,
                            discount_amount=totals.discount_amount,
                            total_amount=totals.total_amount,
                            discount_applied=totals.discount_applied,
                            shipping_street=shipping_address.street,
                            shipping_city=shipping_address.city,
                            shipping_state=shipping_address.state,
                            shipping_postal_code=shipping_address.postal_code,
                            shipping_country=shipping_address.country,
                            payment_method=payment_method,
                            payment_status=initial_payment_status(payment_method),
                            order_status='processing',
                            files=files,
                        )
                        OrderItem.objects.bulk_create([
                            OrderItem(
                                order=order,
                                position=position,
                                product_id=line.product_id,
                                name=line.name,
                                sku=line.sku,
                                quantity=line.quantity,
                                price=line.price,
                            )
                            for position, line in enumerate(cart)
                        ])
                    return order
                except IntegrityError:
                    if not allocator.is_taken(order_id):
                        raise
                    logger.warning(f"[ORDERS] Order number {order_id} already taken (attempt {attempt + 1}/{attempts})")

        raise ConflictException("Could not allocate a unique order number, please retry")
