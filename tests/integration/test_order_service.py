"""Integration tests for apps.orders.services.OrderService."""

from __future__ import annotations

from decimal import Decimal
import uuid

from django.utils import timezone
import pytest

from apps.core.exceptions import ConflictException, NotFoundException, ValidationException
from apps.orders.cart import Cart, CartLine
from apps.orders.models import Order
from apps.orders.numbering import OrderNumberAllocator, format_order_number
from apps.orders.services import OrderService, ShippingAddress
from apps.orders.status import ForwardOnlyStatusPolicy

pytestmark = pytest.mark.django_db

YEAR = timezone.now().year


class StaleCountAllocator(OrderNumberAllocator):
    """Simulates a concurrent checkout that read the order count too early."""

    def count(self) -> int:
        return 0


class FixedAllocator(OrderNumberAllocator):
    """Always proposes the same order number."""

    def __init__(self, order_id: str):
        super().__init__()
        self.order_id = order_id

    def candidate(self, attempt: int = 0) -> str:
        return self.order_id


class TestCreateOrder:
    """Tests for OrderService.create."""

    def test_cash_on_delivery(self, place_order, user, product) -> None:
        """2 x 1000 on delivery: total 2000, payment pending delivery."""
        order = place_order("cash_on_delivery", quantity=2)

        assert order.subtotal == Decimal("2000.00")
        assert order.discount_amount == Decimal("0.00")
        assert order.total_amount == Decimal("2000.00")
        assert order.discount_applied == "0%"
        assert order.payment_status == "pending_delivery"
        assert order.order_status == "processing"
        assert order.user == user
        assert [(i.product_id, i.name, i.sku, i.quantity, i.price) for i in order.line_items] == [
            (product.id, "Lawn Kurti", "SKU-LAWN", 2, Decimal("1000.00"))
        ]

    def test_wallet_payment_discount(self, place_order) -> None:
        """2 x 1000 via EasyPaisa/JazzCash: 15% off, payment pending verification."""
        order = place_order("easypaisa_jazzcash", quantity=2)

        assert order.subtotal == Decimal("2000.00")
        assert order.discount_amount == Decimal("300.00")
        assert order.total_amount == Decimal("1700.00")
        assert order.discount_applied == "15%"
        assert order.payment_status == "pending_verification"
        assert order.order_status == "processing"

    def test_order_numbers_are_sequential(self, place_order) -> None:
        first = place_order()
        second = place_order()
        assert first.order_id == format_order_number(YEAR, 1)
        assert second.order_id == format_order_number(YEAR, 2)

    def test_shipping_address_is_stored(self, place_order) -> None:
        order = place_order()
        assert order.shipping_address == {
            "street": "12 Mall Road",
            "city": "Lahore",
            "state": "Punjab",
            "postalCode": "54000",
            "country": "PK",
        }

    def test_reprices_from_catalog(self, user, product, address) -> None:
        """Client-sent prices and names are replaced by catalog values."""
        cart = Cart.of([
            CartLine(product_id=product.id, quantity=3, price=Decimal("1"), name="free stuff", sku="HACK")
        ])
        order = OrderService().create(cart, address, "cash_on_delivery", user.id)

        item = order.line_items[0]
        assert item.price == Decimal("1000.00")
        assert item.name == "Lawn Kurti"
        assert item.sku == "SKU-LAWN"
        assert order.total_amount == Decimal("3000.00")

    def test_trusts_client_snapshot_when_repricing_disabled(self, settings, user, address) -> None:
        settings.STOREFRONT = {**settings.STOREFRONT, "REPRICE_FROM_CATALOG": False}
        cart = Cart.of([CartLine(product_id=uuid.uuid4(), quantity=2, price=Decimal("1000"), name="Snapshot")])

        order = OrderService().create(cart, address, "easypaisa_jazzcash", user.id)

        assert order.total_amount == Decimal("1700.00")
        assert order.line_items[0].name == "Snapshot"
        assert order.line_items[0].catalog_product is None

    def test_unknown_product_when_repricing(self, user, address) -> None:
        cart = Cart.of([CartLine(product_id=uuid.uuid4(), quantity=1, price=Decimal("10"))])
        with pytest.raises(NotFoundException, match="Product not found"):
            OrderService().create(cart, address, "cash_on_delivery", user.id)
        assert Order.objects.count() == 0

    def test_unknown_user(self, product, address, make_upload, stored_files) -> None:
        """No order and no stored files when the user does not exist."""
        cart = Cart.of([CartLine(product_id=product.id, quantity=1, price=Decimal("1000"))])

        with pytest.raises(NotFoundException, match="User not found"):
            OrderService().create(cart, address, "easypaisa_jazzcash", uuid.uuid4(), [make_upload()])

        assert Order.objects.count() == 0
        assert stored_files() == []

    def test_invalid_payment_method(self, user, product, address) -> None:
        cart = Cart.of([CartLine(product_id=product.id, quantity=1, price=Decimal("1000"))])
        with pytest.raises(ValidationException, match="Invalid payment method"):
            OrderService().create(cart, address, "credit_card", user.id)

    def test_empty_cart(self, user, address) -> None:
        with pytest.raises(ValidationException):
            OrderService().create(Cart(), address, "cash_on_delivery", user.id)


class TestProofFiles:
    """Payment proof uploads at checkout."""

    def test_wallet_payment_keeps_files(self, place_order, make_upload, stored_files) -> None:
        order = place_order("easypaisa_jazzcash", files=[make_upload("a.png"), make_upload("b.jpg")])

        assert len(order.files) == 2
        assert all(path.startswith("/uploads/") for path in order.files)
        assert len(stored_files()) == 2

    def test_cash_on_delivery_ignores_files(self, place_order, make_upload, stored_files) -> None:
        order = place_order("cash_on_delivery", files=[make_upload()])
        assert order.files == []
        assert stored_files() == []

    def test_too_many_files(self, place_order, make_upload, stored_files) -> None:
        with pytest.raises(ValidationException):
            place_order("easypaisa_jazzcash", files=[make_upload(f"{n}.png") for n in range(6)])
        assert stored_files() == []


class TestOrderNumberCollisions:
    """Order numbers stay unique when concurrent checkouts race."""

    def test_stale_count_retries_with_next_free_number(self, place_order) -> None:
        first = place_order()
        second = place_order(service=OrderService(allocator=StaleCountAllocator()))

        assert first.order_id == format_order_number(YEAR, 1)
        assert second.order_id == format_order_number(YEAR, 2)
        assert Order.objects.count() == 2

    def test_gap_after_delete_does_not_reuse_number(self, place_order) -> None:
        """count+1 collides after a delete; the retry moves past the highest number."""
        first = place_order()
        place_order()
        OrderService().delete(first.pk)

        third = place_order()

        assert third.order_id == format_order_number(YEAR, 3)

    def test_exhausted_attempts_raise_conflict(self, place_order, make_upload, stored_files) -> None:
        existing = place_order()
        service = OrderService(allocator=FixedAllocator(existing.order_id))

        with pytest.raises(ConflictException) as exc_info:
            place_order("easypaisa_jazzcash", files=[make_upload()], service=service)

        assert exc_info.value.status_code == 409
        assert exc_info.value.retryable is True
        assert Order.objects.count() == 1
        assert stored_files() == []


class TestQueries:
    """Tests for list, get, list_by_user and delete."""

    def test_list_newest_first(self, place_order) -> None:
        first = place_order()
        second = place_order()
        assert [o.pk for o in OrderService().list()] == [second.pk, first.pk]

    def test_same_instant_sorts_by_sequence_number(self, place_order) -> None:
        """#ORD-<year>-10000 is newer than #ORD-<year>-9999."""
        older = place_order()
        newer = place_order()
        Order.objects.filter(pk=older.pk).update(order_id=format_order_number(YEAR, 9999))
        Order.objects.filter(pk=newer.pk).update(order_id=format_order_number(YEAR, 10000))
        Order.objects.update(created_at=older.created_at)

        assert [o.order_id for o in OrderService().list()] == [
            format_order_number(YEAR, 10000),
            format_order_number(YEAR, 9999),
        ]

    def test_list_filters(self, place_order) -> None:
        place_order("cash_on_delivery")
        wallet = place_order("easypaisa_jazzcash")
        assert [o.pk for o in OrderService().list(payment_method="easypaisa_jazzcash")] == [wallet.pk]

    def test_get_missing(self) -> None:
        with pytest.raises(NotFoundException, match="Order not found"):
            OrderService().get(uuid.uuid4())

    @pytest.mark.parametrize("bad_id", ["not-a-uuid", "123"])
    def test_get_malformed_id(self, bad_id: str) -> None:
        with pytest.raises(NotFoundException):
            OrderService().get(bad_id)

    def test_list_by_user(self, place_order, other_user) -> None:
        mine = place_order()
        place_order(customer=other_user)
        assert [o.pk for o in OrderService().list_by_user(mine.user_id)] == [mine.pk]

    def test_list_by_unknown_user(self) -> None:
        with pytest.raises(NotFoundException, match="User not found"):
            OrderService().list_by_user(uuid.uuid4())

    def test_delete(self, place_order) -> None:
        order = place_order()
        OrderService().delete(order.pk)
        assert not Order.objects.filter(pk=order.pk).exists()
        with pytest.raises(NotFoundException):
            OrderService().delete(order.pk)


class TestSetStatus:
    """Tests for OrderService.set_status."""

    def test_backward_transition_allowed(self, place_order) -> None:
        order = place_order()
        service = OrderService()

        assert service.set_status(order.pk, "shipped").order_status == "shipped"
        assert service.set_status(order.pk, "processing").order_status == "processing"

    def test_updated_at_refreshes(self, place_order) -> None:
        order = place_order()
        updated = OrderService().set_status(order.pk, "delivered")
        assert updated.updated_at >= order.updated_at
        assert updated.created_at == order.created_at

    def test_pending_is_invalid(self, place_order) -> None:
        order = place_order()
        with pytest.raises(ValidationException, match="Invalid status"):
            OrderService().set_status(order.pk, "pending")

    def test_missing_order(self) -> None:
        with pytest.raises(NotFoundException):
            OrderService().set_status(uuid.uuid4(), "shipped")

    def test_stricter_policy_can_be_plugged_in(self, place_order) -> None:
        order = place_order()
        service = OrderService(policy=ForwardOnlyStatusPolicy())
        service.set_status(order.pk, "shipped")
        with pytest.raises(ValidationException):
            service.set_status(order.pk, "processing")


class TestSnapshotImmutability:
    """Catalog changes never rewrite placed orders."""

    def test_product_edit_does_not_change_order(self, place_order, product) -> None:
        order = place_order()

        product.name = "Renamed"
        product.sku = "SKU-NEW"
        product.current_price = Decimal("5000")
        product.save()

        item = OrderService().get(order.pk).line_items[0]
        assert (item.name, item.sku, item.price) == ("Lawn Kurti", "SKU-LAWN", Decimal("1000.00"))
        assert item.catalog_product.name == "Renamed"

    def test_product_delete_does_not_change_order(self, place_order, product) -> None:
        order = place_order()
        product_id = product.id

        product.delete()

        reloaded = OrderService().get(order.pk)
        item = reloaded.line_items[0]
        assert (item.product_id, item.name, item.sku, item.price) == (
            product_id, "Lawn Kurti", "SKU-LAWN", Decimal("1000.00")
        )
        assert item.catalog_product is None
        assert reloaded.total_amount == Decimal("2000.00")


class TestShippingAddress:
    """Tests for ShippingAddress.from_dict."""

    def test_country_defaults_to_us(self) -> None:
        address = ShippingAddress.from_dict(
            {"street": "1 Main St", "city": "Austin", "state": "TX", "postalCode": "73301"}
        )
        assert address.country == "US"

    def test_missing_fields(self) -> None:
        with pytest.raises(ValidationException, match="street, city"):
            ShippingAddress.from_dict({"state": "TX", "postalCode": "73301"})
