"""API tests for the order endpoints."""

from __future__ import annotations

import json
import uuid

import pytest

from apps.orders.models import Order

pytestmark = pytest.mark.django_db

ORDERS_URL = "/api/orders/"


def order_url(pk) -> str:
    return f"/api/orders/{pk}/"


@pytest.fixture
def checkout_form(user, product) -> dict:
    """A storefront multipart checkout form: JSON items and flat address keys."""
    return {
        "userId": str(user.id),
        "items": json.dumps([
            {"productId": str(product.id), "name": "Lawn Kurti", "price": 1000, "quantity": 2}
        ]),
        "paymentMethod": "easypaisa_jazzcash",
        "shippingAddress[street]": "12 Mall Road",
        "shippingAddress[city]": "Lahore",
        "shippingAddress[state]": "Punjab",
        "shippingAddress[postalCode]": "54000",
        "shippingAddress[country]": "PK",
    }


class TestCheckout:
    """POST /api/orders/"""

    def test_multipart_checkout_with_proof(self, api_client, checkout_form, make_upload, stored_files) -> None:
        checkout_form["files"] = [make_upload("one.png"), make_upload("two.png")]

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Order created successfully"
        order = body["order"]
        assert order["orderId"].startswith("#ORD-")
        assert order["subtotal"] == 2000
        assert order["discountAmount"] == 300
        assert order["totalAmount"] == 1700
        assert order["discountApplied"] == "15%"
        assert order["paymentStatus"] == "pending_verification"
        assert order["orderStatus"] == "processing"
        assert order["shippingAddress"]["city"] == "Lahore"
        assert len(order["files"]) == 2
        assert len(stored_files()) == 2

    def test_json_checkout(self, api_client, user, product) -> None:
        payload = {
            "userId": str(user.id),
            "items": [{"productId": str(product.id), "quantity": 1}],
            "paymentMethod": "cash_on_delivery",
            "shippingAddress": {
                "street": "1 Main St",
                "city": "Austin",
                "state": "TX",
                "postalCode": "73301",
            },
        }

        response = api_client.post(ORDERS_URL, payload, format="json")

        assert response.status_code == 201
        order = response.json()["order"]
        assert order["totalAmount"] == 1000
        assert order["paymentStatus"] == "pending_delivery"
        assert order["shippingAddress"]["country"] == "US"
        assert order["user"]["email"] == user.email
        assert order["items"][0]["product"]["id"] == str(product.id)

    def test_cash_on_delivery_ignores_files(self, api_client, checkout_form, make_upload, stored_files) -> None:
        checkout_form["paymentMethod"] = "cash_on_delivery"
        checkout_form["files"] = [make_upload()]

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 201
        assert response.json()["order"]["files"] == []
        assert stored_files() == []

    def test_client_totals_are_ignored(self, api_client, checkout_form) -> None:
        checkout_form["totalAmount"] = "1"
        checkout_form["discountApplied"] = "99%"

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        order = response.json()["order"]
        assert order["totalAmount"] == 1700
        assert order["discountApplied"] == "15%"

    def test_invalid_items_json(self, api_client, checkout_form) -> None:
        checkout_form["items"] = "not json"

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert Order.objects.count() == 0

    def test_empty_items(self, api_client, checkout_form) -> None:
        checkout_form["items"] = "[]"

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert response.json()["message"] == "Items must be a non-empty array"

    @pytest.mark.parametrize(
        "item, message",
        [
            ({"price": "NaN", "quantity": 1}, "Invalid number for price"),
            ({"price": 1000, "quantity": 10**10}, "quantity must be at most"),
            ({"price": 1000, "quantity": 2.7}, "quantity must be a whole number"),
        ],
    )
    def test_malformed_item_is_a_client_error(self, api_client, checkout_form, product, item, message) -> None:
        checkout_form["items"] = json.dumps([{"productId": str(product.id), **item}])

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert message in response.json()["message"]
        assert Order.objects.count() == 0

    def test_total_beyond_storage_is_a_client_error(self, api_client, checkout_form, settings) -> None:
        settings.STOREFRONT = {**settings.STOREFRONT, "REPRICE_FROM_CATALOG": False}
        checkout_form["items"] = json.dumps([{"productId": str(uuid.uuid4()), "price": "1e15", "quantity": 1}])

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert response.json()["message"] == "Order total is too large"

    def test_invalid_payment_method(self, api_client, checkout_form) -> None:
        checkout_form["paymentMethod"] = "credit_card"

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert "Invalid payment method" in response.json()["message"]

    def test_missing_address(self, api_client, checkout_form) -> None:
        del checkout_form["shippingAddress[street]"]

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 400
        assert "street" in response.json()["message"]

    def test_unknown_user(self, api_client, checkout_form, make_upload, stored_files) -> None:
        checkout_form["userId"] = str(uuid.uuid4())
        checkout_form["files"] = [make_upload()]

        response = api_client.post(ORDERS_URL, checkout_form, format="multipart")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found", "code": "NOT_FOUND"}
        assert stored_files() == []


class TestOrderQueries:
    """GET endpoints."""

    def test_list(self, api_client, place_order) -> None:
        first = place_order()
        second = place_order()

        response = api_client.get(ORDERS_URL)

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 2
        assert [o["orderId"] for o in body["orders"]] == [second.order_id, first.order_id]

    def test_detail(self, api_client, place_order) -> None:
        order = place_order()

        response = api_client.get(order_url(order.pk))

        assert response.status_code == 200
        assert response.json()["order"]["orderId"] == order.order_id

    @pytest.mark.parametrize("pk", [uuid.uuid4(), "garbage"])
    def test_detail_missing(self, api_client, pk) -> None:
        response = api_client.get(order_url(pk))
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_by_user(self, api_client, place_order, user, other_user) -> None:
        place_order()
        place_order(customer=other_user)

        response = api_client.get(f"/api/orders/user/{user.id}/")

        assert response.json()["count"] == 1
        assert response.json()["orders"][0]["userId"] == str(user.id)

    def test_by_unknown_user(self, api_client) -> None:
        response = api_client.get(f"/api/orders/user/{uuid.uuid4()}/")
        assert response.status_code == 404

    def test_deleted_product_shows_snapshot(self, api_client, place_order, product) -> None:
        order = place_order()
        product.delete()

        item = api_client.get(order_url(order.pk)).json()["order"]["items"][0]

        assert item["product"] is None
        assert item["name"] == "Lawn Kurti"
        assert item["price"] == 1000


class TestStatusUpdate:
    """PATCH /api/orders/<pk>/"""

    def test_update(self, api_client, place_order) -> None:
        order = place_order()

        response = api_client.patch(order_url(order.pk), {"orderStatus": "Shipped"}, format="json")

        assert response.status_code == 200
        assert response.json()["message"] == "Order status updated"
        assert response.json()["order"]["orderStatus"] == "shipped"

    def test_move_back_to_processing(self, api_client, place_order) -> None:
        order = place_order()
        api_client.patch(order_url(order.pk), {"orderStatus": "shipped"}, format="json")

        response = api_client.patch(order_url(order.pk), {"orderStatus": "processing"}, format="json")

        assert response.status_code == 200
        assert response.json()["order"]["orderStatus"] == "processing"

    @pytest.mark.parametrize("value", ["pending", "lost", ""])
    def test_invalid_status(self, api_client, place_order, value) -> None:
        order = place_order()

        response = api_client.patch(order_url(order.pk), {"orderStatus": value}, format="json")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status"
        order.refresh_from_db()
        assert order.order_status == "processing"

    def test_missing_order(self, api_client) -> None:
        response = api_client.patch(order_url(uuid.uuid4()), {"orderStatus": "shipped"}, format="json")
        assert response.status_code == 404


class TestDelete:
    """DELETE /api/orders/<pk>/"""

    def test_delete(self, api_client, place_order) -> None:
        order = place_order()

        response = api_client.delete(order_url(order.pk))

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Order deleted successfully"}
        assert not Order.objects.filter(pk=order.pk).exists()

    def test_delete_missing(self, api_client) -> None:
        response = api_client.delete(order_url(uuid.uuid4()))
        assert response.status_code == 404


class TestCustomers:
    """GET /api/customers/"""

    def test_list_and_detail(self, api_client, place_order) -> None:
        order = place_order()
        place_order()

        rows = api_client.get("/api/customers/").json()
        detail = api_client.get(f"/api/customers/{order.pk}/").json()

        assert len(rows) == 2
        assert detail["orderId"] == order.order_id
        assert detail["city"] == "Lahore"
        assert detail["orders"][0]["quantity"] == 2

    def test_missing_customer(self, api_client) -> None:
        response = api_client.get(f"/api/customers/{uuid.uuid4()}/")

        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"
