"""Shared test fixtures for the storefront backend.

Provides an API client, catalog and account fixtures, and a helper that
places orders through the order service.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from django.core.files.uploadedfile import SimpleUploadedFile
import pytest
from rest_framework.test import APIClient

from apps.accounts.models import Admin, User
from apps.catalog.models import Category, Product
from apps.orders.cart import Cart, CartLine
from apps.orders.services import OrderService, ShippingAddress

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path: Path) -> Path:
    """Point upload storage at a per-test directory."""
    root = tmp_path / "uploads"
    settings.MEDIA_ROOT = root
    return root


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def user(db) -> User:
    customer = User(name="Ayesha Khan", email="ayesha@example.com", phone="03001234567")
    customer.set_password("secret123")
    customer.save()
    return customer


@pytest.fixture
def other_user(db) -> User:
    customer = User(name="Bilal Ahmed", email="bilal@example.com", phone="03111234567")
    customer.set_password("secret123")
    customer.save()
    return customer


@pytest.fixture
def admin(db) -> Admin:
    account = Admin(name="Shop Owner", email="owner@example.com")
    account.set_password("adminpass1")
    account.save()
    return account


@pytest.fixture
def category(db) -> Category:
    return Category.objects.create(name="Kurtis")


@pytest.fixture
def make_product(db, category: Category) -> Callable[..., Product]:
    """Factory for products; keyword arguments override the defaults."""

    def _make(**overrides) -> Product:
        data = {
            "name": "Lawn Kurti",
            "category": category,
            "sku": "SKU-LAWN",
            "stock": 10,
            "current_price": Decimal("1000"),
            "colors": ["Black", "Teal"],
            "sizes": ["M", "L"],
        }
        data.update(overrides)
        return Product.objects.create(**data)

    return _make


@pytest.fixture
def product(make_product) -> Product:
    return make_product()


@pytest.fixture
def address() -> ShippingAddress:
    return ShippingAddress(
        street="12 Mall Road",
        city="Lahore",
        state="Punjab",
        postal_code="54000",
        country="PK",
    )


@pytest.fixture
def make_upload() -> Callable[..., SimpleUploadedFile]:
    def _make(name: str = "proof.png") -> SimpleUploadedFile:
        return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\nfake-image", content_type="image/png")

    return _make


@pytest.fixture
def place_order(user: User, product: Product, address: ShippingAddress):
    """Place an order for ``quantity`` units of ``product`` through the service."""

    def _place(
        payment_method: str = "cash_on_delivery",
        quantity: int = 2,
        customer: User | None = None,
        files=(),
        service: OrderService | None = None,
    ):
        cart = Cart.of([CartLine(product_id=product.id, quantity=quantity, price=product.current_price)])
        return (service or OrderService()).create(
            cart=cart,
            shipping_address=address,
            payment_method=payment_method,
            user_id=(customer or user).id,
            proof_files=files,
        )

    return _place


@pytest.fixture
def stored_files(media_root: Path) -> Callable[[], list[Path]]:
    """Return a callable listing the files currently in upload storage."""

    def _list() -> list[Path]:
        if not media_root.exists():
            return []
        return [path for path in media_root.iterdir() if path.is_file()]

    return _list
