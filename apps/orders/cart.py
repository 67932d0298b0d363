"""
Checkout cart snapshot.

The storefront keeps the cart client-side; at checkout it submits the lines
it holds, and that snapshot is what the order engine prices.
"""
import json
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from apps.core.exceptions import ValidationException
from apps.core.utils import to_decimal

MAX_LINE_QUANTITY = 1000


@dataclass(frozen=True)
class CartLine:
    product_id: uuid.UUID
    quantity: int
    price: Decimal
    name: str = ''
    sku: str = 'N/A'

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def with_catalog(self, name: str, price: Decimal, sku: Optional[str]) -> "CartLine":
        return replace(self, name=name, price=price, sku=sku or self.sku or 'N/A')

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "CartLine":
        if not isinstance(data, dict):
            raise ValidationException(f"Item {index} must be an object", field="items")

        raw_id = data.get('productId', data.get('product_id', data.get('id')))
        try:
            product_id = uuid.UUID(str(raw_id))
        except (TypeError, ValueError):
            raise ValidationException(f"Item {index} has an invalid productId", field="items")

        raw_quantity = data.get('quantity', 1)
        if isinstance(raw_quantity, bool):
            raise ValidationException(f"Item {index} has an invalid quantity", field="items")
        try:
            quantity = to_decimal(raw_quantity, "quantity")
        except ValidationException:
            raise ValidationException(f"Item {index} has an invalid quantity", field="items")
        if quantity != quantity.to_integral_value():
            raise ValidationException(f"Item {index} quantity must be a whole number", field="items")
        quantity = int(quantity)
        if quantity < 1:
            raise ValidationException(f"Item {index} quantity must be at least 1", field="items")
        if quantity > MAX_LINE_QUANTITY:
            raise ValidationException(
                f"Item {index} quantity must be at most {MAX_LINE_QUANTITY}", field="items"
            )

        price = to_decimal(data.get('price', 0), "price")
        if price < 0:
            raise ValidationException(f"Item {index} price must not be negative", field="items")

        return cls(
            product_id=product_id,
            quantity=quantity,
            price=price,
            name=str(data.get('name') or data.get('title') or ''),
            sku=str(data.get('sku') or 'N/A'),
        )


@dataclass(frozen=True)
class Cart:
    lines: List[CartLine] = field(default_factory=list)

    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal('0'))

    @classmethod
    def from_payload(cls, items: Any) -> "Cart":
        """
        Build a cart from the checkout ``items`` field: a list of dicts or the
        JSON encoded string multipart forms carry.
        """
        if isinstance(items, (str, bytes)):
            try:
                items = json.loads(items)
            except ValueError:
                raise ValidationException("Invalid items format. Expected JSON array.", field="items")

        if not isinstance(items, list) or not items:
            raise ValidationException("Items must be a non-empty array", field="items")

        return cls(lines=[CartLine.from_dict(item, index) for index, item in enumerate(items)])

    @classmethod
    def of(cls, lines: Iterable[CartLine]) -> "Cart":
        return cls(lines=list(lines))
