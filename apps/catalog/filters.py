"""
Read-time product filtering.

Every filter is a predicate over an already fetched product; a product is
kept only when all active predicates hold. Text matching (colors included) is a
case-insensitive substring test, sizes match exactly, numeric and date
bounds are inclusive.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Union

from django.utils import timezone

from apps.core.utils import parse_bound

DateBound = Union[date, datetime]


@dataclass
class ProductFilter:
    """Conjunctive product filter built from query parameters."""
    name: Optional[str] = None
    category: Optional[str] = None
    category_id: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    min_stock: Optional[Decimal] = None
    max_stock: Optional[Decimal] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    created_from: Optional[DateBound] = None
    created_to: Optional[DateBound] = None
    predicates: List[Callable] = field(default_factory=list, repr=False)

    QUERY_PARAMS = {
        'name': ('name', 'text'),
        'category': ('category', 'text'),
        'categoryId': ('category_id', 'text'),
        'color': ('color', 'text'),
        'size': ('size', 'text'),
        'minStock': ('min_stock', 'number'),
        'maxStock': ('max_stock', 'number'),
        'minPrice': ('min_price', 'number'),
        'maxPrice': ('max_price', 'number'),
        'createdFrom': ('created_from', 'date'),
        'createdTo': ('created_to', 'date'),
    }

    @classmethod
    def from_query(cls, params: Dict[str, str]) -> "ProductFilter":
        kwargs = {}
        for param, (attr, kind) in cls.QUERY_PARAMS.items():
            raw = params.get(param)
            if kind == 'text':
                kwargs[attr] = raw.strip() if raw and raw.strip() else None
            else:
                kwargs[attr] = parse_bound(raw, param, kind)
        return cls(**kwargs)

    def __post_init__(self):
        if self.name:
            needle = self.name.lower()
            self.predicates.append(lambda p: needle in (p.name or '').lower())
        if self.category:
            self.predicates.append(
                lambda p: p.category is not None and p.category.name == self.category
            )
        if self.category_id:
            self.predicates.append(lambda p: str(p.category_id) == self.category_id)
        if self.color:
            self.predicates.append(lambda p: _any_substring(p.colors, self.color))
        if self.size:
            self.predicates.append(lambda p: _contains(p.sizes, self.size))
        if self.min_stock is not None:
            self.predicates.append(lambda p: p.stock >= self.min_stock)
        if self.max_stock is not None:
            self.predicates.append(lambda p: p.stock <= self.max_stock)
        if self.min_price is not None:
            self.predicates.append(lambda p: p.current_price >= self.min_price)
        if self.max_price is not None:
            self.predicates.append(lambda p: p.current_price <= self.max_price)
        if self.created_from is not None:
            self.predicates.append(lambda p: _on_or_after(p.created_at, self.created_from))
        if self.created_to is not None:
            self.predicates.append(lambda p: _on_or_before(p.created_at, self.created_to))

    @property
    def is_empty(self) -> bool:
        return not self.predicates

    def matches(self, product) -> bool:
        return all(predicate(product) for predicate in self.predicates)

    def apply(self, products: Iterable) -> List:
        return [p for p in products if self.matches(p)]


def _any_substring(values, wanted: str) -> bool:
    wanted = wanted.lower()
    return any(wanted in str(v).lower() for v in (values or []))


def _contains(values, wanted: str) -> bool:
    wanted = wanted.lower()
    return any(str(v).lower() == wanted for v in (values or []))


def _as_comparable(created_at: datetime, bound: DateBound):
    if isinstance(bound, datetime):
        if timezone.is_naive(bound):
            bound = timezone.make_aware(bound, dt_timezone.utc)
        return created_at, bound
    return created_at.date(), bound


def _on_or_after(created_at: datetime, bound: DateBound) -> bool:
    value, bound = _as_comparable(created_at, bound)
    return value >= bound


def _on_or_before(created_at: datetime, bound: DateBound) -> bool:
    value, bound = _as_comparable(created_at, bound)
    return value <= bound
