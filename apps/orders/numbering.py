"""
Human-readable order numbers: ``#ORD-<year>-<sequence>``, zero padded to 4.

The first candidate for a new order is ``count of orders + 1``. That read is
racy, so the ``order_id`` column is unique and callers retry on collision;
retries move past the highest sequence already issued for the year.
"""
import re
from typing import Optional

from django.utils import timezone

from .models import Order

ORDER_NUMBER_RE = re.compile(r'^#ORD-(?P<year>\d{4})-(?P<sequence>\d+)$')


def format_order_number(year: int, sequence: int) -> str:
    return f"#ORD-{year}-{sequence:04d}"


def parse_sequence(order_id: str) -> Optional[int]:
    match = ORDER_NUMBER_RE.match(order_id or '')
    return int(match.group('sequence')) if match else None


class OrderNumberAllocator:

    def __init__(self, year: Optional[int] = None):
        self.year = year or timezone.now().year

    def count(self) -> int:
        return Order.objects.count()

    def highest_sequence(self) -> int:
        prefix = f"#ORD-{self.year}-"
        issued = Order.objects.filter(order_id__startswith=prefix).values_list('order_id', flat=True)
        return max((parse_sequence(order_id) or 0 for order_id in issued), default=0)

    def candidate(self, attempt: int = 0) -> str:
        if attempt == 0:
            sequence = self.count() + 1
        else:
            sequence = max(self.count(), self.highest_sequence()) + attempt
        return format_order_number(self.year, sequence)

    def is_taken(self, order_id: str) -> bool:
        return Order.objects.filter(order_id=order_id).exists()
