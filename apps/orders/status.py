"""
Order status policy.

Every status change goes through ``StatusPolicy.check``. The default policy
accepts any move between valid statuses, backwards included, so an admin can
correct a mistake. ``ForwardOnlyStatusPolicy`` is the stricter alternative,
selected with ``STOREFRONT['STATUS_POLICY']``.
"""
import logging
from typing import Optional

from django.conf import settings
from django.utils.module_loading import import_string

from apps.core.exceptions import ValidationException
from .models import Order

logger = logging.getLogger(__name__)

ORDER_STATUSES = tuple(value for value, _ in Order.STATUS_CHOICES)

DEFAULT_POLICY = 'apps.orders.status.StatusPolicy'


class StatusPolicy:

    def normalize(self, value: Optional[str]) -> str:
        status = (value or '').strip().lower()
        if status not in ORDER_STATUSES:
            raise ValidationException("Invalid status", field="orderStatus")
        return status

    def allows(self, current: str, target: str) -> bool:
        return True

    def check(self, order: Order, value: Optional[str]) -> str:
        """Return the normalized target status or raise ValidationException."""
        target = self.normalize(value)
        if not self.allows(order.order_status, target):
            raise ValidationException(
                f"Cannot move order from {order.order_status} to {target}",
                field="orderStatus"
            )
        return target


class ForwardOnlyStatusPolicy(StatusPolicy):
    """processing -> shipped -> delivered; cancellation only before delivery."""

    PROGRESSION = ('processing', 'shipped', 'delivered')

    def allows(self, current: str, target: str) -> bool:
        if current == target:
            return True
        if target == 'cancelled':
            return current != 'delivered'
        if current not in self.PROGRESSION:
            return False
        return self.PROGRESSION.index(target) > self.PROGRESSION.index(current)


def get_status_policy() -> StatusPolicy:
    path = settings.STOREFRONT.get('STATUS_POLICY', DEFAULT_POLICY)
    return import_string(path)()
