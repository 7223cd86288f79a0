"""Order number allocation.

Numbers come from a persisted counter advanced under a process lock and
committed on its own, before the placement unit of work starts. A placement
that later fails leaves a gap in the sequence; numbers are never reused.
"""

import threading
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront

ORDER_PREFIX = "PAP"
ORDER_SEQUENCE = "orders"

_allocation_lock = threading.Lock()


@storefront.aggregate
class OrderSequence:
    name = String(identifier=True, max_length=50)
    value = Integer(default=0, min_value=0)

    def advance(self) -> int:
        self.value += 1
        return self.value


def format_order_number(value: int, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    return f"{ORDER_PREFIX}-{now:%Y%m%d}-{value:06d}"


def next_order_number(now: datetime | None = None) -> str:
    with _allocation_lock:
        repo = current_domain.repository_for(OrderSequence)
        try:
            sequence = repo.get(ORDER_SEQUENCE)
        except ObjectNotFoundError:
            sequence = OrderSequence(name=ORDER_SEQUENCE)
        value = sequence.advance()
        repo.add(sequence)

    return format_order_number(value, now)
