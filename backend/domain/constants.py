"""
Domain constants used across services/routers.
"""
from decimal import Decimal

from domain.enums import OrderStatus

# No transition may leave these states
TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})

# Cancellation is refused once goods have left the warehouse
NON_CANCELLABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

# Only orders in these states can be refunded
REFUNDABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

REFUND_NOTE_PREFIX = "Refund processed: "

# Money columns are Numeric(10, 2)
MONEY_QUANTUM = Decimal("0.01")
MAX_PERCENTAGE_VALUE = Decimal("100")

# Orders in this state never count towards revenue or order totals
EXCLUDED_FROM_REVENUE = frozenset({OrderStatus.CANCELLED})

RECENT_ORDERS_LIMIT = 10
