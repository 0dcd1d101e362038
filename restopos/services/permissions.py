from typing import Dict, FrozenSet, Tuple

from restopos.core.exceptions import InvalidTransitionError
from restopos.models import OrderStatus, Role

# Valid status transitions for the order state machine.
# Any non-terminal state may also move to CANCELLED.
VALID_STATUS_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.SERVED, OrderStatus.CANCELLED}),
    OrderStatus.SERVED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in VALID_STATUS_TRANSITIONS.items() if not targets
)

# Edges each non-admin role may take. Admin may take any valid edge; waiter none.
ROLE_EDGES: Dict[Role, FrozenSet[Tuple[OrderStatus, OrderStatus]]] = {
    Role.CASHIER: frozenset({(OrderStatus.READY, OrderStatus.SERVED)}),
    Role.CHEF: frozenset({
        (OrderStatus.PENDING, OrderStatus.IN_PROGRESS),
        (OrderStatus.IN_PROGRESS, OrderStatus.READY),
    }),
    Role.WAITER: frozenset(),
}


def is_valid_edge(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return to_status in VALID_STATUS_TRANSITIONS.get(from_status, frozenset())


def can_transition(role: Role, from_status: OrderStatus, to_status: OrderStatus) -> bool:
    """The single permission matrix, keyed by (role, from, to)."""
    if not is_valid_edge(from_status, to_status):
        return False
    if role == Role.ADMIN:
        return True
    return (from_status, to_status) in ROLE_EDGES.get(role, frozenset())


def check_transition(role: Role, from_status: OrderStatus, to_status: OrderStatus) -> None:
    if from_status in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Order is already in a final state: {from_status.value}. Status cannot be updated."
        )
    if not is_valid_edge(from_status, to_status):
        raise InvalidTransitionError(
            f"Cannot transition order from {from_status.value} to {to_status.value}."
        )
    if not can_transition(role, from_status, to_status):
        raise InvalidTransitionError(
            f"Role '{role.value}' may not move an order from {from_status.value} to {to_status.value}."
        )
