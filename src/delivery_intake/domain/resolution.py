"""Status-update resolution: find the target order and compute its mutation.

NO store writes. The only external read is the injected ``lookup`` callable
returning the most recently created order for a phone number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from delivery_intake.domain.orders import ExistingOrder, OrderMutation, OrderStatus
from delivery_intake.domain.status import StatusIntent, StatusKind

OrderLookup = Callable[[str], ExistingOrder | None]

# History actions recorded next to each mutation
ACTION_DELIVERED = "marked_delivered"
ACTION_FAILED = "marked_failed"
ACTION_PAYMENT = "payment_collected"
ACTION_PICKUP = "marked_pickup"
ACTION_PENDING = "marked_pending"
ACTION_MODIFIED = "modified"
ACTION_NUMBER_CHANGED = "number_changed"

# Unresolved reasons
REASON_NO_STATUS = "reply detected but no recognizable status"
REASON_MISSING_PHONE = "missing identifying phone"
REASON_NOT_FOUND = "no order found for phone"
REASON_NO_NEW_PHONE = "number change without a new number"
REASON_NOTHING_TO_MODIFY = "modify without new items or amount"

_STATUS_ONLY: dict[StatusKind, tuple[OrderStatus, str]] = {
    StatusKind.FAILED: (OrderStatus.FAILED, ACTION_FAILED),
    StatusKind.PICKUP: (OrderStatus.PICKUP, ACTION_PICKUP),
    StatusKind.PENDING: (OrderStatus.PENDING, ACTION_PENDING),
}


class UnsupportedIntentError(Exception):
    """Intent kind has no mutation rule."""


@dataclass(frozen=True)
class ResolutionContext:
    """How to find the order a status update applies to.

    ``direct_order`` comes from reply-thread linkage and wins over ``phone``.
    """

    direct_order: ExistingOrder | None = None
    phone: str | None = None


@dataclass(frozen=True)
class Resolved:
    order: ExistingOrder
    mutation: OrderMutation
    history_action: str

    @property
    def unresolved(self) -> bool:
        return False


@dataclass(frozen=True)
class Unresolved:
    reason: str
    order: ExistingOrder | None = None

    @property
    def unresolved(self) -> bool:
        return True


ResolutionOutcome = Resolved | Unresolved


def round2(value: float) -> float:
    """Round a monetary value to 2 decimals."""
    return round(float(value), 2)


def _payment_mutation(intent: StatusIntent, order: ExistingOrder) -> tuple[OrderMutation, str]:
    due = round2(order.amount_due)
    paid_so_far = round2(order.amount_paid)

    # Zero and missing amounts both mean "pay off the remaining balance".
    if intent.amount:
        applied = round2(intent.amount)
    else:
        remaining = round2(due - paid_so_far)
        # Nothing left to pay: re-apply the full amount due.
        applied = remaining if remaining > 0 else due

    amount_paid = round2(paid_so_far + applied)
    if amount_paid >= due:
        return (
            OrderMutation(amount_paid=amount_paid, status=OrderStatus.DELIVERED),
            ACTION_DELIVERED,
        )
    return OrderMutation(amount_paid=amount_paid), ACTION_PAYMENT


def compute_mutation(
    intent: StatusIntent, order: ExistingOrder
) -> tuple[OrderMutation, str] | Unresolved:
    """Field changes for one intent applied to one order.

    Returns:
        Tuple of (mutation, history_action), or Unresolved when the intent
        is not actionable (number change with no new number, empty modify).

    Raises:
        UnsupportedIntentError: If the intent kind has no mutation rule.
    """
    if intent.kind in _STATUS_ONLY:
        status, action = _STATUS_ONLY[intent.kind]
        return OrderMutation(status=status), action

    if intent.kind is StatusKind.PAYMENT:
        return _payment_mutation(intent, order)

    if intent.kind is StatusKind.MODIFY:
        mutation = OrderMutation(
            items=intent.items,
            amount_due=round2(intent.amount) if intent.amount is not None else None,
        )
        if mutation.is_empty():
            return Unresolved(reason=REASON_NOTHING_TO_MODIFY, order=order)
        return mutation, ACTION_MODIFIED

    if intent.kind is StatusKind.NUMBER_CHANGE:
        if not intent.new_phone:
            return Unresolved(reason=REASON_NO_NEW_PHONE, order=order)
        return OrderMutation(phone=intent.new_phone), ACTION_NUMBER_CHANGED

    raise UnsupportedIntentError(f"no mutation rule for {intent.kind!r}")


def find_target_order(
    intent: StatusIntent | None,
    context: ResolutionContext,
    *,
    lookup: OrderLookup | None = None,
) -> ExistingOrder | Unresolved:
    """Locate the single order a status update refers to.

    Priority:
    1. Order linked through the reply thread.
    2. Most recent order for the phone (any status).
    """
    if context.direct_order is not None:
        return context.direct_order

    phone = context.phone or (intent.phone if intent else None)
    if not phone:
        return Unresolved(reason=REASON_MISSING_PHONE)

    order = lookup(phone) if lookup is not None else None
    if order is None:
        return Unresolved(reason=REASON_NOT_FOUND)
    return order


def resolve_status_update(
    intent: StatusIntent | None,
    context: ResolutionContext,
    *,
    lookup: OrderLookup | None = None,
) -> ResolutionOutcome:
    """Resolve a classified status update into a mutation on one order.

    Args:
        intent: Parsed status intent. None for a reply with no status keyword.
        context: Reply linkage and/or phone used to find the order.
        lookup: Returns the most recent order for a phone, or None.

    Returns:
        Resolved with the mutation and history action, or Unresolved.
    """
    target = find_target_order(intent, context, lookup=lookup)
    if isinstance(target, Unresolved):
        return target

    if intent is None:
        return Unresolved(reason=REASON_NO_STATUS, order=target)

    computed = compute_mutation(intent, target)
    if isinstance(computed, Unresolved):
        return computed

    mutation, action = computed
    return Resolved(order=target, mutation=mutation, history_action=action)
