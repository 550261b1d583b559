"""Shared test helper functions.

Regular functions, not fixtures; import them from test modules.
"""

from __future__ import annotations

from delivery_intake.domain.orders import ExistingOrder, OrderStatus
from delivery_intake.whatsapp.models import InboundMessage, QuotedMessageRef

TEST_GROUP_ID = "120363000000000000@g.us"


def make_order(
    *,
    id: int = 42,
    phone: str = "612345678",
    amount_due: float = 10000,
    amount_paid: float = 0,
    status: OrderStatus = OrderStatus.PENDING,
    message_id: str | None = None,
) -> ExistingOrder:
    """Build an ExistingOrder as the store would return it."""
    return ExistingOrder(
        id=id,
        phone=phone,
        items="2 robes",
        amount_due=amount_due,
        amount_paid=amount_paid,
        status=status,
        message_id=message_id,
    )


def make_message(
    text: str,
    *,
    message_id: str = "false_120363000000000000@g.us_3EB0AAAA",
    group_id: str = TEST_GROUP_ID,
    quoted: QuotedMessageRef | None = None,
    from_me: bool = False,
    is_group: bool = True,
) -> InboundMessage:
    """Build a normalized group message."""
    return InboundMessage(
        message_id=message_id,
        text=text,
        group_id=group_id,
        group_name="Livraisons Douala",
        author="237699000000@c.us",
        from_me=from_me,
        is_group=is_group,
        quoted=quoted,
    )
