"""Reply-thread linkage: find the order a reply quotes.

Orders store the transport ID of their creation message. The ID format seen
on the quoted side varies, so several lookup keys are tried in order.
"""

from __future__ import annotations

from typing import Callable

from delivery_intake.domain.classification import NO_REPLY, ReplyContext
from delivery_intake.domain.orders import ExistingOrder
from delivery_intake.whatsapp.models import QuotedMessageRef

MessageIdLookup = Callable[[str], ExistingOrder | None]


def candidate_keys(ref: QuotedMessageRef) -> list[str]:
    """Lookup keys for a quoted message, most specific first.

    Order: serialized ID, remote ID, bare ID, last "_" segment of the
    serialized ID. Empty and duplicate keys are dropped.
    """
    keys = [ref.serialized, ref.remote, ref.bare]
    if ref.serialized:
        keys.append(ref.serialized.split("_")[-1])

    seen: set[str] = set()
    result: list[str] = []
    for key in keys:
        if key and key not in seen:
            seen.add(key)
            result.append(key)
    return result


def find_quoted_order(
    ref: QuotedMessageRef | None, lookup: MessageIdLookup
) -> ExistingOrder | None:
    """First order found for any candidate key, or None."""
    if ref is None:
        return None
    for key in candidate_keys(ref):
        order = lookup(key)
        if order is not None:
            return order
    return None


def build_reply_context(
    ref: QuotedMessageRef | None, lookup: MessageIdLookup
) -> ReplyContext:
    """ReplyContext for classification. A reply to an unknown message is not a reply."""
    order = find_quoted_order(ref, lookup)
    if order is None:
        return NO_REPLY
    return ReplyContext(quoted_order=order)
