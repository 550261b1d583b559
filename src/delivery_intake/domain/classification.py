"""Entry point: decide what an incoming group message is.

Status updates take priority over new orders, and a reply to a known order
is always a status-update attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from delivery_intake.domain.gazetteers import DEFAULT_PARSER_CONFIG, ParserConfig
from delivery_intake.domain.order_parsing import parse_order_message
from delivery_intake.domain.orders import ExistingOrder, ParsedOrder
from delivery_intake.domain.resolution import ResolutionContext
from delivery_intake.domain.status import StatusIntent
from delivery_intake.domain.status_parsing import parse_status_update

NOISE_MISSING_FIELDS = "no phone or amount found"


@dataclass(frozen=True)
class ReplyContext:
    """Reply-thread linkage resolved by the transport layer."""

    quoted_order: ExistingOrder | None = None

    @property
    def has_quoted_order(self) -> bool:
        return self.quoted_order is not None


NO_REPLY = ReplyContext()


@dataclass(frozen=True)
class Noise:
    """Not an order or status update.

    Structural failures keep the expected-format hint and the failing field.
    """

    reason: str
    expected_format: str | None = None
    failed_field: str | None = None
    kind: Literal["noise"] = "noise"


@dataclass(frozen=True)
class NewOrder:
    order: ParsedOrder
    kind: Literal["new_order"] = "new_order"


@dataclass(frozen=True)
class StatusUpdate:
    intent: StatusIntent | None
    context: ResolutionContext
    kind: Literal["status_update"] = "status_update"


Decision = Noise | NewOrder | StatusUpdate


def classify(
    text: str,
    reply_context: ReplyContext | None = None,
    *,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> Decision:
    """Classify a message as noise, a new order, or a status update.

    Args:
        text: Message body.
        reply_context: Quoted order, if the message replies to one. None is
            treated as "not a reply".
        config: Parser configuration.

    Returns:
        Noise, NewOrder or StatusUpdate.
    """
    reply_context = reply_context or NO_REPLY
    is_reply = reply_context.has_quoted_order

    intent = parse_status_update(text, is_reply=is_reply, config=config)
    if intent is not None or is_reply:
        return StatusUpdate(
            intent=intent,
            context=ResolutionContext(
                direct_order=reply_context.quoted_order,
                phone=intent.phone if intent else None,
            ),
        )

    result = parse_order_message(text, config=config)
    if not isinstance(result, ParsedOrder):
        return Noise(
            reason=result.error,
            expected_format=result.expected_format,
            failed_field=result.field,
        )
    if not result.is_actionable():
        return Noise(reason=NOISE_MISSING_FIELDS)
    return NewOrder(order=result)
