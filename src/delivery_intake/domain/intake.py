"""Message intake: classify one group message and apply it to the order store.

Security: NEVER log message text, phone numbers or authors. Only message id
prefixes, lengths, kinds and order ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from delivery_intake.domain.classification import (
    NewOrder,
    StatusUpdate,
    classify,
)
from delivery_intake.domain.gazetteers import DEFAULT_PARSER_CONFIG, ParserConfig
from delivery_intake.domain.orders import ExistingOrder, NewOrderRecord, ParsedOrder
from delivery_intake.domain.resolution import (
    ACTION_PAYMENT,
    Resolved,
    resolve_status_update,
)
from delivery_intake.infra.order_store import OrderStore
from delivery_intake.infra.settings import Settings
from delivery_intake.observability.correlation import correlation_scope
from delivery_intake.observability.logging import get_logger
from delivery_intake.observability.redaction import safe_log_context
from delivery_intake.whatsapp.models import InboundMessage
from delivery_intake.whatsapp.reply_linkage import build_reply_context
from delivery_intake.whatsapp.templates import format_amount, render

logger = get_logger(__name__)

NOTES_PREVIEW_LENGTH = 100

IntakeOutcome = Literal[
    "skipped",
    "ignored",
    "created",
    "duplicate",
    "updated",
    "unresolved",
    "error",
]


@dataclass(frozen=True)
class IntakeResult:
    """What happened to one message."""

    outcome: IntakeOutcome
    order_id: int | str | None = None
    history_action: str | None = None
    reason: str | None = None
    reply_text: str | None = None


def _message_prefix(message: InboundMessage) -> str:
    return message.message_id[:16]


def _skip_reason(message: InboundMessage, settings: Settings) -> str | None:
    if message.from_me:
        return "own message"
    if not message.is_group:
        return "not a group message"
    if settings.group_id and message.group_id != settings.group_id:
        return "different group"
    return None


def _create_order(
    message: InboundMessage,
    parsed: ParsedOrder,
    *,
    store: OrderStore,
    settings: Settings,
) -> IntakeResult:
    if parsed.phone:
        existing = store.open_for_phone(parsed.phone)
        if existing is not None:
            logger.info(
                "open order already exists for phone",
                extra={"extra_fields": safe_log_context(order_id=existing.id)},
            )
            return IntakeResult(
                outcome="duplicate",
                order_id=existing.id,
                reason="open order already exists for phone",
            )

    record = NewOrderRecord(
        phone=parsed.phone or "unknown",
        items=parsed.items,
        amount_due=parsed.amount_due or 0,
        customer_name=parsed.customer_name,
        quartier=parsed.quartier,
        carrier=parsed.carrier,
        notes=f"Original message: {message.text[:NOTES_PREVIEW_LENGTH]}",
        group_id=message.group_id,
        agency_id=settings.default_agency_id,
        message_id=message.message_id,
    )
    order = store.create(record)

    logger.info(
        "order created",
        extra={
            "extra_fields": safe_log_context(
                order_id=order.id,
                format=parsed.format,
                has_phone=parsed.has_phone,
                has_amount=parsed.has_amount,
                has_quartier=parsed.quartier is not None,
                has_carrier=parsed.carrier is not None,
            )
        },
    )

    reply_text = None
    if settings.send_confirmations:
        reply_text = render(
            "order_created",
            {
                "order_id": order.id,
                "phone": record.phone,
                "items": record.items,
                "amount_due": format_amount(record.amount_due),
            },
        )
    return IntakeResult(outcome="created", order_id=order.id, reply_text=reply_text)


def _status_reply(order: ExistingOrder, history_action: str) -> str:
    if history_action == ACTION_PAYMENT:
        return render(
            "payment_recorded",
            {
                "order_id": order.id,
                "amount_paid": format_amount(order.amount_paid),
                "amount_due": format_amount(order.amount_due),
            },
        )
    return render("status_updated", {"order_id": order.id, "status": order.status.value})


def _apply_status_update(
    decision: StatusUpdate, *, store: OrderStore, settings: Settings
) -> IntakeResult:
    outcome = resolve_status_update(
        decision.intent, decision.context, lookup=store.latest_for_phone
    )

    if not isinstance(outcome, Resolved):
        logger.info(
            "status update unresolved",
            extra={
                "extra_fields": safe_log_context(
                    reason=outcome.reason,
                    kind=decision.intent.kind.value if decision.intent else None,
                    via_reply=decision.context.direct_order is not None,
                    order_id=outcome.order.id if outcome.order else None,
                )
            },
        )
        return IntakeResult(
            outcome="unresolved",
            order_id=outcome.order.id if outcome.order else None,
            reason=outcome.reason,
        )

    order_id = outcome.order.id
    updated = store.update(order_id, outcome.mutation.as_update())
    details = decision.intent.history_details() if decision.intent else {}
    store.add_history(order_id, outcome.history_action, details)

    logger.info(
        "order updated",
        extra={
            "extra_fields": safe_log_context(
                order_id=order_id,
                action=outcome.history_action,
                fields=sorted(outcome.mutation.as_update().keys()),
                via_reply=decision.context.direct_order is not None,
            )
        },
    )
    reply_text = None
    if settings.send_confirmations:
        reply_text = _status_reply(updated, outcome.history_action)
    return IntakeResult(
        outcome="updated",
        order_id=order_id,
        history_action=outcome.history_action,
        reply_text=reply_text,
    )


def process_message(
    message: InboundMessage,
    *,
    store: OrderStore,
    settings: Settings,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> IntakeResult:
    """Classify one message and apply it to the store.

    Never raises for message content or store failures: one bad message must
    not stop the intake loop.

    Args:
        message: Normalized inbound message. Text is NEVER logged.
        store: Order store port.
        settings: Intake settings.
        config: Parser configuration.

    Returns:
        IntakeResult describing the outcome.
    """
    with correlation_scope():
        skip_reason = _skip_reason(message, settings)
        if skip_reason:
            logger.debug(
                "message skipped",
                extra={"extra_fields": safe_log_context(reason=skip_reason)},
            )
            return IntakeResult(outcome="skipped", reason=skip_reason)

        logger.info(
            "message received",
            extra={
                "extra_fields": safe_log_context(
                    message_id_prefix=_message_prefix(message),
                    text_len=len(message.text),
                    is_reply=message.quoted is not None,
                )
            },
        )

        try:
            reply_context = build_reply_context(message.quoted, store.find_by_message_id)
            decision = classify(message.text, reply_context, config=config)

            if isinstance(decision, StatusUpdate):
                return _apply_status_update(decision, store=store, settings=settings)

            if isinstance(decision, NewOrder):
                return _create_order(
                    message, decision.order, store=store, settings=settings
                )

            logger.info(
                "message ignored",
                extra={
                    "extra_fields": safe_log_context(
                        failed_field=decision.failed_field,
                        structural=decision.expected_format is not None,
                    )
                },
            )
            reply_text = None
            if settings.send_confirmations and decision.expected_format:
                reply_text = render(
                    "invalid_format",
                    {
                        "error": decision.reason,
                        "expected_format": decision.expected_format,
                    },
                )
            return IntakeResult(
                outcome="ignored", reason=decision.reason, reply_text=reply_text
            )

        except Exception:
            logger.exception(
                "message processing failed",
                extra={
                    "extra_fields": safe_log_context(
                        message_id_prefix=_message_prefix(message),
                    )
                },
            )
            return IntakeResult(outcome="error", reason="processing failed")
