"""WhatsApp group message models and payload normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class InvalidPayloadError(Exception):
    """Raised when a transport payload has an invalid shape."""

    pass


@dataclass(frozen=True)
class QuotedMessageRef:
    """Identifiers of the message a reply quotes.

    The transport exposes the same message under several ID formats:
    ``serialized`` ("false_1203@g.us_3EB0C4"), ``remote`` ("1203@g.us")
    and the bare ``id`` ("3EB0C4").
    """

    serialized: str | None = None
    remote: str | None = None
    bare: str | None = None

    def is_empty(self) -> bool:
        return not (self.serialized or self.remote or self.bare)


@dataclass(frozen=True)
class InboundMessage:
    """Normalized group message.

    ATTENTION PII: ``text`` and ``author`` contain customer data.
    Never log them; log ``message_id`` and lengths only.
    """

    message_id: str
    text: str
    group_id: str | None = None
    group_name: str | None = None
    author: str | None = None
    from_me: bool = False
    is_group: bool = False
    quoted: QuotedMessageRef | None = None


def _str_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _quoted_ref(payload: dict[str, Any]) -> QuotedMessageRef | None:
    if not payload.get("hasQuotedMsg") and "quotedMsg" not in payload:
        return None

    quoted = payload.get("quotedMsg") or {}
    if not isinstance(quoted, dict):
        return None
    ids = quoted.get("id") or {}
    if isinstance(ids, str):
        ref = QuotedMessageRef(serialized=ids)
    elif isinstance(ids, dict):
        ref = QuotedMessageRef(
            serialized=_str_or_none(ids.get("_serialized")),
            remote=_str_or_none(ids.get("remote")),
            bare=_str_or_none(ids.get("id")),
        )
    else:
        return None
    return None if ref.is_empty() else ref


def normalize(payload: dict[str, Any]) -> InboundMessage:
    """Normalize a transport message payload.

    Expected shape::

        {
            "id": {"_serialized": "...", "remote": "...", "id": "..."},
            "body": "612345678\\n2 robes\\n15k\\nBonapriso",
            "fromMe": false,
            "author": "237699000000@c.us",
            "chat": {"id": {"_serialized": "1203@g.us"}, "name": "...", "isGroup": true},
            "hasQuotedMsg": true,
            "quotedMsg": {"id": {"_serialized": "...", "remote": "...", "id": "..."}}
        }

    Missing or malformed quote data means "not a reply".

    Raises:
        InvalidPayloadError: If the message ID is missing.
    """
    ids = payload.get("id")
    if isinstance(ids, dict):
        message_id = _str_or_none(ids.get("_serialized")) or _str_or_none(ids.get("id"))
    else:
        message_id = _str_or_none(ids)
    if not message_id:
        raise InvalidPayloadError("missing or invalid message id")

    chat = payload.get("chat") or {}
    chat_ids = chat.get("id") or {}
    group_id = (
        _str_or_none(chat_ids.get("_serialized"))
        if isinstance(chat_ids, dict)
        else _str_or_none(chat_ids)
    )

    body = payload.get("body")
    return InboundMessage(
        message_id=message_id,
        text=body if isinstance(body, str) else "",
        group_id=group_id,
        group_name=_str_or_none(chat.get("name")),
        author=_str_or_none(payload.get("author")),
        from_me=bool(payload.get("fromMe", False)),
        is_group=bool(chat.get("isGroup", False)),
        quoted=_quoted_ref(payload),
    )
