"""Status-update intents.

NO store access. Only parsed metadata plus the raw text for audit history.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StatusKind(str, Enum):
    PAYMENT = "payment"
    FAILED = "failed"
    PICKUP = "pickup"
    PENDING = "pending"
    MODIFY = "modify"
    NUMBER_CHANGE = "number_change"


@dataclass(frozen=True)
class StatusIntent:
    """Result of classifying a status-update message.

    ``phone`` is the order's current phone; for ``NUMBER_CHANGE`` it is the
    old number and ``new_phone`` the replacement.
    """

    kind: StatusKind
    details: str
    phone: str | None = None
    amount: float | None = None
    items: str | None = None
    new_phone: str | None = None

    def history_details(self) -> dict[str, object]:
        """Payload stored next to the history action."""
        payload: dict[str, object] = {"type": self.kind.value, "details": self.details}
        if self.phone is not None:
            payload["phone"] = self.phone
        if self.amount is not None:
            payload["amount"] = self.amount
        if self.items is not None:
            payload["items"] = self.items
        if self.new_phone is not None:
            payload["new_phone"] = self.new_phone
        return payload
