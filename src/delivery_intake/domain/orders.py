"""Order records: parse results and the external order entity.

Parse results are plain frozen dataclasses (created and discarded per
message). ``ExistingOrder`` and ``OrderMutation`` cross the boundary with the
persistence collaborator and are validated with pydantic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

OrderFormat = Literal["compact", "neighborhood_first", "flexible"]

COMPACT_FORMAT_HINT = (
    "Ligne 1: Numéro\nLigne 2: Produits\nLigne 3: Montant\nLigne 4: Quartier"
)
NEIGHBORHOOD_FIRST_FORMAT_HINT = (
    "Ligne 1: Quartier\nLignes 2-N: Produits\n"
    "Avant-dernière ligne: Montant\nDernière ligne: Numéro"
)


# ── Enums ─────────────────────────────────────────────────


class OrderStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"
    PICKUP = "pickup"


# ── Parse results ─────────────────────────────────────────


@dataclass(frozen=True)
class ParsedOrder:
    """A structurally valid new-order message."""

    items: str
    format: OrderFormat
    phone: str | None = None
    customer_name: str | None = None
    amount_due: float | None = None
    quartier: str | None = None
    carrier: str | None = None

    @property
    def valid(self) -> bool:
        return True

    @property
    def has_phone(self) -> bool:
        return self.phone is not None

    @property
    def has_amount(self) -> bool:
        # A zero amount ("0k") is not an amount.
        return bool(self.amount_due)

    def is_actionable(self) -> bool:
        """True when at least a phone or an amount was found."""
        return self.has_phone or self.has_amount


@dataclass(frozen=True)
class ParseFailure:
    """A recognized schema that failed a line-specific check.

    ``field`` names the failing part ("lines", "phone", "items", "amount",
    "quartier") and is safe to log; ``error`` quotes the message line.
    """

    error: str
    expected_format: str | None = None
    field: str | None = None

    @property
    def valid(self) -> bool:
        return False


OrderParseResult = ParsedOrder | ParseFailure


# ── Persistence boundary ──────────────────────────────────


class ExistingOrder(BaseModel):
    """Order as read from the store. Referenced, never owned, by the engine."""

    id: int | str
    phone: str
    items: str | None = None
    amount_due: float = 0
    amount_paid: float = 0
    status: OrderStatus = OrderStatus.PENDING
    message_id: str | None = None
    created_at: datetime | None = None


class OrderMutation(BaseModel):
    """Field changes to apply to one order. Unset fields are left alone."""

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    amount_paid: float | None = None
    amount_due: float | None = None
    items: str | None = None
    phone: str | None = None

    def as_update(self) -> dict[str, Any]:
        """Only the fields that were set, with enum values unwrapped."""
        return self.model_dump(exclude_none=True, mode="json")

    def is_empty(self) -> bool:
        return not self.as_update()


class NewOrderRecord(BaseModel):
    """Record handed to the store when a new order is created."""

    model_config = ConfigDict(extra="forbid")

    phone: str
    items: str
    amount_due: float = 0
    customer_name: str | None = None
    quartier: str | None = None
    carrier: str | None = None
    notes: str | None = None
    group_id: str | None = None
    agency_id: str | None = None
    message_id: str | None = None
