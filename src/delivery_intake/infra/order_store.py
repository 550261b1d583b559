"""Order store port and an in-memory implementation.

The real store (SQL, API) lives outside this package. It must apply each
``update`` as a single-row atomic write so two status messages for the same
phone cannot race on stale amounts.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Protocol

from delivery_intake.domain.orders import ExistingOrder, NewOrderRecord, OrderStatus


class OrderNotFoundError(Exception):
    """Order id does not exist in the store."""


class OrderStore(Protocol):
    def find_by_message_id(self, message_id: str) -> ExistingOrder | None: ...

    def latest_for_phone(self, phone: str) -> ExistingOrder | None:
        """Most recently created order for phone, any status."""
        ...

    def open_for_phone(self, phone: str) -> ExistingOrder | None:
        """Most recently created pending order for phone."""
        ...

    def create(self, record: NewOrderRecord) -> ExistingOrder: ...

    def update(self, order_id: int | str, changes: dict[str, Any]) -> ExistingOrder: ...

    def add_history(self, order_id: int | str, action: str, details: dict[str, Any]) -> None: ...


class InMemoryOrderStore:
    """Thread-safe dict-backed store. Insertion order is creation order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: dict[int, ExistingOrder] = {}
        self._records: dict[int, NewOrderRecord] = {}
        self.history: list[dict[str, Any]] = []
        self._next_id = 1

    def _newest(self, phone: str, *, status: OrderStatus | None = None) -> ExistingOrder | None:
        for order in reversed(list(self._orders.values())):
            if order.phone != phone:
                continue
            if status is not None and order.status != status:
                continue
            return order
        return None

    def find_by_message_id(self, message_id: str) -> ExistingOrder | None:
        with self._lock:
            for order in self._orders.values():
                if order.message_id == message_id:
                    return order
        return None

    def latest_for_phone(self, phone: str) -> ExistingOrder | None:
        with self._lock:
            return self._newest(phone)

    def open_for_phone(self, phone: str) -> ExistingOrder | None:
        with self._lock:
            return self._newest(phone, status=OrderStatus.PENDING)

    def create(self, record: NewOrderRecord) -> ExistingOrder:
        with self._lock:
            order = ExistingOrder(
                id=self._next_id,
                phone=record.phone,
                items=record.items,
                amount_due=record.amount_due,
                message_id=record.message_id,
                created_at=datetime.now(timezone.utc),
            )
            self._orders[order.id] = order
            self._records[order.id] = record
            self._next_id += 1
            return order

    def update(self, order_id: int | str, changes: dict[str, Any]) -> ExistingOrder:
        with self._lock:
            current = self._orders.get(order_id)  # type: ignore[arg-type]
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found")
            updated = ExistingOrder.model_validate({**current.model_dump(), **changes})
            self._orders[current.id] = updated  # type: ignore[index]
            return updated

    def add_history(self, order_id: int | str, action: str, details: dict[str, Any]) -> None:
        with self._lock:
            self.history.append({"order_id": order_id, "action": action, "details": details})

    def get(self, order_id: int) -> ExistingOrder | None:
        return self._orders.get(order_id)

    def record_for(self, order_id: int) -> NewOrderRecord | None:
        """Full creation record (group, agency, notes) for an order."""
        return self._records.get(order_id)
