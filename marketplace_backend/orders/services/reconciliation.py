# orders/services/reconciliation.py

"""
ADMIN DASHBOARD READ MODEL

Event-sourced view of the order list an admin dashboard keeps in memory:

- load(snapshots)              initial authoritative page
- apply_optimistic(id, patch)  speculative local edit -> token
- rollback(token)              undo one speculative edit (operation failed)
- apply_authoritative(event)   change feed event; replaces local state

Rules:
- The last authoritative event (by sequence) for an order id wins; an
  event with a sequence at or below the last one applied for that id is
  stale and ignored.
- An authoritative event drops every pending optimistic patch for its id.
- A delete removes the order from the list AND closes an open detail.

No database access; the HTTP layer feeds it change_feed events.
"""

from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field

EVENT_INSERT = "insert"
EVENT_UPDATE = "update"
EVENT_DELETE = "delete"


@dataclass(frozen=True)
class ChangeEvent:
    sequence: int
    order_id: str
    event_type: str
    snapshot: dict = field(default_factory=dict)

    @classmethod
    def from_model(cls, event) -> "ChangeEvent":
        return cls(
            sequence=int(event.sequence),
            order_id=str(event.order_id),
            event_type=event.event_type,
            snapshot=dict(event.snapshot or {}),
        )


@dataclass
class _Pending:
    token: int
    order_id: str
    patch: dict


class OrderDashboardState:
    def __init__(self):
        self._confirmed: dict[str, dict] = {}
        self._order: list[str] = []
        self._pending: list[_Pending] = []
        self._last_seq: dict[str, int] = {}
        self._deleted: set[str] = set()
        self._tokens = itertools.count(1)
        self.last_sequence = 0
        self._detail_id: str | None = None

    # --------------------------------------------------
    # AUTHORITATIVE
    # --------------------------------------------------

    def load(self, snapshots, *, sequence: int = 0):
        self._confirmed.clear()
        self._order.clear()
        self._pending.clear()
        self._last_seq.clear()
        self._deleted.clear()

        for snap in snapshots:
            order_id = str(snap["id"])
            self._confirmed[order_id] = dict(snap)
            self._order.append(order_id)
            self._last_seq[order_id] = int(sequence)

        self.last_sequence = max(self.last_sequence, int(sequence))

        if self._detail_id is not None and self._detail_id not in self._confirmed:
            self._detail_id = None

    def apply_authoritative(self, event: ChangeEvent) -> bool:
        """
        Returns False when the event is stale and was ignored.
        """
        order_id = str(event.order_id)
        if event.sequence <= self._last_seq.get(order_id, -1):
            return False

        self._last_seq[order_id] = event.sequence
        self.last_sequence = max(self.last_sequence, event.sequence)
        self._pending = [p for p in self._pending if p.order_id != order_id]

        if event.event_type == EVENT_DELETE:
            self._confirmed.pop(order_id, None)
            if order_id in self._order:
                self._order.remove(order_id)
            self._deleted.add(order_id)
            if self._detail_id == order_id:
                self._detail_id = None
            return True

        self._deleted.discard(order_id)
        self._confirmed[order_id] = dict(event.snapshot)
        if order_id not in self._order:
            self._order.insert(0, order_id)
        return True

    def apply_events(self, events) -> int:
        return sum(1 for event in sorted(events, key=lambda e: e.sequence) if self.apply_authoritative(event))

    # --------------------------------------------------
    # OPTIMISTIC
    # --------------------------------------------------

    def apply_optimistic(self, order_id, patch: dict) -> int:
        order_id = str(order_id)
        if order_id not in self._confirmed:
            raise KeyError(order_id)
        token = next(self._tokens)
        self._pending.append(_Pending(token=token, order_id=order_id, patch=dict(patch)))
        return token

    def rollback(self, token: int) -> bool:
        before = len(self._pending)
        self._pending = [p for p in self._pending if p.token != token]
        return len(self._pending) != before

    def has_pending(self, order_id=None) -> bool:
        if order_id is None:
            return bool(self._pending)
        return any(p.order_id == str(order_id) for p in self._pending)

    # --------------------------------------------------
    # VIEWS
    # --------------------------------------------------

    def _view(self, order_id: str) -> dict | None:
        base = self._confirmed.get(order_id)
        if base is None:
            return None
        merged = copy.deepcopy(base)
        for pending in self._pending:
            if pending.order_id == order_id:
                merged.update(pending.patch)
        return merged

    def get(self, order_id) -> dict | None:
        return self._view(str(order_id))

    def visible_orders(self) -> list[dict]:
        return [self._view(order_id) for order_id in self._order]

    def open_detail(self, order_id):
        order_id = str(order_id)
        if order_id not in self._confirmed:
            raise KeyError(order_id)
        self._detail_id = order_id

    def close_detail(self):
        self._detail_id = None

    @property
    def detail(self) -> dict | None:
        if self._detail_id is None:
            return None
        return self._view(self._detail_id)

    def is_deleted(self, order_id) -> bool:
        return str(order_id) in self._deleted


def run_optimistic(state: OrderDashboardState, order_id, patch: dict, operation):
    """
    Apply `patch` locally, run `operation()`; roll the patch back and
    re-raise if the operation fails. On success the patch stays visible
    until the authoritative event for the order replaces it.
    """
    token = state.apply_optimistic(order_id, patch)
    try:
        return operation()
    except Exception:
        state.rollback(token)
        raise
