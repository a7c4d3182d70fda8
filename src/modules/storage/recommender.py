"""Storage slot recommender.

Pure functions: given the incoming order, every order that might occupy a
slot and the configured drawers, pick a drawer and its first free slot.

Drawer scoring (non-full drawers only):

* +40 when a drawer already holds a package of the order's shipment
* +25 when it already holds a package of the same client
* +20 when its fill ratio is strictly between 10% and 90%

Ties keep configuration order.  When every drawer is full the first
configured drawer is returned with score 0 without checking its capacity,
so the suggested location is ``None`` in that case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Set

SHIPMENT_AFFINITY_SCORE = 40
CLIENT_AFFINITY_SCORE = 25
FILL_BALANCE_SCORE = 20
FILL_RATIO_MIN = 0.10
FILL_RATIO_MAX = 0.90

REASON_SAME_SHIPMENT = "contains packages from the same shipment"
REASON_SAME_CLIENT = "contains other packages for the same client"
REASON_GOOD_FILL = "good fill level for consolidating packages"
REASON_FALLBACK = "first available drawer"

STORED = "stored"


class DrawerLike(Protocol):
    name: str
    capacity: int


class OrderLike(Protocol):
    status: str
    storage_location: str
    shipment_id: str
    client_id: Any


@dataclass(frozen=True)
class Suggestion:
    location: Optional[str]
    score: int
    reasons: List[str] = field(default_factory=list)
    drawer: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "location": self.location,
            "score": self.score,
            "reasons": list(self.reasons),
            "drawer": self.drawer,
        }


@dataclass(frozen=True)
class DrawerOccupancy:
    name: str
    capacity: int
    occupied: int
    occupied_slots: List[str]

    @property
    def free(self) -> int:
        return max(0, self.capacity - self.occupied)

    @property
    def fill_ratio(self) -> float:
        return self.occupied / self.capacity if self.capacity else 0.0

    @property
    def is_full(self) -> bool:
        return self.occupied >= self.capacity


def slot_address(drawer_name: str, index: int) -> str:
    """``A``, 3 -> ``A-03``.  Indices above 99 are not truncated."""
    return f"{drawer_name}-{index:02d}"


def stored_orders(orders: Iterable[OrderLike]) -> List[OrderLike]:
    return [order for order in orders if order.status == STORED]


def occupied_slots(orders: Iterable[OrderLike]) -> Set[str]:
    """Addresses held by STORED orders."""
    return {
        order.storage_location
        for order in stored_orders(orders)
        if order.storage_location
    }


def orders_in_drawer(drawer: DrawerLike, orders: Iterable[OrderLike]) -> List[OrderLike]:
    prefix = f"{drawer.name}-"
    return [
        order
        for order in stored_orders(orders)
        if (order.storage_location or "").startswith(prefix)
    ]


def first_free_slot(drawer: DrawerLike, occupied: Set[str]) -> Optional[str]:
    for index in range(1, drawer.capacity + 1):
        address = slot_address(drawer.name, index)
        if address not in occupied:
            return address
    return None


def score_drawer(order: OrderLike, drawer: DrawerLike, contents: Sequence[OrderLike]):
    """Return ``(score, reasons)`` for placing *order* in *drawer*."""
    score = 0
    reasons: List[str] = []

    if order.shipment_id and any(o.shipment_id == order.shipment_id for o in contents):
        score += SHIPMENT_AFFINITY_SCORE
        reasons.append(REASON_SAME_SHIPMENT)

    if any(o.client_id == order.client_id for o in contents):
        score += CLIENT_AFFINITY_SCORE
        reasons.append(REASON_SAME_CLIENT)

    fill_ratio = len(contents) / drawer.capacity
    if FILL_RATIO_MIN < fill_ratio < FILL_RATIO_MAX:
        score += FILL_BALANCE_SCORE
        reasons.append(REASON_GOOD_FILL)

    return score, reasons


def suggest(
    order: OrderLike,
    all_orders: Iterable[OrderLike],
    drawers: Sequence[DrawerLike],
) -> Suggestion:
    """Suggest a storage slot for *order*; advisory only."""
    if not drawers:
        return Suggestion(location=None, score=0, reasons=[])

    all_orders = list(all_orders)
    occupied = occupied_slots(all_orders)

    candidates = []
    for drawer in drawers:
        contents = orders_in_drawer(drawer, all_orders)
        if len(contents) >= drawer.capacity:
            continue
        score, reasons = score_drawer(order, drawer, contents)
        candidates.append((drawer, score, reasons))

    # sorted() is stable: equal scores keep configuration order.
    candidates = sorted(candidates, key=lambda candidate: candidate[1], reverse=True)
    if candidates:
        drawer, score, reasons = candidates[0]
    else:
        # Known edge case: the fallback drawer is not checked for capacity.
        drawer, score, reasons = drawers[0], 0, [REASON_FALLBACK]

    return Suggestion(
        location=first_free_slot(drawer, occupied),
        score=score,
        reasons=list(reasons),
        drawer=drawer.name,
    )


def drawer_occupancy(
    drawers: Sequence[DrawerLike], all_orders: Iterable[OrderLike]
) -> List[DrawerOccupancy]:
    all_orders = list(all_orders)
    overview = []
    for drawer in drawers:
        slots = sorted(o.storage_location for o in orders_in_drawer(drawer, all_orders))
        overview.append(
            DrawerOccupancy(
                name=drawer.name,
                capacity=drawer.capacity,
                occupied=len(slots),
                occupied_slots=slots,
            )
        )
    return overview
