"""Order service layer (Use Cases).

``OrderStatusService`` is the Order Status Engine: it owns the lifecycle
of an order, validates the per-state input, derives computed fields and
produces exactly one history entry per state change.

Every command follows the same shape:

1. Load the order and check the transition is legal.
2. Build the domain event and fold it into an ``OrderSnapshot`` with
   ``apply_event`` (pure, no I/O).
3. Persist changed fields plus the new history entry in one repository
   call.  On failure ``PersistenceError`` propagates and the caller's
   order object is left untouched.
4. Publish the event; audit handlers record it best-effort.

``update_details`` follows the same steps but writes no history entry:
detail edits only reach the activity log.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Union
from uuid import UUID

import structlog
import uuid6
from django.conf import settings
from django.utils import timezone

from modules.orders import financials
from modules.orders.constants import (
    CANCELLABLE_STATES,
    DEFAULT_SHIPPING_RATES,
    FORWARD_SEQUENCE,
    LOCAL_ORDER_ID_START,
    NEXT_STATUS,
    SPLIT_SUFFIX,
    SYSTEM_USER,
    CommissionType,
    OrderStatus,
)
from modules.orders.dtos import (
    ActivityEntryDTO,
    AdvancePayload,
    BillingSummaryDTO,
    InvoiceDTO,
    OrderSnapshot,
    UpdateOrderDTO,
    form_defaults,
    parse_advance_payload,
    parse_update_payload,
)
from modules.orders.events import (
    OrderAdvanced,
    OrderCancelled,
    OrderCreated,
    OrderReverted,
    OrderSplit,
    OrderUpdated,
)
from modules.orders.exceptions import (
    AuthenticationError,
    IllegalTransitionError,
    OrderNotFound,
    ValidationError,
)
from modules.orders.reducer import apply_event, history_entry

if TYPE_CHECKING:
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.core.authentication import IReauthenticator
    from modules.orders.dtos import CreateOrderDTO, SplitOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

# Fields copied from the original order onto a split-off order.
SPLIT_COPIED_FIELDS: Tuple[str, ...] = (
    "client_id",
    "store",
    "price",
    "currency",
    "commission_type",
    "commission_rate",
    "payment_method",
    "shipping_type",
    "origin_center",
    "receiving_company_id",
    "order_date",
    "expected_arrival_date",
    "product_links",
    "product_images",
    "notes",
)

# Create input that the service derives instead of storing as sent.
CREATE_DERIVED_FIELDS = {
    "local_order_id",
    "currency_rate",
    "price_in_mru",
    "commission_rate",
    "commission",
    "order_date",
}

# Edits that re-derive a percentage commission.
COMMISSION_INPUTS = {"price_in_mru", "commission_rate", "commission_type", "commission"}


def configured_shipping_rates() -> Dict[str, Decimal]:
    """Shipping rates per kg from settings, falling back to the defaults."""
    rates = getattr(settings, "SHIPPING_RATES", None) or {}
    return {
        shipping_type: Decimal(str(rates.get(shipping_type, default)))
        for shipping_type, default in DEFAULT_SHIPPING_RATES.items()
    }


def describe_advance(
    from_status: str, changes: Mapping[str, Any]
) -> Tuple[str, str]:
    """History text and audit action for a forward transition.

    The dominant changed field wins: storage location, then tracking
    number, then global order id.
    """
    if from_status == OrderStatus.STORED:
        return "Delivered to client", "Deliver Order"
    if changes.get("storage_location"):
        return f"Stored at {changes['storage_location']}", "Store Order"
    if changes.get("tracking_number"):
        return f"Added Tracking: {changes['tracking_number']}", "Add Tracking"
    if changes.get("global_order_id"):
        return f"Added Global ID: {changes['global_order_id']}", "Add Global ID"
    return "Updated Details", "Update Details"


class OrderStatusService:
    """Application service for Order use-cases.

    Receives repositories and collaborators via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        reauthenticator: Optional[IReauthenticator] = None,
        client_repository: Optional[IClientRepository] = None,
        event_bus: Optional[IEventBus] = None,
        shipping_rates: Optional[Mapping[str, Decimal]] = None,
        order_id_prefix: Optional[str] = None,
        default_commission_rate: Optional[Decimal] = None,
    ) -> None:
        self._order_repo = order_repository
        if reauthenticator is None:
            from modules.core.authentication import ReauthTokenService

            reauthenticator = ReauthTokenService()
        self._reauthenticator = reauthenticator
        self._client_repo = client_repository
        if event_bus is None:
            from shared.infrastructure.bus import event_bus as default_bus

            event_bus = default_bus
        self._event_bus = event_bus
        self._shipping_rates = dict(shipping_rates or configured_shipping_rates())
        self._id_prefix = order_id_prefix or getattr(settings, "ORDER_ID_PREFIX", "FCD")
        self._default_commission_rate = Decimal(
            str(
                default_commission_rate
                if default_commission_rate is not None
                else getattr(settings, "DEFAULT_COMMISSION_RATE", 0)
            )
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO, user: str = SYSTEM_USER) -> Order:
        """Insert a NEW order whose first history entry is ``Order Created``.

        Raises:
            ClientNotFound: the client does not exist.
            ValidationError: the requested local order id is taken.
        """
        log = logger.bind(client_id=str(dto.client_id), user=user)
        log.info("order.creation_started")

        if self._client_repo is not None and not self._client_repo.get_by_id(
            str(dto.client_id)
        ):
            from modules.clients.exceptions import ClientNotFound

            raise ClientNotFound(f"Client {dto.client_id} not found.")

        local_order_id = dto.local_order_id or self.next_local_order_id()
        if self._order_repo.local_id_exists(local_order_id):
            raise ValidationError(
                f"Order id {local_order_id} is already in use.", ("local_order_id",)
            )

        price_in_mru = (
            dto.price_in_mru
            if dto.price_in_mru is not None
            else financials.round_amount(dto.price * dto.currency_rate)
        )
        rate = (
            dto.commission_rate
            if dto.commission_rate is not None
            else self._default_commission_rate
        )
        commission = financials.commission_for(
            price_in_mru, dto.commission_type, rate, dto.commission
        )

        data = dto.model_dump(exclude=CREATE_DERIVED_FIELDS)
        data.update(
            id=uuid6.uuid7(),
            local_order_id=local_order_id,
            status=OrderStatus.NEW,
            price_in_mru=price_in_mru,
            commission_rate=rate,
            commission=commission,
            order_date=dto.order_date or timezone.localdate(),
        )

        event = OrderCreated(
            aggregate_id=data["id"],
            actor=user,
            local_order_id=local_order_id,
        )
        order = self._order_repo.create(data, history_entry(event))

        log.info("order.created", order_id=str(order.id), local_order_id=local_order_id)
        self._publish(event)
        return order

    def advance(
        self,
        order_id: Union[UUID, str],
        payload: Union[AdvancePayload, Mapping[str, Any]],
        user: str = SYSTEM_USER,
    ) -> Order:
        """Move an order one step forward.

        *payload* is either a typed advance payload or raw form input, in
        which case it is parsed against the order's current status with the
        order's existing values as defaults.

        Raises:
            OrderNotFound: order does not exist.
            IllegalTransitionError: terminal or batch-managed order, or a
                payload built for another status.
            ValidationError: required input missing.
            PersistenceError: the order store rejected the write.
        """
        order = self.get_order(str(order_id))
        log = logger.bind(order_id=str(order.id), current_status=order.status, user=user)

        if order.is_terminal:
            log.warning("order.advance_rejected", reason="terminal")
            raise IllegalTransitionError(
                f"Order {order.local_order_id} is {order.status} and cannot advance."
            )
        if order.is_batch_managed:
            log.warning("order.advance_rejected", reason="batch_managed")
            raise IllegalTransitionError(
                f"Order {order.local_order_id} is managed by shipment "
                f"{order.shipment_id}; update the shipment instead."
            )

        if isinstance(payload, Mapping):
            payload = parse_advance_payload(order.status, payload, form_defaults(order))
        elif payload.status != order.status:
            raise IllegalTransitionError(
                f"Payload is for '{payload.status}' but the order is '{order.status}'."
            )

        now = timezone.now()
        changes: Dict[str, Any] = payload.changes()
        if order.status == OrderStatus.ARRIVED_AT_OFFICE:
            shipping_type = changes.get("shipping_type") or order.shipping_type
            changes["shipping_type"] = shipping_type
            changes["shipping_cost"] = financials.shipping_cost(
                changes["weight"], shipping_type, self._shipping_rates
            )
            changes["storage_date"] = now
        elif order.status == OrderStatus.STORED:
            changes["withdrawal_date"] = now

        activity, action = describe_advance(order.status, changes)
        event = OrderAdvanced(
            aggregate_id=order.id,
            actor=user,
            occurred_on=now,
            from_status=order.status,
            to_status=NEXT_STATUS[order.status],
            changes=changes,
            attachments=payload.attachments(),
            activity=activity,
            action=action,
        )
        after = apply_event(OrderSnapshot.from_entity(order), event)

        fields = dict(changes)
        fields["status"] = after.status
        for name in event.attachments:
            fields[name] = list(getattr(after, name))

        saved = self._order_repo.apply_changes(order.id, fields, after.history[-1])
        log.info("order.advanced", new_status=after.status, activity=activity)
        self._publish(event)
        return saved

    def revert(
        self,
        order_id: Union[UUID, str],
        proof: str,
        user: str,
    ) -> Order:
        """Move an order one step back after re-authenticating *user*.

        Re-authentication comes first: nothing is read further or written
        when it fails.

        Raises:
            AuthenticationError: *proof* is not valid for *user*.
            IllegalTransitionError: order is NEW or CANCELLED.
        """
        order = self.get_order(str(order_id))
        log = logger.bind(order_id=str(order.id), current_status=order.status, user=user)

        try:
            self._reauthenticator.reauthenticate(user, proof)
        except AuthenticationError:
            log.warning("order.revert_denied")
            raise

        if order.status not in FORWARD_SEQUENCE or FORWARD_SEQUENCE.index(order.status) <= 0:
            log.warning("order.revert_rejected")
            raise IllegalTransitionError(
                f"Order {order.local_order_id} cannot be reverted from {order.status}."
            )

        previous = FORWARD_SEQUENCE[FORWARD_SEQUENCE.index(order.status) - 1]
        event = OrderReverted(
            aggregate_id=order.id,
            actor=user,
            from_status=order.status,
            to_status=previous,
        )
        after = apply_event(OrderSnapshot.from_entity(order), event)

        saved = self._order_repo.apply_changes(
            order.id, {"status": after.status}, after.history[-1]
        )
        log.info("order.reverted", new_status=after.status)
        self._publish(event)
        return saved

    def cancel(
        self,
        order_id: Union[UUID, str],
        reason: str,
        user: str = SYSTEM_USER,
    ) -> Order:
        """Cancel an ORDERED order.

        Raises:
            IllegalTransitionError: order is not ORDERED.
            ValidationError: *reason* is blank.
        """
        order = self.get_order(str(order_id))
        log = logger.bind(order_id=str(order.id), current_status=order.status, user=user)

        if order.status not in CANCELLABLE_STATES:
            log.warning("order.cancel_not_allowed")
            raise IllegalTransitionError(
                f"Cannot cancel order {order.local_order_id} in status {order.status}."
            )
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A cancellation reason is required.", ("reason",))

        notes = f"[Cancel]: {reason}"
        if order.notes:
            notes = f"{notes}\n{order.notes}"

        event = OrderCancelled(aggregate_id=order.id, actor=user, reason=reason, notes=notes)
        after = apply_event(OrderSnapshot.from_entity(order), event)

        saved = self._order_repo.apply_changes(
            order.id,
            {"status": after.status, "notes": after.notes},
            after.history[-1],
        )
        log.info("order.cancelled", reason=reason)
        self._publish(event)
        return saved

    def split(
        self,
        order_id: Union[UUID, str],
        dto: SplitOrderDTO,
        user: str = SYSTEM_USER,
    ) -> Tuple[Order, Order]:
        """Move ``dto.quantity`` items of a NEW order into a new order.

        Returns ``(original, new_order)``.

        Raises:
            IllegalTransitionError: order is not NEW.
            ValidationError: quantity out of range, or a price adjustment
                larger than the order price.
        """
        order = self.get_order(str(order_id))
        log = logger.bind(order_id=str(order.id), user=user, quantity=dto.quantity)

        if order.status != OrderStatus.NEW:
            raise IllegalTransitionError(
                f"Only new orders can be split; {order.local_order_id} is {order.status}."
            )
        if order.quantity <= 1 or not 1 <= dto.quantity < order.quantity:
            raise ValidationError(
                f"Split quantity must be between 1 and {order.quantity - 1}.",
                ("quantity",),
            )
        if dto.price_adjustment > financials.to_decimal(order.price_in_mru):
            raise ValidationError(
                f"Price adjustment cannot exceed the order price of {order.price_in_mru}.",
                ("price_adjustment",),
            )

        new_local_id = self._split_local_id(order.local_order_id)
        moved_price = dto.price_adjustment
        kept_quantity = order.quantity - dto.quantity
        kept_price = financials.to_decimal(order.price_in_mru) - moved_price

        changes = {
            "quantity": kept_quantity,
            "price_in_mru": kept_price,
            "commission": financials.split_commission(order, kept_quantity, kept_price),
        }
        split_event = OrderSplit(
            aggregate_id=order.id,
            actor=user,
            new_local_order_id=new_local_id,
            moved_quantity=dto.quantity,
            changes=changes,
        )
        after = apply_event(OrderSnapshot.from_entity(order), split_event)

        new_order = {name: getattr(order, name) for name in SPLIT_COPIED_FIELDS}
        new_order.update(
            id=uuid6.uuid7(),
            local_order_id=new_local_id,
            global_order_id=dto.global_order_id,
            tracking_number=dto.tracking_number,
            status=OrderStatus.NEW,
            quantity=dto.quantity,
            price_in_mru=moved_price,
            commission=financials.split_commission(order, dto.quantity, moved_price),
        )
        created_event = OrderCreated(
            aggregate_id=new_order["id"],
            actor=user,
            local_order_id=new_local_id,
            split_from=order.local_order_id,
            activity=f"Created as split from {order.local_order_id}",
        )

        original, created = self._order_repo.split(
            order.id,
            changes,
            after.history[-1],
            new_order,
            history_entry(created_event),
        )
        log.info("order.split", new_order_id=str(created.id), new_local_order_id=new_local_id)
        self._publish(split_event)
        self._publish(created_event)
        return original, created

    def update_details(
        self,
        order_id: Union[UUID, str],
        payload: Union[UpdateOrderDTO, Mapping[str, Any]],
        user: str = SYSTEM_USER,
    ) -> Order:
        """Edit order details without touching status or history.

        A percentage commission follows edits to price or rate, and a new
        shipping type is re-priced once the order has been weighed.

        Raises:
            OrderNotFound: order does not exist.
            ValidationError: a lifecycle field was sent, a value is invalid,
                or nothing editable was sent.
            PersistenceError: the order store rejected the write.
        """
        order = self.get_order(str(order_id))
        log = logger.bind(order_id=str(order.id), current_status=order.status, user=user)

        if isinstance(payload, Mapping):
            payload = parse_update_payload(payload)
        changes = payload.changes()
        if not changes:
            raise ValidationError("No editable fields were sent.")

        commission_type = changes.get("commission_type", order.commission_type)
        if commission_type == CommissionType.PERCENTAGE and changes.keys() & COMMISSION_INPUTS:
            changes["commission"] = financials.commission_for(
                changes.get("price_in_mru", order.price_in_mru),
                commission_type,
                changes.get("commission_rate", order.commission_rate),
            )
        if "shipping_type" in changes and order.weight is not None:
            changes["shipping_cost"] = financials.shipping_cost(
                order.weight, changes["shipping_type"], self._shipping_rates
            )

        event = OrderUpdated(
            aggregate_id=order.id,
            actor=user,
            local_order_id=order.local_order_id,
            changes=changes,
        )
        apply_event(OrderSnapshot.from_entity(order), event)

        saved = self._order_repo.apply_changes(order.id, changes, None)
        log.info("order.details_updated", fields=sorted(changes))
        self._publish(event)
        return saved

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Return a list of orders, optionally filtered."""
        return self._order_repo.list(filters)

    def invoice(self, order_id: str) -> InvoiceDTO:
        order = self.get_order(order_id)
        return InvoiceDTO(
            order_id=order.id,
            local_order_id=order.local_order_id,
            client_name=order.client.name,
            quantity=order.quantity,
            product_total=financials.product_total(order),
            commission=financials.to_decimal(order.commission),
            shipping_cost=financials.to_decimal(order.shipping_cost),
            grand_total=financials.grand_total(order),
            amount_paid=financials.to_decimal(order.amount_paid),
            remaining=financials.remaining(order),
            payment_status=financials.payment_status(order),
            delivery_due=financials.delivery_due(order),
        )

    def billing_summary(self, filters: Optional[Dict[str, Any]] = None) -> BillingSummaryDTO:
        return BillingSummaryDTO(**financials.billing_summary(self._order_repo.list(filters)))

    def next_local_order_id(self) -> str:
        """``<prefix><n>`` with *n* one past the highest numeric suffix in use."""
        pattern = re.compile(rf"^{re.escape(self._id_prefix)}(\d+)$")
        numbers = [
            int(match.group(1))
            for local_id in self._order_repo.local_ids_with_prefix(self._id_prefix)
            if (match := pattern.match(local_id))
        ]
        next_number = max(numbers) + 1 if numbers else LOCAL_ORDER_ID_START
        return f"{self._id_prefix}{max(next_number, LOCAL_ORDER_ID_START)}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _split_local_id(self, local_order_id: str) -> str:
        candidate = f"{local_order_id}{SPLIT_SUFFIX}"
        counter = 2
        while self._order_repo.local_id_exists(candidate):
            candidate = f"{local_order_id}{SPLIT_SUFFIX}{counter}"
            counter += 1
        return candidate

    def _publish(self, event: DomainEvent) -> None:
        self._event_bus.publish(event)

