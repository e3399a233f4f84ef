"""
Booking orchestrator.

Composes availability, recurrence, the lifecycle controller, and pricing
into the operations a booking API exposes: create, reschedule, cancel,
complete, delete, payments, recurring series, and bulk actions.

Every "check availability -> persist" sequence runs under the artisan's
booking lock. Side effects that follow a successful write (recurrence
expansion, deposit capture, notifications, customer statistics) are best
effort: their failures are logged and never undo the write.

Usage:
    orchestrator = BookingOrchestrator(store, working_hours, catalog)
    creation = await orchestrator.create_booking(request)
    await orchestrator.confirm_booking(creation.booking.id)
"""

import functools
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from artisan_booking.config import AppConfig, settings
from artisan_booking.errors import (
    BookingError,
    BookingStateError,
    SlotUnavailableError,
    ValidationError,
    guard_store,
)
from artisan_booking.lifecycle.pricing import RefundPolicy, is_cancellable, reprice_addons
from artisan_booking.lifecycle.state_machine import (
    BookingLifecycle,
    TransitionContext,
    validate_transition,
)
from artisan_booking.locking import ProviderLocks
from artisan_booking.logging_context import (
    get_request_id,
    get_request_logger,
    new_request_id,
    set_request_id,
)
from artisan_booking.ports import (
    BookingStore,
    CatalogLookup,
    CustomerStats,
    Notifier,
    PaymentGateway,
    WorkingHoursProvider,
)
from artisan_booking.schemas.booking_schema import (
    AvailabilityResult,
    Booking,
    BookingStatus,
    Conflict,
    PaymentStatus,
    RecurrencePattern,
    TimeSlot,
)
from artisan_booking.schemas.request_schema import (
    BookingUpdate,
    CancelBookingRequest,
    CompleteBookingRequest,
    CreateBookingRequest,
    RescheduleBookingRequest,
)
from artisan_booking.schemas.result_schema import (
    BatchResult,
    BookingCreation,
    ItemFailure,
    SeriesExpansion,
)
from artisan_booking.scheduling.availability import AvailabilityCalculator
from artisan_booking.scheduling.conflicts import ConflictDetector
from artisan_booking.scheduling.recurrence import RecurrenceExpander
from artisan_booking.utils import is_nil, to_money, utc_now

logger = get_request_logger(__name__)

M = TypeVar("M", bound=BaseModel)
F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

_NO_REQUEST_ID = "NO_REQUEST_ID"

# Statuses shown on an artisan's working schedule
SCHEDULE_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
})

BULK_RESCHEDULE_REASON = "Bulk rescheduled"


def _traced(func: F) -> F:
    """Tag the call with a request id unless the caller already set one."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        previous = get_request_id()
        if previous == _NO_REQUEST_ID:
            new_request_id()
        try:
            return await func(*args, **kwargs)
        finally:
            set_request_id(previous)

    return wrapper  # type: ignore[return-value]


def _parse(model: type[M], data: Union[M, dict[str, Any]]) -> M:
    """Validate a request, converting pydantic errors to ``ValidationError``."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"invalid request: {messages}") from None


def _require_id(value: Optional[UUID], label: str) -> None:
    if is_nil(value):
        raise ValidationError(f"{label} is required")


class BookingOrchestrator:
    """Entry point for every booking operation."""

    def __init__(
        self,
        store: BookingStore,
        working_hours: WorkingHoursProvider,
        catalog: CatalogLookup,
        notifier: Optional[Notifier] = None,
        payments: Optional[PaymentGateway] = None,
        customers: Optional[CustomerStats] = None,
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        locks: Optional[ProviderLocks] = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._notifier = notifier
        self._payments = payments
        self._customers = customers
        self._config = config or settings
        self._clock = clock
        self._locks = locks or ProviderLocks()

        self.conflicts = ConflictDetector(store)
        self.availability = AvailabilityCalculator(store, working_hours, self.conflicts)
        self.recurrence = RecurrenceExpander(store, self.availability, self._locks)
        self.lifecycle = BookingLifecycle(on_completed=self._record_completion, clock=clock)
        self.refunds = RefundPolicy(self._config.pricing)

    # ------------------------------------------------------------------ #
    # Creation
    # ------------------------------------------------------------------ #

    @_traced
    async def create_booking(
        self, request: Union[CreateBookingRequest, dict[str, Any]]
    ) -> BookingCreation:
        """
        Place a booking, then expand its series and take its deposit.

        Raises:
            ValidationError: Bad request or a start time in the past.
            NotFoundError: Unknown service.
            SlotUnavailableError: The window overlaps an active booking.
            InfrastructureError: The availability check or save failed.
        """
        req = _parse(CreateBookingRequest, request)
        self._reject_past(req.start_time, "start time")
        service = await guard_store(self._catalog.get_service(req.service_id), "fetching service")

        async with self._locks.hold(req.artisan_id):
            result = await self.availability.check_availability(
                req.artisan_id, req.start_time, req.duration_minutes, service_id=req.service_id,
            )
            if not result.is_available:
                logger.info(
                    "Booking rejected for artisan %s at %s: %d conflict(s)",
                    req.artisan_id, req.start_time.isoformat(), len(result.conflicts),
                )
                raise SlotUnavailableError(
                    "artisan is not available for the requested time slot", result.conflicts,
                )

            booking = Booking(
                tenant_id=req.tenant_id,
                artisan_id=req.artisan_id,
                customer_id=req.customer_id,
                service_id=req.service_id,
                start_time=req.start_time,
                end_time=req.start_time + timedelta(minutes=req.duration_minutes),
                duration_minutes=req.duration_minutes,
                status=BookingStatus.CONFIRMED if req.auto_confirm else BookingStatus.PENDING,
                payment_status=PaymentStatus.PENDING,
                base_price=to_money(service.price),
                currency=service.currency or self._config.pricing.default_currency,
                notes=req.notes,
                customer_notes=req.customer_notes,
                is_recurring=req.is_recurring,
                recurrence_pattern=req.recurrence_pattern,
                recurrence_end_date=req.recurrence_end_date,
                metadata=dict(req.metadata),
            )
            await reprice_addons(booking, req.selected_addons, self._catalog)
            await guard_store(self._store.create(booking), "saving booking")

        logger.info(
            "Booking created: %s for customer %s with artisan %s at %s",
            booking.id, booking.customer_id, booking.artisan_id, booking.start_time.isoformat(),
        )

        series = None
        if req.is_recurring and req.recurrence_pattern is not None:
            series = await self._expand_after_create(booking, req)

        if req.requires_deposit and req.deposit_amount > 0 and req.payment_method_id:
            booking = await self._capture_deposit(booking, req.deposit_amount, req.payment_method_id)

        if req.send_confirmation_email or req.send_confirmation_sms:
            await self._notify("booking_created", booking)

        return BookingCreation(booking=booking, series=series)

    async def _expand_after_create(
        self, booking: Booking, req: CreateBookingRequest
    ) -> Optional[SeriesExpansion]:
        try:
            series = await self.recurrence.expand_series(
                booking,
                req.recurrence_pattern,
                end_date=req.recurrence_end_date,
                occurrence_count=req.recurrence_occurrences,
            )
        except BookingError as exc:
            logger.error("Failed to create recurring bookings for %s: %s", booking.id, exc)
            return None

        if series.created:
            booking.metadata["recurring_bookings_created"] = len(series.created)
            try:
                await guard_store(self._store.update(booking), "saving series metadata")
            except BookingError as exc:
                logger.warning("Could not record series size on %s: %s", booking.id, exc)
        return series

    async def _capture_deposit(
        self, booking: Booking, amount: Decimal, payment_method_id: str
    ) -> Booking:
        if self._payments is None:
            logger.warning("No payment gateway configured, deposit not taken for %s", booking.id)
            return booking
        try:
            intent_id = await guard_store(
                self._payments.capture_deposit(booking, to_money(amount), payment_method_id),
                "capturing deposit",
            )
            return await self.record_deposit(booking.id, amount, intent_id)
        except BookingError as exc:
            logger.error("Failed to process deposit payment for %s: %s", booking.id, exc)
            return booking

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @_traced
    async def get_booking(self, booking_id: UUID) -> Booking:
        _require_id(booking_id, "booking ID")
        return await guard_store(self._store.get(booking_id), "fetching booking")

    @_traced
    async def get_recurring_series(self, booking_id: UUID) -> list[Booking]:
        """Parent plus children, ordered by start time.

        Any member of the series may be given; children resolve to their parent.
        """
        _require_id(booking_id, "booking ID")
        parent_id = await self.recurrence.series_parent_id(booking_id)
        return await guard_store(
            self._store.get_series(parent_id), "fetching recurring series"
        )

    @_traced
    async def get_artisan_schedule(
        self, artisan_id: UUID, start: datetime, end: datetime
    ) -> list[Booking]:
        """Active (pending, confirmed, in progress) bookings in ``[start, end)``."""
        _require_id(artisan_id, "artisan ID")
        if start > end:
            raise ValidationError("start date cannot be after end date")
        bookings = await guard_store(
            self._store.get_bookings_in_range(artisan_id, start, end), "fetching schedule"
        )
        return sorted(
            (b for b in bookings if b.status in SCHEDULE_STATUSES),
            key=lambda b: b.start_time,
        )

    # ------------------------------------------------------------------ #
    # Updates and status changes
    # ------------------------------------------------------------------ #

    @_traced
    async def update_booking(
        self, booking_id: UUID, update: Union[BookingUpdate, dict[str, Any]]
    ) -> Booking:
        """
        Apply a partial update. Fields the caller did not supply keep their
        stored value; a status change goes through the lifecycle controller.
        """
        upd = _parse(BookingUpdate, update)
        booking = await self.get_booking(booking_id)
        old_status = booking.status
        fields = upd.supplied()

        status = fields.pop("status", None)
        reason = fields.pop("cancellation_reason", None)
        actor = fields.pop("cancelled_by", None)
        if status is not None:
            self.lifecycle.apply_transition(
                booking,
                status,
                TransitionContext(reason=reason or "", actor_id=actor),
                fire_hooks=False,
            )
        elif reason is not None:
            booking.cancellation_reason = reason

        addons = fields.pop("selected_addons", None)
        if addons is not None:
            await reprice_addons(booking, addons, self._catalog)

        metadata = fields.pop("metadata", None)
        if metadata is not None:
            booking.metadata.update(metadata)

        for name, value in fields.items():
            if value is not None:
                setattr(booking, name, value)
        booking.updated_at = self._clock()

        await guard_store(self._store.update(booking), "updating booking")
        logger.info("Booking updated: %s (%s)", booking.id, ", ".join(sorted(upd.model_fields_set)))
        await self._after_status_change(booking, old_status)
        return booking

    async def confirm_booking(self, booking_id: UUID) -> Booking:
        return await self.update_booking(booking_id, BookingUpdate(status=BookingStatus.CONFIRMED))

    async def start_booking(self, booking_id: UUID) -> Booking:
        return await self.update_booking(booking_id, BookingUpdate(status=BookingStatus.IN_PROGRESS))

    async def mark_no_show(self, booking_id: UUID) -> Booking:
        return await self.update_booking(booking_id, BookingUpdate(status=BookingStatus.NO_SHOW))

    @_traced
    async def complete_booking(
        self,
        booking_id: UUID,
        request: Union[CompleteBookingRequest, dict[str, Any], None] = None,
    ) -> Booking:
        """Finish an in-progress booking and credit the customer's loyalty points."""
        req = _parse(CompleteBookingRequest, request or {})
        booking = await self.get_booking(booking_id)
        old_status = booking.status

        self.lifecycle.apply_transition(
            booking,
            BookingStatus.COMPLETED,
            TransitionContext(
                completion_notes=req.completion_notes,
                before_photo_urls=req.before_photo_urls,
                after_photo_urls=req.after_photo_urls,
            ),
            fire_hooks=False,
        )
        if req.actual_duration_minutes is not None:
            booking.metadata["actual_duration_minutes"] = req.actual_duration_minutes
        if req.quality_rating is not None:
            booking.metadata["quality_rating"] = req.quality_rating
        if req.request_review:
            booking.metadata["review_requested"] = True

        await guard_store(self._store.update(booking), "completing booking")
        logger.info("Booking completed: %s (total %s %s)", booking.id, booking.total_price, booking.currency)
        await self._after_status_change(booking, old_status)
        return booking

    @_traced
    async def cancel_booking(
        self, booking_id: UUID, request: Union[CancelBookingRequest, dict[str, Any]]
    ) -> Booking:
        """
        Cancel a booking, refunding the deposit when requested.

        The cancellation is stored before any refund is attempted. A failed
        refund is logged and the booking stays cancelled.

        Raises:
            BookingStateError: The booking is already completed, cancelled,
                or marked no-show.
        """
        req = _parse(CancelBookingRequest, request)
        booking = await self.get_booking(booking_id)
        if not is_cancellable(booking):
            raise BookingStateError(f"booking cannot be cancelled in status {booking.status.value}")
        old_status = booking.status

        self.lifecycle.apply_transition(
            booking,
            BookingStatus.CANCELLED,
            TransitionContext(reason=req.reason, actor_id=req.cancelled_by),
        )
        await guard_store(self._store.update(booking), "cancelling booking")
        logger.info("Booking cancelled: %s (%s)", booking.id, req.reason)

        # Money moves only once the cancellation is stored.
        if req.refund_requested and booking.deposit_paid > 0:
            await self._refund_cancelled(booking, req.reason)

        await self._notify("booking_updated", booking, old_status)
        if req.notify_customer or req.notify_artisan:
            await self._notify("booking_cancelled", booking)
        return booking

    # ------------------------------------------------------------------ #
    # Rescheduling
    # ------------------------------------------------------------------ #

    @_traced
    async def reschedule_booking(
        self, booking_id: UUID, request: Union[RescheduleBookingRequest, dict[str, Any]]
    ) -> Booking:
        """
        Move a booking to a new window, excluding itself from the conflict check.

        Raises:
            BookingStateError: The booking is completed, cancelled, no-show,
                or already in progress.
            SlotUnavailableError: The new window is taken.
        """
        req = _parse(RescheduleBookingRequest, request)
        self._reject_past(req.new_start_time, "new start time")
        _require_id(booking_id, "booking ID")

        # Provider is not known until the booking is read; re-read under the lock.
        current = await self.get_booking(booking_id)
        async with self._locks.hold(current.artisan_id):
            booking = await self.get_booking(booking_id)
            if not booking.can_be_rescheduled:
                raise BookingStateError(
                    f"cannot reschedule booking in status {booking.status.value}"
                )
            duration = req.new_duration_minutes or booking.duration_minutes
            result = await self.availability.check_availability(
                booking.artisan_id,
                req.new_start_time,
                duration,
                service_id=booking.service_id,
                exclude_booking_id=booking.id,
            )
            if not result.is_available:
                raise SlotUnavailableError(
                    "artisan is not available for the requested time slot", result.conflicts,
                )

            booking.reschedule(req.new_start_time, duration)
            if req.reason:
                booking.metadata["reschedule_reason"] = req.reason
            booking.metadata["reschedule_count"] = int(booking.metadata.get("reschedule_count", 0)) + 1
            booking.updated_at = self._clock()
            await guard_store(self._store.update(booking), "rescheduling booking")

        logger.info("Booking rescheduled: %s to %s", booking.id, booking.start_time.isoformat())
        if req.notify_customer or req.notify_artisan:
            await self._notify("booking_updated", booking, booking.status)
        return booking

    # ------------------------------------------------------------------ #
    # Deletion
    # ------------------------------------------------------------------ #

    @_traced
    async def delete_booking(self, booking_id: UUID) -> None:
        """
        Remove a booking.

        In-progress bookings cannot be deleted. Pending or confirmed
        bookings that have not started are removed outright; anything else
        is soft-deleted so its history survives.
        """
        booking = await self.get_booking(booking_id)
        if booking.status == BookingStatus.IN_PROGRESS:
            raise BookingStateError("cannot delete booking that is in progress")

        now = self._now_like(booking.start_time)
        if booking.can_be_rescheduled and not booking.has_started(now):
            await guard_store(self._store.delete(booking.id), "deleting booking")
            logger.info("Booking deleted: %s", booking.id)
        else:
            await guard_store(self._store.soft_delete(booking.id, self._clock()), "deleting booking")
            logger.info("Booking soft-deleted: %s (%s)", booking.id, booking.status.value)

    # ------------------------------------------------------------------ #
    # Payments
    # ------------------------------------------------------------------ #

    @_traced
    async def record_deposit(
        self, booking_id: UUID, amount: Decimal, payment_intent_id: str = ""
    ) -> Booking:
        """Record a captured deposit. Full payment stays pending."""
        _require_id(booking_id, "booking ID")
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("amount must be positive")
        booking = await self.get_booking(booking_id)
        if amount > booking.total_price:
            raise ValidationError(
                f"deposit {amount} exceeds booking total {booking.total_price}"
            )
        booking.deposit_paid = amount
        if payment_intent_id:
            booking.payment_intent_id = payment_intent_id
        booking.payment_status = PaymentStatus.PENDING
        booking.updated_at = self._clock()
        await guard_store(self._store.update(booking), "recording deposit")
        logger.info("Deposit recorded: %s %s on %s", amount, booking.currency, booking.id)
        return booking

    @_traced
    async def process_refund(self, booking_id: UUID, amount: Decimal, reason: str) -> Booking:
        """
        Refund part of the deposit, capped by the refund policy less
        anything already refunded.

        Raises:
            ValidationError: Non-positive amount, or more than is refundable.
            InfrastructureError: The payment gateway failed, or the refund
                went through but could not be recorded.
        """
        _require_id(booking_id, "booking ID")
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("amount must be positive")
        booking = await self.get_booking(booking_id)
        await self._issue_refund(booking, amount, reason)
        await self._record_refund(booking)
        return booking

    async def _refund_cancelled(self, booking: Booking, reason: str) -> None:
        amount = self.refunds.refundable_amount(booking, self._now_like(booking.start_time))
        if amount <= 0:
            logger.info("No refund due for %s at this notice", booking.id)
            return
        try:
            await self._issue_refund(booking, amount, reason)
        except BookingError as exc:
            logger.error("Failed to process refund for %s: %s", booking.id, exc)
            return
        try:
            await self._record_refund(booking)
        except BookingError as exc:
            logger.warning("Cancelled booking %s kept an unrecorded refund: %s", booking.id, exc)

    async def _issue_refund(self, booking: Booking, amount: Decimal, reason: str) -> None:
        max_refund = self.refunds.refundable_amount(booking, self._now_like(booking.start_time))
        if amount > max_refund:
            raise ValidationError(
                f"refund amount exceeds maximum refundable amount ({max_refund})"
            )
        if self._payments is None:
            raise ValidationError("no payment gateway configured")
        refund_id = await guard_store(
            self._payments.refund(booking, amount, reason), "processing refund"
        )
        booking.refund_id = refund_id
        booking.refunded_amount = to_money(booking.refunded_amount + amount)
        booking.payment_status = PaymentStatus.REFUNDED
        logger.info("Refund processed: %s %s on %s (%s)", amount, booking.currency, booking.id, refund_id)

    async def _record_refund(self, booking: Booking) -> None:
        booking.updated_at = self._clock()
        try:
            await guard_store(self._store.update(booking), "recording refund")
        except BookingError as exc:
            logger.error(
                "Refund %s of %s issued for %s but not recorded: %s",
                booking.refund_id, booking.refunded_amount, booking.id, exc,
            )
            raise

    # ------------------------------------------------------------------ #
    # Recurring series
    # ------------------------------------------------------------------ #

    @_traced
    async def update_recurring_series(
        self,
        parent_booking_id: UUID,
        update: Union[BookingUpdate, dict[str, Any]],
        future_only: bool = True,
    ) -> BatchResult[Booking]:
        """Apply one update to every open booking in a series."""
        upd = _parse(BookingUpdate, update)
        series = await self.get_recurring_series(parent_booking_id)
        result: BatchResult[Booking] = BatchResult()
        for booking in self._open_members(series, future_only):
            await self._run_item(result, booking.id, self.update_booking(booking.id, upd))
        logger.info(
            "Recurring series %s updated: %d ok, %d failed",
            parent_booking_id, len(result.succeeded), len(result.failures),
        )
        return result

    @_traced
    async def cancel_recurring_series(
        self,
        parent_booking_id: UUID,
        reason: str,
        cancelled_by: UUID,
        future_only: bool = True,
    ) -> BatchResult[Booking]:
        """Cancel every open booking in a series."""
        request = _parse(CancelBookingRequest, {"reason": reason, "cancelled_by": cancelled_by})
        series = await self.get_recurring_series(parent_booking_id)
        result: BatchResult[Booking] = BatchResult()
        for booking in self._open_members(series, future_only):
            await self._run_item(result, booking.id, self.cancel_booking(booking.id, request))
        logger.info(
            "Recurring series %s cancelled: %d ok, %d failed",
            parent_booking_id, len(result.succeeded), len(result.failures),
        )
        return result

    def _open_members(self, series: list[Booking], future_only: bool) -> list[Booking]:
        members = [b for b in series if not b.is_terminal]
        if future_only:
            members = [b for b in members if not b.has_started(self._now_like(b.start_time))]
        return members

    # ------------------------------------------------------------------ #
    # Bulk operations
    # ------------------------------------------------------------------ #

    @_traced
    async def bulk_confirm(self, booking_ids: list[UUID]) -> BatchResult[Booking]:
        return await self.bulk_update_status(booking_ids, BookingStatus.CONFIRMED)

    @_traced
    async def bulk_cancel(
        self, booking_ids: list[UUID], reason: str, cancelled_by: UUID
    ) -> BatchResult[Booking]:
        _require_ids(booking_ids)
        request = _parse(CancelBookingRequest, {"reason": reason, "cancelled_by": cancelled_by})
        result: BatchResult[Booking] = BatchResult()
        for booking_id in booking_ids:
            await self._run_item(result, booking_id, self.cancel_booking(booking_id, request))
        logger.info("Bookings bulk cancelled: %d ok, %d failed", len(result.succeeded), len(result.failures))
        return result

    @_traced
    async def bulk_reschedule(
        self, booking_ids: list[UUID], new_start_time: datetime
    ) -> BatchResult[Booking]:
        """
        Move each booking to ``new_start_time``.

        Bookings of the same artisan collide with each other: the first one
        moves and the rest are reported as conflicts.
        """
        _require_ids(booking_ids)
        request = RescheduleBookingRequest(
            new_start_time=new_start_time,
            reason=BULK_RESCHEDULE_REASON,
            notify_customer=True,
            notify_artisan=True,
        )
        result: BatchResult[Booking] = BatchResult()
        for booking_id in booking_ids:
            await self._run_item(result, booking_id, self.reschedule_booking(booking_id, request))
        logger.info("Bookings bulk rescheduled: %d ok, %d failed", len(result.succeeded), len(result.failures))
        return result

    @_traced
    async def bulk_update_status(
        self, booking_ids: list[UUID], status: BookingStatus
    ) -> BatchResult[Booking]:
        _require_ids(booking_ids)
        update = BookingUpdate(status=status)
        result: BatchResult[Booking] = BatchResult()
        for booking_id in booking_ids:
            await self._run_item(result, booking_id, self.update_booking(booking_id, update))
        logger.info(
            "Bookings bulk set to %s: %d ok, %d failed",
            status.value, len(result.succeeded), len(result.failures),
        )
        return result

    @staticmethod
    async def _run_item(
        result: BatchResult[Booking], booking_id: UUID, operation: Awaitable[Booking]
    ) -> None:
        try:
            result.succeeded.append(await operation)
        except BookingError as exc:
            logger.warning("Batch item %s failed (%s): %s", booking_id, exc.kind, exc)
            result.failures.append(ItemFailure(booking_id=booking_id, kind=exc.kind, message=str(exc)))

    # ------------------------------------------------------------------ #
    # Scheduling pass-throughs
    # ------------------------------------------------------------------ #

    async def check_availability(
        self,
        provider_id: UUID,
        date: datetime,
        duration_minutes: int,
        service_id: Optional[UUID] = None,
        exclude_booking_id: Optional[UUID] = None,
    ) -> AvailabilityResult:
        self._check_duration(duration_minutes)
        return await self.availability.check_availability(
            provider_id, date, duration_minutes, service_id, exclude_booking_id
        )

    async def find_conflicts(
        self,
        provider_id: UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[Conflict]:
        return await self.conflicts.find_conflicts(provider_id, start, end, exclude_booking_id)

    async def generate_slots(
        self, provider_id: UUID, date: datetime, duration_minutes: int
    ) -> list[TimeSlot]:
        self._check_duration(duration_minutes)
        return await self.availability.generate_slots(provider_id, date, duration_minutes)

    async def get_available_slots(
        self, provider_id: UUID, date: datetime, duration_minutes: int
    ) -> list[TimeSlot]:
        self._check_duration(duration_minutes)
        return await self.availability.get_available_slots(provider_id, date, duration_minutes)

    async def expand_recurrence(
        self,
        parent: Booking,
        pattern: Union[RecurrencePattern, str],
        end_date: Optional[datetime] = None,
        occurrence_count: Optional[int] = None,
    ) -> list[Booking]:
        return await self.recurrence.expand(parent, pattern, end_date, occurrence_count)

    def validate_transition(self, from_status: BookingStatus, to_status: BookingStatus) -> None:
        validate_transition(from_status, to_status)

    def apply_transition(
        self,
        booking: Booking,
        to_status: BookingStatus,
        context: Optional[TransitionContext] = None,
    ) -> Booking:
        return self.lifecycle.apply_transition(booking, to_status, context)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _now_like(self, moment: datetime) -> datetime:
        """Current time, made naive when compared with a naive ``moment``."""
        now = self._clock()
        if moment.tzinfo is None and now.tzinfo is not None:
            return now.replace(tzinfo=None)
        return now

    def _reject_past(self, moment: datetime, label: str) -> None:
        if moment < self._now_like(moment):
            raise ValidationError(f"{label} cannot be in the past")

    def _check_duration(self, duration_minutes: int) -> None:
        low = self._config.scheduling.min_duration_minutes
        high = self._config.scheduling.max_duration_minutes
        if not low <= duration_minutes <= high:
            raise ValidationError(f"duration must be between {low} and {high} minutes")

    def _record_completion(self, booking: Booking, loyalty_points: int) -> None:
        if self._customers is None:
            return
        self._customers.record_booking(booking.customer_id, booking.total_price, loyalty_points)

    async def _after_status_change(self, booking: Booking, old_status: BookingStatus) -> None:
        if booking.status == old_status:
            return
        await self._notify("booking_updated", booking, old_status)
        if booking.status == BookingStatus.COMPLETED:
            self.lifecycle.run_completion_hook(booking)

    async def _notify(self, event: str, booking: Booking, *args: Any) -> None:
        if self._notifier is None:
            return
        try:
            await guard_store(getattr(self._notifier, event)(booking, *args), f"sending {event}")
        except BookingError as exc:
            logger.error("Failed to send %s notification for %s: %s", event, booking.id, exc)


def _require_ids(booking_ids: list[UUID]) -> None:
    if not booking_ids:
        raise ValidationError("at least one booking ID is required")
