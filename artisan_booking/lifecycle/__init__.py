from artisan_booking.lifecycle.pricing import (
    RefundPolicy,
    is_cancellable,
    price_addons,
    reprice_addons,
)
from artisan_booking.lifecycle.state_machine import (
    BookingLifecycle,
    TransitionContext,
    allowed_transitions,
    can_transition,
    validate_transition,
)

__all__ = [
    "BookingLifecycle",
    "TransitionContext",
    "allowed_transitions",
    "can_transition",
    "validate_transition",
    "RefundPolicy",
    "is_cancellable",
    "price_addons",
    "reprice_addons",
]
