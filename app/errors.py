"""Typed service errors.

Each error carries the HTTP status the API layer renders it with and a
stable ``code`` clients can branch on. Validation and lifecycle errors are
raised before any write; ``ConcurrencyConflict`` is the only error raised
once a transaction has started writing, and the whole transaction is rolled
back before it propagates.
"""

from typing import Any


class ServiceError(Exception):
    """Base class for errors reported to the caller"""

    status_code = 400
    code = "service_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


# Placement validation

class OwnerRequired(ServiceError):
    status_code = 422
    code = "owner_required"


class UserNotFound(ServiceError):
    status_code = 404
    code = "user_not_found"


class DishNotFound(ServiceError):
    status_code = 404
    code = "dish_not_found"


class DishUnavailable(ServiceError):
    status_code = 409
    code = "dish_unavailable"


class InsufficientStock(ServiceError):
    status_code = 409
    code = "insufficient_stock"


class VariantNotFound(ServiceError):
    status_code = 404
    code = "variant_not_found"


class PromoCodeInvalid(ServiceError):
    status_code = 400
    code = "promo_code_invalid"


class PromoCodeExpired(PromoCodeInvalid):
    code = "promo_code_expired"


class PromoCodeUsageLimitExceeded(PromoCodeInvalid):
    status_code = 409
    code = "promo_code_usage_limit_exceeded"


class PromoCodeMinimumNotMet(PromoCodeInvalid):
    code = "promo_code_minimum_not_met"


class NoAvailableSlot(ServiceError):
    status_code = 409
    code = "no_available_slot"


class SlotFullyBooked(ServiceError):
    status_code = 409
    code = "slot_fully_booked"


# Lifecycle

class OrderNotFound(ServiceError):
    status_code = 404
    code = "order_not_found"


class InvalidTransition(ServiceError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Invalid status transition from {current} to {requested}",
            current=current,
            requested=requested,
        )


class AlreadyCancelled(ServiceError):
    status_code = 409
    code = "already_cancelled"


class AlreadyPickedUp(ServiceError):
    status_code = 409
    code = "already_picked_up"


# Catalog, scheduling and promotion management

class InvalidTimeRange(ServiceError):
    status_code = 422
    code = "invalid_time_range"


class TimeSlotOverlap(ServiceError):
    status_code = 409
    code = "time_slot_overlap"


class InvalidPromoDefinition(ServiceError):
    status_code = 422
    code = "invalid_promo_definition"


class PromoCodeExists(ServiceError):
    status_code = 409
    code = "promo_code_exists"


class InvalidBusinessSetting(ServiceError):
    status_code = 422
    code = "invalid_business_setting"


# Payments

class PaymentNotFound(ServiceError):
    status_code = 404
    code = "payment_not_found"


class PaymentStateError(ServiceError):
    status_code = 409
    code = "payment_state_error"


# Infrastructure

class ConcurrencyConflict(ServiceError):
    """A concurrent transaction changed a row this one depended on.

    Nothing was persisted; the caller may retry the whole operation.
    """

    status_code = 503
    code = "concurrency_conflict"
