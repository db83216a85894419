from .attempt import CheckoutAttempt, CheckoutState
from .errors import (
    CheckoutError,
    GatewayUnavailable,
    InvalidAmount,
    InvalidTransition,
    NotificationFailed,
    OrderPersistFailed,
    PaymentFailed,
    PaymentVerificationFailed,
    UserCancelledPayment,
)

__all__ = [
    "CheckoutAttempt",
    "CheckoutState",
    "CheckoutError",
    "GatewayUnavailable",
    "InvalidAmount",
    "InvalidTransition",
    "NotificationFailed",
    "OrderPersistFailed",
    "PaymentFailed",
    "PaymentVerificationFailed",
    "UserCancelledPayment",
]
