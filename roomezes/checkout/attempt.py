"""
Machine à états d'une tentative de checkout.

Idle -> IntentRequested -> AwaitingPayment -> Verifying -> Persisting -> Completed
Toute étape non terminale peut sortir en Failed(reason). Une tentative annulée
revient à Idle et est abandonnée; une tentative Failed ne reprend jamais.
"""
import logging
import uuid
from enum import Enum
from typing import Dict, FrozenSet, Optional

from .errors import InvalidTransition

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    IDLE = "Idle"
    INTENT_REQUESTED = "IntentRequested"
    AWAITING_PAYMENT = "AwaitingPayment"
    VERIFYING = "Verifying"
    PERSISTING = "Persisting"
    COMPLETED = "Completed"
    FAILED = "Failed"


TERMINAL_STATES = frozenset({CheckoutState.COMPLETED, CheckoutState.FAILED})

_TRANSITIONS: Dict[CheckoutState, FrozenSet[CheckoutState]] = {
    CheckoutState.IDLE: frozenset({CheckoutState.INTENT_REQUESTED}),
    CheckoutState.INTENT_REQUESTED: frozenset({CheckoutState.AWAITING_PAYMENT}),
    # Annulation par l'utilisateur: retour à Idle
    CheckoutState.AWAITING_PAYMENT: frozenset({CheckoutState.VERIFYING, CheckoutState.IDLE}),
    CheckoutState.VERIFYING: frozenset({CheckoutState.PERSISTING}),
    CheckoutState.PERSISTING: frozenset({CheckoutState.COMPLETED}),
    CheckoutState.COMPLETED: frozenset(),
    CheckoutState.FAILED: frozenset(),
}


class CheckoutAttempt:
    """Une tentative = un identifiant, un état courant et, en cas d'échec, la raison."""

    def __init__(self, attempt_id: Optional[str] = None):
        self.attempt_id = attempt_id or uuid.uuid4().hex
        self.state = CheckoutState.IDLE
        self.failure_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: CheckoutState) -> None:
        if target == CheckoutState.FAILED:
            raise InvalidTransition("use fail() to enter the Failed state")
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        logger.debug("checkout.attempt %s %s -> %s", self.attempt_id, self.state.value, target.value)
        self.state = target

    def fail(self, reason: str) -> None:
        if self.is_terminal:
            raise InvalidTransition(f"{self.state.value} -> Failed")
        logger.debug("checkout.attempt %s %s -> Failed (%s)", self.attempt_id, self.state.value, reason)
        self.state = CheckoutState.FAILED
        self.failure_reason = reason

    def __repr__(self) -> str:
        return f"CheckoutAttempt({self.attempt_id!r}, state={self.state.value})"
