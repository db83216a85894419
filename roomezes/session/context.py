"""
Contexte de session explicite.

Remplace la lecture dispersée d'un état d'authentification ambiant: chaque
composant qui a besoin de l'identité reçoit un SessionContext, et les
changements (connexion, rafraîchissement du token, déconnexion) passent par
un unique point d'abonnement.
"""
import logging
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
SIGNED_OUT = "SIGNED_OUT"

DEFAULT_ROLE = "student"
VENDOR_ROLES = ("vendor", "admin")


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None
    role: str = DEFAULT_ROLE
    access_token: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def is_vendor(self) -> bool:
        return self.role in VENDOR_ROLES


SessionListener = Callable[[str, Optional[Identity]], None]


class SessionContext:
    """
    Porte l'identité courante d'une session utilisateur.
    - subscribe(listener) retourne une fonction de désabonnement.
    - Un listener en erreur est journalisé et n'empêche pas les suivants.
    """

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: List[SessionListener] = []

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def require_identity(self) -> Identity:
        if self._identity is None:
            raise PermissionError("Non authentifié")
        return self._identity

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def sign_in(self, identity: Identity) -> None:
        self._identity = identity
        self._publish(SIGNED_IN)

    def refresh(self, access_token: str) -> None:
        # Rafraîchir une session anonyme n'a pas de sens
        if self._identity is None:
            return
        self._identity = self._identity.model_copy(update={"access_token": access_token})
        self._publish(TOKEN_REFRESHED)

    def sign_out(self) -> None:
        self._identity = None
        self._publish(SIGNED_OUT)

    def _publish(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self._identity)
            except Exception:
                logger.exception("session.listener failed event=%s", event)


def identity_from_user(user: dict) -> Identity:
    """Construit une Identity depuis le dict utilisateur normalisé (voir utils.security)."""
    metadata = user.get("metadata") or {}
    return Identity(
        user_id=str(user.get("id") or ""),
        email=user.get("email"),
        role=str(user.get("role") or DEFAULT_ROLE),
        access_token=user.get("token"),
        display_name=metadata.get("full_name") or metadata.get("name"),
    )
