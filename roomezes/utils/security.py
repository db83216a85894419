from fastapi import Request, HTTPException, Depends
from fastapi.responses import Response
from typing import Optional, Dict, Any
from roomezes.config import COOKIE_SECURE
from roomezes.session.context import SessionContext, identity_from_user, DEFAULT_ROLE, VENDOR_ROLES

COOKIE_NAME = "sb_access"

def determine_role(metadata: Dict[str, Any] | None) -> str:
    """
    Rôle applicatif depuis user_metadata.role.
    - vendor: gérant de cantine/blanchisserie/imprimerie
    - admin: administration de la plateforme
    - student sinon
    """
    role_lower = str((metadata or {}).get("role", "")).lower()
    if role_lower in ("admin", "vendor"):
        return role_lower
    # Ancien libellé côté front pour les gérants
    if role_lower in ("owner", "service_provider"):
        return "vendor"
    return DEFAULT_ROLE

def set_session_cookie(response: Response, access_token: str):
    response.set_cookie(
        key=COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="Lax",
        max_age=60 * 60,
        path="/",
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(COOKIE_NAME, path="/")

def _token_from_request(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token

def get_current_user(request: Request) -> Dict[str, Any]:
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        from roomezes.session.repository import get_user_from_access_token
        raw = get_user_from_access_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")

    if not raw.get("id"):
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    metadata = raw.get("user_metadata") or {}
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": metadata,
        "role": determine_role(metadata),
        "token": token,
    }

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user

def require_vendor(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") not in VENDOR_ROLES:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user

def get_session_context(user: Dict[str, Any] = Depends(require_user)) -> SessionContext:
    """Un SessionContext par requête, alimenté par l'utilisateur authentifié."""
    return SessionContext(identity_from_user(user))
