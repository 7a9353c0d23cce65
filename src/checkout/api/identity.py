"""Request identity resolution.

Authentication happens upstream; the gateway in front of the service
forwards the signed-in shopper as ``X-User-Id`` / ``X-User-Email``. Guest
shoppers are recognised by their browser session (``X-Session-Id``).
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException

from checkout.session.ports import Identity


def optional_identity(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
) -> Identity | None:
    if not x_user_id or not x_user_email:
        return None
    return Identity(user_id=x_user_id, email=x_user_email)


@dataclass(frozen=True)
class CartOwner:
    user_id: str | None = None
    session_id: str | None = None


def cart_owner(
    x_user_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
) -> CartOwner:
    if not x_user_id and not x_session_id:
        raise HTTPException(status_code=401, detail="Sign in or provide a session id")
    return CartOwner(user_id=x_user_id or None, session_id=x_session_id or None)
