"""
Placeholder bearer-token identity.

The token value, minus the "Bearer " scheme and the mock token prefix, is the
user id. ADMIN_USER_ID is the only administrator.
"""

import os
from typing import Optional

from fastapi import Header

from errors import Forbidden

ADMIN_USER_ID = os.getenv("ADMIN_USER_ID", "admin-1")
TOKEN_PREFIX = os.getenv("TOKEN_PREFIX", "mock-token-")


def user_id_from_authorization(authorization: Optional[str], default: str = "") -> str:
    if not authorization:
        return default
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        return default
    return token.replace(TOKEN_PREFIX, "", 1)


def is_admin(user_id: str) -> bool:
    return user_id == ADMIN_USER_ID


def require_admin(user_id: str, message: str) -> None:
    if not is_admin(user_id):
        raise Forbidden(message)


# --- FastAPI dependencies ---

def current_user(authorization: Optional[str] = Header(None)) -> str:
    """User id from the Authorization header; empty string when absent."""
    return user_id_from_authorization(authorization)


def submitting_user(authorization: Optional[str] = Header(None)) -> str:
    """Like current_user, but anonymous submissions are attributed to the admin."""
    return user_id_from_authorization(authorization, default=ADMIN_USER_ID)
