# auth/dependencies.py

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from auth.jwt_handler import verify_token
from core.config import settings
from core.errors import PermissionDenied, Unauthenticated

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Identity(BaseModel):
    """The caller behind a verified bearer token."""
    user_id: str
    user_type: str = "user"


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Resolve `Authorization: Bearer <token>` into an Identity, or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing or invalid authorization header")

    payload = verify_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise Unauthenticated("Invalid or expired token")

    return Identity(user_id=str(payload["sub"]), user_type=payload.get("user_type") or "user")


def is_admin(identity: Identity) -> bool:
    """Whether the token carries the admin role claim, regardless of REQUIRE_ADMIN_ROLE."""
    return identity.user_type == "admin"


async def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    """
    Identity for the administrative surface. The role claim is only enforced
    when REQUIRE_ADMIN_ROLE is switched on; otherwise any verified caller passes.
    """
    if settings.REQUIRE_ADMIN_ROLE and identity.user_type != "admin":
        logger.warning(f"Non-admin caller {identity.user_id} rejected from admin route")
        raise PermissionDenied()
    return identity
