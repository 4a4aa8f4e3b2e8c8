from __future__ import annotations

import logging
from typing import Annotated, Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from .models import ROLE_VENDOR, ROLE_VETERINARIAN
from .security import InvalidTokenError, TokenPayload, decode_access_token

logger = logging.getLogger(__name__)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
) -> TokenPayload:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided, authorization denied.",
        )

    # "Bearer <token>"
    parts = authorization.split(" ")
    token = parts[1].strip() if len(parts) > 1 else ""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Malformed token."
        )

    try:
        return decode_access_token(token)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is not valid."
        ) from exc


CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]


def require_roles(*allowed_roles: str) -> Callable[..., TokenPayload]:
    """Dependency factory admitting only callers whose role is in ``allowed_roles``."""

    def _check(user: CurrentUser) -> TokenPayload:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: You do not have the required permissions.",
            )
        return user

    return _check


VendorUser = Annotated[TokenPayload, Depends(require_roles(ROLE_VENDOR))]
VeterinarianUser = Annotated[TokenPayload, Depends(require_roles(ROLE_VETERINARIAN))]
