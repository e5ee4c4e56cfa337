"""Admin-secret authentication for the driver endpoints."""

import secrets

from fastapi import Header, HTTPException

import config


def require_admin(x_admin_secret: str = Header(..., alias="X-Admin-Secret")) -> None:
    """FastAPI dependency: reject requests without the server's admin secret.

    Usage:
        @router.post("/endpoint", dependencies=[Depends(require_admin)])

    Raises:
        HTTPException 403: If the header doesn't match config.ADMIN_SECRET.
    """
    if not secrets.compare_digest(x_admin_secret, config.ADMIN_SECRET):
        raise HTTPException(status_code=403, detail="Invalid admin secret")
