"""
Shared API dependencies.

Identity is supplied by the upstream identity provider as the
``X-User-Id`` header; this service trusts it and only checks that it is
present.
"""

from fastapi import Header, HTTPException, status


def get_current_user_id(x_user_id: str | None = Header(None, alias="X-User-Id",
                                                          description="Acting user id"), ) -> str:
    """Extract the acting user id from the request headers."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header", )
    return x_user_id.strip()
