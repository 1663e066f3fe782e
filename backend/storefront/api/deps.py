from typing import Optional

from fastapi import Header, HTTPException


def current_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    """
    The auth layer in front of this service validates the session and forwards
    the user id in X-User-Id. Nothing here checks credentials.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Missing user")
    try:
        uid = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user")
    if uid < 1:
        raise HTTPException(status_code=401, detail="Invalid user")
    return uid
