import time
from typing import Optional

from fastapi import Depends, Header, HTTPException

from radio_sync.core.config import Config, load_config
from radio_sync.domain.radio import has_admin_role


def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


def get_now() -> float:
    """FastAPI dependency for the current Unix time."""
    return time.time()


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Caller identity, as asserted by the auth proxy in front of the API."""
    return x_user_id


def get_is_admin(user_id: Optional[str] = Depends(get_user_id)) -> bool:
    return has_admin_role(user_id)


def require_admin(is_admin: bool = Depends(get_is_admin)) -> None:
    if not is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
