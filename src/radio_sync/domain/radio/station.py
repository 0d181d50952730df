"""
Broadcast config and the admin live toggle.

The radio_config row is the only state listeners share. Going live stamps a
fresh loop-start epoch, which every listening session picks up on its next
poll and snaps to.
"""

import math
import time
from typing import Optional

from loguru import logger

from radio_sync.core.database import DEFAULT_CONFIG_ID
from radio_sync.core.db_adapter import get_radio_db_connection

from .exceptions import NotAuthorizedError, RadioUnavailableError
from .models import VALID_MODES, RadioConfig

ADMIN_ROLE = "admin"


def get_radio_config() -> RadioConfig:
    """Fetch the singleton broadcast config.

    Raises:
        RadioUnavailableError: If the store can't be read or the row is missing
    """
    try:
        with get_radio_db_connection() as conn:
            cursor = conn.execute(
                "SELECT is_live, loop_start_epoch, mode FROM radio_config WHERE id = ?",
                (DEFAULT_CONFIG_ID,),
            )
            row = cursor.fetchone()
    except Exception as e:
        raise RadioUnavailableError(f"Could not read radio config: {e}") from e

    if row is None:
        raise RadioUnavailableError("Radio config has not been initialized")

    return RadioConfig(
        is_live=bool(row["is_live"]),
        loop_start_epoch=row["loop_start_epoch"],
        mode=row["mode"],
    )


def set_live(
    is_live: bool,
    is_admin: bool,
    now: Optional[float] = None,
) -> RadioConfig:
    """Turn the broadcast on or off.

    Going live writes ``is_live`` and a new ``loop_start_epoch`` in a single
    statement: a hard reset of the rotation to track 0, offset 0 for every
    listener. Going offline only clears ``is_live`` and keeps the epoch.

    Args:
        is_live: Desired state
        is_admin: Whether the caller holds the admin capability
        now: Unix timestamp to stamp (defaults to the current time)

    Returns:
        The config after the write

    Raises:
        NotAuthorizedError: If the caller is not an admin
        RadioUnavailableError: If the config row doesn't exist
    """
    if not is_admin:
        raise NotAuthorizedError("Only admins can change the live state")

    with get_radio_db_connection() as conn:
        if is_live:
            epoch = math.floor(time.time() if now is None else now)
            cursor = conn.execute(
                """
                UPDATE radio_config
                SET is_live = ?, loop_start_epoch = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (True, epoch, DEFAULT_CONFIG_ID),
            )
        else:
            cursor = conn.execute(
                """
                UPDATE radio_config
                SET is_live = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (False, DEFAULT_CONFIG_ID),
            )
        conn.commit()
        if cursor.rowcount == 0:
            raise RadioUnavailableError("Radio config has not been initialized")

    config = get_radio_config()
    if is_live:
        logger.info(f"Radio is LIVE (loop start epoch {config.loop_start_epoch})")
    else:
        logger.info("Radio stopped")
    return config


def set_mode(mode: str, is_admin: bool) -> RadioConfig:
    """Change the programming mode (rotation, scheduled or hybrid).

    Raises:
        NotAuthorizedError: If the caller is not an admin
        ValueError: If the mode is unknown
    """
    if not is_admin:
        raise NotAuthorizedError("Only admins can change the radio mode")
    if mode not in VALID_MODES:
        raise ValueError(f"Invalid mode: {mode}. Must be one of {', '.join(VALID_MODES)}")

    with get_radio_db_connection() as conn:
        conn.execute(
            "UPDATE radio_config SET mode = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (mode, DEFAULT_CONFIG_ID),
        )
        conn.commit()

    logger.info(f"Radio mode set to {mode}")
    return get_radio_config()


def has_admin_role(user_id: Optional[str]) -> bool:
    """Check whether an identity holds the admin role."""
    if not user_id:
        return False
    with get_radio_db_connection() as conn:
        cursor = conn.execute(
            "SELECT 1 FROM user_roles WHERE user_id = ? AND role = ?",
            (user_id, ADMIN_ROLE),
        )
        return cursor.fetchone() is not None


def grant_role(user_id: str, role: str = ADMIN_ROLE) -> None:
    """Grant a role to an identity (idempotent)."""
    with get_radio_db_connection() as conn:
        conn.execute(
            """
            INSERT INTO user_roles (user_id, role) VALUES (?, ?)
            ON CONFLICT (user_id, role) DO NOTHING
            """,
            (user_id, role),
        )
        conn.commit()
    logger.info(f"Granted role '{role}' to {user_id}")
