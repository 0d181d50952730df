"""
Radio domain module.

Provides the deterministic broadcast clock, schedule slots, the admin live
toggle and the per-listener session controller that keeps local players in
sync with the shared clock.
"""

from .clock import compute_state, get_upcoming, total_loop_duration
from .exceptions import NotAuthorizedError, RadioError, RadioUnavailableError
from .models import (
    MODE_HYBRID,
    MODE_ROTATION,
    MODE_SCHEDULED,
    VALID_MODES,
    BroadcastState,
    ExclusiveSlot,
    Program,
    RadioConfig,
    ScheduleEntry,
)
from .programming import select_program
from .schedule import (
    add_schedule_entry,
    delete_schedule_entry,
    get_schedule_entries,
    get_next_exclusive,
    get_schedule_entry,
    get_scheduled_track,
    time_in_slot,
    update_schedule_entry,
)
from .session import Backend, RadioSession, SessionState, SessionStatus
from .station import (
    ADMIN_ROLE,
    get_radio_config,
    grant_role,
    has_admin_role,
    set_live,
    set_mode,
)

__all__ = [
    "compute_state",
    "get_upcoming",
    "total_loop_duration",
    "NotAuthorizedError",
    "RadioError",
    "RadioUnavailableError",
    "MODE_HYBRID",
    "MODE_ROTATION",
    "MODE_SCHEDULED",
    "VALID_MODES",
    "BroadcastState",
    "ExclusiveSlot",
    "Program",
    "RadioConfig",
    "ScheduleEntry",
    "select_program",
    "add_schedule_entry",
    "delete_schedule_entry",
    "get_next_exclusive",
    "get_schedule_entries",
    "get_schedule_entry",
    "get_scheduled_track",
    "time_in_slot",
    "update_schedule_entry",
    "Backend",
    "RadioSession",
    "SessionState",
    "SessionStatus",
    "ADMIN_ROLE",
    "get_radio_config",
    "grant_role",
    "has_admin_role",
    "set_live",
    "set_mode",
]
