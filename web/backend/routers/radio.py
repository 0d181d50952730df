"""
Radio API endpoints.

Read endpoints let any client see the broadcast config and what's on air;
listening clients do the clock math themselves from ``/config`` and
``/tracks``. Writes (live toggle, mode, schedule) need the admin role.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from radio_sync.domain.library import Track, get_active_tracks, get_rotation
from radio_sync.domain.radio import (
    ScheduleEntry,
    add_schedule_entry,
    compute_state,
    delete_schedule_entry,
    get_next_exclusive,
    get_radio_config,
    get_schedule_entries,
    get_schedule_entry,
    get_upcoming,
    select_program,
    set_live,
    set_mode,
    update_schedule_entry,
)
from web.backend.deps import get_is_admin, get_now, require_admin
from web.backend.schemas import (
    CreateScheduleRequest,
    ExclusiveSlotResponse,
    LiveRequest,
    ModeRequest,
    NowPlayingResponse,
    RadioConfigResponse,
    ScheduleEntryResponse,
    TrackResponse,
    UpdateScheduleRequest,
)

router = APIRouter(prefix="/radio", tags=["radio"])


# === Helper Functions ===


def _track_to_response(track: Track, is_admin: bool = True) -> TrackResponse:
    """Convert Track NamedTuple to response model.

    Hidden tracks are exclusives: non-admins only learn that one is on air.
    """
    if track.is_hidden and not is_admin:
        return TrackResponse(
            id=track.id,
            title="Exclusive track",
            artist="",
            duration_seconds=track.duration_seconds,
            sort_order=track.sort_order,
            is_exclusive=True,
        )
    return TrackResponse(
        id=track.id,
        title=track.title,
        artist=track.artist,
        album=track.album,
        duration_seconds=track.duration_seconds,
        audio_url=track.audio_url,
        youtube_url=track.youtube_url,
        external_ref=track.external_ref,
        sort_order=track.sort_order,
        is_exclusive=track.is_hidden,
    )


def _schedule_entry_to_response(entry: ScheduleEntry) -> ScheduleEntryResponse:
    """Convert ScheduleEntry dataclass to response model."""
    return ScheduleEntryResponse(
        id=entry.id,
        track_id=entry.track_id,
        day_of_week=entry.day_of_week,
        start_time=entry.start_time,
        end_time=entry.end_time,
        priority=entry.priority,
        is_active=entry.is_active,
    )


def _config_response() -> RadioConfigResponse:
    config = get_radio_config()
    return RadioConfigResponse(
        is_live=config.is_live,
        loop_start_epoch=config.loop_start_epoch,
        mode=config.mode,
    )


# === Broadcast ===


@router.get("/config", response_model=RadioConfigResponse)
def read_config() -> RadioConfigResponse:
    """Get the shared broadcast config."""
    return _config_response()


@router.get("/now-playing", response_model=NowPlayingResponse)
def get_now_playing(
    now: float = Depends(get_now),
    is_admin: bool = Depends(get_is_admin),
) -> NowPlayingResponse:
    """Get what's on air, computed from the broadcast clock."""
    config = get_radio_config()
    if not config.is_live:
        raise HTTPException(status_code=404, detail="Radio is offline")

    tracks = get_active_tracks()
    program = select_program(config, tracks, get_schedule_entries(active_only=True), now)
    if program is None:
        raise HTTPException(status_code=404, detail="Nothing playing")

    rotation = get_rotation(tracks)
    state = compute_state(rotation, config.loop_start_epoch, now)
    upcoming = get_upcoming(rotation, state) if state else []

    return NowPlayingResponse(
        track=_track_to_response(program.track, is_admin),
        position_seconds=program.position_seconds,
        track_index=program.track_index,
        from_schedule=program.from_schedule,
        loop_start_epoch=config.loop_start_epoch,
        server_time=now,
        upcoming=[_track_to_response(t) for t in upcoming],
    )


@router.get("/next-exclusive", response_model=ExclusiveSlotResponse)
def read_next_exclusive(
    now: float = Depends(get_now),
    is_admin: bool = Depends(get_is_admin),
) -> ExclusiveSlotResponse:
    """Get the exclusive slot on air now, or the next one with a countdown."""
    slot = get_next_exclusive(
        get_schedule_entries(active_only=True),
        get_active_tracks(),
        datetime.fromtimestamp(now),
    )
    if slot is None:
        raise HTTPException(status_code=404, detail="No exclusive scheduled")

    return ExclusiveSlotResponse(
        track=_track_to_response(slot.track, is_admin),
        schedule_entry_id=slot.entry.id,
        day_of_week=slot.entry.day_of_week,
        start_time=slot.entry.start_time,
        end_time=slot.entry.end_time,
        starts_at=slot.starts_at,
        starts_in_seconds=slot.starts_in_seconds,
        is_live=slot.is_live,
    )


@router.get("/tracks", response_model=list[TrackResponse])
def list_rotation() -> list[TrackResponse]:
    """Get the rotation in broadcast order."""
    return [_track_to_response(t) for t in get_rotation(get_active_tracks())]


@router.post("/live", response_model=RadioConfigResponse)
def toggle_live(
    req: LiveRequest,
    is_admin: bool = Depends(get_is_admin),
    now: float = Depends(get_now),
) -> RadioConfigResponse:
    """Go live (restarting the loop for everyone) or go offline."""
    config = set_live(req.is_live, is_admin=is_admin, now=now)
    return RadioConfigResponse(
        is_live=config.is_live,
        loop_start_epoch=config.loop_start_epoch,
        mode=config.mode,
    )


@router.put("/mode", response_model=RadioConfigResponse)
def change_mode(
    req: ModeRequest, is_admin: bool = Depends(get_is_admin)
) -> RadioConfigResponse:
    """Switch between rotation, scheduled and hybrid programming."""
    try:
        set_mode(req.mode, is_admin=is_admin)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _config_response()


# === Schedule CRUD ===


@router.get("/schedule", response_model=list[ScheduleEntryResponse])
def list_schedule() -> list[ScheduleEntryResponse]:
    """Get all schedule slots."""
    return [_schedule_entry_to_response(e) for e in get_schedule_entries()]


@router.post(
    "/schedule",
    response_model=ScheduleEntryResponse,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def create_schedule_entry(req: CreateScheduleRequest) -> ScheduleEntryResponse:
    """Add a schedule slot."""
    try:
        entry = add_schedule_entry(
            track_id=req.track_id,
            start_time=req.start_time,
            end_time=req.end_time,
            day_of_week=req.day_of_week,
            priority=req.priority,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _schedule_entry_to_response(entry)


@router.put(
    "/schedule/{entry_id}",
    response_model=ScheduleEntryResponse,
    dependencies=[Depends(require_admin)],
)
def update_schedule(entry_id: str, req: UpdateScheduleRequest) -> ScheduleEntryResponse:
    """Update a schedule slot."""
    # An explicit null day_of_week means "every day"; other nulls mean "unchanged"
    updates = {
        k: v
        for k, v in req.model_dump(exclude_unset=True).items()
        if v is not None or k == "day_of_week"
    }

    try:
        if not update_schedule_entry(entry_id, **updates):
            raise HTTPException(status_code=404, detail="Schedule entry not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    entry = get_schedule_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Schedule entry not found")
    return _schedule_entry_to_response(entry)


@router.delete("/schedule/{entry_id}", dependencies=[Depends(require_admin)])
def delete_schedule(entry_id: str) -> dict[str, bool]:
    """Delete a schedule slot."""
    if not delete_schedule_entry(entry_id):
        raise HTTPException(status_code=404, detail="Schedule entry not found")
    logger.info(f"Schedule entry {entry_id} deleted via API")
    return {"ok": True}
