from datetime import datetime

from pydantic import BaseModel
from typing import Optional


class TrackResponse(BaseModel):
    id: str
    title: str
    artist: str
    album: Optional[str] = None
    duration_seconds: Optional[float] = None
    audio_url: Optional[str] = None
    youtube_url: Optional[str] = None
    external_ref: Optional[str] = None  # Embedded-player video ID
    sort_order: int
    is_exclusive: bool = False  # Hidden track; metadata withheld from non-admins


class RadioConfigResponse(BaseModel):
    is_live: bool
    loop_start_epoch: Optional[int]
    mode: str


class NowPlayingResponse(BaseModel):
    track: TrackResponse
    position_seconds: float
    track_index: Optional[int] = None  # None for scheduled tracks
    from_schedule: bool
    loop_start_epoch: Optional[int]
    server_time: float  # Lets clients estimate their clock offset
    upcoming: list[TrackResponse]


class ExclusiveSlotResponse(BaseModel):
    track: TrackResponse
    schedule_entry_id: str
    day_of_week: Optional[int] = None
    start_time: str
    end_time: str
    starts_at: datetime
    starts_in_seconds: float  # 0 while live
    is_live: bool


class LiveRequest(BaseModel):
    is_live: bool


class ModeRequest(BaseModel):
    mode: str


class ScheduleEntryResponse(BaseModel):
    id: str
    track_id: str
    day_of_week: Optional[int] = None
    start_time: str
    end_time: str
    priority: int
    is_active: bool


class CreateScheduleRequest(BaseModel):
    track_id: str
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    day_of_week: Optional[int] = None  # 0 = Sunday, None = every day
    priority: int = 0


class UpdateScheduleRequest(BaseModel):
    track_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    day_of_week: Optional[int] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
