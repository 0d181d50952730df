"""
radio-sync CLI - Entry point

Admin commands (live toggle, mode, catalog and schedule maintenance) write
the shared store directly. ``listen`` runs a local listening session and
``serve`` starts the web API.
"""

import argparse
import sys
import time
from datetime import datetime
from typing import Optional

from loguru import logger

from radio_sync.core import (
    ensure_directories,
    init_database,
    init_postgres_schema,
    is_postgres,
    load_config,
    print_error,
    print_table,
    safe_print,
    setup_logging_from_config,
)
from radio_sync.core.config import Config
from radio_sync.domain.library import add_track, get_active_tracks, get_rotation
from radio_sync.domain.radio import (
    VALID_MODES,
    NotAuthorizedError,
    RadioError,
    RadioSession,
    add_schedule_entry,
    compute_state,
    delete_schedule_entry,
    get_radio_config,
    get_schedule_entries,
    get_upcoming,
    grant_role,
    has_admin_role,
    select_program,
    set_live,
    set_mode,
)


def _format_position(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def _init_store() -> None:
    if is_postgres():
        init_postgres_schema()
    else:
        init_database()


def run_init() -> int:
    ensure_directories()
    _init_store()
    safe_print("✓ Database initialized", "green")
    return 0


def run_now() -> int:
    """Print what's on air right now."""
    config = get_radio_config()
    if not config.is_live:
        safe_print("Radio is offline", "yellow")
        return 0

    tracks = get_active_tracks()
    now = time.time()
    program = select_program(config, tracks, get_schedule_entries(active_only=True), now)
    if program is None:
        safe_print("Radio is live but has nothing to play", "yellow")
        return 0

    track = program.track
    source = "scheduled" if program.from_schedule else f"rotation #{program.track_index + 1}"
    safe_print(
        f"♪ {track.title} - {track.artist or 'Unknown'} "
        f"[{_format_position(program.position_seconds)}] ({source})",
        "bold cyan",
    )

    rotation = get_rotation(tracks)
    state = compute_state(rotation, config.loop_start_epoch, now)
    if state is not None:
        upcoming = get_upcoming(rotation, state)
        if upcoming:
            safe_print("Up next:", "dim")
            for index, next_track in enumerate(upcoming, 1):
                safe_print(f"  {index}. {next_track.title} - {next_track.artist or 'Unknown'}")
    return 0


def run_live(enabled: bool, user_id: Optional[str]) -> int:
    radio_config = set_live(enabled, is_admin=has_admin_role(user_id))
    if radio_config.is_live:
        started = datetime.fromtimestamp(radio_config.loop_start_epoch)
        safe_print(f"✓ Radio is LIVE (loop restarted at {started:%H:%M:%S})", "green")
    else:
        safe_print("✓ Radio is offline", "green")
    return 0


def run_mode(mode: str, user_id: Optional[str]) -> int:
    radio_config = set_mode(mode, is_admin=has_admin_role(user_id))
    safe_print(f"✓ Mode set to {radio_config.mode}", "green")
    return 0


def run_tracks_add(args: argparse.Namespace) -> int:
    track = add_track(
        title=args.title,
        artist=args.artist or "",
        duration_seconds=args.duration,
        audio_url=args.audio_url,
        youtube_url=args.youtube_url,
        sort_order=args.sort_order,
        is_hidden=args.hidden,
        album=args.album,
    )
    safe_print(f"✓ Added track {track.title} ({track.id})", "green")
    return 0


def run_tracks_list() -> int:
    tracks = get_active_tracks()
    if not tracks:
        safe_print("No active tracks", "yellow")
        return 0

    rows = []
    for track in tracks:
        source = "embedded" if track.external_ref else "native"
        if track.is_hidden:
            source += " (exclusive)"
        length = _format_position(track.weight) if track.weight else "-"
        rows.append([str(track.sort_order), track.title, track.artist, length, source, track.id])
    print_table("Active tracks", [">Order", "Title", "Artist", ">Length", "Source", "ID"], rows)
    return 0


def run_schedule_add(args: argparse.Namespace) -> int:
    entry = add_schedule_entry(
        track_id=args.track_id,
        start_time=args.start,
        end_time=args.end,
        day_of_week=args.day,
        priority=args.priority,
    )
    safe_print(f"✓ Added schedule slot {entry.id}", "green")
    return 0


def run_schedule_list() -> int:
    entries = get_schedule_entries()
    if not entries:
        safe_print("No schedule slots", "yellow")
        return 0

    days = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    rows = [
        [
            "Daily" if entry.day_of_week is None else days[entry.day_of_week],
            f"{entry.start_time}-{entry.end_time}",
            entry.track_id,
            str(entry.priority),
            "yes" if entry.is_active else "no",
            entry.id,
        ]
        for entry in entries
    ]
    print_table("Schedule", ["Day", "Time", "Track", ">Priority", "Active", "ID"], rows)
    return 0


def run_schedule_remove(entry_id: str) -> int:
    if not delete_schedule_entry(entry_id):
        print_error(f"Schedule slot not found: {entry_id}")
        return 1
    safe_print("✓ Schedule slot removed", "green")
    return 0


def run_listen(config: Config) -> int:
    """Tune in and keep the local players in sync until Ctrl+C."""
    from radio_sync.domain.playback import EmbeddedPlayerAdapter, MpvAudioPlayer
    from radio_sync.domain.playback.mpv import check_mpv_available
    from radio_sync.domain.playback.mpv_widget import MpvEmbeddedWidget

    if not check_mpv_available(config.player.mpv_path):
        print_error("mpv is not installed or not on PATH")
        return 1

    native = MpvAudioPlayer(config.player, volume=config.radio.volume)
    embedded = EmbeddedPlayerAdapter(
        lambda: MpvEmbeddedWidget(config.player),
        volume=config.radio.volume,
        progress_interval=config.radio.progress_interval_seconds,
        on_error=lambda message: safe_print(f"Embedded player: {message}", "yellow"),
    )
    session = RadioSession(
        native,
        embedded,
        poll_interval=config.radio.poll_interval_seconds,
        seek_delay=config.radio.seek_delay_seconds,
    )

    safe_print("Tuning in... (Ctrl+C to stop)", "cyan")
    last_shown = None
    try:
        with session:
            session.tune_in()
            while True:
                program = session.now_playing
                shown = (program.track.id if program else None, session.state.status)
                if shown != last_shown:
                    last_shown = shown
                    if program is not None:
                        safe_print(
                            f"♪ {program.track.title} - {program.track.artist or 'Unknown'}",
                            "bold cyan",
                        )
                    else:
                        safe_print(f"… {session.state.status.value}", "dim")
                time.sleep(0.5)
    except KeyboardInterrupt:
        safe_print("\nTuned out", "cyan")
    finally:
        native.close()
    return 0


def run_serve(config: Config, host: Optional[str], port: Optional[int]) -> int:
    import uvicorn

    uvicorn.run(
        "web.backend.main:app",
        host=host or config.web.host,
        port=port or config.web.port,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="radio-sync",
        description="radio-sync - Synchronized radio playback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    subparsers.add_parser("init", help="Create the database and seed the radio config")
    subparsers.add_parser("now", help="Show what is on air")
    subparsers.add_parser("listen", help="Tune in on this machine")

    serve_parser = subparsers.add_parser("serve", help="Start the web API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")

    live_parser = subparsers.add_parser("live", help="Turn the broadcast on or off (admin)")
    live_parser.add_argument("state", choices=["on", "off"])
    live_parser.add_argument("--user", required=True, help="Admin user ID")

    mode_parser = subparsers.add_parser("mode", help="Set the programming mode (admin)")
    mode_parser.add_argument("mode", choices=VALID_MODES)
    mode_parser.add_argument("--user", required=True, help="Admin user ID")

    grant_parser = subparsers.add_parser("grant-admin", help="Grant the admin role")
    grant_parser.add_argument("user_id")

    tracks_parser = subparsers.add_parser("tracks", help="Manage the catalog")
    tracks_sub = tracks_parser.add_subparsers(dest="tracks_command", required=True)
    tracks_add = tracks_sub.add_parser("add", help="Add a track")
    tracks_add.add_argument("title")
    tracks_add.add_argument("--artist")
    tracks_add.add_argument("--album")
    tracks_add.add_argument("--duration", type=float, help="Length in seconds")
    tracks_add.add_argument("--audio-url", help="File path or URL for the native player")
    tracks_add.add_argument("--youtube-url", help="YouTube URL for the embedded player")
    tracks_add.add_argument("--sort-order", type=int, default=0)
    tracks_add.add_argument(
        "--hidden", action="store_true", help="Exclusive: only playable from the schedule"
    )
    tracks_sub.add_parser("list", help="List active tracks")

    schedule_parser = subparsers.add_parser("schedule", help="Manage schedule slots")
    schedule_sub = schedule_parser.add_subparsers(dest="schedule_command", required=True)
    schedule_add = schedule_sub.add_parser("add", help="Add a slot")
    schedule_add.add_argument("track_id")
    schedule_add.add_argument("start", help="Start time (HH:MM)")
    schedule_add.add_argument("end", help="End time (HH:MM)")
    schedule_add.add_argument("--day", type=int, help="0 = Sunday .. 6 = Saturday")
    schedule_add.add_argument("--priority", type=int, default=0)
    schedule_sub.add_parser("list", help="List slots")
    schedule_remove = schedule_sub.add_parser("remove", help="Remove a slot")
    schedule_remove.add_argument("entry_id")

    return parser


def dispatch(args: argparse.Namespace, config: Config) -> int:
    if args.subcommand == "init":
        return run_init()
    if args.subcommand == "now":
        return run_now()
    if args.subcommand == "listen":
        return run_listen(config)
    if args.subcommand == "serve":
        return run_serve(config, args.host, args.port)
    if args.subcommand == "live":
        return run_live(args.state == "on", args.user)
    if args.subcommand == "mode":
        return run_mode(args.mode, args.user)
    if args.subcommand == "grant-admin":
        grant_role(args.user_id)
        safe_print(f"✓ {args.user_id} is now an admin", "green")
        return 0
    if args.subcommand == "tracks":
        if args.tracks_command == "add":
            return run_tracks_add(args)
        return run_tracks_list()
    if args.subcommand == "schedule":
        if args.schedule_command == "add":
            return run_schedule_add(args)
        if args.schedule_command == "list":
            return run_schedule_list()
        return run_schedule_remove(args.entry_id)
    return 1


def main() -> None:
    """Main entry point for the radio-sync command."""
    parser = build_parser()
    args = parser.parse_args()
    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    config = load_config()
    setup_logging_from_config(config.logging)

    try:
        sys.exit(dispatch(args, config))
    except NotAuthorizedError as e:
        print_error(f"Not authorized: {e}")
        sys.exit(1)
    except ValueError as e:
        print_error(f"Error: {e}")
        sys.exit(1)
    except RadioError as e:
        logger.error(f"Radio error: {e}")
        print_error(f"Radio unavailable: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
