"""
MPV process management and JSON IPC.

Functional helpers shared by the native audio player and the mpv-backed
embedded widget. Each player owns its own mpv process and socket.
"""

import json
import os
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, NamedTuple, Optional

from loguru import logger

from radio_sync.core.config import PlayerConfig


class MpvHandle(NamedTuple):
    """A running mpv process and its IPC socket."""

    socket_path: str
    process: subprocess.Popen


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _socket_path_for(config: PlayerConfig, name: str) -> str:
    if config.mpv_socket_path:
        return f"{config.mpv_socket_path}-{name}"
    return str(Path(tempfile.gettempdir()) / f"radio-sync-{name}-{os.getpid()}")


def start_mpv(config: PlayerConfig, name: str, volume: int = 100) -> Optional[MpvHandle]:
    """Start an idle MPV with JSON IPC.

    Args:
        config: Player configuration
        name: Instance name, used in the socket path
        volume: Initial volume (0-100)

    Returns:
        MpvHandle, or None if mpv could not be started
    """
    socket_path = _socket_path_for(config, name)
    logger.info(f"Starting MPV ({name}) with socket: {socket_path}")

    try:
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            config.mpv_path,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            f"--volume={max(0, min(100, volume))}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        # Wait for socket to be created
        started = time.time()
        while not os.path.exists(socket_path):
            if time.time() - started > config.startup_timeout_seconds:
                logger.error(
                    f"MPV socket creation timeout after {config.startup_timeout_seconds}s"
                )
                process.kill()
                return None
            time.sleep(0.1)

        if send_mpv_command(socket_path, {"command": ["get_property", "idle-active"]}):
            logger.info(f"MPV ({name}) started successfully")
            return MpvHandle(socket_path=socket_path, process=process)

        logger.error("MPV socket connection test failed")
        process.kill()
        return None

    except (subprocess.SubprocessError, OSError) as e:
        logger.error(f"Failed to start MPV: {e}")
        return None


def stop_mpv(handle: Optional[MpvHandle]) -> None:
    """Stop MPV process and cleanup."""
    if handle is None:
        return

    try:
        handle.process.kill()
        handle.process.wait(timeout=2.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"MPV already gone during cleanup: {e}")

    if os.path.exists(handle.socket_path):
        try:
            os.unlink(handle.socket_path)
        except OSError as e:
            logger.debug(f"Could not remove MPV socket: {e}")


def is_mpv_running(handle: Optional[MpvHandle]) -> bool:
    """Check if the MPV process is alive and its socket exists."""
    if handle is None:
        return False
    if handle.process.poll() is not None:
        return False
    return os.path.exists(handle.socket_path)


def _ipc_request(socket_path: Optional[str], payload: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC request and return the decoded response."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)
            sock.sendall((json.dumps(payload) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8").strip()
    except (socket.error, OSError):
        return None

    # mpv may interleave event lines; the reply is the line with "error"
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data:
            return data
    return {} if not response else None


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    data = _ipc_request(socket_path, command)
    if data is None:
        return False
    return data.get("error", "success") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    data = _ipc_request(socket_path, {"command": ["get_property", property_name]})
    if data and data.get("error") == "success":
        return data.get("data")
    return None


def set_mpv_property(socket_path: Optional[str], property_name: str, value: Any) -> bool:
    """Set a property value on MPV."""
    return send_mpv_command(
        socket_path, {"command": ["set_property", property_name, value]}
    )
