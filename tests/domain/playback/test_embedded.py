"""Tests for the embedded player adapter."""

from unittest.mock import MagicMock

import pytest

from radio_sync.domain.playback.embedded import (
    EmbeddedPlayerAdapter,
    UnmutePhase,
    WidgetEvent,
    WidgetState,
)
from tests.fakes import FakeWidget


@pytest.fixture
def widget() -> FakeWidget:
    return FakeWidget(auto_play=False)


@pytest.fixture
def adapter(widget: FakeWidget):
    adapter = EmbeddedPlayerAdapter(lambda: widget, volume=0.5, progress_interval=60.0)
    adapter.open()
    yield adapter
    adapter.close()


class TestLifecycle:
    """Create-once, destroy-on-close."""

    def test_widget_created_once(self, widget: FakeWidget) -> None:
        factory = MagicMock(return_value=widget)
        adapter = EmbeddedPlayerAdapter(factory)

        assert adapter.open()
        assert adapter.open()

        factory.assert_called_once()
        assert adapter.available
        adapter.close()

    def test_close_destroys_widget(self, widget: FakeWidget) -> None:
        with EmbeddedPlayerAdapter(lambda: widget) as adapter:
            assert adapter.available

        assert widget.destroyed
        assert not adapter.available

    def test_construction_failure_is_permanent(self) -> None:
        factory = MagicMock(side_effect=RuntimeError("blocked"))
        on_error = MagicMock()
        adapter = EmbeddedPlayerAdapter(factory, on_error=on_error)

        assert adapter.open() is False
        assert adapter.open() is False

        factory.assert_called_once()
        on_error.assert_called_once()
        assert "blocked" in on_error.call_args.args[0]
        assert not adapter.available

    def test_commands_without_widget_are_ignored(self) -> None:
        adapter = EmbeddedPlayerAdapter(MagicMock(side_effect=RuntimeError("nope")))
        adapter.open()

        adapter.load("abc", 10)
        adapter.set_playing(True)
        adapter.seek(5)

        assert adapter.loaded_id is None


class TestUnmuteProtocol:
    """Mute before load, unmute only once PLAYING is reported."""

    def test_load_mutes_before_cueing(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 42.0)

        assert widget.calls == [("mute",), ("cue_or_load", "vid", 42.0)]
        assert adapter.phase == UnmutePhase.LOADING
        assert adapter.loaded_id == "vid"

    def test_same_id_is_not_reloaded(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        adapter.load("vid", 30)

        assert widget.command_names().count("cue_or_load") == 1

    def test_play_request_does_not_unmute(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        adapter.set_playing(True)

        assert "unmute" not in widget.command_names()
        assert adapter.phase == UnmutePhase.AWAITING_PLAYING

    def test_playing_event_unmutes_and_applies_volume(
        self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget
    ) -> None:
        adapter.load("vid", 0)
        adapter.set_playing(True)

        widget.emit(WidgetState.PLAYING)

        assert widget.calls[-2:] == [("set_volume", 50), ("unmute",)]
        assert adapter.phase == UnmutePhase.UNMUTED
        assert adapter.is_playing

    def test_user_mute_survives_confirmation(
        self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget
    ) -> None:
        adapter.set_muted(True)
        adapter.load("vid", 0)

        widget.emit(WidgetState.PLAYING)

        assert "unmute" not in widget.command_names()
        assert adapter.phase == UnmutePhase.UNMUTED

    def test_volume_is_stored_until_unmuted(
        self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget
    ) -> None:
        adapter.load("vid", 0)
        adapter.set_volume(0.3)
        assert "set_volume" not in widget.command_names()

        widget.emit(WidgetState.PLAYING)
        adapter.set_volume(1.5)

        assert ("set_volume", 30) in widget.calls
        assert widget.calls[-1] == ("set_volume", 100)

    def test_new_load_mutes_again(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("one", 0)
        widget.emit(WidgetState.PLAYING)

        adapter.load("two", 0)

        assert widget.calls[-2:] == [("mute",), ("cue_or_load", "two", 0.0)]
        assert adapter.phase == UnmutePhase.LOADING


class TestSetPlaying:
    """play/pause only when the reported state disagrees."""

    def test_no_play_when_already_playing(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        widget.emit(WidgetState.PLAYING)
        before = len(widget.calls)

        adapter.set_playing(True)

        assert len(widget.calls) == before

    def test_pause_only_when_playing(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        adapter.set_playing(False)
        assert "pause" not in widget.command_names()

        widget.emit(WidgetState.PLAYING)
        adapter.set_playing(False)

        assert widget.command_names().count("pause") == 1
        assert not adapter.is_playing

    def test_pending_play_is_not_repeated(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        adapter.set_playing(True)
        assert adapter.play_pending

        adapter.set_playing(True)

        assert widget.command_names().count("play") == 1

    def test_paused_report_clears_pending_play(
        self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget
    ) -> None:
        adapter.load("vid", 0)
        adapter.set_playing(True)

        widget.emit(WidgetState.PAUSED)
        assert not adapter.play_pending
        adapter.set_playing(True)

        assert widget.command_names().count("play") == 2

    def test_immediate_confirmation_clears_pending(self) -> None:
        widget = FakeWidget(auto_play=True)
        with EmbeddedPlayerAdapter(lambda: widget, progress_interval=60.0) as adapter:
            adapter.load("vid", 0)
            adapter.set_playing(True)

            assert adapter.is_playing
            assert not adapter.play_pending

    def test_nothing_loaded_nothing_to_play(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.set_playing(True)

        assert widget.calls == []


class TestEvents:
    """Widget state events."""

    def test_ended_notifies_session(self, widget: FakeWidget) -> None:
        on_ended = MagicMock()
        adapter = EmbeddedPlayerAdapter(lambda: widget, on_ended=on_ended, progress_interval=60.0)
        adapter.open()
        adapter.load("vid", 0)
        widget.emit(WidgetState.PLAYING)

        widget.emit(WidgetState.ENDED)

        on_ended.assert_called_once_with()
        assert not adapter.progress_tracking
        adapter.close()

    @pytest.mark.parametrize("state", [WidgetState.PAUSED, WidgetState.BUFFERING])
    def test_pause_and_buffering_stop_progress(
        self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget, state: WidgetState
    ) -> None:
        adapter.load("vid", 0)
        widget.emit(WidgetState.PLAYING)
        assert adapter.progress_tracking

        widget.emit(state)

        assert not adapter.progress_tracking
        assert adapter.current_time() is None

    def test_cued_moves_to_awaiting_playing(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)

        widget.emit(WidgetState.CUED)

        assert adapter.phase == UnmutePhase.AWAITING_PLAYING

    def test_error_event_reported(self, widget: FakeWidget) -> None:
        on_error = MagicMock()
        adapter = EmbeddedPlayerAdapter(lambda: widget, on_error=on_error)
        adapter.open()

        widget.handler(WidgetEvent(kind="error", message="video unavailable"))

        on_error.assert_called_once_with("video unavailable")
        adapter.close()

    def test_progress_reports_position(self, widget: FakeWidget) -> None:
        on_progress = MagicMock()
        adapter = EmbeddedPlayerAdapter(lambda: widget, on_progress=on_progress, progress_interval=60.0)
        adapter.open()
        adapter.load("vid", 0)
        widget.emit(WidgetState.PLAYING)
        widget.current_time = 12.5

        adapter._emit_progress()

        on_progress.assert_called_once_with(12.5)
        adapter.close()


class TestFailureAbsorption:
    """Widget command failures are logged, never raised."""

    def test_failing_commands_do_not_raise(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        widget.cue_or_load = MagicMock(side_effect=RuntimeError("not ready"))
        widget.play = MagicMock(side_effect=RuntimeError("not ready"))

        adapter.load("vid", 0)
        adapter.set_playing(True)

        assert adapter.loaded_id == "vid"
        assert adapter.phase == UnmutePhase.LOADING

    def test_stop_forgets_loaded_video(self, adapter: EmbeddedPlayerAdapter, widget: FakeWidget) -> None:
        adapter.load("vid", 0)
        widget.emit(WidgetState.PLAYING)

        adapter.stop()

        assert widget.calls[-1] == ("stop",)
        assert adapter.loaded_id is None
        assert adapter.phase == UnmutePhase.IDLE
        assert not adapter.is_playing
