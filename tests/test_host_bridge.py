"""Tests for the host bridge and the embedding message protocol."""

import pytest

from snapie.player.controller import PlaybackController
from snapie.player.host_bridge import HostBridge
from snapie.player.messages import PlayerReady, orientation, parse_command
from snapie.player.session import PlayableVideo

ORIGIN = "https://host.example"


@pytest.fixture
def posted():
    return []


@pytest.fixture
def bridge(pipeline, clock, posted):
    return HostBridge(
        pipeline,
        post=posted.append,
        allowed_origins=[ORIGIN],
        timeupdate_interval=0.25,
        clock=clock,
    )


def video(**overrides):
    fields = dict(owner="a", permlink="b", collection="embed", chain=("https://cdn.example/x",),
                  status="published")
    fields.update(overrides)
    return PlayableVideo(**fields)


class TestOrigin:
    def test_disallowed_origin_runs_nothing(self, bridge, pipeline):
        assert bridge.receive("https://evil.example", {"command": "play"}) is False
        assert pipeline.play_calls == 0

    def test_wildcard_allows_any_origin(self, pipeline, clock, posted):
        bridge = HostBridge(pipeline, post=posted.append, allowed_origins=["*"], clock=clock)
        assert bridge.receive("https://anyone.example", {"command": "play"})
        assert pipeline.play_calls == 1


class TestCommands:
    @pytest.mark.parametrize("data", [
        {"command": "selfDestruct"},
        {"type": "play"},
        "play",
        None,
        {"command": "seek", "time": "soon"},
    ])
    def test_unrecognised_messages_are_ignored(self, bridge, pipeline, data):
        assert bridge.receive(ORIGIN, data) is False
        assert pipeline.play_calls == 0
        assert pipeline.seeks == []

    def test_toggle_play(self, bridge, pipeline):
        bridge.receive(ORIGIN, {"command": "toggle-play"})
        assert not pipeline.paused
        bridge.receive(ORIGIN, {"command": "toggle-play"})
        assert pipeline.paused

    def test_mute_commands(self, bridge, pipeline):
        bridge.receive(ORIGIN, {"command": "mute"})
        assert pipeline.muted
        bridge.receive(ORIGIN, {"command": "toggleMute"})
        assert not pipeline.muted

    def test_seek_is_clamped_to_duration(self, bridge, pipeline):
        bridge.receive(ORIGIN, {"command": "seek", "time": 500})
        bridge.receive(ORIGIN, {"command": "seek", "time": -3})
        assert pipeline.seeks == [120.0, 0.0]

    def test_seek_without_time_does_nothing(self, bridge, pipeline):
        assert bridge.receive(ORIGIN, {"command": "seek"}) is False
        assert pipeline.seeks == []

    def test_relative_seeks(self, bridge, pipeline):
        pipeline.current_time = 50
        bridge.receive(ORIGIN, {"command": "seekForward"})
        bridge.receive(ORIGIN, {"command": "seekBackward", "seconds": 5})
        assert pipeline.seeks == [60.0, 55.0]

    @pytest.mark.parametrize("volume,expected", [(0.4, 0.4), (7, 1.0), (-1, 0.0)])
    def test_set_volume_is_clamped(self, bridge, pipeline, volume, expected):
        bridge.receive(ORIGIN, {"command": "setVolume", "volume": volume})
        assert pipeline.volume == expected

    def test_volume_steps(self, bridge, pipeline):
        bridge.receive(ORIGIN, {"command": "volumeUp"})
        assert pipeline.volume == 1.0
        bridge.receive(ORIGIN, {"command": "volumeDown", "step": 0.5})
        assert pipeline.volume == pytest.approx(0.5)

    def test_fullscreen_commands(self, bridge, pipeline):
        bridge.receive(ORIGIN, {"command": "enterFullscreen"})
        assert pipeline.fullscreen
        bridge.receive(ORIGIN, {"command": "toggleFullscreen"})
        assert not pipeline.fullscreen

    def test_get_state_reports_session(self, bridge, pipeline, posted):
        controller = PlaybackController(pipeline, host=bridge)
        controller.load(video(is_placeholder=True))
        controller.on_dimensions(1080, 1920)
        posted.clear()
        bridge.receive(ORIGIN, {"command": "getState"})
        state = posted[-1]
        assert state["type"] == "3speak-state"
        assert state["state"] == "loading"
        assert state["orientation"] == "vertical"
        assert state["isPlaceholder"] is True
        assert state["currentTime"] == 0.0


class TestOutgoing:
    def test_timeupdates_are_throttled(self, bridge, clock, posted):
        bridge.timeupdate()
        clock.advance(0.1)
        bridge.timeupdate()
        clock.advance(0.2)
        bridge.timeupdate()
        bridge.timeupdate(force=True)
        assert [m["type"] for m in posted] == ["3speak-timeupdate"] * 3

    def test_controller_forwards_lifecycle_messages(self, bridge, pipeline, posted):
        controller = PlaybackController(pipeline, host=bridge)
        controller.load(video())
        controller.on_metadata()
        controller.on_dimensions(1920, 1080)
        controller.on_dimensions(1920, 1080)
        controller.on_play()
        controller.on_pause()
        controller.on_duration_change(99.0)
        types = [m["type"] for m in posted]
        assert types == [
            "3speak-player-ready", "3speak-play", "3speak-pause", "3speak-durationchange",
        ]
        ready = posted[0]
        assert ready["isVertical"] is False
        assert ready["aspectRatio"] == pytest.approx(1.7778)

    def test_fatal_error_is_posted(self, bridge, pipeline, posted):
        from snapie.player.errors import DecodeError

        controller = PlaybackController(pipeline, host=bridge)
        controller.load(video())
        controller.on_error(DecodeError("corrupt"))
        assert posted[-1]["type"] == "3speak-error"
        assert posted[-1]["classification"] == "codec"


@pytest.mark.parametrize("width,height,expected", [
    (1920, 1080, "horizontal"),
    (1080, 1920, "vertical"),
    (500, 500, "square"),
])
def test_orientation(width, height, expected):
    assert orientation(width, height) == expected
    assert PlayerReady.from_dimensions(width, height).orientation == expected


def test_parse_command_defaults():
    cmd = parse_command({"command": "seekForward", "extra": 1})
    assert cmd.seconds == 10
    assert cmd.step == pytest.approx(0.1)
