"""
Tests for the pipeline driver.

Run with: pytest tests/test_pipeline.py
"""

import json

from arena_log.core.actions import MatchStarted
from arena_log.core.events import EventBus, EventType
from arena_log.core.pipeline import LogPipeline
from arena_log.core.rpc import RpcReconstructor


def gre_line(*messages):
    body = json.dumps({
        "transactionId": "m-1",
        "timestamp": "1715000000000",
        "greToClientEvent": {"greToClientMessages": list(messages)},
    })
    return f"[UnityCrossThreadLogger]{body}"


SAMPLE_LOG = [
    "[UnityCrossThreadLogger]Client.SceneChange",
    '[3] [UnityCrossThreadLogger]==> QuestGetQuests {"id":"q1","request":"{}"}',
    "",
    "[UnityCrossThreadLogger]<== QuestGetQuests(q1)",
    '{"quests":[{"questId":"a","locKey":"Win2","currentProgress":1,"goalProgress":2}]}',
    gre_line({"type": "GREMessageType_ConnectResp", "systemSeatIds": [1]}),
    gre_line({"type": "GREMessageType_GameStateMessage", "gameStateMessage": {
        "turnInfo": {"turnNumber": 1, "phase": "Phase_Beginning", "activePlayer": 1},
    }}),
]


class TestProcessRaw:
    """Test per-line processing."""

    def test_blank_lines_are_skipped(self):
        """Test that blank lines consume no index."""
        pipeline = LogPipeline()
        assert pipeline.process_raw("   ") is None
        result = pipeline.process_raw("hello")
        assert result.line.index == 0
        assert pipeline.lines_processed == 1

    def test_blank_line_between_header_and_body(self):
        """Test that a blank line doesn't split a response header from its body."""
        pipeline = LogPipeline()
        pipeline.process_raw('==> DraftStatus {"id":"d1"}')
        pipeline.process_raw("<== DraftStatus(d1)")
        pipeline.process_raw("")
        result = pipeline.process_raw('{"status":"PickNext"}')

        assert [c.id for c in result.rpc_calls] == ["d1"]
        assert [e.type for e in result.events] == ["draft_status"]

    def test_line_feeds_both_components(self):
        """Test that one line can produce RPC output and game actions."""
        pipeline = LogPipeline()
        result = pipeline.process_raw(gre_line({"type": "GREMessageType_ConnectResp", "systemSeatIds": [2]}))
        assert result.rpc_calls == []
        assert isinstance(result.actions[0], MatchStarted)
        assert result.actions[0].local_seat_id == 2

    def test_max_pending_is_passed_on(self):
        """Test the pending bound reaches the reconstructor."""
        pipeline = LogPipeline(max_pending_rpcs=1)
        pipeline.process_raw('==> A {"id":"1"}')
        pipeline.process_raw('==> B {"id":"2"}')
        assert pipeline.rpc_reconstructor.pending_count == 1

    def test_malformed_snapshot_does_not_raise(self):
        """Test that odd shapes inside a GRE snapshot stay inside the tracker."""
        pipeline = LogPipeline()
        pipeline.process_raw(gre_line({"type": "GREMessageType_ConnectResp", "systemSeatIds": [1]}))
        result = pipeline.process_raw(gre_line({"type": "GREMessageType_GameStateMessage", "gameStateMessage": {
            "zones": [{"zoneId": [31], "type": "ZoneType_Hand", "ownerSeatId": 1,
                       "objectInstanceIds": [{"id": 5}]}],
            "gameObjects": [{"instanceId": 5, "zoneId": [31], "cardTypes": 7}],
            "annotations": [{"affectedIds": [5], "type": ["AnnotationType_ZoneTransfer"],
                             "details": [{"key": ["zone_src"], "valueInt32": [31]}]}],
        }}))
        assert result.line.index == 1
        assert pipeline.process_raw("next").line.index == 2

    def test_injected_components(self):
        """Test that callers may supply their own components."""
        reconstructor = RpcReconstructor(max_pending=5)
        pipeline = LogPipeline(rpc_reconstructor=reconstructor)
        assert pipeline.rpc_reconstructor is reconstructor


class TestPublishing:
    """Test what the pipeline publishes on its bus."""

    def test_text_event_published(self):
        """Test that plain-text messages go out after the raw line."""
        bus = EventBus()
        received = []
        bus.subscribe_all(lambda event: received.append(event))
        pipeline = LogPipeline(bus=bus)

        result = pipeline.process_raw("[UnityCrossThreadLogger]Life total for Opponent: 14")

        assert [e.event_type for e in received] == [EventType.RAW_LINE, EventType.TEXT_EVENT]
        assert received[1].data is result.text_events[0]
        assert received[1].data.data == {"player": "Opponent", "total": 14}
        assert result.actions == []

    def test_publish_order(self):
        """Test line, RPC, interpreted event, then actions."""
        bus = EventBus()
        received = []
        bus.subscribe_all(lambda event: received.append(event.event_type))
        pipeline = LogPipeline(bus=bus)

        for raw in SAMPLE_LOG:
            pipeline.process_raw(raw)

        assert received == [
            EventType.RAW_LINE,
            EventType.RAW_LINE,
            EventType.RAW_LINE,
            EventType.RAW_LINE,
            EventType.RPC_COMPLETED,
            EventType.EVENT_INTERPRETED,
            EventType.RAW_LINE,
            EventType.GAME_ACTION,
            EventType.RAW_LINE,
            EventType.GAME_ACTION,
        ]

    def test_reset_clears_state_and_publishes(self):
        """Test reset() on a log discontinuity."""
        bus = EventBus()
        resets = []
        bus.subscribe(EventType.PIPELINE_RESET, resets.append)
        pipeline = LogPipeline(bus=bus)
        pipeline.process_raw('==> A {"id":"1"}')
        pipeline.process_raw(gre_line({"type": "GREMessageType_ConnectResp", "systemSeatIds": [1]}))

        pipeline.reset()

        assert len(resets) == 1
        assert pipeline.rpc_reconstructor.pending_count == 0
        assert pipeline.game_tracker.local_seat_id is None
        # Indices keep counting across a reset
        assert pipeline.process_raw("x").line.index == 2


class TestReplay:
    """Test whole-file replay."""

    def test_replay_collects_everything(self):
        """Test the replay summary."""
        result = LogPipeline().replay(SAMPLE_LOG)

        assert result.lines == 6
        assert [c.name for c in result.rpc_calls] == ["QuestGetQuests"]
        assert result.rpc_calls[0].request_payload == {}
        assert result.events[0].data["quests"][0]["description"] == "Win2"
        assert [a.kind for a in result.actions] == ["match_started", "turn_started"]
        assert result.text_events == []

    def test_replay_from_file(self, tmp_path):
        """Test replaying lines read from a file object."""
        log_file = tmp_path / "Player.log"
        log_file.write_text("\n".join(SAMPLE_LOG) + "\n", encoding="utf-8")

        with open(log_file, encoding="utf-8") as f:
            result = LogPipeline().replay(f)
        assert len(result.actions) == 2
