"""
Tests for plain-text client messages.

Run with: pytest tests/test_text_events.py
"""

import pytest

from arena_log.core.log_line import frame
from arena_log.core.text_events import detect_text_event


def detect(raw):
    return detect_text_event(frame(raw, 7))


class TestDetectTextEvent:
    """Test the three plain-text patterns."""

    def test_match_created(self):
        """Test a match creation line."""
        event = detect("[UnityCrossThreadLogger]Match created: Play queue")
        assert event.type == "match_created"
        assert event.data == {}
        assert event.line.index == 7

    def test_life_total(self):
        """Test that player and total are captured."""
        event = detect("[Client GRE] Life total for Opponent Name : 17")
        assert event.type == "life_total_changed"
        assert event.data == {"player": "Opponent Name", "total": 17}

    def test_draw_card(self):
        """Test that the card id is captured."""
        event = detect("DrawCard seat=1 cardId=grp_70123-a")
        assert event.type == "card_drawn"
        assert event.data == {"card_id": "grp_70123-a"}

    def test_case_insensitive(self):
        """Test lower-case variants."""
        assert detect("match CREATED").type == "match_created"

    def test_first_pattern_wins(self):
        """Test a line matching two patterns."""
        assert detect("Match created, Life total for You: 20").type == "match_created"

    @pytest.mark.parametrize("raw", [
        "",
        "Client.SceneChange",
        "Life total for : 20",
        "DrawCard without id",
        '{"message": "Match created"}',
        '[UnityCrossThreadLogger]==> Log {"id":"1","request":"DrawCard cardId=1"}',
        "<== MatchCreated(abc)",
    ])
    def test_no_match(self, raw):
        """Test lines that aren't plain-text messages."""
        assert detect(raw) is None

    def test_to_dict(self):
        """Test the JSON shape used by the CLI."""
        record = detect("Life total for Me: 5").to_dict()
        assert record["type"] == "life_total_changed"
        assert record["data"] == {"player": "Me", "total": 5}
        assert record["line"] == 7
        assert isinstance(record["timestamp"], str)
