"""Unit tests for the metrics event logger."""

import json

from lull.core.events import InitiativeExecuted, InitiativeFailed, SleepStateChanged
from lull.core.events_listener import SystemEventLogger


async def test_events_are_written_as_json_lines(temp_data_dir):
    event_logger = SystemEventLogger(str(temp_data_dir))

    await event_logger.on_sleep_state_changed(SleepStateChanged(
        scope_id="guild", old_state="awake", new_state="deep_sleep", reason="24.0h without activity"
    ))
    await event_logger.on_initiative_executed(InitiativeExecuted(
        scope_id="guild", action="start_topic", channel_id="10", attempts=1, content_length=12
    ))
    await event_logger.on_initiative_failed(InitiativeFailed(
        scope_id="guild", action="share_funny", attempts=3, reason="no content delivered"
    ))

    lines = (temp_data_dir / "metrics.jsonl").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]

    assert [r["event"] for r in records] == [
        "sleep_state_changed", "initiative_executed", "initiative_failed"
    ]
    assert records[0]["new_state"] == "deep_sleep"
    assert records[1]["channel_id"] == "10"
    assert records[2]["attempts"] == 3
