import json
import logging

import pytest

from scalemesh.core.sinks import (
    EVENT_LOGGER_NAME,
    FanOutEventSink,
    JsonLinesEventSink,
    LoggingEventSink,
    RecordingEventSink,
)


class ExplodingSink(RecordingEventSink):
    def emit(self, event):
        raise RuntimeError("down")


EVENT = {"outcome": "APPLIED", "schedule": "down", "requested_profile": {"pool": "workers"}}


def test_logging_sink_emits_json(caplog):
    with caplog.at_level(logging.INFO, logger=EVENT_LOGGER_NAME):
        LoggingEventSink().emit(EVENT)
    records = [r for r in caplog.records if r.name == EVENT_LOGGER_NAME]
    assert len(records) == 1
    assert json.loads(records[0].getMessage())["outcome"] == "APPLIED"


def test_jsonl_sink_appends(tmp_path):
    path = tmp_path / "nested" / "events.jsonl"
    sink = JsonLinesEventSink(path)
    sink.emit(EVENT)
    sink.emit({**EVENT, "outcome": "SKIPPED_BUSY"})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["outcome"] for line in lines] == ["APPLIED", "SKIPPED_BUSY"]


def test_fan_out_tolerates_partial_failure():
    good = RecordingEventSink()
    FanOutEventSink(ExplodingSink(), good).emit(EVENT)
    assert good.last == EVENT


def test_fan_out_raises_when_every_sink_fails():
    with pytest.raises(RuntimeError):
        FanOutEventSink(ExplodingSink(), ExplodingSink()).emit(EVENT)
