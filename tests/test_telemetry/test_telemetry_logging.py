from __future__ import annotations

import json
import logging

from billiards_queue.telemetry.logging_setup import JsonFormatter, configure_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("billiards_queue.rotation", logging.INFO, __file__, 10, "Result %s", ("recorded",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_should_include_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(winner_id="a", winner_streak=2)))
    assert payload["message"] == "Result recorded"
    assert payload["level"] == "INFO"
    assert payload["name"] == "billiards_queue.rotation"
    assert payload["winner_id"] == "a"
    assert payload["winner_streak"] == 2
    assert "lineno" not in payload


def test_json_formatter_should_skip_unserializable_extra() -> None:
    payload = json.loads(JsonFormatter().format(_record(handle=object(), person_ids=["a", "b"])))
    assert "handle" not in payload
    assert payload["person_ids"] == ["a", "b"]


def test_configure_logging_should_write_json_lines(tmp_path) -> None:
    logger = configure_logging(log_dir=tmp_path / "logs", level="debug", logger_name="billiards_queue_test")
    logger.getChild("session").info("Command applied", extra={"command": "join"})
    for handler in logger.handlers:
        handler.flush()
    lines = (tmp_path / "logs" / "queue_current.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in lines]
    assert events[-1]["message"] == "Command applied"
    assert events[-1]["command"] == "join"
    assert events[-1]["name"] == "billiards_queue_test.session"
    assert logger.propagate is False
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
