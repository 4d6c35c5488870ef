from __future__ import annotations

import json

import pytest

from runner_harness.session import protocol
from runner_harness.session.protocol import Message, decode_message


def test_encode_is_one_json_line() -> None:
    line = Message(protocol.DISCOVERY_START, {"sources": ["a.dll"]}).encode()

    assert line.endswith("\n")
    assert line.count("\n") == 1
    assert json.loads(line) == {"type": "discovery.start", "payload": {"sources": ["a.dll"]}}


def test_decode_message() -> None:
    message = decode_message('{"type": "discovery.complete", "payload": {"total_tests": 2}}')

    assert message == Message("discovery.complete", {"total_tests": 2})


def test_missing_payload_is_empty() -> None:
    assert decode_message('{"type": "session.end"}').payload == {}
    assert decode_message('{"type": "session.end", "payload": null}').payload == {}


@pytest.mark.parametrize(
    "line",
    [
        "not json at all",
        '{"type": "session.message"',
        "[1, 2, 3]",
        '"session.connected"',
        '{"payload": {}}',
        '{"type": "", "payload": {}}',
        '{"type": 7, "payload": {}}',
        '{"type": "session.message", "payload": "text"}',
        '{"type": "session.message", "payload": [1]}',
    ],
)
def test_malformed_lines_are_rejected(line: str) -> None:
    assert decode_message(line) is None
