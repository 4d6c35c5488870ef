"""Runner protocol messages.

The harness and the runner exchange newline-delimited JSON objects over
the runner's stdin/stdout. Every message has the shape::

    {"type": "discovery.start", "payload": {...}}
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional


PROTOCOL_VERSION = 1

# Harness -> runner
SESSION_START = "session.start"
SESSION_END = "session.end"
EXTENSIONS_INITIALIZE = "extensions.initialize"
DISCOVERY_START = "discovery.start"
EXECUTION_START = "execution.start"

# Runner -> harness
SESSION_CONNECTED = "session.connected"
SESSION_MESSAGE = "session.message"
SESSION_FAULT = "session.fault"
DISCOVERY_TESTS_FOUND = "discovery.tests_found"
DISCOVERY_COMPLETE = "discovery.complete"
EXECUTION_STATS_CHANGE = "execution.stats_change"
EXECUTION_COMPLETE = "execution.complete"


@dataclass
class Message:
    """A single protocol message."""
    type: str
    payload: dict[str, Any] = field(default_factory=dict)

    def encode(self) -> str:
        """Serialize to one line of JSON, newline included."""
        return json.dumps({"type": self.type, "payload": self.payload}) + "\n"


def decode_message(line: str) -> Optional[Message]:
    """Parse one protocol line.

    Returns:
        The Message, or None if the line is not a valid message.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict):
        return None

    message_type = data.get("type")
    if not isinstance(message_type, str) or not message_type:
        return None

    payload = data.get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return None

    return Message(type=message_type, payload=payload)
