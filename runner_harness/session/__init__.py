"""Session module - external runner process communication."""

from .protocol import PROTOCOL_VERSION, Message, decode_message
from .runner_session import RunnerSession

__all__ = [
    "PROTOCOL_VERSION",
    "Message",
    "decode_message",
    "RunnerSession",
]
