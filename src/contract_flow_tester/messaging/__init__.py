"""Messaging exports."""

from .channel_protocols import MessageChannel
from .exchange_coordinator import exchange_request_reply
from .kafka_channel import KafkaMessageChannel

__all__ = [
    "KafkaMessageChannel",
    "MessageChannel",
    "exchange_request_reply",
]
