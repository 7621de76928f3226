"""Kafka-backed message channel."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Callable
from typing import Any, Protocol

from confluent_kafka import TIMESTAMP_NOT_AVAILABLE, Consumer, KafkaError, KafkaException, Producer

from contract_flow_tester.configuration.runtime_settings import KafkaSettings
from contract_flow_tester.failures import (
    ChannelTransportError,
    MalformedDocumentError,
    ReplyTimeoutError,
)

logger = logging.getLogger(__name__)

_KAFKA_CLIENT_LOGGER = logging.getLogger("contract_flow_tester.kafka.client")
_KAFKA_CLIENT_LOGGER.addHandler(logging.NullHandler())
_KAFKA_CLIENT_LOGGER.propagate = False
_KAFKA_CLIENT_LOGGER.setLevel(logging.CRITICAL + 1)

_DEFAULT_GROUP_PREFIX = "contract-flow-tester"
_OFFSET_LOOKUP_TIMEOUT_SECONDS = 10.0


class KafkaProducerProtocol(Protocol):
    """Subset of the producer API used by the channel."""

    def produce(self, topic: str, value: bytes | None = None, **kwargs: Any) -> None: ...

    def flush(self, timeout: float = ...) -> int: ...


class KafkaConsumerProtocol(Protocol):
    """Subset of the consumer API used by the channel."""

    def subscribe(self, topics: list[str], on_assign: Any = None, **kwargs: Any) -> None: ...

    def poll(self, timeout: float) -> _KafkaRawMessage | None: ...

    def close(self) -> None: ...


class _KafkaRawMessage(Protocol):
    """Subset of Kafka message API required by the channel."""

    def error(self) -> Any: ...

    def value(self) -> bytes | None: ...

    def timestamp(self) -> tuple[int, int]: ...


ConsumerFactory = Callable[[dict[str, Any]], KafkaConsumerProtocol]


class KafkaMessageChannel:
    """Publishes JSON requests to topics and reads the first JSON reply from a topic."""

    def __init__(
        self,
        kafka_settings: KafkaSettings,
        *,
        producer: KafkaProducerProtocol | None = None,
        consumer_factory: ConsumerFactory | None = None,
    ) -> None:
        self._settings = kafka_settings
        self._producer = producer or self._create_producer()
        self._consumer_factory = consumer_factory or _create_consumer

    def publish(self, destination: str, body: Any) -> None:
        """Produce `body` as compact JSON and wait until the broker acknowledged it."""
        payload = json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        delivery_errors: list[Any] = []

        def _on_delivery(error: Any, _message: Any) -> None:
            if error is not None:
                delivery_errors.append(error)

        try:
            self._producer.produce(destination, value=payload, on_delivery=_on_delivery)
            undelivered = self._producer.flush(self._settings.publish_timeout_seconds)
        except (KafkaException, BufferError) as exc:
            raise ChannelTransportError(f"Publishing to {destination} failed: {exc}") from exc
        if delivery_errors:
            raise ChannelTransportError(
                f"Publishing to {destination} failed: {delivery_errors[0]}"
            )
        if undelivered:
            raise ChannelTransportError(
                f"Publishing to {destination} was not acknowledged within "
                f"{self._settings.publish_timeout_seconds} s."
            )
        logger.debug("published %d byte(s) to %s", len(payload), destination)

    def subscribe(
        self,
        destination: str,
        timeout_ms: int,
        *,
        on_subscribed: Callable[[], None] | None = None,
    ) -> Any:
        """Return the first JSON message written to `destination` since this call started.

        On partition assignment the consumer seeks to the offsets for the call's
        start time, so a reply produced before the assignment completed is still read.
        `on_subscribed` is therefore called as soon as the start time is fixed.
        """
        start_ms = int(time.time() * 1000)
        if on_subscribed is not None:
            on_subscribed()
        deadline = time.monotonic() + timeout_ms / 1000.0
        poll_interval = self._settings.poll_interval_ms / 1000.0
        consumer = self._consumer_factory(self._consumer_config())

        def _on_assign(assigned_consumer: Any, partitions: list[Any]) -> None:
            for partition in partitions:
                partition.offset = start_ms
            resolved = assigned_consumer.offsets_for_times(
                partitions, timeout=_OFFSET_LOOKUP_TIMEOUT_SECONDS
            )
            assigned_consumer.assign(resolved)

        try:
            consumer.subscribe([destination], on_assign=_on_assign)
            while (remaining := deadline - time.monotonic()) > 0:
                message = consumer.poll(timeout=min(poll_interval, remaining))
                if message is None:
                    continue
                if message.error():
                    if message.error().code() == KafkaError._PARTITION_EOF:
                        continue
                    raise ChannelTransportError(
                        f"Kafka error on {destination}: {message.error()}"
                    )
                timestamp_type, timestamp_value = message.timestamp()
                if timestamp_type != TIMESTAMP_NOT_AVAILABLE and timestamp_value < start_ms:
                    continue
                return _decode_reply(message, destination)
        except KafkaException as exc:
            raise ChannelTransportError(f"Consuming from {destination} failed: {exc}") from exc
        finally:
            consumer.close()
        raise ReplyTimeoutError(f"No reply received on {destination} within {timeout_ms} ms.")

    def close(self) -> None:
        self._producer.flush(self._settings.publish_timeout_seconds)

    def _base_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {"bootstrap.servers": ",".join(self._settings.bootstrap_servers)}
        for key, value in self._settings.security.items():
            if isinstance(value, str | int | float | bool) or value is None:
                config[key] = value
        return config

    def _consumer_config(self) -> dict[str, Any]:
        group_prefix = self._settings.group_id or _DEFAULT_GROUP_PREFIX
        config = self._base_config()
        config.update(
            {
                "group.id": f"{group_prefix}-{uuid.uuid4().hex}",
                "enable.auto.commit": False,
                "auto.offset.reset": "latest",
            }
        )
        return config

    def _create_producer(self) -> KafkaProducerProtocol:
        try:
            return Producer(self._base_config(), logger=_KAFKA_CLIENT_LOGGER)
        except KafkaException as exc:
            raise ChannelTransportError(f"Cannot create Kafka producer: {exc}") from exc


def _create_consumer(config: dict[str, Any]) -> KafkaConsumerProtocol:
    try:
        return Consumer(config, logger=_KAFKA_CLIENT_LOGGER)
    except KafkaException as exc:
        raise ChannelTransportError(f"Cannot create Kafka consumer: {exc}") from exc


def _decode_reply(message: _KafkaRawMessage, destination: str) -> Any:
    payload = message.value()
    if payload is None:
        raise MalformedDocumentError(f"Reply on {destination} has an empty payload.")
    try:
        return json.loads(bytes(payload).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedDocumentError(f"Reply on {destination} is not valid JSON: {exc}") from exc
