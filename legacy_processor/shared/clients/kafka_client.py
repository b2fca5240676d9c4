"""Kafka client for consuming challenge notifications."""

import asyncio
import os
import ssl
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Coroutine

from aiokafka import AIOKafkaConsumer
from aiokafka.helpers import create_ssl_context

from legacy_processor.config import Settings, get_settings
from legacy_processor.shared.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class KafkaMessage:
    """Represents a Kafka message. ``value`` is the raw record bytes."""

    topic: str
    key: str | None
    value: bytes | None
    headers: dict[str, str] = field(default_factory=dict)
    partition: int | None = None
    offset: int | None = None
    timestamp: datetime | None = None


MessageHandler = Callable[[KafkaMessage], Coroutine[Any, Any, None]]


def build_ssl_context(settings: Settings) -> ssl.SSLContext | None:
    """Build an SSL context from PEM client certificate settings, if configured."""
    if not (settings.kafka_client_cert and settings.kafka_client_cert_key):
        return None

    # ssl needs files, the settings carry PEM text; the files live only until loaded
    paths: list[str] = []
    try:
        for pem in (settings.kafka_client_cert, settings.kafka_client_cert_key):
            with tempfile.NamedTemporaryFile("w", suffix=".pem", delete=False) as pem_file:
                paths.append(pem_file.name)
                pem_file.write(pem)
        return create_ssl_context(certfile=paths[0], keyfile=paths[1])
    finally:
        for path in paths:
            os.unlink(path)


class KafkaConsumer:
    """Async Kafka consumer with per-topic handlers and manual offset commits."""

    def __init__(
        self,
        topics: list[str],
        group_id: str | None = None,
        client_id: str = "legacy-challenge-processor",
        settings: Settings | None = None,
    ):
        self.topics = topics
        self.client_id = client_id
        self._settings = settings or get_settings()
        self.group_id = group_id or self._settings.kafka_group_id
        self._consumer: AIOKafkaConsumer | None = None
        self._handlers: dict[str, MessageHandler] = {}
        self._running = False

    def register_handler(self, topic: str, handler: MessageHandler) -> None:
        """Register a handler for a specific topic."""
        self._handlers[topic] = handler
        logger.info("kafka_handler_registered", topic=topic)

    async def start(self) -> None:
        """Start the consumer."""
        if self._consumer is None:
            ssl_context = build_ssl_context(self._settings)
            self._consumer = AIOKafkaConsumer(
                *self.topics,
                bootstrap_servers=self._settings.kafka_bootstrap_servers,
                group_id=self.group_id,
                client_id=self.client_id,
                key_deserializer=lambda k: k.decode("utf-8", errors="replace") if k else None,
                auto_offset_reset="earliest",
                enable_auto_commit=False,
                security_protocol="SSL" if ssl_context else "PLAINTEXT",
                ssl_context=ssl_context,
            )
            await self._consumer.start()
            logger.info(
                "kafka_consumer_started",
                topics=self.topics,
                group_id=self.group_id,
            )

    async def stop(self) -> None:
        """Stop the consumer."""
        self._running = False
        if self._consumer is not None:
            await self._consumer.stop()
            self._consumer = None
            logger.info("kafka_consumer_stopped")

    async def consume(self) -> None:
        """Consume messages until stopped, committing each offset after its handler ran."""
        if self._consumer is None:
            await self.start()

        self._running = True
        try:
            async for msg in self._consumer:
                if not self._running:
                    break

                message = KafkaMessage(
                    topic=msg.topic,
                    key=msg.key,
                    value=msg.value,
                    headers={k: (v or b"").decode("utf-8", errors="replace") for k, v in msg.headers or ()},
                    partition=msg.partition,
                    offset=msg.offset,
                    timestamp=datetime.fromtimestamp(msg.timestamp / 1000) if msg.timestamp else None,
                )

                handler = self._handlers.get(msg.topic)
                if handler:
                    try:
                        await handler(message)
                    except Exception as e:
                        logger.error(
                            "kafka_message_handler_error",
                            topic=msg.topic,
                            offset=msg.offset,
                            error=str(e),
                        )
                else:
                    logger.warning("kafka_no_handler", topic=msg.topic)
                # no redelivery: failed messages are logged, never retried
                await self._consumer.commit()
        except asyncio.CancelledError:
            logger.info("kafka_consumer_cancelled")
            raise
        finally:
            await self.stop()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
