"""Background worker for challenge notifications.

Consumes challenge create/update notifications from Kafka and hands
them to :class:`ChallengeSyncService`, one message at a time.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import signal
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Final

from legacy_processor.challenges.service import ChallengeSyncService
from legacy_processor.config import Settings, get_settings
from legacy_processor.infrastructure.database.session import close_db, get_session_factory, init_db
from legacy_processor.repositories.id_generator import SequenceIdAllocator
from legacy_processor.shared.clients.auth_client import M2MTokenProvider
from legacy_processor.shared.clients.challenge_api_client import ChallengeApiClient
from legacy_processor.shared.clients.kafka_client import KafkaConsumer, KafkaMessage
from legacy_processor.shared.utils.logging import (
    bind_message_context,
    clear_message_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


HealthStatus = dict[str, Any]


class ChallengeWorker:
    """
    Background worker for challenge notifications.

    Routes each topic to the matching sync operation. Failures are
    logged and counted; the message is not retried.
    """

    # Reconnection delay after consumer errors
    RECONNECT_DELAY_SECONDS: Final[int] = 5

    def __init__(
        self,
        service: ChallengeSyncService,
        settings: Settings | None = None,
        consumer: KafkaConsumer | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.topics = [
            self._settings.create_challenge_topic,
            self._settings.update_challenge_topic,
        ]
        self._service = service
        self._processors: dict[str, Callable[[dict[str, Any]], Awaitable[Any]]] = {
            self._settings.create_challenge_topic: service.process_create,
            self._settings.update_challenge_topic: service.process_update,
        }
        self.consumer = consumer or KafkaConsumer(topics=self.topics, settings=self._settings)
        for topic in self.topics:
            self.consumer.register_handler(topic, self.handle_message)

        self.running = False
        self._shutdown_event = asyncio.Event()
        self._messages_processed = 0
        self._errors_count = 0
        self._started_at: datetime | None = None

    def get_health_status(self) -> HealthStatus:
        """Return health status for monitoring."""
        return {
            "healthy": self.running,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "messages_processed": self._messages_processed,
            "errors_count": self._errors_count,
            "topics": self.topics,
        }

    async def start(self) -> None:
        """Consume until shutdown is requested."""
        logger.info("starting_challenge_worker", topics=self.topics)
        self.running = True
        self._started_at = datetime.now(timezone.utc)

        consume_task = asyncio.create_task(self._consume_forever())
        await self._shutdown_event.wait()
        consume_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await consume_task

    async def _consume_forever(self) -> None:
        while self.running and not self._shutdown_event.is_set():
            try:
                await self.consumer.consume()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._errors_count += 1
                logger.error("challenge_worker_error", error=str(e))
                if self.running and not self._shutdown_event.is_set():
                    logger.info(
                        "challenge_worker_reconnecting",
                        delay_seconds=self.RECONNECT_DELAY_SECONDS,
                    )
                    await asyncio.sleep(self.RECONNECT_DELAY_SECONDS)

    async def stop(self) -> None:
        """Stop the worker gracefully."""
        logger.info(
            "stopping_challenge_worker",
            messages_processed=self._messages_processed,
            errors_count=self._errors_count,
        )
        self.running = False
        self._shutdown_event.set()
        await self.consumer.stop()
        await self._service.close()

    def request_shutdown(self) -> None:
        """Signal the worker to shut down (called from signal handlers)."""
        self._shutdown_event.set()

    async def handle_message(self, message: KafkaMessage) -> None:
        """Decode, check and process one Kafka message."""
        bind_message_context(message.topic, partition=message.partition, offset=message.offset)
        try:
            await self._process_message(message)
        finally:
            clear_message_context("partition", "offset")

    async def _process_message(self, message: KafkaMessage) -> None:
        try:
            data = json.loads((message.value or b"").decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self._errors_count += 1
            logger.error("invalid_message_json", error=str(e))
            return

        if not isinstance(data, dict) or data.get("topic") != message.topic:
            self._errors_count += 1
            logger.error(
                "message_topic_mismatch",
                message_topic=data.get("topic") if isinstance(data, dict) else None,
            )
            return

        processor = self._processors[message.topic]
        try:
            await processor(data)
            self._messages_processed += 1
        except Exception as e:
            self._errors_count += 1
            logger.exception(
                "challenge_processing_error",
                error=str(e),
                error_type=getattr(e, "error_type", type(e).__name__),
            )


def build_worker(settings: Settings | None = None) -> ChallengeWorker:
    """Wire the worker and its collaborators from settings."""
    settings = settings or get_settings()
    session_factory = get_session_factory()
    service = ChallengeSyncService(
        session_factory=session_factory,
        id_allocator=SequenceIdAllocator(session_factory),
        challenge_api=ChallengeApiClient(),
        token_provider=M2MTokenProvider(settings),
    )
    return ChallengeWorker(service, settings=settings)


async def start_challenge_worker() -> ChallengeWorker:
    """Start the challenge worker with signal handling."""
    await init_db()
    worker = build_worker()

    loop = asyncio.get_running_loop()

    def handle_signal(sig: signal.Signals) -> None:
        logger.info("received_shutdown_signal", signal=sig.name)
        worker.request_shutdown()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal, sig)

    try:
        await worker.start()
    finally:
        await worker.stop()
        await close_db()

    return worker


def run_challenge_worker() -> None:
    """Entry point for running the worker as a standalone process."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service_name=settings.service_name,
        service_version=settings.service_version,
    )
    logger.info("challenge_worker_starting", version=settings.service_version)

    try:
        asyncio.run(start_challenge_worker())
        logger.info("challenge_worker_stopped_cleanly")
    except KeyboardInterrupt:
        logger.info("challenge_worker_interrupted")
    except Exception as e:
        logger.error("challenge_worker_fatal_error", error=str(e))
        raise


if __name__ == "__main__":
    run_challenge_worker()


__all__ = ["ChallengeWorker", "build_worker", "start_challenge_worker", "run_challenge_worker"]
