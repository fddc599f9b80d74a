"""Publishing of watchfolder messages onto a Redis queue."""

from collections.abc import Generator
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from batchin.core.config import Settings
from batchin.core.errors import TransportError
from batchin.core.logging import get_logger
from batchin.watchfolder.metrics import MESSAGES_PUBLISHED
from batchin.watchfolder.models import WatchfolderMessage

logger = get_logger(__name__)


@contextmanager
def open_transport(settings: Settings) -> Generator[redis.Redis, None, None]:
    """Open the transport connection for the duration of a run.

    Args:
        settings: Application settings

    Yields:
        Redis client, verified with PING

    Raises:
        TransportError: If the transport cannot be reached
    """
    client = redis.Redis.from_url(
        settings.transport_url,
        decode_responses=False,
        socket_timeout=settings.TRANSPORT_TIMEOUT,
        socket_connect_timeout=settings.TRANSPORT_TIMEOUT,
    )
    try:
        try:
            client.ping()
        except RedisError as e:
            raise TransportError(settings.TRANSPORT_QUEUE, str(e)) from e
        logger.debug(
            "Connected to transport",
            host=settings.TRANSPORT_HOST,
            port=settings.TRANSPORT_PORT,
            vhost=settings.TRANSPORT_VHOST,
        )
        yield client
    finally:
        client.close()


class PublisherGateway:
    """Hands serialized messages to the transport.

    The only contract is whether the transport accepted the push. Delivery
    and acknowledgement are the transport's business; a rejected push is
    never retried.
    """

    def __init__(self, client: redis.Redis, queue: str) -> None:
        """Initialize gateway.

        Args:
            client: Redis client
            queue: Default destination queue
        """
        self.client = client
        self.queue = queue

    def publish(self, message: WatchfolderMessage, queue: str | None = None) -> None:
        """Push one message onto the destination queue.

        Args:
            message: Message to publish
            queue: Destination queue, the gateway default when omitted

        Raises:
            TransportError: If the transport rejects the push
        """
        destination = queue or self.queue
        payload = message.to_json()
        try:
            self.client.rpush(destination, payload.encode("utf-8"))
        except RedisError as e:
            MESSAGES_PUBLISHED.labels(queue=destination, status="failure").inc()
            raise TransportError(destination, str(e)) from e

        MESSAGES_PUBLISHED.labels(queue=destination, status="success").inc()
        logger.debug(
            "Published watchfolder message",
            queue=destination,
            flow_id=message.flow_id,
            file_name=message.essence.file_name,
        )
