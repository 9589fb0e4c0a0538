"""Kafka producer for publishing order placed events."""

from typing import Optional, Protocol

from confluent_kafka import Producer

from .logger import logger
from .schemas import OrderPlacedEvent

ORDER_PLACED_TOPIC = "order-placed-topic"


class EventPublisher(Protocol):
    """Protocol for publishing order events to a named channel."""

    def publish(self, channel: str, event: OrderPlacedEvent) -> None:
        """Publish an event. May raise if the event cannot be handed off."""
        ...


class OrderEventProducer:
    """Kafka producer for publishing order placed events.

    Messages are keyed by order number so every event of an order lands on
    the same partition.

    Attributes:
        _producer: The underlying Kafka producer instance.
    """

    def __init__(self, bootstrap_servers: str, client_id: str = "order-service", acks: str = "all"):
        """Initialize the Kafka producer with the given bootstrap servers.

        Args:
            bootstrap_servers (str): Comma-separated list of Kafka broker addresses.
            client_id (str): Producer client ID.
            acks (str): The number of acknowledgments the producer requires.
        """
        self._producer = Producer(
            {
                "bootstrap.servers": bootstrap_servers,
                "client.id": client_id,
                "acks": acks,
                "message.timeout.ms": 5000,
                "partitioner": "consistent_random",  # Same key → same partition
            }
        )

    @property
    def producer(self):
        """Get the underlying Kafka producer instance.

        Returns:
            Producer: The Kafka producer instance.
        """
        return self._producer

    def _delivery_callback(self, err, msg):
        """Callback function for message delivery reports.

        Args:
            err: Error that occurred during message delivery, if any.
            msg: Message that was delivered or failed.
        """
        if err:
            logger.bind(topic=msg.topic(), key=msg.key()).error(f"Message failed delivery: {err}")
        else:
            logger.debug(f"Message delivered to {msg.topic()} [p:{msg.partition()}] @ {msg.offset()}")

    def publish(self, channel: str, event: OrderPlacedEvent) -> None:
        """Publish an order placed event to a Kafka topic.

        Args:
            channel (str): Kafka topic to publish to.
            event (OrderPlacedEvent): The event to publish.

        Raises:
            BufferError: If the producer's internal buffer is full.
            KafkaException: If the message cannot be enqueued.
        """
        try:
            self._producer.produce(
                topic=channel,
                key=event.order_number.encode("utf-8"),
                value=event.to_json().encode("utf-8"),
                on_delivery=self._delivery_callback,
            )
            self._producer.poll(0)  # Trigger delivery callbacks
        except BufferError:
            logger.warning("Producer buffer full, flushing...")
            self._producer.flush()
            raise

    def flush(self, timeout: float = 10.0) -> None:
        """Wait for all messages to be delivered.

        Args:
            timeout: Maximum time to wait in seconds
        """
        remaining = self._producer.flush(timeout)
        if remaining > 0:
            logger.warning(f"{remaining} messages still pending delivery")

    def close(self, timeout: Optional[float] = None) -> None:
        """Flush pending messages before shutdown."""
        self.flush(timeout if timeout is not None else 10.0)
