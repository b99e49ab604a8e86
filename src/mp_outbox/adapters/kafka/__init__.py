"""Kafka adapter – aiokafka publisher."""
from mp_outbox.adapters.kafka.publisher import KafkaPublisher

__all__ = ["KafkaPublisher"]
