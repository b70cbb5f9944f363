# events.py - best-effort catalog event stream
import json
import logging
import time
import uuid

import config

logger = logging.getLogger(__name__)

EVENT_SOURCE = "catalog"

_producer = None
_producer_failed = False


def get_producer():
    """Return the shared Kafka producer, creating it on first use.

    Returns None when no bootstrap servers are configured or the producer
    could not be created; a failed creation is not retried.
    """
    global _producer, _producer_failed
    if _producer is not None or _producer_failed or not config.KAFKA_BOOTSTRAP:
        return _producer
    try:
        from kafka import KafkaProducer
        _producer = KafkaProducer(
            bootstrap_servers=[h.strip() for h in config.KAFKA_BOOTSTRAP.split(',')],
            key_serializer=lambda k: str(k).encode('utf-8'),
            value_serializer=lambda v: json.dumps(v).encode('utf-8'),
        )
        logger.info("Kafka producer initialized for %s", config.KAFKA_BOOTSTRAP)
    except Exception as e:
        _producer_failed = True
        logger.error("Failed to initialize Kafka producer: %s", e)
    return _producer


def build_event(event_type, payload):
    """Wrap a payload in the catalog event envelope."""
    return {
        'event_id': uuid.uuid4().hex,
        'source': EVENT_SOURCE,
        'type': event_type,
        'occurred_at': time.time(),
        'payload': payload,
    }


def partition_key(payload):
    # events about one title stay ordered on one partition
    return payload.get('title_id')


def publish_event(event_type, payload):
    """Publish a catalog event, or log it when Kafka is not configured.

    Publishing never fails the caller's request.
    """
    event = build_event(event_type, payload)
    producer = get_producer()
    if producer is None:
        logger.debug("Kafka producer not initialized. Event: %s", event)
        return event
    try:
        producer.send(config.KAFKA_TOPIC, key=partition_key(payload), value=event)
        producer.flush()
        logger.info("Kafka event sent: %s (%s)", event_type, event['event_id'])
    except Exception as e:
        logger.error("Kafka send error for event '%s': %s", event_type, e)
    return event
