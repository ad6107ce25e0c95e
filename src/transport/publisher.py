"""
src/transport/publisher.py
──────────────────────────
Outbound transport for telemetry events.

Topic layout:
  <prefix>/depot/<depotId>/train/<vehicleId>       vehicle telemetry (QoS 1)
  <prefix>/depot/<depotId>/pointmachine/<deviceId> point machine telemetry (QoS 1)
  <prefix>/depot/<depotId>/status                  depot registration (retained)

Publishers never raise on delivery problems: failures are logged and the
tick loop carries on. Reconnection is paho's job, with a fixed backoff.
While offline, QoS 1 messages wait in paho's bounded outgoing queue.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import paho.mqtt.client as mqtt

_logger = logging.getLogger(__name__)


class Publisher(Protocol):
    def publish(self, topic: str, payload: dict[str, Any], *, qos: int = 1, retain: bool = False) -> None: ...


@dataclass(frozen=True)
class TopicScheme:
    prefix: str = "railstream"

    def vehicle(self, depot_id: str, vehicle_id: str) -> str:
        return f"{self.prefix}/depot/{depot_id}/train/{vehicle_id}"

    def point_machine(self, depot_id: str, device_id: str) -> str:
        return f"{self.prefix}/depot/{depot_id}/pointmachine/{device_id}"

    def depot_status(self, depot_id: str) -> str:
        return f"{self.prefix}/depot/{depot_id}/status"


# ── In-memory publisher ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class PublishedMessage:
    topic: str
    payload: dict[str, Any]
    qos: int
    retain: bool


@dataclass
class RecordingPublisher:
    """Keeps every message in memory; used for dry runs and tests."""
    messages: list[PublishedMessage] = field(default_factory=list)

    def publish(self, topic: str, payload: dict[str, Any], *, qos: int = 1, retain: bool = False) -> None:
        self.messages.append(PublishedMessage(topic=topic, payload=payload, qos=qos, retain=retain))

    def topics(self) -> list[str]:
        return [m.topic for m in self.messages]


# ── MQTT publisher ────────────────────────────────────────────────────────────

def parse_broker_url(url: str) -> tuple[str, int, bool]:
    """
    "mqtt://broker:1883" → ("broker", 1883, False); "mqtts://host" → ("host", 8883, True).
    A bare host defaults to plain MQTT on 1883.
    """
    value = url.strip()
    if not value:
        raise ValueError("Broker URL is empty")

    scheme = "mqtt"
    if "://" in value:
        scheme, value = value.split("://", 1)
    if "/" in value:
        value = value.split("/", 1)[0]

    tls = scheme.lower() in ("mqtts", "ssl", "tls")
    host, _, maybe_port = value.rpartition(":")
    if host and maybe_port.isdigit():
        return host, int(maybe_port), tls
    return value, 8883 if tls else 1883, tls


class MqttPublisher:
    """paho-mqtt publisher running its network loop on a background thread."""

    def __init__(
        self,
        broker_url: str,
        client_id: str,
        *,
        reconnect_delay_s: int = 5,
        connect_timeout_s: int = 30,
        keepalive: int = 60,
        max_queued_messages: int = 1000,
        client: mqtt.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host, self._port, self._tls = parse_broker_url(broker_url)
        self._client_id = client_id
        self._reconnect_delay_s = reconnect_delay_s
        self._connect_timeout_s = connect_timeout_s
        self._keepalive = keepalive
        self._max_queued_messages = max_queued_messages
        self._client = client
        self._logger = logger or _logger
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _build_client(self) -> mqtt.Client:
        client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
            clean_session=True,
        )
        client.enable_logger(self._logger)
        if self._tls:
            client.tls_set()
        client.connect_timeout = self._connect_timeout_s
        # Bounds the offline backlog; paho rejects with MQTT_ERR_QUEUE_SIZE once full
        client.max_queued_messages_set(self._max_queued_messages)
        return client

    def start(self) -> None:
        """Connect asynchronously; messages published before the session is up are queued."""
        client = self._client or self._build_client()
        client.reconnect_delay_set(min_delay=self._reconnect_delay_s, max_delay=self._reconnect_delay_s)

        def on_connect(_c: Any, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.info("Connected to MQTT broker %s:%s", self._host, self._port)

        def on_disconnect(_c: Any, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
            if self._running:
                self._logger.warning("MQTT broker offline (%s); reconnecting every %ss", reason_code, self._reconnect_delay_s)

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect

        self._logger.info("Connecting to MQTT broker %s:%s as %s", self._host, self._port, self._client_id)
        client.connect_async(self._host, self._port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True

    def publish(self, topic: str, payload: dict[str, Any], *, qos: int = 1, retain: bool = False) -> None:
        if self._client is None:
            self._logger.error("Publish to %s dropped: publisher not started", topic)
            return
        info = self._client.publish(topic, json.dumps(payload), qos=qos, retain=retain)
        if info.rc == mqtt.MQTT_ERR_NO_CONN and qos > 0:
            self._logger.debug("Publish to %s queued until reconnect", topic)
        elif info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._logger.warning("Publish to %s not accepted: %s", topic, mqtt.error_string(info.rc))

    def stop(self) -> None:
        client = self._client
        was_running = self._running
        self._running = False
        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.info("MQTT network loop stopped")
