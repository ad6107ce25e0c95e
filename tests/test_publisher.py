"""
tests/test_publisher.py
────────────────────────
Tests for topic layout, broker URL parsing and the paho-mqtt publisher.
"""
import json
import logging
from types import SimpleNamespace

import paho.mqtt.client as mqtt
import pytest

from src.transport.publisher import MqttPublisher, RecordingPublisher, TopicScheme, parse_broker_url


class FakeClient:
    """Stands in for paho's Client; records every call."""

    def __init__(self, rc=mqtt.MQTT_ERR_SUCCESS, **client_kwargs):
        self.rc = rc
        self.client_kwargs = client_kwargs
        self.connect_timeout = None
        self.calls = []
        self.published = []
        self.on_connect = None
        self.on_disconnect = None

    def enable_logger(self, logger):
        self.calls.append(("enable_logger",))

    def max_queued_messages_set(self, queue_size):
        self.calls.append(("max_queued_messages_set", queue_size))

    def reconnect_delay_set(self, min_delay, max_delay):
        self.calls.append(("reconnect_delay_set", min_delay, max_delay))

    def connect_async(self, host, port, keepalive=60):
        self.calls.append(("connect_async", host, port))

    def loop_start(self):
        self.calls.append(("loop_start",))

    def loop_stop(self):
        self.calls.append(("loop_stop",))

    def disconnect(self):
        self.calls.append(("disconnect",))

    def publish(self, topic, payload, qos=0, retain=False):
        self.published.append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self.rc)


class TestParseBrokerUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("mqtt://broker.local:1883", ("broker.local", 1883, False)),
            ("mqtt://broker.local", ("broker.local", 1883, False)),
            ("mqtts://broker.local", ("broker.local", 8883, True)),
            ("ssl://10.0.0.5:9000", ("10.0.0.5", 9000, True)),
            ("localhost", ("localhost", 1883, False)),
            ("mqtt://host:1884/ignored", ("host", 1884, False)),
        ],
    )
    def test_parse(self, url, expected):
        assert parse_broker_url(url) == expected

    def test_empty(self):
        with pytest.raises(ValueError):
            parse_broker_url("  ")


class TestTopicScheme:
    def test_default_prefix(self):
        topics = TopicScheme()
        assert topics.vehicle("MOC", "EMU-A1-001") == "railstream/depot/MOC/train/EMU-A1-001"
        assert topics.point_machine("KHU", "KHU-PM-B1") == "railstream/depot/KHU/pointmachine/KHU-PM-B1"
        assert topics.depot_status("KHA") == "railstream/depot/KHA/status"


class TestRecordingPublisher:
    def test_records(self):
        publisher = RecordingPublisher()
        publisher.publish("a/b", {"x": 1}, retain=True)
        assert publisher.topics() == ["a/b"]
        assert publisher.messages[0].retain is True


class TestMqttPublisher:
    def test_start_configures_fixed_backoff(self):
        client = FakeClient()
        publisher = MqttPublisher("mqtt://broker:1883", "agent-1", reconnect_delay_s=5, client=client)
        publisher.start()
        assert client.calls == [
            ("reconnect_delay_set", 5, 5),
            ("connect_async", "broker", 1883),
            ("loop_start",),
        ]
        assert publisher.is_running
        assert callable(client.on_connect)
        assert callable(client.on_disconnect)

    def test_publish_serialises_json(self):
        client = FakeClient()
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        publisher.publish("railstream/depot/MOC/status", {"depotId": "MOC"}, retain=True)
        topic, payload, qos, retain = client.published[0]
        assert topic == "railstream/depot/MOC/status"
        assert json.loads(payload) == {"depotId": "MOC"}
        assert (qos, retain) == (1, True)

    def test_rejected_publish_is_logged(self, caplog):
        client = FakeClient(rc=mqtt.MQTT_ERR_QUEUE_SIZE)
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        with caplog.at_level(logging.WARNING, logger="src.transport.publisher"):
            publisher.publish("t", {"a": 1})
        assert "not accepted" in caplog.text

    def test_publish_before_start_is_dropped(self, caplog):
        publisher = MqttPublisher("mqtt://broker", "agent-1")
        with caplog.at_level(logging.ERROR, logger="src.transport.publisher"):
            publisher.publish("t", {"a": 1})
        assert "not started" in caplog.text

    def test_stop(self):
        client = FakeClient()
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        publisher.stop()
        assert client.calls[-2:] == [("disconnect",), ("loop_stop",)]
        assert not publisher.is_running

    def test_on_disconnect_logs_while_running(self, caplog):
        client = FakeClient()
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        with caplog.at_level(logging.WARNING, logger="src.transport.publisher"):
            client.on_disconnect(client, None, None, "unspecified error", None)
        assert "offline" in caplog.text

    def test_offline_qos1_publish_is_queued_quietly(self, caplog):
        client = FakeClient(rc=mqtt.MQTT_ERR_NO_CONN)
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        with caplog.at_level(logging.DEBUG, logger="src.transport.publisher"):
            publisher.publish("railstream/depot/MOC/status", {"depotId": "MOC"}, qos=1, retain=True)
        warnings = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert warnings == []
        assert "queued until reconnect" in caplog.text

    def test_offline_qos0_publish_is_reported(self, caplog):
        client = FakeClient(rc=mqtt.MQTT_ERR_NO_CONN)
        publisher = MqttPublisher("mqtt://broker", "agent-1", client=client)
        publisher.start()
        with caplog.at_level(logging.WARNING, logger="src.transport.publisher"):
            publisher.publish("t", {"a": 1}, qos=0)
        assert "not accepted" in caplog.text

    def test_built_client_bounds_offline_queue(self, monkeypatch):
        monkeypatch.setattr(mqtt, "Client", lambda **kwargs: FakeClient(**kwargs))
        publisher = MqttPublisher("mqtt://broker", "agent-1", connect_timeout_s=12, max_queued_messages=250)
        client = publisher._build_client()
        assert ("max_queued_messages_set", 250) in client.calls
        assert client.connect_timeout == 12
        assert client.client_kwargs["client_id"] == "agent-1"
        assert client.client_kwargs["callback_api_version"] is mqtt.CallbackAPIVersion.VERSION2
