"""Tests for topic configuration and the port registry."""
import pytest
from pydantic import ValidationError
from eventgrid_simulator.config import Settings, TopicSettings
from eventgrid_simulator.topics import Topic, TopicRegistry


def test_lookup_by_port():
    registry = TopicRegistry([Topic(name="orders", port=60101, key="k"), Topic(name="audit", port=60102)])
    assert registry.for_port(60101).name == "orders"
    assert registry.for_port(60102).requires_auth is False
    assert registry.for_port(60103) is None
    assert registry.for_port(None) is None
    assert registry.ports == [60101, 60102]
    assert len(registry) == 2


def test_duplicate_ports_rejected():
    with pytest.raises(ValueError, match="both listen on port 60101"):
        TopicRegistry([Topic(name="a", port=60101), Topic(name="b", port=60101)])


def test_topics_are_immutable():
    topic = Topic(name="orders", port=60101)
    with pytest.raises(ValidationError):
        topic.key = "changed"


def test_registry_from_settings():
    registry = TopicRegistry.from_settings([TopicSettings(name="orders", port=60101, key="abc123")])
    assert registry.for_port(60101) == Topic(name="orders", port=60101, key="abc123")


def test_settings_defaults():
    settings = Settings(LOG_JSON=False)
    assert settings.MAX_PAYLOAD_BYTES == 1536000
    assert settings.MAX_EVENT_BYTES == 66560


def test_settings_topics_from_env(monkeypatch):
    monkeypatch.setenv(
        "EVENTGRID_TOPICS",
        '[{"name": "orders", "port": 60101, "key": "abc123"}, {"name": "audit", "port": 60102}]',
    )
    settings = Settings()
    assert [t.port for t in settings.TOPICS] == [60101, 60102]
    assert settings.TOPICS[1].key is None


def test_settings_reject_duplicate_ports():
    with pytest.raises(ValidationError):
        Settings(TOPICS=[TopicSettings(name="a", port=1), TopicSettings(name="b", port=1)])
