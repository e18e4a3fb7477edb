"""Shared fixtures: a two-topic app and its topics."""
import pytest
from eventgrid_simulator.config import Settings, TopicSettings
from eventgrid_simulator.main import create_app
from eventgrid_simulator.services.delivery import DeliveryService
from eventgrid_simulator.topics import Topic
from .factories import OPEN_PORT, SECURED_PORT, TOPIC_KEY


@pytest.fixture
def secured_topic():
    return Topic(name="orders", port=SECURED_PORT, key=TOPIC_KEY)


@pytest.fixture
def open_topic():
    return Topic(name="audit", port=OPEN_PORT)


@pytest.fixture
def settings():
    return Settings(
        LOG_JSON=False,
        TOPICS=[
            TopicSettings(name="orders", port=SECURED_PORT, key=TOPIC_KEY),
            TopicSettings(name="audit", port=OPEN_PORT),
        ],
    )


@pytest.fixture
def delivery():
    return DeliveryService()


@pytest.fixture
def app(settings, delivery):
    return create_app(settings, delivery=delivery)
