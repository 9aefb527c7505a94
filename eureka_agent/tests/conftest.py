"""
Shared fixtures for lifecycle tests.
"""

import pytest

from eureka_agent.agent import AgentConfig, LifecycleController
from .fakes import FakeTransport, RecordingRetry


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig(
        registry_url="http://registry.test/eureka/",
        app_name="ORDER-SERVICE",
        port="9090",
        username="admin",
        password="secret",
        retry_interval=0.01,
        heartbeat_interval=60,
        grace_period=0.0,
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def retry() -> RecordingRetry:
    return RecordingRetry()


@pytest.fixture
def controller(config, transport, retry):
    controller = LifecycleController(
        config,
        transport=transport,
        retry_policy=retry,
        resolver=lambda: "10.0.0.7",
    )
    yield controller
    controller.stop_heartbeat(timeout=2)
