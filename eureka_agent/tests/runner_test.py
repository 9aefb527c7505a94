"""
Command-line runner tests.
"""

import os
import signal
from unittest.mock import Mock

import pytest

from eureka_agent.agent import LifecycleController, ShutdownState
from eureka_agent.runner import runner as runner_module
from eureka_agent.runner.utils import build_config, parse_arguments
from .fakes import FakeTransport, RecordingRetry


def test_arguments_build_config():
    args = parse_arguments([
        "--registry-url", "http://eureka:8761/eureka/",
        "--app-name", "ORDER-SERVICE",
        "--port", "9090",
        "--username", "admin",
        "--password", "secret",
        "--heartbeat-interval", "5",
        "--verbose",
    ])

    config = build_config(args)

    assert config.registry_url == "http://eureka:8761/eureka"
    assert config.app_name == "ORDER-SERVICE"
    assert config.port == "9090"
    assert config.username == "admin"
    assert config.password == "secret"
    assert config.heartbeat_interval == 5.0
    assert config.retry_interval == 10.0
    assert config.grace_period == 3.0
    assert config.verbose


def test_app_name_is_required():
    with pytest.raises(SystemExit):
        parse_arguments([])


@pytest.fixture
def wired(monkeypatch):
    controller = Mock()
    coordinator = Mock()
    coordinator.wait.return_value = True
    coordinator.state = ShutdownState.RUNNING
    monkeypatch.setattr(runner_module, "LifecycleController", Mock(return_value=controller))
    monkeypatch.setattr(runner_module, "ShutdownCoordinator", Mock(return_value=coordinator))
    monkeypatch.setattr(runner_module, "configure_logging", Mock())
    return controller, coordinator


def test_run_agent_registers_and_waits_for_termination(wired):
    controller, coordinator = wired

    assert runner_module.run_agent(["--app-name", "ORDER-SERVICE"]) == 0

    coordinator.install.assert_called_once_with()
    controller.register.assert_called_once_with()
    coordinator.wait.assert_called_with(1)
    coordinator.uninstall.assert_called_once_with()
    controller.transport.close.assert_called_once_with()


def test_run_agent_deregisters_on_unexpected_error(wired):
    controller, coordinator = wired
    controller.register.side_effect = RuntimeError("boom")

    assert runner_module.run_agent(["--app-name", "ORDER-SERVICE"]) == 1

    coordinator.shutdown.assert_called_once_with()
    controller.transport.close.assert_called_once_with()


def test_signal_during_startup_only_deregisters(monkeypatch):
    transport = FakeTransport()

    def controller_factory(config):
        return LifecycleController(config, transport=transport, retry_policy=RecordingRetry(),
                                   resolver=lambda: "10.0.0.7")

    monkeypatch.setattr(runner_module, "configure_logging", Mock())
    monkeypatch.setattr(runner_module, "LifecycleController", controller_factory)
    # SIGTERM lands after the handlers are installed but before registration starts
    monkeypatch.setattr(runner_module, "interface_summary", lambda: os.kill(os.getpid(), signal.SIGTERM))

    assert runner_module.run_agent(["--app-name", "ORDER-SERVICE", "--grace-period", "0"]) == 0

    assert [p["status"] for p in transport.posts] == ["DOWN"]
    assert transport.heartbeats == []
    assert transport.closed


def test_skips_registration_when_already_stopping(wired):
    controller, coordinator = wired
    coordinator.state = ShutdownState.STOPPING

    assert runner_module.run_agent(["--app-name", "ORDER-SERVICE"]) == 0

    controller.register.assert_not_called()
