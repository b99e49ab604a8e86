"""Unit tests for the relay launcher wiring."""
from __future__ import annotations

import pytest

from mp_outbox.config import RelaySettings
from mp_outbox.relay import OutboxRelay, launcher
from mp_outbox.runtime import WorkerPool
from mp_outbox.testing import InMemoryOutboxStore, InMemoryTopicCoordinator, RecordingPublisher


class _FakeController:
    instances: list["_FakeController"] = []

    def __init__(self, runner, signals) -> None:
        self.runner = runner
        self.signals = signals
        self.ran = False
        _FakeController.instances.append(self)

    def run(self) -> str:
        self.ran = True
        return "SIGTERM"


@pytest.fixture(autouse=True)
def fake_controller(monkeypatch):
    _FakeController.instances.clear()
    monkeypatch.setattr(launcher, "ShutdownController", _FakeController)
    return _FakeController


class TestBuildRelays:
    def test_one_relay_per_publisher(self) -> None:
        publishers = [RecordingPublisher(), RecordingPublisher()]
        relays = launcher.build_relays(
            RelaySettings(), InMemoryOutboxStore(), InMemoryTopicCoordinator(), publishers
        )
        assert len(relays) == 2
        assert all(isinstance(r, OutboxRelay) for r in relays)
        assert relays[0].id != relays[1].id


class TestStartOutboxRelays:
    def test_wires_worker_pool_and_closes_publishers(self) -> None:
        settings = RelaySettings(database_url="sqlite://", worker_count=3, shutdown_signals=["TERM"])
        publishers: list[RecordingPublisher] = []

        def factory() -> RecordingPublisher:
            publishers.append(RecordingPublisher())
            return publishers[-1]

        launcher.start_outbox_relays(settings, publisher_factory=factory)

        [controller] = _FakeController.instances
        assert controller.ran
        assert isinstance(controller.runner, WorkerPool)
        assert len(controller.runner.runners) == 3
        assert [s.name for s in controller.signals] == ["SIGTERM"]
        assert len(publishers) == 3
        assert all(p.closed for p in publishers)

    def test_publishers_closed_when_run_fails(self, monkeypatch) -> None:
        def _boom(self) -> str:
            raise RuntimeError("boom")

        monkeypatch.setattr(_FakeController, "run", _boom)
        publisher = RecordingPublisher()
        with pytest.raises(RuntimeError):
            launcher.start_outbox_relays(
                RelaySettings(database_url="sqlite://"), publisher_factory=lambda: publisher
            )
        assert publisher.closed

    def test_settings_loaded_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("OUTBOX_DATABASE_URL", "sqlite://")
        monkeypatch.setenv("OUTBOX_WORKER_COUNT", "2")
        launcher.start_outbox_relays(publisher_factory=RecordingPublisher)
        [controller] = _FakeController.instances
        assert len(controller.runner.runners) == 2


class TestMain:
    def test_loads_dotenv_and_configures_logging(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OUTBOX_BATCH_SIZE", "1000")
        (tmp_path / ".env").write_text("OUTBOX_BATCH_SIZE=250\n")
        calls: list[object] = []
        monkeypatch.setattr(launcher, "configure_logging", lambda: calls.append("logging"))
        monkeypatch.setattr(launcher, "start_outbox_relays", calls.append)

        launcher.main()

        assert calls[0] == "logging"
        # variables already set in the environment win over the file
        assert calls[1].batch_size == 1000
