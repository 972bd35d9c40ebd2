from __future__ import annotations

import pytest

from tenantsync import main as main_module
from tenantsync.config import SyncConfig
from tenantsync.domain.errors import SourceUnavailable
from tenantsync.domain.sync import SyncEngine
from tests.helpers.sync_fakes import (
    FakeDeviceSource,
    FakeScheduler,
    FakeTenantSource,
    InMemoryStore,
    make_tenants,
    unavailable,
)


def _patch_engine(
    monkeypatch: pytest.MonkeyPatch,
    tenants: FakeTenantSource,
    devices: FakeDeviceSource,
) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_build(*, sync: SyncConfig) -> SyncEngine:
        captured["sync"] = sync
        engine = SyncEngine(
            store=InMemoryStore(),
            tenant_source=tenants,
            device_source=devices,
            scheduler=FakeScheduler(),  # type: ignore[arg-type]
            cron_expression=sync.cron_expression,
        )
        captured["engine"] = engine
        return engine

    monkeypatch.setattr(main_module, "build_sync_engine", fake_build)
    return captured


def test_main_once_prints_summary(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    tenants = FakeTenantSource(make_tenants("t1", "t2"))
    devices = FakeDeviceSource({"t1": ["devA", "devB"], "t2": unavailable("t2")})
    _patch_engine(monkeypatch, tenants, devices)

    main_module.main(["--once"])

    out, err = capsys.readouterr()
    assert "Synchronized 1/2 tenants, 2 devices" in out
    assert "t2:" in err


def test_main_once_exits_when_pass_aborts(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    tenants = FakeTenantSource(error=SourceUnavailable("tenant registry down"))
    _patch_engine(monkeypatch, tenants, FakeDeviceSource())

    with pytest.raises(SystemExit) as exc:
        main_module.main(["--once"])

    assert exc.value.code == 1
    assert "tenant registry down" in capsys.readouterr().err


def test_main_cron_flag_overrides_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYNC_CRON_EXPRESSION", "0 * * * *")
    captured = _patch_engine(monkeypatch, FakeTenantSource(), FakeDeviceSource())
    served: list[SyncEngine] = []

    async def fake_serve(engine: SyncEngine) -> None:
        served.append(engine)

    monkeypatch.setattr(main_module, "serve", fake_serve)

    main_module.main(["--cron", "*/2 * * * *", "--log-level", "debug"])

    sync = captured["sync"]
    assert isinstance(sync, SyncConfig)
    assert sync.cron_expression == "*/2 * * * *"
    assert served == [captured["engine"]]


def test_main_missing_configuration_exits_with_usage_code(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("TENANT_REGISTRY_URL", raising=False)
    monkeypatch.delenv("DEVICE_REGISTRY_URL", raising=False)

    with pytest.raises(SystemExit) as exc:
        main_module.main(["--once"])

    assert exc.value.code == 2
    assert "TENANT_REGISTRY_URL" in capsys.readouterr().err


def test_main_rejects_malformed_cron(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _patch_engine(monkeypatch, FakeTenantSource(), FakeDeviceSource())

    with pytest.raises(SystemExit) as exc:
        main_module.main(["--cron", "every minute"])

    assert exc.value.code == 2
    assert "5 fields" in capsys.readouterr().err
