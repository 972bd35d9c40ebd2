from __future__ import annotations

from tenantsync.domain.model import PassResult, Tenant


def test_tenant_record_always_carries_its_id() -> None:
    tenant = Tenant(id="t1", payload={"id": "stale", "name": "Acme"})

    assert tenant.as_record() == {"id": "t1", "name": "Acme"}
    assert str(tenant) == "t1"


def test_pass_result_ok() -> None:
    assert PassResult(tenants=["t1"], synced=["t1"]).ok is True
    assert PassResult(skipped=True).ok is False
    assert PassResult(error="down").ok is False
    assert PassResult(failed={"t1": "boom"}).ok is False
