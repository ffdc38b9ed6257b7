from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest
import requests

from telemetry_sync.ingestion.schema import RawReading, SensorKind, Vendor


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, bad_json: bool = False) -> None:
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self.bad_json:
            raise requests.JSONDecodeError("Expecting value", "", 0)
        return self.payload


class FakeStore:
    """Records upserts; raises for device ids listed in ``fail_for``."""

    def __init__(self, fail_for: Iterable[str] = ()) -> None:
        self.fail_for = set(fail_for)
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def update_by_device_id(self, device_id: str, payload: Dict[str, Any]) -> None:
        if device_id in self.fail_for:
            raise RuntimeError(f"write rejected for {device_id}")
        self.calls.append((device_id, payload))

    @property
    def device_ids(self) -> List[str]:
        return [device_id for device_id, _ in self.calls]


class FakeTrino:
    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.statements: List[str] = []
        self.fail_on = fail_on

    def execute(self, sql: str) -> list:
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError("query failed")
        self.statements.append(sql)
        return []


@pytest.fixture()
def stores() -> Dict[SensorKind, FakeStore]:
    return {SensorKind.WATER_LEVEL: FakeStore(), SensorKind.RAINFALL: FakeStore()}


@pytest.fixture()
def http_get(monkeypatch):
    """Route ``requests.get`` to a per-URL table of responses or exceptions."""
    routes: Dict[str, Any] = {}
    seen: List[str] = []

    def fake_get(url, params=None, timeout=None):
        seen.append(url)
        outcome = routes.get(url)
        if outcome is None:
            return FakeResponse(status_code=404)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(requests, "get", fake_get)
    fake_get.routes = routes
    fake_get.seen = seen
    return fake_get


def _higertech_raw(device_id: str, **fields: Any) -> RawReading:
    return RawReading(
        vendor=Vendor.HIGERTECH,
        device_id=device_id,
        reading_at=fields.get("reading_at", "2024-01-01 00:00:00"),
        water_level=fields.get("water_level"),
        rainfall=fields.get("rainfall"),
        battery=fields.get("battery"),
    )


@pytest.fixture()
def higertech_raw():
    return _higertech_raw
