import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Vendor(str, Enum):
    APTECH = "aptech"
    HIGERTECH = "higertech"


class SensorKind(str, Enum):
    WATER_LEVEL = "awlr"
    RAINFALL = "arr"

    @property
    def label(self) -> str:
        return self.value.upper()

    @property
    def value_field(self) -> str:
        """Name of the measurement column in the downstream station store."""
        return "water_level" if self is SensorKind.WATER_LEVEL else "rainfall"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class RawReading:
    """One vendor record, values exactly as the vendor reported them."""

    vendor: Vendor
    device_id: str
    reading_at: Optional[str]
    water_level: Any = None
    rainfall: Any = None
    battery: Any = None

    def measurement(self, sensor_kind: SensorKind) -> Any:
        if sensor_kind is SensorKind.WATER_LEVEL:
            return self.water_level
        return self.rainfall

    def is_complete(self, sensor_kind: SensorKind) -> bool:
        return not _is_blank(self.reading_at) and not _is_blank(self.measurement(sensor_kind))


class CanonicalReading(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    device_id: str = Field(min_length=1)
    post_name: str = Field(min_length=1)
    sensor_kind: SensorKind
    observed_at: datetime
    value: float
    battery: Optional[float] = None

    @field_validator("observed_at")
    @classmethod
    def _require_offset(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("observed_at must carry a UTC offset")
        return v

    @field_validator("value", "battery")
    @classmethod
    def _require_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("measurement must be a finite number")
        return v

    def to_station_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "time": self.observed_at,
            self.sensor_kind.value_field: self.value,
            "post_name": self.post_name,
        }
        if self.battery is not None:
            payload["battery"] = self.battery
        return payload


class SyncStatus(str, Enum):
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class DeviceResult:
    device_id: str
    sensor_kind: SensorKind
    status: SyncStatus
    post_name: Optional[str] = None
    reason: str = ""


@dataclass
class CycleSummary:
    vendor: Vendor
    results: List[DeviceResult] = field(default_factory=list)
    fetch_error: Optional[str] = None

    def add(self, result: DeviceResult) -> None:
        self.results.append(result)

    def _count(self, status: SyncStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def updated(self) -> int:
        return self._count(SyncStatus.UPDATED)

    @property
    def skipped(self) -> int:
        return self._count(SyncStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(SyncStatus.FAILED)

    @property
    def completed(self) -> bool:
        return self.fetch_error is None

    def describe(self) -> str:
        if not self.completed:
            return f"{self.vendor.value}: aborted ({self.fetch_error})"
        return (
            f"{self.vendor.value}: {self.updated} updated, "
            f"{self.skipped} skipped, {self.failed} failed"
        )
