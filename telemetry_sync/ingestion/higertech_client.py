import requests
from typing import Any, Dict, Optional
from .schema import RawReading, SensorKind, Vendor
from .vendor_client import VendorClient
from ..utils.logging import get_logger

logger = get_logger(__name__)

class HigertechClient(VendorClient):
    """Per-device endpoint. Every failure mode collapses to ``None`` plus one warning."""

    def __init__(self, base_url: str, timeout_s: int = 30, attempts: int = 1):
        super().__init__(timeout_s=timeout_s, attempts=attempts)
        self.base_url = base_url.rstrip("/")

    def device_url(self, device_id: str) -> str:
        return f"{self.base_url}/reading/device/{device_id}"

    def fetch_one(self, device_id: str, sensor_kind: SensorKind) -> Optional[RawReading]:
        try:
            payload = self._get(self.device_url(device_id))
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to fetch data for device {device_id}: {e}")
            return None

        record = self._select(payload, device_id)
        if record is None:
            logger.warning(f"No data for device {device_id}")
            return None

        reading = RawReading(
            vendor=Vendor.HIGERTECH,
            device_id=device_id,
            reading_at=record.get("reading_at"),
            water_level=record.get("water_level"),
            rainfall=record.get("rainfall"),
            battery=record.get("battery"),
        )
        if not reading.is_complete(sensor_kind):
            logger.warning(f"Incomplete {sensor_kind.label} data for device {device_id}")
            return None
        return reading

    @staticmethod
    def _select(payload: Any, device_id: str) -> Optional[Dict[str, Any]]:
        # the endpoint may return readings of other devices alongside the requested one
        candidates = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(candidates, list):
            return None
        for entry in candidates:
            if isinstance(entry, dict) and entry.get("device_id") == device_id:
                return entry
        return None
