import requests
from typing import Any, Dict, List, Optional
from .schema import RawReading, Vendor
from .vendor_client import FetchError, VendorClient
from ..utils.logging import get_logger

logger = get_logger(__name__)

class AptechClient(VendorClient):
    """Batch endpoint: one request returns the latest record of every Aptech device."""

    LIST_FIELD = "telemetryjakarta"

    def __init__(self, url: str, params: Dict[str, Any], timeout_s: int = 30, attempts: int = 1):
        super().__init__(timeout_s=timeout_s, attempts=attempts)
        self.url = url
        self.params = params

    def fetch_readings(self) -> List[RawReading]:
        try:
            payload = self._get(self.url, params=self.params)
        except (requests.RequestException, ValueError) as e:
            raise FetchError(f"Aptech request failed: {e}") from e

        records = payload.get(self.LIST_FIELD) if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise FetchError(f"Aptech response has no '{self.LIST_FIELD}' list")

        out: List[RawReading] = []
        for item in records:
            reading = self._to_raw(item)
            if reading is not None:
                out.append(reading)
        logger.info(f"Fetched {len(out)} Aptech records")
        return out

    def _to_raw(self, item: Any) -> Optional[RawReading]:
        if not isinstance(item, dict):
            return None
        device_id = item.get("nama_lokasi")
        if not device_id:
            return None

        date_part = item.get("ReceivedDate")
        time_part = item.get("ReceivedTime")
        reading_at = None
        if date_part:
            reading_at = f"{date_part} {time_part}".strip() if time_part else str(date_part)

        return RawReading(
            vendor=Vendor.APTECH,
            device_id=str(device_id),
            reading_at=reading_at,
            water_level=item.get("WLevel"),
            rainfall=item.get("Rain"),
        )
