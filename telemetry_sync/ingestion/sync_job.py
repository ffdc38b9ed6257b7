from abc import ABC, abstractmethod
from typing import List, Mapping, Optional
from .aptech_client import AptechClient
from .higertech_client import HigertechClient
from .normalizer import DataNormalizer, NormalizationError
from .registry import DeviceRegistry, VendorRegistries
from .schema import CycleSummary, DeviceResult, RawReading, SensorKind, SyncStatus, Vendor
from ..db.station_store import StationStore
from ..utils.logging import get_logger

logger = get_logger(__name__)

class SyncJob(ABC):
    """One vendor's cycle: fetch, then normalize and upsert device by device.

    Nothing raised while handling a single device leaves ``_process``; the
    outcome is recorded as a ``DeviceResult`` instead.
    """

    def __init__(
        self,
        registries: VendorRegistries,
        normalizer: DataNormalizer,
        stores: Mapping[SensorKind, StationStore],
    ):
        missing = [k.value for k in SensorKind if k not in stores]
        if missing:
            raise ValueError(f"No station store for: {', '.join(missing)}")
        self.registries = registries
        self.normalizer = normalizer
        self.stores = stores

    @property
    def vendor(self) -> Vendor:
        return self.registries.vendor

    @abstractmethod
    def run(self) -> CycleSummary:
        ...

    def _process(self, raw: RawReading, registry: DeviceRegistry, post_name: str) -> DeviceResult:
        kind = registry.sensor_kind
        device_id = raw.device_id

        if not raw.is_complete(kind):
            logger.warning(f"Incomplete {kind.label} data for device {device_id}")
            return DeviceResult(device_id, kind, SyncStatus.SKIPPED, post_name, "incomplete data")

        try:
            reading = self.normalizer.normalize(raw, kind, post_name)
        except NormalizationError as e:
            logger.warning(f"Invalid {kind.label} data for {post_name} ({device_id}): {e}")
            return DeviceResult(device_id, kind, SyncStatus.FAILED, post_name, str(e))

        try:
            self.stores[kind].update_by_device_id(device_id, reading.to_station_payload())
        except Exception as e:
            logger.warning(f"Failed to update {kind.label} {post_name} ({device_id}): {e}")
            return DeviceResult(device_id, kind, SyncStatus.FAILED, post_name, f"store error: {e}")

        logger.info(f"{kind.label} updated: {post_name} ({device_id})")
        return DeviceResult(device_id, kind, SyncStatus.UPDATED, post_name)

    def _finish(self, summary: CycleSummary) -> CycleSummary:
        logger.info(f"Sync complete - {summary.describe()}")
        return summary


class BatchSyncJob(SyncJob):
    """Aptech: a single request carries every device; its failure ends the cycle."""

    def __init__(
        self,
        client: AptechClient,
        registries: VendorRegistries,
        normalizer: DataNormalizer,
        stores: Mapping[SensorKind, StationStore],
    ):
        super().__init__(registries, normalizer, stores)
        self.client = client

    def run(self) -> CycleSummary:
        summary = CycleSummary(vendor=self.vendor)
        logger.info(f"Running {self.vendor.value} sync...")
        try:
            records = self.client.fetch_readings()
        except Exception as e:
            logger.error(f"{self.vendor.value} sync failed: {e}")
            summary.fetch_error = str(e)
            return summary

        for registry in self.registries.by_kind():
            for raw, post_name in self._matched(records, registry):
                summary.add(self._process(raw, registry, post_name))
        return self._finish(summary)

    @staticmethod
    def _matched(records: List[RawReading], registry: DeviceRegistry):
        for raw in records:
            post_name = registry.lookup(raw.device_id)
            if post_name is not None:
                yield raw, post_name


class PerDeviceSyncJob(SyncJob):
    """Higertech: one request per registered device, each failing on its own."""

    def __init__(
        self,
        client: HigertechClient,
        registries: VendorRegistries,
        normalizer: DataNormalizer,
        stores: Mapping[SensorKind, StationStore],
    ):
        super().__init__(registries, normalizer, stores)
        self.client = client

    def run(self) -> CycleSummary:
        summary = CycleSummary(vendor=self.vendor)
        logger.info(f"Running {self.vendor.value} sync...")
        for registry in self.registries.by_kind():
            for device_id, post_name in registry.items():
                summary.add(self._sync_device(device_id, post_name, registry))
        return self._finish(summary)

    def _sync_device(self, device_id: str, post_name: str, registry: DeviceRegistry) -> DeviceResult:
        kind = registry.sensor_kind
        raw: Optional[RawReading]
        try:
            raw = self.client.fetch_one(device_id, kind)
        except Exception as e:
            # fetch_one normally returns None instead of raising
            logger.warning(f"Unexpected error fetching {kind.label} device {device_id}: {e}")
            return DeviceResult(device_id, kind, SyncStatus.FAILED, post_name, str(e))
        if raw is None:
            return DeviceResult(device_id, kind, SyncStatus.SKIPPED, post_name, "no data")
        return self._process(raw, registry, post_name)
