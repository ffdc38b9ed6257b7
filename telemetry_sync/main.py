from typing import Dict, Optional

from telemetry_sync.config import Settings
from telemetry_sync.db.trino_client import TrinoClient
from telemetry_sync.db.station_store import StationStore, TrinoStationStore
from telemetry_sync.db import ddl

from telemetry_sync.ingestion.aptech_client import AptechClient
from telemetry_sync.ingestion.higertech_client import HigertechClient
from telemetry_sync.ingestion.normalizer import DataNormalizer
from telemetry_sync.ingestion.registry import build_default_registries
from telemetry_sync.ingestion.schema import SensorKind, Vendor
from telemetry_sync.ingestion.sync_job import BatchSyncJob, PerDeviceSyncJob, SyncJob

from telemetry_sync.scheduling.scheduler import GuardedCycle, IntervalScheduler
from telemetry_sync.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

def _trino(s: Settings) -> TrinoClient:
    return TrinoClient(s.trino_host, s.trino_port, s.trino_user, s.trino_catalog, s.trino_schema)

def _tables(s: Settings) -> Dict[SensorKind, str]:
    return {SensorKind.WATER_LEVEL: s.awlr_table, SensorKind.RAINFALL: s.arr_table}

def build_stores(s: Settings, trino: Optional[TrinoClient] = None) -> Dict[SensorKind, StationStore]:
    trino = trino or _trino(s)
    return {
        kind: TrinoStationStore(trino, s.trino_schema, table, kind)
        for kind, table in _tables(s).items()
    }

def build_jobs(s: Settings, stores: Optional[Dict[SensorKind, StationStore]] = None) -> Dict[Vendor, SyncJob]:
    stores = stores if stores is not None else build_stores(s)
    registries = build_default_registries()
    normalizer = DataNormalizer()

    aptech = AptechClient(s.aptech_url, s.aptech_params(), timeout_s=s.request_timeout_s, attempts=s.request_attempts)
    higertech = HigertechClient(s.higertech_base_url, timeout_s=s.request_timeout_s, attempts=s.request_attempts)

    return {
        Vendor.APTECH: BatchSyncJob(aptech, registries[Vendor.APTECH], normalizer, stores),
        Vendor.HIGERTECH: PerDeviceSyncJob(higertech, registries[Vendor.HIGERTECH], normalizer, stores),
    }

def init():
    s = Settings()
    trino = _trino(s)
    trino.execute(ddl.create_schema(s.trino_schema))
    for kind, table in _tables(s).items():
        trino.execute(ddl.create_station_table(s.trino_schema, table, kind))

def build_scheduler(s: Settings, jobs: Dict[Vendor, SyncJob]) -> IntervalScheduler:
    cycles = [GuardedCycle(vendor.value, job) for vendor, job in jobs.items()]
    return IntervalScheduler(cycles, interval_s=s.sync_interval_s)

def main():
    s = Settings()
    setup_logging(s.log_level)
    init()

    jobs = build_jobs(s)
    if s.run_once:
        for job in jobs.values():
            job.run()
        return

    build_scheduler(s, jobs).run_forever()

if __name__ == "__main__":
    main()
