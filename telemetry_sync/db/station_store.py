import time
from datetime import datetime
from typing import Any, Dict, Optional, Protocol
from .trino_client import TrinoClient
from ..ingestion.schema import SensorKind

def now_ms() -> int:
    return int(time.time() * 1000)

class StationStore(Protocol):
    def update_by_device_id(self, device_id: str, payload: Dict[str, Any]) -> None:
        ...

class TrinoStationStore:
    """Latest-reading table for one sensor kind, keyed by device_id."""

    def __init__(self, trino: TrinoClient, schema: str, table: str, sensor_kind: SensorKind):
        self.trino = trino
        self.schema = schema
        self.table = table
        self.sensor_kind = sensor_kind

    def update_by_device_id(self, device_id: str, payload: Dict[str, Any]) -> None:
        value_field = self.sensor_kind.value_field
        if value_field not in payload:
            raise KeyError(f"payload for {device_id} has no {value_field}")

        # simplest: delete + insert (last write wins)
        self.trino.execute(f"""DELETE FROM {self.schema}.{self.table} WHERE device_id = {self._sql_str(device_id)}""")
        self.trino.execute(
            f"""INSERT INTO {self.schema}.{self.table}
            (device_id, post_name, observed_at, {value_field}, battery, updated_ts)
            VALUES ({self._sql_str(device_id)}, {self._sql_str(payload.get("post_name"))},
            {self._sql_ts(payload.get("time"))}, {self._sql_num(payload[value_field])},
            {self._sql_num(payload.get("battery"))}, {now_ms()})
            """
        )

    def _sql_str(self, s: Optional[str]) -> str:
        if s is None:
            return "NULL"
        escaped = str(s).replace("'", "''")
        return f"'{escaped}'"

    def _sql_num(self, v: Optional[float]) -> str:
        if v is None:
            return "NULL"
        return repr(float(v))

    def _sql_ts(self, ts: Optional[datetime]) -> str:
        if ts is None:
            return "NULL"
        if ts.tzinfo is None:
            raise ValueError("station timestamps must carry an offset")
        offset = ts.strftime("%z")  # e.g. +0700
        return f"TIMESTAMP '{ts:%Y-%m-%d %H:%M:%S}.{ts.microsecond // 1000:03d} {offset[:3]}:{offset[3:]}'"
