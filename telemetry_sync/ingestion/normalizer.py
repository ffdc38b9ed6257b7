import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from dateutil import parser as dt_parser
from pydantic import ValidationError
from .schema import CanonicalReading, RawReading, SensorKind, Vendor

# Vendors report wall-clock time without an offset; the stations are read in WIB
WIB = timezone(timedelta(hours=7), "WIB")
LOCAL_OFFSET = timedelta(hours=7)

# Raw value is divided by this before it becomes the canonical value
UNIT_DIVISORS: Dict[Tuple[Vendor, SensorKind], float] = {
    (Vendor.APTECH, SensorKind.WATER_LEVEL): 100.0,  # centimetres -> metres
}

class NormalizationError(ValueError):
    pass

class DataNormalizer:
    def __init__(self, divisors: Optional[Dict[Tuple[Vendor, SensorKind], float]] = None):
        self.divisors = dict(UNIT_DIVISORS if divisors is None else divisors)

    def _parse_time(self, s: Optional[str]) -> datetime:
        if s is None or not str(s).strip():
            raise NormalizationError("missing timestamp")
        try:
            parsed = dt_parser.isoparse(str(s).strip())
        except (ValueError, OverflowError) as e:
            raise NormalizationError(f"unparsable timestamp {s!r}") from e
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return (parsed + LOCAL_OFFSET).replace(tzinfo=WIB)

    def _to_float(self, v: Any, what: str) -> float:
        if isinstance(v, bool):
            raise NormalizationError(f"non-numeric {what} {v!r}")
        try:
            out = float(v)
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"non-numeric {what} {v!r}") from e
        if not math.isfinite(out):
            raise NormalizationError(f"non-finite {what} {v!r}")
        return out

    def _battery(self, v: Any) -> Optional[float]:
        # optional: anything that is not a usable number is simply dropped
        if v is None or isinstance(v, bool):
            return None
        try:
            out = float(v)
        except (TypeError, ValueError):
            return None
        return out if math.isfinite(out) else None

    def normalize(self, raw: RawReading, sensor_kind: SensorKind, post_name: str) -> CanonicalReading:
        observed_at = self._parse_time(raw.reading_at)

        measurement = raw.measurement(sensor_kind)
        if measurement is None:
            raise NormalizationError(f"missing {sensor_kind.value_field}")
        value = self._to_float(measurement, sensor_kind.value_field)
        value = value / self.divisors.get((raw.vendor, sensor_kind), 1.0)

        try:
            return CanonicalReading(
                device_id=raw.device_id,
                post_name=post_name,
                sensor_kind=sensor_kind,
                observed_at=observed_at,
                value=value,
                battery=self._battery(raw.battery),
            )
        except ValidationError as e:
            raise NormalizationError(str(e)) from e
