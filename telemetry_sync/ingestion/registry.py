from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .schema import SensorKind, Vendor


class DeviceRegistry:
    """Static device ID -> canonical post name table for one vendor and sensor kind."""

    def __init__(self, vendor: Vendor, sensor_kind: SensorKind, mapping: Mapping[str, str]):
        self.vendor = vendor
        self.sensor_kind = sensor_kind
        self._mapping: Mapping[str, str] = MappingProxyType(dict(mapping))

    def lookup(self, device_id: Optional[str]) -> Optional[str]:
        if device_id is None:
            return None
        return self._mapping.get(device_id)

    def device_ids(self) -> List[str]:
        return list(self._mapping)

    def items(self):
        return self._mapping.items()

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"DeviceRegistry({self.vendor.value}, {self.sensor_kind.value}, {len(self)} devices)"


@dataclass(frozen=True)
class VendorRegistries:
    vendor: Vendor
    water_level: DeviceRegistry
    rainfall: DeviceRegistry

    def __post_init__(self):
        for kind, registry in ((SensorKind.WATER_LEVEL, self.water_level), (SensorKind.RAINFALL, self.rainfall)):
            if registry.vendor is not self.vendor or registry.sensor_kind is not kind:
                raise ValueError(f"{registry!r} does not belong in the {self.vendor.value} {kind.value} slot")
        shared = set(self.water_level.device_ids()) & set(self.rainfall.device_ids())
        if shared:
            raise ValueError(f"Devices mapped as both AWLR and ARR for {self.vendor.value}: {sorted(shared)}")

    def for_kind(self, sensor_kind: SensorKind) -> DeviceRegistry:
        return self.water_level if sensor_kind is SensorKind.WATER_LEVEL else self.rainfall

    def by_kind(self):
        """Registries in processing order: water level first, then rainfall."""
        return [self.water_level, self.rainfall]


APTECH_AWLR: Dict[str, str] = {
    "sabagi": "Sabagi",
    "undarandir": "Undar Andir",
}

APTECH_ARR: Dict[str, str] = {
    "ciminyak": "Ciminyak",
    "pchciomas": "Ciomas",
    "kiarasari": "Kiarasari",
    "aptechv2_h3": "Padarincang",
    "aptechv2_h2": "Pamarayan",
    "aptechv2_f1": "Pulo Ampel",
    "sepang": "Sepang",
    "smp2lewudamar": "SMP2 Leuwidamar",
    "sukmajaya": "Sukmajaya",
    "telagaluhur": "Telaga Luhur",
    "tersaba": "Tersaba",
    "toge": "Toge",
}

HIGERTECH_AWLR: Dict[str, str] = {
    "HGT412": "Pabuaran",
    "HGT281": "Al Azhar Kaujon",
    "HGT414": "Pamarayan Hulu",
    "HGT280": "Kenari Kasunyatan",
    "HGT282": "Jembatan Cimake",
    "HGT278": "Bendung Karet Cibanten",
    "HGT413": "Kp. Peusar",
    "HGT664": "Bojong Manik",
    "HGT671": "Cikande",
    "HGT678": "Jasinga",
    "HGT679": "Bendungan Karet Cidurian",
    "HGT709": "Tanjungsari",
}

HIGERTECH_ARR: Dict[str, str] = {
    "HGT665": "Bojong Manik",
}


def build_registries(vendor: Vendor, awlr: Mapping[str, str], arr: Mapping[str, str]) -> VendorRegistries:
    return VendorRegistries(
        vendor=vendor,
        water_level=DeviceRegistry(vendor, SensorKind.WATER_LEVEL, awlr),
        rainfall=DeviceRegistry(vendor, SensorKind.RAINFALL, arr),
    )


def build_default_registries() -> Dict[Vendor, VendorRegistries]:
    return {
        Vendor.APTECH: build_registries(Vendor.APTECH, APTECH_AWLR, APTECH_ARR),
        Vendor.HIGERTECH: build_registries(Vendor.HIGERTECH, HIGERTECH_AWLR, HIGERTECH_ARR),
    }
