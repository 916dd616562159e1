"""Manufacturer maintenance schedules and the catalog that serves them."""

from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from jsonschema import validate

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "schedules.yaml"
SCHEMA_PATH = DATA_DIR / "schedules.schema.yaml"

ITEM_KEYS = (
    "oil",
    "oil_filter",
    "air_filter",
    "spark_plugs",
    "chain",
    "brakes",
    "general_inspection",
)

ITEM_LABELS = {
    "oil": "Oil change",
    "oil_filter": "Oil filter replacement",
    "air_filter": "Air filter replacement",
    "spark_plugs": "Spark plug replacement",
    "chain": "Drive chain service",
    "brakes": "Brake service",
    "general_inspection": "General inspection",
    "valves": "Valve adjustment",
}

BASE_PENALTIES = {
    "oil": 30,
    "brakes": 25,
    "spark_plugs": 15,
    "oil_filter": 20,
    "air_filter": 10,
    "chain": 15,
    "general_inspection": 20,
}
DEFAULT_PENALTY = 10


def item_label(item: str) -> str:
    """Display title for a maintenance item key."""
    return ITEM_LABELS.get(item, f"Maintenance: {item}")


def base_penalty(item: str) -> int:
    return BASE_PENALTIES.get(item, DEFAULT_PENALTY)


class Interval:
    """Distance/time pair; whichever comes first triggers the service."""

    def __init__(self, km: float, months: float):
        self.km = km
        self.months = months


class SpecialRule:
    """A one-off recommendation triggered every `every_km` kilometres."""

    def __init__(self, item: str, key: str, every_km: float, recommendation: str):
        self.item = item
        self.key = key
        self.every_km = every_km
        self.recommendation = recommendation

    def last_crossing(self, odometer: float) -> Optional[float]:
        """Most recent threshold crossed at this odometer, None if none yet."""
        if odometer < self.every_km:
            return None
        return (odometer // self.every_km) * self.every_km


class ManufacturerSchedule:
    """Maintenance intervals published by one manufacturer."""

    def __init__(
            self,
            manufacturer: str,
            intervals: Dict[str, Interval],
            special_rules: Optional[List[SpecialRule]] = None,
            model: Optional[str] = None,
    ):
        self.manufacturer = manufacturer
        self.intervals = intervals
        self.special_rules = special_rules or []
        self.model = model

    def items(self):
        """(item key, Interval) pairs in canonical item order."""
        return [(k, self.intervals[k]) for k in ITEM_KEYS if k in self.intervals]


def _parse_schedule(dct: dict) -> ManufacturerSchedule:
    intervals = {
        key: Interval(value["km"], value["months"])
        for key, value in dct["intervals"].items()
    }
    rules = [
        SpecialRule(r["item"], r["key"], r["everyKm"], r["recommendation"])
        for r in dct.get("specialRules") or []
    ]
    return ManufacturerSchedule(dct["manufacturer"], intervals, rules, dct.get("model"))


class ScheduleCatalog:
    """Read-only lookup of schedules by manufacturer."""

    def __init__(self, schedules: List[ManufacturerSchedule]):
        self.schedules = list(schedules)

    @classmethod
    def from_yaml(cls, filename: Union[str, Path] = DEFAULT_CATALOG_PATH) -> "ScheduleCatalog":
        """Load and validate a catalog YAML file."""
        with open(filename) as fp:
            data = yaml.safe_load(fp)
        with open(SCHEMA_PATH) as fp:
            schema = yaml.safe_load(fp)
        validate(instance=data, schema=schema)
        return cls([_parse_schedule(d) for d in data["schedules"]])

    @property
    def manufacturers(self) -> List[str]:
        return sorted({s.manufacturer for s in self.schedules})

    def schedule_for(
        self, manufacturer: str, model: Optional[str] = None
    ) -> Optional[ManufacturerSchedule]:
        """
        Find the schedule for a manufacturer (case-insensitive).

        A model-specific entry wins when both the entry and the caller name a
        model; otherwise the manufacturer-wide entry is returned. Unknown
        manufacturers return None.
        """
        if not manufacturer:
            return None
        wanted = manufacturer.lower()
        candidates = [s for s in self.schedules if s.manufacturer.lower() == wanted]
        if model:
            for s in candidates:
                if s.model and s.model.lower() == model.lower():
                    return s
        for s in candidates:
            if not s.model:
                return s
        return None


_default_catalog: Optional[ScheduleCatalog] = None


def default_catalog() -> ScheduleCatalog:
    """The bundled catalog, loaded once."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = ScheduleCatalog.from_yaml()
    return _default_catalog


def schedule_for(manufacturer: str) -> Optional[ManufacturerSchedule]:
    return default_catalog().schedule_for(manufacturer)
