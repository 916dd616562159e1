"""Keyword classification of free-text service records into maintenance items."""

from typing import Iterable, List, Optional, Set

from .calculations import parse_date
from .service_record import ServiceRecord

# Case-insensitive substring matches against description and part names.
# Portuguese variants cover records imported from the shop's older data.
KEYWORDS = {
    "oil": ["oil", "lubricant", "óleo", "oleo", "lubrificante"],
    "oil_filter": ["oil filter", "filtro óleo", "filtro oleo", "filtro de óleo"],
    "air_filter": ["air filter", "filtro ar", "filtro de ar"],
    "spark_plugs": ["spark", "plug", "ignition", "vela", "ignição"],
    "chain": ["chain", "transmission", "sprocket", "corrente", "transmissão", "relação"],
    "brakes": ["brake", "pad", "disc", "freio", "pastilha", "disco"],
    "general_inspection": [
        "inspection",
        "general",
        "complete overhaul",
        "revisão",
        "revisao",
        "geral",
        "completa",
    ],
    "valves": ["valve", "adjustment", "válvula", "valvula", "regulagem"],
}


def keywords_for(item: str) -> List[str]:
    """Keywords for an item; unknown items match on their own name."""
    return KEYWORDS.get(item, [item])


def classify_record(
    description: Optional[str],
    part_names: Iterable[str],
    items: Optional[Iterable[str]] = None,
) -> Set[str]:
    """
    Return every item key whose keywords appear in the record text.

    Checks the known items by default. Items passed in without a keyword
    entry match on their own name.
    """
    texts = [(description or "").lower()] + [(n or "").lower() for n in part_names]
    keys = KEYWORDS if items is None else items
    return {
        item
        for item in keys
        if any(word in text for word in keywords_for(item) for text in texts)
    }


def record_matches(record: ServiceRecord, item: str) -> bool:
    return item in classify_record(record.description, record.part_names, [item])


def sort_newest_first(history: Iterable[ServiceRecord]) -> List[ServiceRecord]:
    """Sort by date descending, odometer breaking ties."""
    return sorted(
        history,
        key=lambda r: (parse_date(r.date), r.odometer or 0),
        reverse=True,
    )


def last_matching_record(
    history: Iterable[ServiceRecord], item: str
) -> Optional[ServiceRecord]:
    """Most recent record for a maintenance item, regardless of input order."""
    for record in sort_newest_first(history):
        if record_matches(record, item):
            return record
    return None
