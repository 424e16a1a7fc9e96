from datetime import date
from typing import Any, Iterable, Mapping, Optional

from inventory_ledger.core.dates import date_stamp, now_iso

_SEQUENCE_WIDTH = 4


def next_id(items: Iterable[Mapping[str, Any]]) -> int:
    """``max(id) + 1`` over the collection, ``1`` when empty.

    Only safe while the caller holds the lock guarding the collection.
    """
    ids = [int(item["id"]) for item in items if item.get("id") is not None]
    return max(ids) + 1 if ids else 1


def generate_reference_number(
    prefix: str,
    existing_items: Iterable[Mapping[str, Any]],
    *,
    today: Optional[date] = None,
) -> str:
    """``PREFIX-YYYYMMDD-NNNN`` numbered after the highest sequence used today.

    Sequences past 9999 in one day overflow the four digits.
    """
    today_prefix = "{}-{}-".format(prefix, date_stamp(today))
    sequences = []
    for item in existing_items:
        reference = item.get("referenceNumber") or ""
        if not reference.startswith(today_prefix):
            continue
        suffix = reference[-_SEQUENCE_WIDTH:]
        if suffix.isdigit():
            sequences.append(int(suffix))
    next_sequence = max(sequences) + 1 if sequences else 1
    return "{}{}".format(today_prefix, str(next_sequence).zfill(_SEQUENCE_WIDTH))


def find_index(items: list[dict[str, Any]], **criteria: Any) -> int:
    for index, item in enumerate(items):
        if all(item.get(key) == value for key, value in criteria.items()):
            return index
    return -1


__all__ = ["find_index", "generate_reference_number", "next_id", "now_iso"]
