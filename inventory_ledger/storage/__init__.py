from inventory_ledger.storage.json_store import JsonStore
from inventory_ledger.storage.records import find_index, generate_reference_number, next_id, now_iso

__all__ = ["JsonStore", "find_index", "generate_reference_number", "next_id", "now_iso"]
