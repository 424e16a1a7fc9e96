import os

from fastapi import APIRouter, Depends

from inventory_ledger.core.constants import COLLECTIONS
from inventory_ledger.core.dates import now_iso
from inventory_ledger.core.errors import StorageIOError, StorageParseError
from inventory_ledger.dependencies import ServiceContainer, get_container

router = APIRouter(tags=["Health"])


def _collection_health(container: ServiceContainer) -> dict:
    report = {}
    for name in COLLECTIONS:
        try:
            report[name] = {"ok": True, "records": len(container.store.read_collection(name))}
        except (StorageIOError, StorageParseError) as exc:
            report[name] = {"ok": False, "error": exc.message}
    return report


@router.get("/health")
def health_check(container: ServiceContainer = Depends(get_container)):
    """Report whether the data directory and the stock lock are usable.

    A stale stock lock or an unreadable collection marks the service degraded.
    """
    settings = container.settings
    data_dir = container.store.data_dir
    mutex = container.stock_mutex
    collections = _collection_health(container)
    stale = mutex.is_stale()

    healthy = not stale and all(entry["ok"] for entry in collections.values())
    return {
        "status": "ok" if healthy else "degraded",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "dataDir": {
            "path": str(data_dir),
            "exists": data_dir.is_dir(),
            "writable": data_dir.is_dir() and os.access(data_dir, os.W_OK),
        },
        "stockLock": {"name": mutex.name, "locked": mutex.locked, "stale": stale},
        "collections": collections,
        "time": now_iso(),
    }
