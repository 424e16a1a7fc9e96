import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Union

from inventory_ledger.core.errors import StorageIOError, StorageParseError

logger = logging.getLogger(__name__)


class JsonStore:
    """Named record collections kept as pretty-printed JSON arrays.

    The store does not serialize access on its own; read-modify-write
    cycles on shared collections go through the stock mutex.
    """

    def __init__(self, data_dir: Union[str, Path], *, create_missing: bool = True):
        self.data_dir = Path(data_dir)
        self.create_missing = create_missing

    def path_for(self, name: str) -> Path:
        filename = name if name.endswith(".json") else "{}.json".format(name)
        return self.data_dir / filename

    def read_collection(self, name: str) -> list[dict[str, Any]]:
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            if self.create_missing:
                return []
            raise StorageIOError(
                "Collection '{}' not found at {}".format(name, path),
                collection=name,
            ) from exc
        except OSError as exc:
            raise StorageIOError(
                "Unable to read collection '{}': {}".format(name, exc),
                collection=name,
            ) from exc

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageParseError(
                "Collection '{}' is not valid JSON: {}".format(name, exc),
                collection=name,
            ) from exc
        if not isinstance(data, list):
            raise StorageParseError(
                "Collection '{}' must be a JSON array".format(name),
                collection=name,
            )
        return data

    def write_collection(self, name: str, items: Iterable[dict[str, Any]]) -> None:
        path = self.path_for(name)
        records = list(items)
        payload = json.dumps(records, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=".{}.".format(path.stem),
                suffix=".tmp",
                dir=str(path.parent),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageIOError(
                "Unable to write collection '{}': {}".format(name, exc),
                collection=name,
            ) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)
        logger.debug("Wrote %s record(s) to %s", len(records), path.name)


__all__ = ["JsonStore"]
