"""
JSON file store.

The whole catalog is one document: {"users": [], "items": [], "donations": [], "offers": []}.
Writes go to a temp file in the same directory which is fsynced and then
renamed over the old file, so a crash mid-write leaves the previous state.
"""
import json
import os
import tempfile
from pathlib import Path

from foodchain.adapters.store.base import CatalogStore, new_id
from foodchain.orchestrator.contracts import StoreRoot


class JsonFileStore(CatalogStore):
    def __init__(self, status_store, path: str | os.PathLike, id_factory=new_id):
        super().__init__(status_store, id_factory=id_factory)
        self.path = Path(path)
        self._skipped = 0

    def load(self) -> None:
        with self._lock:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._root = StoreRoot()
                self.flush()
                self.status.log(f"json_store: initialised {self.path}")
                return
            text = self.path.read_text(encoding="utf-8")
            # an empty file counts as an empty catalog
            self._root = StoreRoot.from_dict(json.loads(text) if text.strip() else None)
            skipped = len(self._root.unreadable_items) + len(self._root.unreadable_offers)
            if skipped != self._skipped:
                self._skipped = skipped
                self.status.log(f"json_store: {skipped} unreadable record(s) in {self.path}, kept but not listed")

    def flush(self) -> None:
        with self._lock:
            doc = self._root.to_dict()
            fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
