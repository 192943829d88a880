from foodchain.adapters.store.base import CatalogStore, new_id
from foodchain.orchestrator.contracts import StoreRoot


class MemoryStore(CatalogStore):
    """In-process store: nothing survives a restart. For tests and demos."""

    def __init__(self, status_store, id_factory=new_id, seed: dict | None = None):
        super().__init__(status_store, id_factory=id_factory)
        self._root = StoreRoot.from_dict(seed)
        self.flushes = 0

    def load(self) -> None:
        pass

    def flush(self) -> None:
        self.flushes += 1
