import json
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from toksave.infra.storage import HistoryStorage
from toksave.models.record import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 15

_entries_adapter = TypeAdapter(List[HistoryEntry])


class HistoryStore:
    """
    Most-recent-first list of past retrievals, bounded and deduplicated by id.

    Every mutation is written through to the injected storage. Storage
    failures are logged and never raised: on load they leave the history
    empty, on save the in-memory list stays authoritative.
    """

    def __init__(self, storage: HistoryStorage, max_size: int = DEFAULT_MAX_SIZE):
        self.storage = storage
        self.max_size = max_size
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    async def load(self) -> List[HistoryEntry]:
        """Restore the persisted history, empty when anything goes wrong"""
        try:
            raw = await self.storage.load()
            self._entries = _entries_adapter.validate_json(raw)[:self.max_size] if raw else []
        except (ValidationError, ValueError) as e:
            logger.warning(f"Discarding unreadable history: {e}")
            self._entries = []
        except Exception as e:
            logger.error(f"Failed to load history: {str(e)}")
            self._entries = []

        return self.entries

    async def record(self, entry: HistoryEntry, max_size: Optional[int] = None) -> List[HistoryEntry]:
        """Move entry to the front, dropping older entries with the same id"""
        limit = self.max_size if max_size is None else max_size
        remaining = [e for e in self._entries if e.id != entry.id]
        self._entries = [entry, *remaining][:limit]

        await self._persist()
        return self.entries

    async def clear(self) -> List[HistoryEntry]:
        self._entries = []
        await self._persist()
        return self.entries

    async def _persist(self) -> None:
        payload = json.dumps(
            [e.model_dump(mode="json") for e in self._entries],
            ensure_ascii=False
        )
        try:
            await self.storage.save(payload)
        except Exception as e:
            logger.error(f"Failed to persist history: {str(e)}")
