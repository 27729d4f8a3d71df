from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from redis.asyncio import Redis

if TYPE_CHECKING:
    from toksave.services.history import HistoryStore
    from toksave.services.retriever import VideoRetriever

@dataclass
class RuntimeState:
    """Centralized runtime state"""
    redis: Optional[Redis] = None
    retriever: Optional["VideoRetriever"] = None
    history: Optional["HistoryStore"] = None
    history_backend: str = "unknown"

state = RuntimeState()
