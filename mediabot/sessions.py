import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .models import MediaKind, SearchResult

MAX_CANDIDATES = 3


@dataclass(frozen=True)
class Session:
    session_id: str
    kind: MediaKind
    candidates: Tuple[SearchResult, ...]
    user_id: int
    created_at: float = field(default_factory=time.time)

    @property
    def key(self) -> Tuple[MediaKind, str]:
        return (self.kind, self.session_id)

    def candidate(self, index: int) -> Optional[SearchResult]:
        if 0 <= index < len(self.candidates):
            return self.candidates[index]
        return None


class SessionStore:
    """In-memory pending selections keyed by (kind, session id).

    Only touched from the event loop thread, so no locking.
    """

    def __init__(self, max_age_seconds: int = 0) -> None:
        self.max_age = max_age_seconds
        self._data: Dict[Tuple[MediaKind, str], Session] = {}

    def put(self, session: Session) -> None:
        self._data[session.key] = session

    def get(self, kind: MediaKind, session_id: str) -> Optional[Session]:
        return self._data.get((kind, session_id))

    def delete(self, kind: MediaKind, session_id: str) -> Optional[Session]:
        return self._data.pop((kind, session_id), None)

    def sweep(self, now: Optional[float] = None) -> int:
        if self.max_age <= 0:
            return 0
        cutoff = (time.time() if now is None else now) - self.max_age
        stale = [key for key, s in self._data.items() if s.created_at < cutoff]
        for key in stale:
            del self._data[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._data)
