"""Session storage keyed by client key.

One stored session per client. Every write replaces the whole session, so a
caller always does get, modify, put.
"""
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from interview_ace.models.interview import InterviewSession

logger = logging.getLogger(__name__)


class SessionRepository(ABC):
    @abstractmethod
    def get(self, client_key: str) -> Optional[InterviewSession]:
        pass

    @abstractmethod
    def put(self, client_key: str, session: InterviewSession) -> None:
        pass

    @abstractmethod
    def delete(self, client_key: str) -> bool:
        pass


class InMemorySessionRepository(SessionRepository):
    """Stores the serialized JSON, the same bytes a browser key would hold"""

    def __init__(self):
        self._sessions: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, client_key: str) -> Optional[InterviewSession]:
        with self._lock:
            raw = self._sessions.get(client_key)
        if raw is None:
            return None
        return InterviewSession.model_validate_json(raw)

    def put(self, client_key: str, session: InterviewSession) -> None:
        raw = session.model_dump_json()
        with self._lock:
            self._sessions[client_key] = raw

    def delete(self, client_key: str) -> bool:
        with self._lock:
            return self._sessions.pop(client_key, None) is not None


class MongoSessionRepository(SessionRepository):
    def __init__(self, collection):
        self.collection = collection

    def get(self, client_key: str) -> Optional[InterviewSession]:
        doc = self.collection.find_one({"client_key": client_key})
        if not doc:
            return None
        return InterviewSession.model_validate(doc["session"])

    def put(self, client_key: str, session: InterviewSession) -> None:
        self.collection.replace_one(
            {"client_key": client_key},
            {
                "client_key": client_key,
                "session": session.model_dump(mode="json"),
                "updated_at": datetime.now(),
            },
            upsert=True,
        )
        logger.info(f"💾 [DB] Stored session {session.session_id} ({len(session.results)} results)")

    def delete(self, client_key: str) -> bool:
        result = self.collection.delete_one({"client_key": client_key})
        return result.deleted_count > 0
