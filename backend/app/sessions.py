"""
In-memory registry of solving sessions for the HTTP API.

Each session owns one ``TimelineStateMachine``.  The timeline itself does
no locking, so every session carries its own lock and all mutations go
through ``Session.lock``.
"""

import logging
import threading
import uuid
from typing import Optional

from linalyze.models import VARIABLE_NAMES
from linalyze.timeline import TimelineStateMachine

logger = logging.getLogger(__name__)


class Session:

    def __init__(self, matrix, variables: Optional[list] = None):
        self.id = uuid.uuid4().hex
        self.timeline = TimelineStateMachine(matrix)
        num_vars = len(self.timeline.present.matrix[0]) - 1
        self.variables = list(variables) if variables else list(VARIABLE_NAMES[:num_vars])
        self.lock = threading.Lock()


class SessionRegistry:

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, matrix, variables: Optional[list] = None) -> Session:
        session = Session(matrix, variables)
        with self._lock:
            self._sessions[session.id] = session
        logger.info("created session %s", session.id)
        return session

    def get(self, session_id: str) -> Session:
        """Raise ``KeyError`` for unknown ids."""
        with self._lock:
            return self._sessions[session_id]

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
