import threading
from typing import Dict
import uuid


class UpdateTracker:
    """Per-user version counter bumped whenever a user's budgets change.

    Clients poll with the last version they saw; a higher current version
    means their budget views are stale. One instance lives on the FastAPI
    app state and is handed to services explicitly.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._versions: Dict[uuid.UUID, int] = {}

    def bump(self, user_id: uuid.UUID) -> int:
        with self._lock:
            version = self._versions.get(user_id, 0) + 1
            self._versions[user_id] = version
            return version

    def version(self, user_id: uuid.UUID) -> int:
        with self._lock:
            return self._versions.get(user_id, 0)

    def has_updates(self, user_id: uuid.UUID, since: int = None) -> bool:
        current = self.version(user_id)
        if since is None:
            return True
        return since < current
