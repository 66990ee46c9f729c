import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("task-client")

DEFAULT_SESSION_PATH = Path.home() / ".task_client" / "session.json"


class SessionCache:
    """Signed-in user (id, email, role, token) persisted between runs."""

    def __init__(self, path: Optional[Path] = None):
        env_path = os.getenv("TASK_CLIENT_SESSION")
        self.path = Path(path or env_path or DEFAULT_SESSION_PATH)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"[Session] Ignoring unreadable session file {self.path}: {e}")
            return None
        if not isinstance(data, dict) or not data.get("token"):
            return None
        return data

    def save(self, user: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(user), encoding="utf-8")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
