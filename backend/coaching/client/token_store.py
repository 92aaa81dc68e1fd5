import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Persists the signed-in user and bearer token between runs as a small JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable session file %s", self.path)
            return None
        if not isinstance(data, dict) or "user" not in data:
            return None
        return data

    def save(self, user: dict, access_token: Optional[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"user": user, "access_token": access_token}
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
