from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ResultCache:
    """Snapshot of the last search, stored as the provider's raw items.

    Every search replaces the whole file; nothing is merged or kept from
    earlier runs. Read and write failures are logged and never raised.
    """

    def __init__(self, path: str = "./cache/last-fetched-tracks.json"):
        self.path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.error("Error loading cached tracks from %s: %s", self.path, exc)
            return []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            # `save` indexes into the file exactly as written.
            logger.error("Error loading cached tracks from %s: expected a list of objects", self.path)
            return []
        return data

    def save(self, items: list[dict[str, Any]]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Error saving cached tracks to %s: %s", self.path, exc)
            return False
        return True
