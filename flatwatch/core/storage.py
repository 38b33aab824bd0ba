import json
import logging
from pathlib import Path
from typing import Set

logger = logging.getLogger(__name__)


def load_json_set(path: Path) -> Set[str]:
    if not path.exists():
        return set()
    try:
        return set(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, TypeError) as e:
        logger.warning(f"Could not read {path}, starting empty: {e}")
        return set()


def save_json_set(path: Path, values: Set[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(sorted(values)), encoding="utf-8")


def make_seen_key(source: str, listing_id: str) -> str:
    # namespaced dedupe across all suppliers
    return f"{source}:{listing_id}"


class Storage:
    """Subscribers and per-chat seen keys, one JSON file each."""

    def __init__(self, data_dir: Path | str = "./data"):
        self.data_dir = Path(data_dir)

    @property
    def subscribers_file(self) -> Path:
        return self.data_dir / "subscribers.json"

    def _seen_path_for(self, chat_id: str) -> Path:
        return self.data_dir / "seen" / f"{chat_id}.json"

    def load_subscribers(self) -> Set[str]:
        return load_json_set(self.subscribers_file)

    def save_subscribers(self, ids: Set[str]) -> None:
        save_json_set(self.subscribers_file, ids)

    def load_seen_for(self, chat_id: str) -> Set[str]:
        return load_json_set(self._seen_path_for(chat_id))

    def save_seen_for(self, chat_id: str, keys: Set[str]) -> None:
        save_json_set(self._seen_path_for(chat_id), keys)
