"""File-backed key-value store for local persistence."""

import os
import re
from dataclasses import dataclass
from pathlib import Path

from leftover_tracker.services.local_store import BlobStore

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass
class JsonFileBlobStore(BlobStore):
    """Stores each key as one file under a data directory."""

    root: Path

    @classmethod
    def create(cls, root: str | Path) -> "JsonFileBlobStore":
        """Create a store rooted at the given directory."""
        path = Path(root)
        path.mkdir(parents=True, exist_ok=True)
        return cls(root=path)

    def get_string(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never written."""
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_string(self, key: str, value: str) -> None:
        """Replace the value for a key atomically."""
        path = self._path_for(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    def _path_for(self, key: str) -> Path:
        return self.root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"
