"""
Persistent identifier -> file record store.

The registry lives in memory and is written through to a JSON snapshot by
the service after every mutation. The snapshot is a list of
``[file_id, record]`` pairs; order carries no meaning on reload.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from common.logging_config import get_logger
from common.types import FileRecord
from registry.exceptions import SnapshotIOError

logger = get_logger(__name__)


class JsonSnapshotFile:
    """
    Snapshot storage backed by a single JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the snapshot, so readers never observe a half-written file.
    """

    def __init__(self, path: str):
        """
        Args:
            path: Path to the JSON snapshot file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> List[Any]:
        """
        Read the raw list of pairs.

        Raises:
            SnapshotIOError: If the file cannot be read or is not valid JSON
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise SnapshotIOError(f"Failed to read snapshot {self.path}: {e}") from e

        if not isinstance(data, list):
            raise SnapshotIOError(f"Snapshot {self.path} is not a list of pairs")
        return data

    def write(self, pairs: List[List[Any]]) -> None:
        """
        Atomically replace the snapshot.

        Raises:
            SnapshotIOError: If the snapshot cannot be written
        """
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(pairs, f, indent=2)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            raise SnapshotIOError(f"Failed to write snapshot {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)


class RegistryStore:
    """
    In-memory registry with an injected snapshot port.

    The store never persists implicitly; callers invoke persist() after each
    mutation. In-memory state stays authoritative when a persist fails.
    """

    def __init__(self, snapshot: JsonSnapshotFile):
        self._snapshot = snapshot
        self._records: Dict[str, FileRecord] = {}

    def load(self) -> Dict[str, FileRecord]:
        """
        Load the registry from the snapshot.

        A missing, unreadable or corrupt snapshot yields an empty registry.

        Returns:
            Copy of the loaded mapping
        """
        if not self._snapshot.exists():
            logger.info(f"No snapshot found at {self._snapshot.path}, starting with an empty registry")
            self._records = {}
            return {}

        try:
            pairs = self._snapshot.read()
            records = {}
            for file_id, data in pairs:
                records[str(file_id)] = FileRecord.from_dict(data)
        except (SnapshotIOError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load registry snapshot: {e}, starting with an empty registry")
            self._records = {}
            return {}

        self._records = records
        logger.info(f"Registry loaded from {self._snapshot.path} ({len(records)} file(s))")
        return dict(records)

    def persist(self) -> bool:
        """
        Write the whole registry to the snapshot.

        Returns:
            True on success, False if the write failed (logged)
        """
        pairs = [[file_id, record.to_dict()] for file_id, record in self._records.items()]
        try:
            self._snapshot.write(pairs)
        except SnapshotIOError as e:
            logger.error(f"{e}; keeping in-memory registry")
            return False

        logger.debug(f"Registry saved ({len(pairs)} file(s))")
        return True

    def get(self, file_id: str) -> Optional[FileRecord]:
        return self._records.get(file_id)

    def set(self, file_id: str, record: FileRecord) -> None:
        self._records[file_id] = record

    def delete(self, file_id: str) -> bool:
        """Remove an entry. Returns False if it was absent."""
        return self._records.pop(file_id, None) is not None

    def list(
        self,
        predicate: Optional[Callable[[str, FileRecord], bool]] = None
    ) -> List[Tuple[str, FileRecord]]:
        """
        List entries in store order, optionally filtered.

        Args:
            predicate: Called with (file_id, record); entries returning False are skipped
        """
        return [
            (file_id, record)
            for file_id, record in self._records.items()
            if predicate is None or predicate(file_id, record)
        ]

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._records

    def __len__(self) -> int:
        return len(self._records)
